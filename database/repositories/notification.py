from typing import Any, Dict, List, Optional

from sqlalchemy import select, update

from database.models import Notification
from database.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    def create(
        self,
        user_id: Any,
        type: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Notification:
        notification = Notification(
            user_id=self._id(user_id),
            type=type,
            title=title,
            body=body,
            data=data,
            read=False,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def list_for_user(self, user_id: Any, unread_only: bool = False) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == self._id(user_id))
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def mark_read(self, user_id: Any) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == self._id(user_id), Notification.read.is_(False))
            .values(read=True)
        )
        return result.rowcount
