import uuid

from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Index

from .base import Base, JSONType, UUIDType, utcnow


class Notification(Base):
    """
    In-app notification shown to a user.

    Written by the in-app channel when a queued message is delivered.
    """
    __tablename__ = 'notification'

    id = Column(UUIDType, primary_key=True, default=uuid.uuid4)
    user_id = Column(UUIDType, nullable=False)
    type = Column(Text, nullable=False)  # new_match|shortlisted|rejected|status_changed|application_received
    title = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    data = Column(JSONType, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_notification_user_read', 'user_id', 'read'),
        Index('idx_notification_user_created', 'user_id', 'created_at'),
    )
