from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from core.utils import to_uuid


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    @staticmethod
    def _id(value: Any):
        return to_uuid(value)

    def _insert(self, model):
        """Dialect-specific INSERT supporting ON CONFLICT clauses."""
        if self.db.get_bind().dialect.name == 'sqlite':
            return sqlite_insert(model)
        return pg_insert(model)
