import contextlib
import logging
from typing import List, Optional

from database.repositories import (
    ApplicationRepository,
    MatchRepository,
    MatrixRepository,
    NotificationRepository,
    PartyRepository,
    StageRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Repositories sharing one Session, plus an outbox of notifications.

    Messages published here are handed to the notifier only after the
    transaction commits; a rolled-back unit of work sends nothing.
    """

    def __init__(self, session):
        self.session = session
        self.parties = PartyRepository(session)
        self.matrices = MatrixRepository(session)
        self.matches = MatchRepository(session)
        self.stages = StageRepository(session)
        self.applications = ApplicationRepository(session)
        self.notifications = NotificationRepository(session)
        self._outbox: List = []

    def publish(self, message) -> None:
        self._outbox.append(message)

    @property
    def outbox(self) -> List:
        return list(self._outbox)


@contextlib.contextmanager
def unit_of_work(session_factory=None, notifier: Optional[object] = None):
    """Per-unit-of-work transaction scope.

    Yields a UnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. After a successful commit the
    outbox is dispatched through ``notifier.dispatch_all``.

    Usage:
        with unit_of_work(SessionLocal, notifier) as uow:
            application = uow.applications.get(application_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal

    session = session_factory()
    uow = UnitOfWork(session)
    try:
        yield uow
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if notifier is not None and uow.outbox:
        notifier.dispatch_all(uow.outbox)
