from typing import Any, List, Optional

from sqlalchemy import select

from database.models import Application, ApplicationHistory, PipelineStage
from database.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository):
    def get(self, application_id: Any) -> Optional[Application]:
        return self.db.get(Application, self._id(application_id))

    def get_for_pair(self, candidate_id: Any, job_id: Any) -> Optional[Application]:
        stmt = select(Application).where(
            Application.candidate_id == self._id(candidate_id),
            Application.job_id == self._id(job_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_job(self, job_id: Any) -> List[Application]:
        stmt = (
            select(Application)
            .where(Application.job_id == self._id(job_id))
            .order_by(Application.applied_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def add(self, application: Application) -> Application:
        self.db.add(application)
        self.db.flush()
        return application

    def append_history(
        self,
        application: Application,
        from_stage: Optional[PipelineStage],
        to_stage: PipelineStage,
        actor: Optional[str],
        note: Optional[str] = None
    ) -> ApplicationHistory:
        entry = ApplicationHistory(
            application_id=application.id,
            from_stage_id=from_stage.id if from_stage is not None else None,
            from_stage_name=from_stage.name if from_stage is not None else None,
            to_stage_id=to_stage.id,
            to_stage_name=to_stage.name,
            actor=actor,
            note=note,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def history(self, application_id: Any) -> List[ApplicationHistory]:
        """Transitions of the application, oldest first."""
        stmt = (
            select(ApplicationHistory)
            .where(ApplicationHistory.application_id == self._id(application_id))
            .order_by(ApplicationHistory.id)
        )
        return list(self.db.execute(stmt).scalars().all())
