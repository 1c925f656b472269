import logging
from typing import Any, List, Optional

from sqlalchemy import select, func

from database.models import Application, PipelineStage
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class StageRepository(BaseRepository):
    def get(self, stage_id: Any) -> Optional[PipelineStage]:
        return self.db.get(PipelineStage, self._id(stage_id))

    def list_for_company(self, company_id: Any, for_update: bool = False) -> List[PipelineStage]:
        stmt = (
            select(PipelineStage)
            .where(PipelineStage.company_id == self._id(company_id))
            .order_by(PipelineStage.order, PipelineStage.created_at)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return list(self.db.execute(stmt).scalars().all())

    def count_for_company(self, company_id: Any) -> int:
        stmt = select(func.count(PipelineStage.id)).where(
            PipelineStage.company_id == self._id(company_id)
        )
        return self.db.execute(stmt).scalar_one()

    def max_order(self, company_id: Any) -> Optional[int]:
        stmt = select(func.max(PipelineStage.order)).where(
            PipelineStage.company_id == self._id(company_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def count_occupants(self, stage_id: Any) -> int:
        stmt = select(func.count(Application.id)).where(
            Application.current_stage_id == self._id(stage_id)
        )
        return self.db.execute(stmt).scalar_one()

    def add(self, stage: PipelineStage) -> PipelineStage:
        self.db.add(stage)
        self.db.flush()
        return stage

    def set_order(self, stage: PipelineStage, order: int) -> None:
        stage.order = order

    def delete(self, stage: PipelineStage) -> None:
        self.db.delete(stage)
        self.db.flush()
