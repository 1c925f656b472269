#!/usr/bin/env python3
"""
Pipeline Stage Registry - Per-company ordered hiring stages.

Keeps two cross-row invariants inside its mutating operations: stage order
values are unique within a company, and one stage is flagged default.
"""

from typing import Any, List, Optional
import logging
import warnings

from core.config_loader import PipelineConfig
from core.exceptions import (
    CompanyNotFound,
    DefaultStageProtected,
    DuplicateDefaultStage,
    InvalidStageOrder,
    StageInUse,
    StageNotFound,
)
from core.utils import to_uuid
from database.models import PipelineStage
from database.uow import UnitOfWork, unit_of_work

logger = logging.getLogger(__name__)


class StageRegistry:
    def __init__(self, config: Optional[PipelineConfig] = None, session_factory=None):
        self.config = config or PipelineConfig()
        self.session_factory = session_factory

    def _uow(self):
        return unit_of_work(self.session_factory)

    # ------------------------------------------------------------------
    # Helpers shared with PipelineEngine (run inside the caller's unit of work)
    # ------------------------------------------------------------------

    def stages_for(self, uow: UnitOfWork, company_id: Any) -> List[PipelineStage]:
        """Stages of the company in order, seeding the defaults if it has none."""
        stages = uow.stages.list_for_company(company_id)
        if stages:
            return stages

        if uow.parties.get_company(company_id) is None:
            raise CompanyNotFound(company_id)

        for order, template in enumerate(self.config.default_stages):
            uow.stages.add(PipelineStage(
                company_id=to_uuid(company_id),
                name=template.name,
                order=order,
                color=template.color,
                is_default=template.is_default,
            ))
        logger.info(f"Seeded {len(self.config.default_stages)} default stages for company {company_id}")
        return uow.stages.list_for_company(company_id)

    def default_stage_for(self, uow: UnitOfWork, company_id: Any) -> PipelineStage:
        stages = self.stages_for(uow, company_id)
        if not stages:
            raise StageNotFound(f"default of company {company_id}")
        return self.resolve_default(stages, company_id)

    @staticmethod
    def resolve_default(stages: List[PipelineStage], company_id: Any) -> PipelineStage:
        """
        Pick the default stage from an ordered stage list.

        Several flagged stages: the lowest-order one wins and a
        DuplicateDefaultStage warning is emitted. None flagged: the first
        stage is used.
        """
        defaults = [stage for stage in stages if stage.is_default]
        if len(defaults) > 1:
            message = (
                f"Company {company_id} has {len(defaults)} default stages "
                f"({', '.join(stage.name for stage in defaults)}); using '{defaults[0].name}'"
            )
            logger.warning(message)
            warnings.warn(message, DuplicateDefaultStage, stacklevel=2)
            return defaults[0]
        if not defaults:
            logger.warning(f"Company {company_id} has no default stage; using '{stages[0].name}'")
            return stages[0]
        return defaults[0]

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def list_stages(self, company_id: Any) -> List[PipelineStage]:
        with self._uow() as uow:
            return self.stages_for(uow, company_id)

    def get_default_stage(self, company_id: Any) -> PipelineStage:
        with self._uow() as uow:
            return self.default_stage_for(uow, company_id)

    def create_stage(
        self,
        company_id: Any,
        name: str,
        color: Optional[str] = None,
        is_default: bool = False
    ) -> PipelineStage:
        """Append a stage after the company's last one."""
        name = (name or '').strip()
        if not name:
            raise ValueError("Stage name must not be empty")

        with self._uow() as uow:
            if uow.parties.get_company(company_id) is None:
                raise CompanyNotFound(company_id)

            max_order = uow.stages.max_order(company_id)
            first = max_order is None
            if is_default and not first:
                self._clear_default(uow, company_id)

            stage = uow.stages.add(PipelineStage(
                company_id=to_uuid(company_id),
                name=name,
                order=0 if first else max_order + 1,
                color=color or self.config.default_stage_color,
                is_default=is_default or first,
            ))
            logger.info(f"Created stage '{name}' at position {stage.order} for company {company_id}")
        return stage

    def update_stage(
        self,
        stage_id: Any,
        name: Optional[str] = None,
        color: Optional[str] = None,
        is_default: Optional[bool] = None
    ) -> PipelineStage:
        """
        Rename, recolour or flag a stage as default.

        Flagging a stage default unflags the company's other stages.
        Unflagging the default directly is refused: flag another stage instead.
        """
        with self._uow() as uow:
            stage = uow.stages.get(stage_id)
            if stage is None:
                raise StageNotFound(stage_id)

            if name is not None:
                name = name.strip()
                if not name:
                    raise ValueError("Stage name must not be empty")
                stage.name = name
            if color is not None:
                stage.color = color
            if is_default is True and not stage.is_default:
                self._clear_default(uow, stage.company_id)
                stage.is_default = True
                logger.info(f"Stage '{stage.name}' is now the default for company {stage.company_id}")
            elif is_default is False and stage.is_default:
                raise DefaultStageProtected(stage.id, action="unflagged; flag another stage as default instead")
            uow.session.flush()
        return stage

    def _clear_default(self, uow: UnitOfWork, company_id: Any) -> None:
        for other in uow.stages.list_for_company(company_id):
            if other.is_default:
                other.is_default = False

    def reorder(self, company_id: Any, ordered_ids: List[Any]) -> List[PipelineStage]:
        """
        Rewrite the order of all company stages in one transaction.

        ``ordered_ids`` must be a permutation of the company's stage ids;
        otherwise nothing changes.

        Raises:
            InvalidStageOrder: With the missing, foreign and duplicated ids
        """
        with self._uow() as uow:
            stages = uow.stages.list_for_company(company_id, for_update=True)
            by_id = {stage.id: stage for stage in stages}

            requested = []
            foreign = []
            for raw_id in ordered_ids:
                try:
                    stage_id = to_uuid(raw_id)
                except ValueError:
                    foreign.append(raw_id)
                    continue
                if stage_id not in by_id:
                    foreign.append(raw_id)
                requested.append(stage_id)

            seen = set()
            duplicates = []
            for stage_id in requested:
                if stage_id in seen and stage_id not in duplicates:
                    duplicates.append(stage_id)
                seen.add(stage_id)
            missing = [stage.id for stage in stages if stage.id not in seen]

            if missing or foreign or duplicates:
                raise InvalidStageOrder(company_id, missing=missing, foreign=foreign, duplicates=duplicates)

            for order, stage_id in enumerate(requested):
                uow.stages.set_order(by_id[stage_id], order)
            uow.session.flush()

            result = [by_id[stage_id] for stage_id in requested]
            logger.info(f"Reordered {len(result)} stages for company {company_id}")
        return result

    def delete_stage(self, stage_id: Any) -> None:
        """
        Raises:
            StageNotFound: If the stage does not exist
            DefaultStageProtected: If it is the company's default stage
            StageInUse: If applications currently sit in it
        """
        with self._uow() as uow:
            stage = uow.stages.get(stage_id)
            if stage is None:
                raise StageNotFound(stage_id)
            if stage.is_default:
                raise DefaultStageProtected(stage.id)

            occupants = uow.stages.count_occupants(stage.id)
            if occupants:
                raise StageInUse(stage.id, occupants)

            uow.stages.delete(stage)
            logger.info(f"Deleted stage '{stage.name}' from company {stage.company_id}")
