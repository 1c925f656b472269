#!/usr/bin/env python3
"""
Pipeline Engine - Moves applications through a company's stages.

Every stage change and its history row are written in one transaction; the
candidate notification is published to the unit of work and delivered only
after that transaction commits.

Usage:
    engine = PipelineEngine(config.pipeline, registry, session_factory, notifier)
    application = engine.create_application(candidate_id, job_id)
    engine.move(application.id, interview_stage_id, actor='recruiter@acme')
"""

from typing import Any, List, Optional
from dataclasses import dataclass, field
import logging

from sqlalchemy.exc import IntegrityError

from core.config_loader import PipelineConfig
from core.exceptions import (
    ApplicationExists,
    ApplicationNotFound,
    CandidateNotFound,
    InvalidStageTarget,
    InvalidStageTransition,
    JobNotFound,
    TerminalStageReached,
)
from core.match_service import MatchService
from core.utils import to_uuid
from database.models import Application, ApplicationHistory, PipelineStage
from database.models.base import utcnow
from database.uow import UnitOfWork, unit_of_work
from notification.message_builder import NotificationMessageBuilder
from notification.service import NotificationMessage
from pipeline.registry import StageRegistry
from pipeline.roles import is_terminal, stage_role

logger = logging.getLogger(__name__)


@dataclass
class PipelineColumn:
    """One stage of a job's board with the applications sitting in it."""
    stage: PipelineStage
    applications: List[Application] = field(default_factory=list)


class PipelineEngine:
    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        registry: Optional[StageRegistry] = None,
        session_factory=None,
        notifier=None,
        match_service: Optional[MatchService] = None
    ):
        self.config = config or PipelineConfig()
        self.registry = registry or StageRegistry(self.config, session_factory)
        self.session_factory = session_factory
        self.notifier = notifier
        self.match_service = match_service or MatchService(session_factory=session_factory, notifier=notifier)

    def _uow(self):
        return unit_of_work(self.session_factory, self.notifier)

    def create_application(
        self,
        candidate_id: Any,
        job_id: Any,
        match_id: Any = None,
        actor: Optional[str] = None
    ) -> Application:
        """
        Enter a candidate into a job's pipeline at the company's default stage.

        When both matrices exist the pair is (re)scored in the same transaction
        and its match linked; otherwise an existing match is linked if there is
        one. An explicit ``match_id`` always wins.

        Raises:
            ApplicationExists: If the candidate already applied to the job
        """
        with self._uow() as uow:
            job = uow.parties.get_job(job_id)
            if job is None:
                raise JobNotFound(job_id)
            candidate = uow.parties.get_candidate(candidate_id)
            if candidate is None:
                raise CandidateNotFound(candidate_id)

            existing = uow.applications.get_for_pair(candidate.id, job.id)
            if existing is not None:
                raise ApplicationExists(candidate.id, job.id, existing.id)

            match = self._score_on_apply(uow, job, candidate.id)
            if match_id is None and match is not None:
                match_id = match.id

            stage = self.registry.default_stage_for(uow, job.company_id)
            application = Application(
                candidate_id=candidate.id,
                job_id=job.id,
                match_id=to_uuid(match_id),
                current_stage=stage,
            )
            try:
                uow.applications.add(application)
            except IntegrityError:
                raise ApplicationExists(candidate.id, job.id, None)
            uow.applications.append_history(application, None, stage, actor)

            company = uow.parties.get_company(job.company_id)
            if company is not None and company.user_id is not None:
                content = NotificationMessageBuilder.application_received(
                    candidate.name,
                    job.title,
                    data={
                        'application_id': str(application.id),
                        'candidate_id': str(candidate.id),
                        'job_id': str(job.id),
                    },
                )
                uow.publish(NotificationMessage.from_content(company.user_id, content))

            logger.info(f"Application {application.id} created for job {job.id} at stage '{stage.name}'")
        return application

    def move(
        self,
        application_id: Any,
        target_stage_id: Any,
        actor: Optional[str] = None,
        note: Optional[str] = None
    ) -> Application:
        """
        Move an application to any stage of its company's pipeline.

        Raises:
            ApplicationNotFound: If the application does not exist
            InvalidStageTarget: If the stage is not in the company's registry
            InvalidStageTransition: If stage order is enforced and the move skips stages
        """
        with self._uow() as uow:
            application = self._get_application(uow, application_id)
            company_id = application.job.company_id

            target = uow.stages.get(target_stage_id)
            if target is None:
                raise InvalidStageTarget(target_stage_id, company_id, reason="stage does not exist")
            if target.company_id != company_id:
                raise InvalidStageTarget(target.id, company_id)

            if self.config.enforce_stage_order:
                self._check_order(uow, application, target)

            self._apply_move(uow, application, target, actor, note)
        return application

    def advance(self, application_id: Any, actor: Optional[str] = None, note: Optional[str] = None) -> Application:
        """
        Move an application to the next stage by order.

        Raises:
            TerminalStageReached: From a terminal stage or the last stage
        """
        with self._uow() as uow:
            application = self._get_application(uow, application_id)
            current = application.current_stage
            if is_terminal(current.name, self.config.terminal_stage_names):
                raise TerminalStageReached(application.id, current.name)

            stages = self.registry.stages_for(uow, application.job.company_id)
            position = [stage.id for stage in stages].index(current.id)
            if position + 1 >= len(stages):
                raise TerminalStageReached(application.id, current.name)

            self._apply_move(uow, application, stages[position + 1], actor, note)
        return application

    def get_history(self, application_id: Any) -> List[ApplicationHistory]:
        with self._uow() as uow:
            application = self._get_application(uow, application_id)
            return uow.applications.history(application.id)

    def get_pipeline(self, job_id: Any) -> List[PipelineColumn]:
        """The job's board: every company stage with its applications."""
        with self._uow() as uow:
            job = uow.parties.get_job(job_id)
            if job is None:
                raise JobNotFound(job_id)

            columns = [PipelineColumn(stage=stage) for stage in self.registry.stages_for(uow, job.company_id)]
            by_stage = {column.stage.id: column for column in columns}
            for application in uow.applications.list_for_job(job.id):
                column = by_stage.get(application.current_stage_id)
                if column is not None:
                    column.applications.append(application)
        return columns

    def _score_on_apply(self, uow: UnitOfWork, job, candidate_id: Any):
        candidate_matrix = uow.matrices.get_candidate_matrix(candidate_id)
        job_matrix = uow.matrices.get_job_matrix(job.id)
        if candidate_matrix is None or job_matrix is None:
            logger.debug(f"Matrices incomplete for candidate {candidate_id} and job {job.id}; not scoring")
            return uow.matches.get_for_pair(candidate_id, job.id)
        match, _ = self.match_service.score_pair(uow, job, candidate_matrix, job_matrix)
        return match

    def _get_application(self, uow: UnitOfWork, application_id: Any) -> Application:
        application = uow.applications.get(application_id)
        if application is None:
            raise ApplicationNotFound(application_id)
        return application

    def _check_order(self, uow: UnitOfWork, application: Application, target: PipelineStage) -> None:
        stages = uow.stages.list_for_company(target.company_id)
        positions = {stage.id: index for index, stage in enumerate(stages)}
        current_position = positions[application.current_stage_id]
        if positions[target.id] > current_position + 1:
            raise InvalidStageTransition(
                application.id,
                application.current_stage_id,
                target.id,
                reason=f"cannot skip ahead from '{application.current_stage.name}' to '{target.name}'",
            )

    def _apply_move(
        self,
        uow: UnitOfWork,
        application: Application,
        target: PipelineStage,
        actor: Optional[str],
        note: Optional[str]
    ) -> None:
        source = application.current_stage
        application.current_stage = target
        application.updated_at = utcnow()
        uow.applications.append_history(application, source, target, actor, note)

        candidate = application.candidate
        if candidate is not None and candidate.user_id is not None:
            content = NotificationMessageBuilder.stage_changed(
                stage_role(target.name),
                application.job.title,
                target.name,
                data={
                    'application_id': str(application.id),
                    'job_id': str(application.job_id),
                    'stage_id': str(target.id),
                    'stage_name': target.name,
                },
            )
            uow.publish(NotificationMessage.from_content(candidate.user_id, content))

        logger.info(
            f"Application {application.id} moved from '{source.name}' to '{target.name}'"
            f"{f' by {actor}' if actor else ''}"
        )
