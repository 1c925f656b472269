from typing import Any, Dict, Optional, Tuple, Union
import logging

from core.exceptions import CandidateNotFound, JobNotFound
from core.match_service import MatchService, RecomputeReport
from core.utils import round_half_up, to_uuid
from database.models import CandidateMatrix, JobMatrix
from database.uow import UnitOfWork, unit_of_work
from etl.schema_models import CandidateMatrixPayload, JobMatrixPayload

logger = logging.getLogger(__name__)

RawMatrix = Union[str, bytes, Dict[str, Any]]


class MatrixIngestService:
    """Stores matrices produced by the external generator.

    ``ingest_candidate``/``ingest_job`` run inside the caller's unit of work.
    ``store_candidate_matrix``/``store_job_matrix`` own their transaction and,
    once it commits, re-score the counterparts so no Match is left computed
    from a superseded matrix.

    Usage:
        with unit_of_work() as uow:
            MatrixIngestService().ingest_candidate(uow, candidate_id, raw_json)
        # commit happens automatically

        matrix, report = ingest_service.store_job_matrix(job_id, raw_json)
    """

    def __init__(self, session_factory=None, match_service: Optional[MatchService] = None, notifier=None):
        self.session_factory = session_factory
        self.match_service = match_service or MatchService(session_factory=session_factory, notifier=notifier)

    @staticmethod
    def _parse(payload_class, raw: RawMatrix):
        if isinstance(raw, (str, bytes)):
            return payload_class.model_validate_json(raw)
        return payload_class.model_validate(raw)

    def ingest_candidate(
        self,
        uow: UnitOfWork,
        candidate_id: Any,
        raw: RawMatrix,
        cv_file_id: Optional[Any] = None
    ) -> CandidateMatrix:
        """Validate and store a new matrix; it supersedes the candidate's older ones.

        Raises:
            pydantic.ValidationError: If the payload does not match the schema
            CandidateNotFound: If the candidate does not exist
        """
        payload = self._parse(CandidateMatrixPayload, raw)
        if uow.parties.get_candidate(candidate_id) is None:
            raise CandidateNotFound(candidate_id)

        matrix = CandidateMatrix(
            candidate_id=to_uuid(candidate_id),
            cv_file_id=to_uuid(cv_file_id),
            skills=payload.skills_json(),
            roles=payload.roles,
            total_years_experience=payload.total_years_experience,
            domains=payload.domains,
            education=payload.education,
            languages=payload.languages,
            location_signals=payload.location_signals.model_dump(),
            confidence=round_half_up(payload.confidence) if payload.confidence is not None else None,
            evidence=[snippet.model_dump(exclude_none=True) for snippet in payload.evidence],
            model_version=payload.model_version,
        )
        uow.matrices.add_candidate_matrix(matrix)
        logger.info(
            f"Stored candidate matrix {matrix.id} for candidate {candidate_id} "
            f"({len(matrix.skills)} skills, confidence={matrix.confidence})"
        )
        return matrix

    def ingest_job(self, uow: UnitOfWork, job_id: Any, raw: RawMatrix) -> JobMatrix:
        """Validate and store a job matrix, replacing the job's previous one.

        Raises:
            pydantic.ValidationError: If the payload does not match the schema
            JobNotFound: If the job does not exist
        """
        payload = self._parse(JobMatrixPayload, raw)
        if uow.parties.get_job(job_id) is None:
            raise JobNotFound(job_id)

        matrix = JobMatrix(
            job_id=to_uuid(job_id),
            required_skills=payload.required_skills_json(),
            preferred_skills=payload.preferred_skills_json(),
            experience_weight=payload.experience_weight,
            location_weight=payload.location_weight,
            domain_weight=payload.domain_weight,
            min_years_experience=payload.min_years_experience,
            domains=payload.domains,
            location=payload.location.model_dump(exclude_none=True),
            model_version=payload.model_version,
        )
        uow.matrices.replace_job_matrix(matrix)
        logger.info(
            f"Stored job matrix {matrix.id} for job {job_id} "
            f"({len(matrix.required_skills)} required, {len(matrix.preferred_skills)} preferred skills)"
        )
        return matrix

    def store_candidate_matrix(
        self,
        candidate_id: Any,
        raw: RawMatrix,
        cv_file_id: Optional[Any] = None
    ) -> Tuple[CandidateMatrix, RecomputeReport]:
        """Store a candidate matrix, then re-score the candidate against every job with a matrix."""
        with unit_of_work(self.session_factory) as uow:
            matrix = self.ingest_candidate(uow, candidate_id, raw, cv_file_id)
        return matrix, self.match_service.recompute_for_candidate(matrix.candidate_id)

    def store_job_matrix(self, job_id: Any, raw: RawMatrix) -> Tuple[JobMatrix, RecomputeReport]:
        """Store a job matrix, then re-score the job against every candidate with a matrix."""
        with unit_of_work(self.session_factory) as uow:
            matrix = self.ingest_job(uow, job_id, raw)
        return matrix, self.match_service.recompute_for_job(matrix.job_id)
