import logging
from typing import Any, List, Optional

from sqlalchemy import select, delete

from database.models import CandidateMatrix, JobMatrix
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MatrixRepository(BaseRepository):
    """Read access to the generated matrices, plus the ingestion writes."""

    def get_candidate_matrix(self, candidate_id: Any) -> Optional[CandidateMatrix]:
        """Most recently generated matrix of the candidate, or None if never generated."""
        stmt = (
            select(CandidateMatrix)
            .where(CandidateMatrix.candidate_id == self._id(candidate_id))
            .order_by(CandidateMatrix.generated_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def get_job_matrix(self, job_id: Any) -> Optional[JobMatrix]:
        stmt = select(JobMatrix).where(JobMatrix.job_id == self._id(job_id))
        return self.db.execute(stmt).scalar_one_or_none()

    def add_candidate_matrix(self, matrix: CandidateMatrix) -> CandidateMatrix:
        self.db.add(matrix)
        self.db.flush()
        return matrix

    def replace_job_matrix(self, matrix: JobMatrix) -> JobMatrix:
        removed = self.db.execute(
            delete(JobMatrix).where(JobMatrix.job_id == matrix.job_id)
        ).rowcount
        if removed:
            logger.info(f"Replaced job matrix for job {matrix.job_id}")
        self.db.add(matrix)
        self.db.flush()
        return matrix

    def candidate_ids_with_matrix(self) -> List[Any]:
        stmt = select(CandidateMatrix.candidate_id).distinct()
        return list(self.db.execute(stmt).scalars().all())

    def job_ids_with_matrix(self) -> List[Any]:
        stmt = select(JobMatrix.job_id)
        return list(self.db.execute(stmt).scalars().all())
