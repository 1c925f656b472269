import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select

from database.models import Match
from database.models.base import utcnow
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MatchRepository(BaseRepository):
    def get(self, match_id: Any) -> Optional[Match]:
        return self.db.get(Match, self._id(match_id))

    def get_for_pair(self, candidate_id: Any, job_id: Any) -> Optional[Match]:
        stmt = select(Match).where(
            Match.candidate_id == self._id(candidate_id),
            Match.job_id == self._id(job_id)
        ).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(
        self,
        candidate_id: Any,
        job_id: Any,
        score: int,
        breakdown: Dict[str, Any],
        evidence: List[Dict[str, Any]],
        candidate_matrix_id: Any = None,
        job_matrix_id: Any = None
    ) -> Tuple[Match, bool]:
        """Insert or overwrite the single Match row of a (candidate, job) pair.

        Uses INSERT ... ON CONFLICT DO UPDATE on the pair's unique constraint,
        so concurrent recomputations converge on the last committed score
        instead of duplicating rows. The decision status is left untouched.

        Returns: (match, created)
        """
        candidate_id = self._id(candidate_id)
        job_id = self._id(job_id)
        now = utcnow()

        values = {
            'score': score,
            'breakdown': breakdown,
            'evidence': evidence,
            'candidate_matrix_id': self._id(candidate_matrix_id),
            'job_matrix_id': self._id(job_matrix_id),
            'calculated_at': now,
            'updated_at': now,
        }

        stmt = self._insert(Match).values(
            id=uuid.uuid4(),
            candidate_id=candidate_id,
            job_id=job_id,
            status='pending',
            created_at=now,
            **values
        ).on_conflict_do_update(
            index_elements=['candidate_id', 'job_id'],
            set_=values
        )
        self.db.execute(stmt)

        match = self.get_for_pair(candidate_id, job_id)
        # An insert stamps both columns with this call's time; an update leaves created_at alone
        created = match.created_at == match.calculated_at
        logger.info(
            f"{'Created' if created else 'Updated'} match {match.id} "
            f"(candidate {candidate_id}, job {job_id}) score={score}"
        )
        return match, created

    def set_status(self, match: Match, status: str) -> bool:
        """Set the decision status. Returns False when it already had that status."""
        if match.status == status:
            return False
        match.status = status
        match.updated_at = utcnow()
        self.db.flush()
        return True

    def list_for_job(self, job_id: Any, min_score: Optional[int] = None) -> List[Match]:
        stmt = select(Match).where(Match.job_id == self._id(job_id))
        if min_score is not None:
            stmt = stmt.where(Match.score >= min_score)
        stmt = stmt.order_by(Match.score.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_for_candidate(self, candidate_id: Any, status: Optional[str] = None) -> List[Match]:
        stmt = select(Match).where(Match.candidate_id == self._id(candidate_id))
        if status is not None:
            stmt = stmt.where(Match.status == status)
        stmt = stmt.order_by(Match.score.desc())
        return list(self.db.execute(stmt).scalars().all())

    def delete(self, match: Match) -> None:
        self.db.delete(match)
        self.db.flush()
