#!/usr/bin/env python3
"""
Match Service - Scores candidate/job pairs and records the results.

Reads the current matrices, runs the scorer, upserts the single Match row
of the pair and publishes candidate notifications to the unit of work's
outbox. Also owns the shortlist/reject decision on a match.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import logging

from core.config_loader import ScorerConfig
from core.exceptions import InvalidDecision, JobNotFound, MatchNotFound, MissingMatrix
from core.scorer import ScoringService
from database.models import Match
from database.uow import UnitOfWork, unit_of_work
from notification.message_builder import NotificationMessageBuilder
from notification.service import NotificationMessage

logger = logging.getLogger(__name__)

DECISIONS = {
    'shortlist': 'shortlisted',
    'reject': 'rejected',
}


@dataclass
class RecomputeReport:
    """Outcome of a batch recomputation."""
    scored: List[Match] = field(default_factory=list)
    created: int = 0
    skipped: List[Any] = field(default_factory=list)


class MatchService:
    """
    Service layer for matches.

    Each public method is one unit of work; notifications go out only after
    it commits.
    """

    def __init__(self, config: Optional[ScorerConfig] = None, session_factory=None, notifier=None):
        self.config = config or ScorerConfig()
        self.scorer = ScoringService(self.config)
        self.session_factory = session_factory
        self.notifier = notifier

    def _uow(self):
        return unit_of_work(self.session_factory, self.notifier)

    def compute_match(self, candidate_id: Any, job_id: Any) -> Match:
        """
        Score the pair from its current matrices and upsert its Match.

        Raises:
            MissingMatrix: If either side has no generated matrix
            JobNotFound: If the job does not exist
        """
        with self._uow() as uow:
            job = uow.parties.get_job(job_id)
            if job is None:
                raise JobNotFound(job_id)
            job_matrix = uow.matrices.get_job_matrix(job_id)
            candidate_matrix = uow.matrices.get_candidate_matrix(candidate_id)
            if candidate_matrix is None or job_matrix is None:
                raise MissingMatrix(
                    candidate_id=candidate_id if candidate_matrix is None else None,
                    job_id=job_id if job_matrix is None else None,
                )
            match, _ = self.score_pair(uow, job, candidate_matrix, job_matrix)
        return match

    def score_pair(self, uow: UnitOfWork, job, candidate_matrix, job_matrix):
        """
        Score one pair inside the caller's unit of work and upsert its Match.

        Publishes the new-match notification to the unit of work when the row
        is created with a score of at least ``min_score_to_notify``.

        Returns: (match, created)
        """
        result = self.scorer.score(candidate_matrix, job_matrix)
        match, created = uow.matches.upsert(
            candidate_id=candidate_matrix.candidate_id,
            job_id=job.id,
            score=result.score,
            breakdown=result.breakdown,
            evidence=result.evidence_dicts(),
            candidate_matrix_id=candidate_matrix.id,
            job_matrix_id=job_matrix.id,
        )

        if created and match.score >= self.config.min_score_to_notify:
            candidate = uow.parties.get_candidate(candidate_matrix.candidate_id)
            if candidate is not None and candidate.user_id is not None:
                content = NotificationMessageBuilder.new_match(
                    match.score,
                    job.title,
                    data={'match_id': str(match.id), 'job_id': str(job.id), 'score': match.score},
                )
                uow.publish(NotificationMessage.from_content(candidate.user_id, content))
        return match, created

    def recompute_for_job(self, job_id: Any, candidate_ids: Optional[List[Any]] = None) -> RecomputeReport:
        """
        Re-score a job against every candidate that has a matrix.

        With ``candidate_ids`` only those candidates are scored; the ones
        without a matrix are reported in ``skipped``.
        """
        report = RecomputeReport()
        with self._uow() as uow:
            job = uow.parties.get_job(job_id)
            if job is None:
                raise JobNotFound(job_id)
            job_matrix = uow.matrices.get_job_matrix(job_id)
            if job_matrix is None:
                raise MissingMatrix(job_id=job_id)

            if candidate_ids is None:
                candidate_ids = uow.matrices.candidate_ids_with_matrix()

            for candidate_id in candidate_ids:
                candidate_matrix = uow.matrices.get_candidate_matrix(candidate_id)
                if candidate_matrix is None:
                    logger.warning(f"Skipping candidate {candidate_id}: no matrix generated")
                    report.skipped.append(candidate_id)
                    continue
                match, created = self.score_pair(uow, job, candidate_matrix, job_matrix)
                report.scored.append(match)
                report.created += int(created)

        logger.info(
            f"Recomputed job {job_id}: {len(report.scored)} scored "
            f"({report.created} new), {len(report.skipped)} skipped"
        )
        return report

    def recompute_for_candidate(self, candidate_id: Any, job_ids: Optional[List[Any]] = None) -> RecomputeReport:
        """Re-score a candidate against every job that has a matrix."""
        report = RecomputeReport()
        with self._uow() as uow:
            candidate_matrix = uow.matrices.get_candidate_matrix(candidate_id)
            if candidate_matrix is None:
                raise MissingMatrix(candidate_id=candidate_id)

            if job_ids is None:
                job_ids = uow.matrices.job_ids_with_matrix()

            for job_id in job_ids:
                job = uow.parties.get_job(job_id)
                job_matrix = uow.matrices.get_job_matrix(job_id)
                if job is None or job_matrix is None:
                    logger.warning(f"Skipping job {job_id}: no matrix generated")
                    report.skipped.append(job_id)
                    continue
                match, created = self.score_pair(uow, job, candidate_matrix, job_matrix)
                report.scored.append(match)
                report.created += int(created)

        logger.info(
            f"Recomputed candidate {candidate_id}: {len(report.scored)} scored "
            f"({report.created} new), {len(report.skipped)} skipped"
        )
        return report

    def decide_match(self, match_id: Any, decision: str) -> Match:
        """
        Shortlist or reject a match.

        Re-applying the current status changes nothing and sends nothing.

        Raises:
            InvalidDecision: If decision is not 'shortlist' or 'reject'
            MatchNotFound: If the match does not exist
        """
        status = DECISIONS.get(decision)
        if status is None:
            raise InvalidDecision(decision)

        with self._uow() as uow:
            match = uow.matches.get(match_id)
            if match is None:
                raise MatchNotFound(match_id)

            if not uow.matches.set_status(match, status):
                logger.debug(f"Match {match.id} already {status}")
                return match

            logger.info(f"Match {match.id} {status}")
            candidate = uow.parties.get_candidate(match.candidate_id)
            job = uow.parties.get_job(match.job_id)
            if candidate is not None and candidate.user_id is not None:
                content = NotificationMessageBuilder.match_decision(
                    status,
                    job.title if job is not None else '',
                    data={'match_id': str(match.id), 'job_id': str(match.job_id)},
                )
                uow.publish(NotificationMessage.from_content(candidate.user_id, content))
        return match

    def shortlist(self, match_id: Any) -> Match:
        return self.decide_match(match_id, 'shortlist')

    def reject(self, match_id: Any) -> Match:
        return self.decide_match(match_id, 'reject')

    def list_matches_for_job(self, job_id: Any, min_score: Optional[int] = None) -> List[Match]:
        if min_score is None:
            min_score = self.config.min_score_to_list
        with self._uow() as uow:
            return uow.matches.list_for_job(job_id, min_score=min_score)

    def list_matches_for_candidate(self, candidate_id: Any, status: Optional[str] = None) -> List[Match]:
        with self._uow() as uow:
            return uow.matches.list_for_candidate(candidate_id, status=status)

    def get_breakdown(self, match_id: Any) -> Dict[str, Any]:
        with self._uow() as uow:
            match = uow.matches.get(match_id)
            if match is None:
                raise MatchNotFound(match_id)
            return {'score': match.score, 'breakdown': match.breakdown, 'evidence': match.evidence}
