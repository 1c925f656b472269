#!/usr/bin/env python3
"""
Service-layer exceptions for matching and pipeline operations.

Every exception carries the ids needed by the caller to act on it.
"""

from typing import Any, Optional


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundException(ServiceException):
    """Raised when a referenced entity does not exist."""
    pass


class MatchNotFound(NotFoundException):
    def __init__(self, match_id: Any):
        self.match_id = match_id
        super().__init__(f"Match {match_id} not found")


class ApplicationNotFound(NotFoundException):
    def __init__(self, application_id: Any):
        self.application_id = application_id
        super().__init__(f"Application {application_id} not found")


class StageNotFound(NotFoundException):
    def __init__(self, stage_id: Any):
        self.stage_id = stage_id
        super().__init__(f"Pipeline stage {stage_id} not found")


class CompanyNotFound(NotFoundException):
    def __init__(self, company_id: Any):
        self.company_id = company_id
        super().__init__(f"Company {company_id} not found")


class CandidateNotFound(NotFoundException):
    def __init__(self, candidate_id: Any):
        self.candidate_id = candidate_id
        super().__init__(f"Candidate {candidate_id} not found")


class JobNotFound(NotFoundException):
    def __init__(self, job_id: Any):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found")


class MissingMatrix(ServiceException):
    """
    One or both matrices have not been generated yet.

    Recoverable by regenerating the matrix upstream.
    """

    def __init__(self, candidate_id: Any = None, job_id: Any = None):
        self.candidate_id = candidate_id
        self.job_id = job_id
        missing = []
        if candidate_id is not None:
            missing.append(f"candidate {candidate_id}")
        if job_id is not None:
            missing.append(f"job {job_id}")
        super().__init__(f"Matrix not generated for {' and '.join(missing) or 'unknown subject'}")


class InvalidDecision(ServiceException):
    def __init__(self, decision: str):
        self.decision = decision
        super().__init__(f"Unknown match decision '{decision}' (expected 'shortlist' or 'reject')")


class InvalidStageTarget(ServiceException):
    """Target stage is not part of the application's company registry."""

    def __init__(self, stage_id: Any, company_id: Any, reason: Optional[str] = None):
        self.stage_id = stage_id
        self.company_id = company_id
        self.reason = reason or "stage does not belong to the company's pipeline"
        super().__init__(f"Invalid target stage {stage_id} for company {company_id}: {self.reason}")


class InvalidStageTransition(ServiceException):
    """Move rejected by the stage-order policy."""

    def __init__(self, application_id: Any, from_stage_id: Any, to_stage_id: Any, reason: str):
        self.application_id = application_id
        self.from_stage_id = from_stage_id
        self.to_stage_id = to_stage_id
        self.reason = reason
        super().__init__(
            f"Cannot move application {application_id} from {from_stage_id} to {to_stage_id}: {reason}"
        )


class TerminalStageReached(ServiceException):
    def __init__(self, application_id: Any, stage_name: str):
        self.application_id = application_id
        self.stage_name = stage_name
        super().__init__(f"Application {application_id} is in terminal stage '{stage_name}'")


class InvalidStageOrder(ServiceException):
    """Reorder request is not a permutation of the company's stages."""

    def __init__(self, company_id: Any, missing=(), foreign=(), duplicates=()):
        self.company_id = company_id
        self.missing = list(missing)
        self.foreign = list(foreign)
        self.duplicates = list(duplicates)
        parts = []
        if self.missing:
            parts.append(f"missing {self.missing}")
        if self.foreign:
            parts.append(f"unknown or foreign {self.foreign}")
        if self.duplicates:
            parts.append(f"duplicated {self.duplicates}")
        super().__init__(f"Invalid stage order for company {company_id}: {', '.join(parts)}")


class StageInUse(ServiceException):
    """Stage still has applications sitting in it."""

    def __init__(self, stage_id: Any, occupants: int):
        self.stage_id = stage_id
        self.occupants = occupants
        super().__init__(f"Stage {stage_id} still holds {occupants} application(s); move them first")


class DefaultStageProtected(ServiceException):
    """The default stage can be neither deleted nor unflagged directly."""

    def __init__(self, stage_id: Any, action: str = "deleted"):
        self.stage_id = stage_id
        self.action = action
        super().__init__(f"Stage {stage_id} is the company's default stage and cannot be {action}")


class ApplicationExists(ServiceException):
    def __init__(self, candidate_id: Any, job_id: Any, application_id: Any):
        self.candidate_id = candidate_id
        self.job_id = job_id
        self.application_id = application_id
        super().__init__(f"Candidate {candidate_id} already applied to job {job_id} ({application_id})")


class DuplicateDefaultStage(UserWarning):
    """
    Data-integrity warning: a company has more than one stage flagged default.

    Never raised; emitted through warnings.warn while the lowest-order
    default is used.
    """
    pass
