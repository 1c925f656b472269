from .base import Base
from .party import Company, Candidate, Job
from .matrix import CandidateMatrix, JobMatrix
from .match import Match, MATCH_STATUSES
from .pipeline import PipelineStage, Application, ApplicationHistory
from .notification import Notification

__all__ = [
    'Base',
    'Company',
    'Candidate',
    'Job',
    'CandidateMatrix',
    'JobMatrix',
    'Match',
    'MATCH_STATUSES',
    'PipelineStage',
    'Application',
    'ApplicationHistory',
    'Notification',
]
