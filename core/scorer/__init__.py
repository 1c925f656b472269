"""
Scorer package - Candidate/job fit scoring.

Modules:
- skills: skill name normalisation and classification
- coverage: required/preferred skill coverage
- alignment: experience, domain and location sub-scores
- service: ScoringService combining the axes into one score
"""

from core.scorer.models import EvidenceItem, MatchScore, SkillCoverage
from core.scorer.service import ScoringService, score_match

__all__ = [
    'EvidenceItem',
    'MatchScore',
    'SkillCoverage',
    'ScoringService',
    'score_match',
]
