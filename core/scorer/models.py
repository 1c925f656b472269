#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field, asdict


@dataclass
class SkillCoverage:
    """Weighted coverage of one job skill list by the candidate's skills."""
    fraction: float = 0.0
    matched: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.missing)


@dataclass
class EvidenceItem:
    """One "why this score" line: an axis, its sub-score and what drove it."""
    axis: str
    score: float
    weight: float
    detail: str
    matched: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MatchScore:
    """Complete scoring result for one candidate/job pair."""
    score: int
    breakdown: Dict[str, float] = field(default_factory=dict)
    evidence: List[EvidenceItem] = field(default_factory=list)
    raw_score: float = 0.0
    confidence_factor: float = 1.0
    axis_weights: Dict[str, float] = field(default_factory=dict)

    def evidence_dicts(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self.evidence]

    def evidence_for(self, axis: str) -> Optional[EvidenceItem]:
        return next((item for item in self.evidence if item.axis == axis), None)
