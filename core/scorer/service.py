#!/usr/bin/env python3
"""
Scoring Service - Turns a candidate matrix and a job matrix into a match score.

Pure computation: reads two matrices, returns a MatchScore. No persistence.
"""

from typing import Any, Dict, Optional
import logging

from core.config_loader import ScorerConfig
from core.utils import clamp, round_half_up
from core.scorer.models import EvidenceItem, MatchScore
from core.scorer.skills import candidate_skill_set
from core.scorer.coverage import score_skills
from core.scorer.alignment import (
    calculate_domain_score,
    calculate_experience_score,
    calculate_location_score,
)

logger = logging.getLogger(__name__)

AXES = ('skills', 'experience', 'domain', 'location')


def _weight(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return max(0.0, float(value))


def axis_weights(job_matrix: Any, skill_baseline_weight: float) -> Dict[str, float]:
    """
    Effective weight of each axis, summing to 1.

    Skills always take ``skill_baseline_weight``; the rest is split across
    experience/domain/location in proportion to the job's declared weights.
    With no declared weights skills take everything.
    """
    declared = {
        'experience': _weight(job_matrix.experience_weight),
        'domain': _weight(job_matrix.domain_weight),
        'location': _weight(job_matrix.location_weight),
    }
    total = sum(declared.values())
    if total <= 0:
        return {'skills': 1.0, 'experience': 0.0, 'domain': 0.0, 'location': 0.0}

    remaining = 1.0 - skill_baseline_weight
    weights = {'skills': skill_baseline_weight}
    for axis, value in declared.items():
        weights[axis] = remaining * value / total
    return weights


def confidence_factor(confidence: Optional[float]) -> float:
    """Matrix confidence in [0, 100] as a multiplier; missing confidence is 1."""
    if confidence is None:
        return 1.0
    return clamp(float(confidence)) / 100.0


class ScoringService:
    """
    Deterministic match scorer.

    The same pair of matrices always produces the same score, breakdown and
    evidence.
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()

    def score(self, candidate_matrix: Any, job_matrix: Any) -> MatchScore:
        cfg = self.config
        skills = candidate_skill_set(candidate_matrix.skills, exclude_soft=cfg.exclude_soft_skills)

        skill_score, required, preferred = score_skills(
            skills, job_matrix.required_skills, job_matrix.preferred_skills, cfg
        )
        experience_score = calculate_experience_score(
            candidate_matrix.total_years_experience, job_matrix.min_years_experience
        )
        domain_score, domains_matched, domains_missing = calculate_domain_score(
            candidate_matrix.domains, job_matrix.domains
        )
        location_score, location_detail = calculate_location_score(
            candidate_matrix.location_signals, job_matrix.location, cfg.same_country_location_score
        )

        breakdown = {
            'skills': round(skill_score, 2),
            'experience': round(experience_score, 2),
            'domain': round(domain_score, 2),
            'location': round(location_score, 2),
        }
        weights = axis_weights(job_matrix, cfg.skill_baseline_weight)
        sub_scores = {
            'skills': skill_score,
            'experience': experience_score,
            'domain': domain_score,
            'location': location_score,
        }
        raw = sum(weights[axis] * sub_scores[axis] for axis in AXES)
        factor = confidence_factor(candidate_matrix.confidence)
        final = round_half_up(clamp(raw * factor))

        years = candidate_matrix.total_years_experience
        min_years = job_matrix.min_years_experience
        evidence = [
            EvidenceItem(
                axis='skills',
                score=breakdown['skills'],
                weight=weights['skills'],
                detail=(
                    f"{len(required.matched)}/{required.total} required and "
                    f"{len(preferred.matched)}/{preferred.total} preferred skills covered"
                ),
                matched=required.matched + preferred.matched,
                missing=required.missing + preferred.missing,
            ),
            EvidenceItem(
                axis='experience',
                score=breakdown['experience'],
                weight=weights['experience'],
                detail=(
                    f"{years or 0:g} years against a minimum of {min_years:g}"
                    if min_years else "no minimum experience required"
                ),
            ),
            EvidenceItem(
                axis='domain',
                score=breakdown['domain'],
                weight=weights['domain'],
                detail=(
                    f"{len(domains_matched)}/{len(domains_matched) + len(domains_missing)} job domains covered"
                    if domains_matched or domains_missing else "job lists no domains"
                ),
                matched=domains_matched,
                missing=domains_missing,
            ),
            EvidenceItem(
                axis='location',
                score=breakdown['location'],
                weight=weights['location'],
                detail=location_detail,
            ),
            EvidenceItem(
                axis='confidence',
                score=round(factor * 100.0, 2),
                weight=factor,
                detail=(
                    "matrix confidence not reported"
                    if candidate_matrix.confidence is None
                    else f"score scaled by matrix confidence {factor * 100.0:g}%"
                ),
            ),
        ]

        logger.debug(f"Scored pair: raw={raw:.2f} factor={factor:.2f} final={final}")

        return MatchScore(
            score=final,
            breakdown=breakdown,
            evidence=evidence,
            raw_score=raw,
            confidence_factor=factor,
            axis_weights=weights,
        )


def score_match(candidate_matrix: Any, job_matrix: Any, config: Optional[ScorerConfig] = None) -> MatchScore:
    return ScoringService(config).score(candidate_matrix, job_matrix)
