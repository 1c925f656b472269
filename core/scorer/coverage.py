#!/usr/bin/env python3
"""
Coverage Calculations - Required and preferred skill coverage.

Calculates what share of a job's skill lists the candidate covers and folds
the two coverages into the skill sub-score.
"""

from typing import Any, Set, Tuple
import logging

from core.config_loader import ScorerConfig
from core.scorer.models import SkillCoverage
from core.scorer.skills import (
    has_skill,
    is_generic_skill,
    is_soft_skill,
    iter_skill_entries,
    normalize_skill,
    skill_name,
    skill_weight,
)

logger = logging.getLogger(__name__)


def calculate_coverage(
    job_skills: Any,
    candidate_skills: Set[str],
    config: ScorerConfig
) -> SkillCoverage:
    """
    Weighted fraction of ``job_skills`` present in ``candidate_skills``.

    Each job skill counts with its declared weight (1 when absent); generic
    tooling counts at ``config.generic_skill_weight`` of that. Soft skills are
    ignored when ``config.exclude_soft_skills`` is set. An empty list yields
    fraction 0 and total 0; callers decide what "nothing required" means.
    """
    coverage = SkillCoverage()
    weight_total = 0.0
    weight_matched = 0.0
    seen = set()

    for entry in iter_skill_entries(job_skills):
        name = skill_name(entry)
        if not name:
            continue
        if config.exclude_soft_skills and is_soft_skill(name):
            continue
        normalized = normalize_skill(name)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)

        weight = skill_weight(entry)
        if is_generic_skill(name):
            weight *= config.generic_skill_weight
        weight_total += weight

        if has_skill(candidate_skills, normalized):
            weight_matched += weight
            coverage.matched.append(name)
        else:
            coverage.missing.append(name)

    if weight_total > 0:
        coverage.fraction = weight_matched / weight_total
    elif coverage.total > 0:
        # Every listed skill was generic and the generic weight is 0
        coverage.fraction = len(coverage.matched) / coverage.total

    return coverage


def calculate_skill_score(
    required: SkillCoverage,
    preferred: SkillCoverage,
    config: ScorerConfig
) -> float:
    """
    Combine required and preferred coverage into a 0-100 skill sub-score.

    Formula: 100 * (w_req * RequiredCoverage + w_pref * PreferredCoverage) / (w_req + w_pref)

    No required skills -> 100. No preferred skills -> required coverage alone.
    """
    if required.total == 0:
        return 100.0
    if preferred.total == 0:
        return 100.0 * required.fraction

    weight_sum = config.required_weight + config.preferred_weight
    if weight_sum <= 0:
        return 100.0 * required.fraction

    return 100.0 * (
        config.required_weight * required.fraction +
        config.preferred_weight * preferred.fraction
    ) / weight_sum


def score_skills(
    candidate_skills: Set[str],
    required_skills: Any,
    preferred_skills: Any,
    config: ScorerConfig
) -> Tuple[float, SkillCoverage, SkillCoverage]:
    """Returns: (skill_score, required_coverage, preferred_coverage)"""
    required = calculate_coverage(required_skills, candidate_skills, config)
    preferred = calculate_coverage(preferred_skills, candidate_skills, config)
    return calculate_skill_score(required, preferred, config), required, preferred
