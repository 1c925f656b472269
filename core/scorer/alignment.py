#!/usr/bin/env python3
"""
Alignment Calculations - Experience, domain and location sub-scores.

Each function returns a 0-100 sub-score plus the details used as evidence.
"""

from typing import Any, Dict, List, Optional, Set, Tuple

_REMOTE_NEGATIVES = {'', 'no', 'none', 'false', 'onsite', 'on-site', 'office'}


def _norm(value: Any) -> str:
    if value is None:
        return ''
    return ' '.join(str(value).lower().split())


def _names(values: Any) -> List[str]:
    if not values:
        return []
    if isinstance(values, (str, dict)):
        values = [values]
    names = []
    for value in values:
        if isinstance(value, dict):
            value = value.get('name') or value.get('domain')
        if value:
            names.append(str(value).strip())
    return names


def calculate_experience_score(
    candidate_years: Optional[float],
    min_years: Optional[float]
) -> float:
    """
    100 when the minimum is met or unstated, otherwise proportional.

    Formula: 100 * years / min_years, floored at 0.
    """
    if min_years is None or min_years <= 0:
        return 100.0
    years = max(0.0, float(candidate_years or 0.0))
    if years >= min_years:
        return 100.0
    return 100.0 * years / float(min_years)


def calculate_domain_score(
    candidate_domains: Any,
    job_domains: Any
) -> Tuple[float, List[str], List[str]]:
    """
    Fraction of the job's domain tags the candidate has worked in.

    Returns: (score, matched_domains, missing_domains)
    """
    wanted = []
    seen: Set[str] = set()
    for name in _names(job_domains):
        key = _norm(name)
        if key and key not in seen:
            seen.add(key)
            wanted.append(name)

    if not wanted:
        return 100.0, [], []

    have = {_norm(name) for name in _names(candidate_domains)}
    matched = [name for name in wanted if _norm(name) in have]
    missing = [name for name in wanted if _norm(name) not in have]
    return 100.0 * len(matched) / len(wanted), matched, missing


def has_remote_affinity(location_signals: Optional[Dict[str, Any]]) -> bool:
    if not location_signals:
        return False
    value = location_signals.get('remote_affinity', location_signals.get('remote'))
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, (list, tuple, set, dict)):
        return bool(value)
    return _norm(value) not in _REMOTE_NEGATIVES


def _candidate_places(location_signals: Dict[str, Any], key: str, plural: str) -> Set[str]:
    places = {_norm(location_signals.get(key))} if key else set()
    for place in location_signals.get(plural) or []:
        places.add(_norm(place))
    places.discard('')
    return places


def calculate_location_score(
    location_signals: Optional[Dict[str, Any]],
    job_location: Optional[Dict[str, Any]],
    same_country_score: float = 50.0
) -> Tuple[float, str]:
    """
    Location fit of a candidate for a job.

    - job without location constraint -> 100
    - remote job and candidate open to remote -> 100
    - same city, or same country when the job names no city -> 100
    - same country, different city -> ``same_country_score``
    - otherwise 0

    Returns: (score, detail)
    """
    signals = location_signals or {}
    job_location = job_location or {}

    location_type = _norm(job_location.get('location_type') or job_location.get('type'))
    job_city = _norm(job_location.get('city'))
    job_country = _norm(job_location.get('country'))
    is_remote = location_type == 'remote'

    if is_remote and has_remote_affinity(signals):
        return 100.0, "remote role, candidate open to remote work"

    if not job_city and not job_country:
        if is_remote:
            return 0.0, "remote role, candidate has no remote affinity"
        return 100.0, "job has no location constraint"

    # preferred_locations may name either cities or countries
    anywhere = _candidate_places(signals, '', 'preferred_locations')
    cities = _candidate_places(signals, 'city', 'preferred_cities') | anywhere
    countries = _candidate_places(signals, 'country', 'preferred_countries') | anywhere

    if job_city and job_city in cities:
        return 100.0, f"candidate is in {job_location.get('city')}"
    if job_country and job_country in countries:
        if not job_city:
            return 100.0, f"candidate is in {job_location.get('country')}"
        return float(same_country_score), (
            f"same country ({job_location.get('country')}), different city than {job_location.get('city')}"
        )
    return 0.0, "candidate location does not match the job"
