#!/usr/bin/env python3
"""
Skill name normalisation.

Maps spelling variants onto one canonical token (``React.js`` -> ``react``,
``k8s`` -> ``kubernetes``) while keeping related but distinct technologies
apart (``react`` vs ``react-native``, ``angular`` vs ``angularjs``).
"""

import re
from typing import Any, Iterable, Set

_SEPARATORS = re.compile(r'[._\s-]+')

# Keys are either the lower-cased name or its separator-free form
_ALIASES = {
    'js': 'javascript',
    'ecmascript': 'javascript',
    'ts': 'typescript',
    'py': 'python',
    'python3': 'python',
    'golang': 'go',
    'html5': 'html',
    'css3': 'css',
    'node': 'nodejs',
    'reactjs': 'react',
    'reactnative': 'react-native',
    'vuejs': 'vue',
    'angular2': 'angular',
    'express': 'expressjs',
    'objc': 'objective-c',
    'objectivec': 'objective-c',
    'postgres': 'postgresql',
    'sqlserver': 'mssql',
    'mongo': 'mongodb',
    'amazonwebservices': 'aws',
    'microsoftazure': 'azure',
    'googlecloud': 'gcp',
    'googlecloudplatform': 'gcp',
    'k8s': 'kubernetes',
    'ci/cd': 'cicd',
    'ci/cd pipelines': 'cicd',
    'tf': 'tensorflow',
    'ml': 'machine-learning',
    'machinelearning': 'machine-learning',
    'dl': 'deep-learning',
    'deeplearning': 'deep-learning',
}

SQL_FAMILY = frozenset({'sql', 'mysql', 'postgresql', 'mssql', 'sqlite'})

SOFT_SKILLS = frozenset({
    'communication', 'teamwork', 'problemsolving', 'leadership', 'timemanagement',
    'criticalthinking', 'adaptability', 'creativity', 'collaboration',
    'interpersonal', 'interpersonalskills', 'presentation', 'presentationskills',
    'publicspeaking', 'negotiation', 'conflictresolution', 'decisionmaking',
    'emotionalintelligence', 'workethic', 'selfmotivated', 'attentiontodetail',
    'multitasking', 'organization', 'organizational', 'flexibility', 'reliability',
    'analyticalskills', 'analyticalthinking', 'strategicthinking',
    'projectmanagement',
})

GENERIC_TECH_SKILLS = frozenset({
    'git', 'github', 'gitlab', 'bitbucket',
    'microsoftoffice', 'msoffice', 'word', 'excel', 'powerpoint',
    'windows', 'linux', 'macos',
    'agile', 'scrum', 'kanban', 'jira', 'trello',
    'slack', 'teams', 'zoom',
})


def _compact(name: Any) -> str:
    return _SEPARATORS.sub('', ' '.join(str(name).lower().split()))


def normalize_skill(name: Any) -> str:
    """Canonical, case-insensitive token for a skill name ('' for blanks)."""
    if name is None:
        return ''
    lowered = ' '.join(str(name).lower().split())
    if not lowered:
        return ''
    if lowered in _ALIASES:
        return _ALIASES[lowered]
    compact = _SEPARATORS.sub('', lowered)
    return _ALIASES.get(compact, compact)


def is_soft_skill(name: Any) -> bool:
    return bool(name) and _compact(name) in SOFT_SKILLS


def is_generic_skill(name: Any) -> bool:
    return bool(name) and _compact(name) in GENERIC_TECH_SKILLS


def skill_name(entry: Any) -> str:
    """Name of a skill entry given as a string or {"name"|"skill": ...} dict."""
    if entry is None:
        return ''
    if isinstance(entry, dict):
        return str(entry.get('name') or entry.get('skill') or '').strip()
    return str(entry).strip()


def skill_weight(entry: Any, default: float = 1.0) -> float:
    if isinstance(entry, dict):
        weight = entry.get('weight')
        if isinstance(weight, (int, float)) and weight > 0:
            return float(weight)
    return default


def iter_skill_entries(skills: Any) -> Iterable[Any]:
    """Skill lists arrive as lists of names/dicts or as {name: weight|proficiency} maps.

    Numeric map values become the entry weight; anything else keeps the name only.
    """
    if not skills:
        return []
    if isinstance(skills, dict):
        return [
            {'name': name, 'weight': value}
            if isinstance(value, (int, float)) and not isinstance(value, bool) else name
            for name, value in skills.items()
        ]
    return list(skills)


def candidate_skill_set(skills: Any, exclude_soft: bool = True) -> Set[str]:
    result = set()
    for entry in iter_skill_entries(skills):
        name = skill_name(entry)
        if not name or (exclude_soft and is_soft_skill(name)):
            continue
        result.add(normalize_skill(name))
    result.discard('')
    return result


def has_skill(candidate_skills: Set[str], required: str) -> bool:
    """Exact canonical match, or any SQL dialect satisfying another."""
    if required in candidate_skills:
        return True
    return required in SQL_FAMILY and bool(candidate_skills & SQL_FAMILY)
