"""Lifecycle roles of company-defined stage names."""

from typing import Iterable, Optional

# First matching keyword wins
ROLE_KEYWORDS = (
    ('reject', 'rejected'),
    ('hire', 'hired'),
    ('offer', 'offer'),
    ('interview', 'interview'),
    ('screen', 'screening'),
)


def stage_role(stage_name: Optional[str]) -> Optional[str]:
    """Role a stage name maps to ('screening', 'interview', ...), or None."""
    if not stage_name:
        return None
    lowered = stage_name.lower()
    for keyword, role in ROLE_KEYWORDS:
        if keyword in lowered:
            return role
    return None


def is_terminal(stage_name: Optional[str], terminal_names: Iterable[str]) -> bool:
    if not stage_name:
        return False
    return stage_name.strip().lower() in {name.strip().lower() for name in terminal_names}
