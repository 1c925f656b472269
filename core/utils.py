import logging
import uuid
from typing import Any, Optional

logger = logging.getLogger(__name__)


def to_uuid(value: Any) -> Optional[uuid.UUID]:
    """Coerce an id given as str or UUID into a UUID (None passes through).

    Raises:
        ValueError: If the value is not a valid UUID
    """
    if value is None or isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (Python's round() is banker's)."""
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)
