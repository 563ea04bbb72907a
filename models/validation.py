"""Input checks applied before anything is stored."""

import math
from datetime import date, datetime
from typing import Optional

from dateutil.parser import isoparse

from .subject import SubjectType
from .topic import DurationType


def require_name(name: Optional[str], what: str = "Name") -> str:
    if name is None or not str(name).strip():
        raise ValueError(f"{what} is required")
    return str(name).strip()


def parse_subject_type(value) -> SubjectType:
    try:
        return SubjectType(value)
    except ValueError:
        choices = ", ".join(t.value for t in SubjectType)
        raise ValueError(f"Unknown subject type '{value}' (expected one of: {choices})")


def parse_duration_type(value) -> Optional[DurationType]:
    if value is None or value == "":
        return None
    try:
        return DurationType(value)
    except ValueError:
        choices = ", ".join(t.value for t in DurationType)
        raise ValueError(f"Unknown duration type '{value}' (expected one of: {choices})")


def check_duration_value(value) -> Optional[float]:
    """Intervals must be positive."""
    if value is None:
        return None
    number = _number(value, "durationValue")
    if number <= 0:
        raise ValueError(f"durationValue must be positive, got {value}")
    return number


def check_reading(value, field: str) -> Optional[float]:
    """Odometer and hour-meter readings cannot be negative."""
    if value is None:
        return None
    number = _number(value, field)
    if number < 0:
        raise ValueError(f"{field} cannot be negative, got {value}")
    return number


def check_date(value, field: str = "date") -> Optional[str]:
    """Accept an ISO-8601 date string (or date) and return it as a string."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        text = value.isoformat()
    elif isinstance(value, str):
        text = value
    else:
        raise ValueError(f"{field} must be an ISO-8601 date, got {value!r}")
    try:
        isoparse(text)
    except ValueError:
        raise ValueError(f"{field} must be an ISO-8601 date, got '{value}'")
    return text


def _number(value, field: str):
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{field} must be a number, got '{value}'")
    if isinstance(number, float) and not math.isfinite(number):
        raise ValueError(f"{field} must be a finite number, got '{value}'")
    if isinstance(number, float) and number.is_integer() and not isinstance(value, float):
        return int(number)
    return number
