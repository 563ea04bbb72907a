"""Urgency enum for maintenance status levels."""

from enum import Enum


class Urgency(Enum):
    """Maintenance urgency categories. Lower rank = more urgent."""

    OVERDUE = "overdue"
    WARNING = "warning"
    OK = "ok"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Urgency.OVERDUE: 1, Urgency.WARNING: 2, Urgency.OK: 3}
