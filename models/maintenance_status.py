"""Dataclasses for calculated maintenance status."""

from dataclasses import dataclass
from typing import Optional

from .status import Urgency


@dataclass
class MaintenanceStatus:
    """Calculated status for one topic. Recomputed on every read."""

    topic_id: str
    status_text: str
    percent_remaining: Optional[float] = None
    is_overdue: bool = False
    urgency: Optional[Urgency] = None
    days_until_due: Optional[float] = None
    months_until_due: Optional[float] = None
    miles_until_due: Optional[float] = None
    hours_until_due: Optional[float] = None

    @property
    def is_known(self) -> bool:
        """False when a usage reading was missing and nothing was computed."""
        return self.urgency is not None

    def to_dict(self) -> dict:
        return {
            "topicId": self.topic_id,
            "percentRemaining": self.percent_remaining,
            "isOverdue": self.is_overdue,
            "daysUntilDue": self.days_until_due,
            "monthsUntilDue": self.months_until_due,
            "milesUntilDue": self.miles_until_due,
            "hoursUntilDue": self.hours_until_due,
            "statusText": self.status_text,
            "urgency": self.urgency.value if self.urgency else None,
        }


@dataclass
class SubjectSummary:
    """Roll-up of topic statuses for one subject."""

    subject_id: str
    urgency: Urgency
    text: str
    overdue: int = 0
    warning: int = 0
    ok: int = 0
    unknown: int = 0

    def to_dict(self) -> dict:
        return {
            "subjectId": self.subject_id,
            "urgency": self.urgency.value,
            "text": self.text,
            "overdue": self.overdue,
            "warning": self.warning,
            "ok": self.ok,
            "unknown": self.unknown,
        }
