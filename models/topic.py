"""MaintenanceTopic class for recurring maintenance tasks."""

from enum import Enum
from typing import List, Optional


class DurationType(Enum):
    """Unit of a maintenance interval."""

    DAYS = "days"
    MONTHS = "months"
    MILES = "miles"
    HOURS = "hours"


class MaintenanceStep:
    """One ordered step of a maintenance procedure."""

    def __init__(
            self,
            id: str,
            order: int,
            description: str,
            completed: bool = False,
    ):
        self.id = id
        self.order = order
        self.description = description
        self.completed = completed or False


class MaintenanceTopic:
    """A recurring maintenance task bound to one subject."""

    def __init__(
            self,
            id: str,
            subject_id: str,
            name: str,
            duration_value: Optional[float] = None,
            duration_type: Optional[DurationType] = None,
            last_completed_date: Optional[str] = None,
            last_completed_mileage: Optional[float] = None,
            last_completed_hours: Optional[float] = None,
            steps: Optional[List[MaintenanceStep]] = None,
            tools: Optional[List[str]] = None,
            scheduled_date: Optional[str] = None,
            notes: Optional[str] = None,
            created_at: Optional[str] = None,
            updated_at: Optional[str] = None,
    ):
        self.id = id
        self.subject_id = subject_id
        self.name = name
        self.duration_value = duration_value
        self.duration_type = DurationType(duration_type) if duration_type else None
        self.last_completed_date = last_completed_date
        self.last_completed_mileage = last_completed_mileage
        self.last_completed_hours = last_completed_hours
        self.steps = steps or []
        self.tools = tools or []
        self.scheduled_date = scheduled_date
        self.notes = notes
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def has_interval(self) -> bool:
        """True when both interval magnitude and unit are configured."""
        return bool(self.duration_value) and self.duration_type is not None

    @property
    def interval_label(self) -> str:
        """Human-readable interval, e.g. 'every 5000 miles'."""
        if not self.has_interval:
            return "-"
        value = self.duration_value
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return f"every {value} {self.duration_type.value}"

    @property
    def ordered_steps(self) -> List[MaintenanceStep]:
        return sorted(self.steps, key=lambda s: s.order)
