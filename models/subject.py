"""Subject class for the things being maintained."""

from enum import Enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .topic import MaintenanceTopic


class SubjectType(Enum):
    """Kinds of subject. Determines which usage counters are meaningful."""

    VEHICLE = "vehicle"
    HOUSE = "house"
    BOAT = "boat"
    EQUIPMENT = "equipment"
    OTHER = "other"


class Subject:
    """A physical thing under maintenance (car, house, boat...)."""

    def __init__(
        self,
        id: str,
        name: str,
        type: SubjectType,
        current_mileage: Optional[float] = None,
        current_hours: Optional[float] = None,
        topics: Optional[List["MaintenanceTopic"]] = None,
        created_at: Optional[str] = None,
        updated_at: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.type = SubjectType(type)
        self.current_mileage = current_mileage
        self.current_hours = current_hours
        self.topics = topics or []
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def is_vehicle(self) -> bool:
        return self.type == SubjectType.VEHICLE

    @property
    def tracks_hours(self) -> bool:
        """Boats and equipment log engine hours."""
        return self.type in (SubjectType.BOAT, SubjectType.EQUIPMENT)

    def get_topic(self, topic_id: str) -> Optional["MaintenanceTopic"]:
        """Find one of this subject's topics by id."""
        for topic in self.topics:
            if topic.id == topic_id:
                return topic
        return None
