"""
Storage for subjects and topics.

MaintenanceRepository implements every operation against a Garage
aggregate; subclasses only decide where that aggregate lives:
- MemoryRepository: in-process, nothing persisted
- YamlRepository: one YAML data file, loaded and written per operation
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union

from .garage import Garage
from .loader import load_garage, save_garage
from .subject import Subject
from .topic import MaintenanceStep, MaintenanceTopic
from .validation import (
    check_date,
    check_duration_value,
    check_reading,
    parse_duration_type,
    parse_subject_type,
    require_name,
)

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex[:8]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_steps(steps) -> List[MaintenanceStep]:
    """Accept steps as objects or dicts; ids and order are filled in if missing."""
    if steps is None:
        return []
    if not isinstance(steps, (list, tuple)):
        raise ValueError("steps must be a list")
    result = []
    for index, step in enumerate(steps):
        if isinstance(step, dict):
            if not step.get("description"):
                raise ValueError("Step description is required")
            step = MaintenanceStep(
                step.get("id") or new_id(),
                step.get("order", index),
                step["description"],
                step.get("completed", False),
            )
        elif not isinstance(step, MaintenanceStep):
            raise ValueError(f"Each step must be an object, got {step!r}")
        result.append(step)
    return result


def _coerce_tools(tools) -> List[str]:
    if tools is None:
        return []
    if not isinstance(tools, (list, tuple)) or not all(isinstance(t, str) for t in tools):
        raise ValueError("tools must be a list of strings")
    return list(tools)


def _check_notes(notes) -> Optional[str]:
    if notes is not None and not isinstance(notes, str):
        raise ValueError("notes must be text")
    return notes


# Updatable field -> check returning the value to store
SUBJECT_CHECKS = {
    "name": lambda v: require_name(v, "Subject name"),
    "type": parse_subject_type,
    "current_mileage": lambda v: check_reading(v, "currentMileage"),
    "current_hours": lambda v: check_reading(v, "currentHours"),
}
TOPIC_CHECKS = {
    "name": lambda v: require_name(v, "Topic name"),
    "steps": _coerce_steps,
    "tools": _coerce_tools,
    "duration_value": check_duration_value,
    "duration_type": parse_duration_type,
    "scheduled_date": lambda v: check_date(v, "scheduledDate"),
    "notes": _check_notes,
    "last_completed_date": lambda v: check_date(v, "lastCompletedDate"),
    "last_completed_mileage": lambda v: check_reading(v, "lastCompletedMileage"),
    "last_completed_hours": lambda v: check_reading(v, "lastCompletedHours"),
}


class MaintenanceRepository:
    """Base repository. Subclasses provide _load() and _save()."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock

    def _load(self) -> Garage:
        raise NotImplementedError

    def _save(self, garage: Garage) -> None:
        raise NotImplementedError

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    def garage(self) -> Garage:
        """The current aggregate, for batch status calculation."""
        return self._load()

    # -------------------------------------------------------------------------
    # Subjects
    # -------------------------------------------------------------------------

    def list_subjects(self) -> List[Subject]:
        return list(self._load().subjects)

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return self._load().get_subject(subject_id)

    def create_subject(
        self,
        name: str,
        type,
        current_mileage: Optional[float] = None,
        current_hours: Optional[float] = None,
        id: Optional[str] = None,
    ) -> Subject:
        garage = self._load()
        if id is not None and garage.get_subject(id) is not None:
            raise ValueError(f"Subject '{id}' already exists")
        now = self._timestamp()
        subject = Subject(
            id=id or new_id(),
            name=require_name(name),
            type=parse_subject_type(type),
            current_mileage=check_reading(current_mileage, "currentMileage"),
            current_hours=check_reading(current_hours, "currentHours"),
            created_at=now,
            updated_at=now,
        )
        garage.subjects.append(subject)
        self._save(garage)
        logger.info("Created subject %s (%s)", subject.id, subject.name)
        return subject

    def update_subject(self, subject_id: str, **fields) -> Optional[Subject]:
        """
        Apply the given fields to a subject.

        Only keys passed are touched; passing None for a reading clears it.
        Returns None when the subject does not exist.
        """
        unknown = set(fields) - set(SUBJECT_CHECKS)
        if unknown:
            raise ValueError(f"Cannot update subject field(s): {', '.join(sorted(unknown))}")

        garage = self._load()
        subject = garage.get_subject(subject_id)
        if subject is None:
            return None

        # Every field is checked before any is applied
        changes = {field: SUBJECT_CHECKS[field](value) for field, value in fields.items()}
        for field, value in changes.items():
            setattr(subject, field, value)
        subject.updated_at = self._timestamp()

        self._save(garage)
        logger.info("Updated subject %s (%s)", subject.id, ", ".join(sorted(fields)) or "no fields")
        return subject

    def delete_subject(self, subject_id: str) -> bool:
        """Delete a subject and every topic it owns."""
        garage = self._load()
        subject = garage.get_subject(subject_id)
        if subject is None:
            return False
        garage.subjects.remove(subject)
        self._save(garage)
        logger.info("Deleted subject %s with %d topic(s)", subject_id, len(subject.topics))
        return True

    # -------------------------------------------------------------------------
    # Topics
    # -------------------------------------------------------------------------

    def list_topics(self, subject_id: Optional[str] = None) -> List[MaintenanceTopic]:
        return self._load().get_topics(subject_id)

    def get_topic(self, topic_id: str) -> Optional[MaintenanceTopic]:
        found = self._load().find_topic(topic_id)
        return found[1] if found else None

    def create_topic(
        self,
        subject_id: str,
        name: str,
        duration_value: Optional[float] = None,
        duration_type=None,
        steps=None,
        tools: Optional[List[str]] = None,
        scheduled_date: Optional[str] = None,
        notes: Optional[str] = None,
        id: Optional[str] = None,
    ) -> MaintenanceTopic:
        garage = self._load()
        subject = garage.get_subject(subject_id)
        if subject is None:
            raise ValueError(f"Subject '{subject_id}' not found")
        if id is not None and garage.find_topic(id) is not None:
            raise ValueError(f"Topic '{id}' already exists")

        now = self._timestamp()
        topic = MaintenanceTopic(
            id=id or new_id(),
            subject_id=subject.id,
            name=require_name(name),
            duration_value=check_duration_value(duration_value),
            duration_type=parse_duration_type(duration_type),
            steps=_coerce_steps(steps),
            tools=_coerce_tools(tools),
            scheduled_date=check_date(scheduled_date, "scheduledDate"),
            notes=_check_notes(notes),
            created_at=now,
            updated_at=now,
        )
        # Newest first, as the dashboard lists them
        subject.topics.insert(0, topic)
        self._save(garage)
        logger.info("Created topic %s (%s) on subject %s", topic.id, topic.name, subject.id)
        return topic

    def update_topic(self, topic_id: str, **fields) -> Optional[MaintenanceTopic]:
        """
        Apply the given fields to a topic.

        Only keys passed are touched. Returns None when the topic does not exist.
        """
        unknown = set(fields) - set(TOPIC_CHECKS)
        if unknown:
            raise ValueError(f"Cannot update topic field(s): {', '.join(sorted(unknown))}")

        garage = self._load()
        found = garage.find_topic(topic_id)
        if found is None:
            return None
        _, topic = found

        changes = {field: TOPIC_CHECKS[field](value) for field, value in fields.items()}
        for field, value in changes.items():
            setattr(topic, field, value)
        topic.updated_at = self._timestamp()

        self._save(garage)
        logger.info("Updated topic %s (%s)", topic.id, ", ".join(sorted(fields)) or "no fields")
        return topic

    def delete_topic(self, topic_id: str) -> bool:
        garage = self._load()
        found = garage.find_topic(topic_id)
        if found is None:
            return False
        subject, topic = found
        subject.topics.remove(topic)
        self._save(garage)
        logger.info("Deleted topic %s from subject %s", topic_id, subject.id)
        return True

    def complete_topic_maintenance(
        self,
        subject_id: Optional[str],
        topic_id: str,
        date: str,
        mileage: Optional[float] = None,
        hours: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> Optional[MaintenanceTopic]:
        """
        Record that a topic was serviced.

        Sets last_completed_date and, when given, the mileage/hours readings
        and notes. Nothing else on the topic is cleared. subject_id may be
        None to look the owner up from the topic id.
        """
        completed_on = check_date(date)
        if completed_on is None:
            raise ValueError("date is required")
        mileage = check_reading(mileage, "mileage")
        hours = check_reading(hours, "hours")
        notes = _check_notes(notes)

        garage = self._load()
        found = garage.find_topic(topic_id)
        if found is None:
            return None
        subject, topic = found
        if subject_id is not None and subject.id != subject_id:
            return None

        topic.last_completed_date = completed_on
        if mileage is not None:
            topic.last_completed_mileage = mileage
        if hours is not None:
            topic.last_completed_hours = hours
        if notes is not None:
            topic.notes = notes
        topic.updated_at = self._timestamp()

        self._save(garage)
        logger.info("Completed topic %s on subject %s (%s)", topic.id, subject.id, completed_on)
        return topic


class MemoryRepository(MaintenanceRepository):
    """Keeps everything in process memory."""

    def __init__(self, garage: Optional[Garage] = None, **kwargs):
        super().__init__(**kwargs)
        self._garage = garage if garage is not None else Garage()

    def _load(self) -> Garage:
        return self._garage

    def _save(self, garage: Garage) -> None:
        self._garage = garage


class YamlRepository(MaintenanceRepository):
    """Reads and rewrites one YAML data file on every operation."""

    def __init__(self, filename: Union[str, Path], **kwargs):
        super().__init__(**kwargs)
        self.filename = Path(filename)

    def _load(self) -> Garage:
        if not self.filename.exists():
            return Garage()
        return load_garage(self.filename)

    def _save(self, garage: Garage) -> None:
        save_garage(self.filename, garage)
        logger.debug("Wrote %d subject(s) to %s", len(garage.subjects), self.filename)
