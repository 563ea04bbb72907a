"""YAML loading and saving utilities for maintenance data."""

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .garage import Garage
from .subject import Subject
from .topic import MaintenanceStep, MaintenanceTopic


def step_from_dict(dct: Dict[str, Any]) -> MaintenanceStep:
    return MaintenanceStep(
        dct["id"],
        dct["order"],
        dct["description"],
        dct.get("completed", False),
    )


def topic_from_dict(dct: Dict[str, Any]) -> MaintenanceTopic:
    steps = [
        s if isinstance(s, MaintenanceStep) else step_from_dict(s)
        for s in dct.get("steps") or []
    ]
    return MaintenanceTopic(
        dct["id"],
        dct.get("subjectId"),
        dct["name"],
        dct.get("durationValue"),
        dct.get("durationType"),
        dct.get("lastCompletedDate"),
        dct.get("lastCompletedMileage"),
        dct.get("lastCompletedHours"),
        steps,
        dct.get("tools"),
        dct.get("scheduledDate"),
        dct.get("notes"),
        dct.get("createdAt"),
        dct.get("updatedAt"),
    )


def subject_from_dict(dct: Dict[str, Any]) -> Subject:
    topics = [
        t if isinstance(t, MaintenanceTopic) else topic_from_dict(t)
        for t in dct.get("topics") or []
    ]
    # Nested topics always belong to the enclosing subject
    for topic in topics:
        topic.subject_id = dct["id"]
    return Subject(
        dct["id"],
        dct["name"],
        dct["type"],
        dct.get("currentMileage"),
        dct.get("currentHours"),
        topics,
        dct.get("createdAt"),
        dct.get("updatedAt"),
    )


def _parse_object(dct: Dict[str, Any]) -> Union[Subject, MaintenanceTopic, MaintenanceStep, Garage, dict]:
    """Parse dictionary into appropriate object type."""
    # Topic (nested under a subject)
    if "subjectId" in dct:
        return topic_from_dict(dct)
    # Step (nested under a topic)
    elif "order" in dct and "description" in dct:
        return step_from_dict(dct)
    # Subject
    elif "type" in dct and "name" in dct:
        return subject_from_dict(dct)
    # Top-level file object
    elif "subjects" in dct:
        return Garage(dct["subjects"])
    else:
        return dct


def load_garage(filename: Union[str, Path]) -> Garage:
    """Load every subject and topic from a YAML file."""
    with open(filename, "rb") as fp:
        raw = yaml.load(fp, Loader=yaml.SafeLoader) or {}
    if "subjects" not in raw or raw["subjects"] is None:
        raw["subjects"] = []
    # Unquoted YAML dates load as date objects; str() keeps them ISO-8601
    json_data = json.dumps(raw, indent=4, default=str)
    return json.loads(json_data, object_hook=_parse_object)


def step_to_dict(step: MaintenanceStep) -> Dict[str, Any]:
    return {
        "id": step.id,
        "order": step.order,
        "description": step.description,
        "completed": step.completed,
    }


def topic_to_dict(topic: MaintenanceTopic) -> Dict[str, Any]:
    """Serialize a topic to the YAML/JSON dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": topic.id,
        "subjectId": topic.subject_id,
        "name": topic.name,
    }
    if topic.duration_value is not None:
        d["durationValue"] = topic.duration_value
    if topic.duration_type is not None:
        d["durationType"] = topic.duration_type.value
    if topic.last_completed_date is not None:
        d["lastCompletedDate"] = topic.last_completed_date
    if topic.last_completed_mileage is not None:
        d["lastCompletedMileage"] = topic.last_completed_mileage
    if topic.last_completed_hours is not None:
        d["lastCompletedHours"] = topic.last_completed_hours
    if topic.scheduled_date is not None:
        d["scheduledDate"] = topic.scheduled_date
    if topic.notes is not None:
        d["notes"] = topic.notes
    d["steps"] = [step_to_dict(s) for s in topic.ordered_steps]
    d["tools"] = list(topic.tools)
    if topic.created_at is not None:
        d["createdAt"] = topic.created_at
    if topic.updated_at is not None:
        d["updatedAt"] = topic.updated_at
    return d


def subject_to_dict(subject: Subject, include_topics: bool = True) -> Dict[str, Any]:
    """Serialize a subject to the YAML/JSON dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": subject.id,
        "name": subject.name,
        "type": subject.type.value,
    }
    if subject.current_mileage is not None:
        d["currentMileage"] = subject.current_mileage
    if subject.current_hours is not None:
        d["currentHours"] = subject.current_hours
    if subject.created_at is not None:
        d["createdAt"] = subject.created_at
    if subject.updated_at is not None:
        d["updatedAt"] = subject.updated_at
    if include_topics:
        d["topics"] = [topic_to_dict(t) for t in subject.topics]
    return d


def save_garage(filename: Union[str, Path], garage: Garage) -> None:
    """Write the whole garage back to a YAML file."""
    data = {"subjects": [subject_to_dict(s) for s in garage.subjects]}
    Path(filename).parent.mkdir(parents=True, exist_ok=True)
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
