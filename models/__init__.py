"""
Household maintenance tracking models.

This package provides data models for tracking recurring maintenance:
- Urgency: Status levels (OVERDUE, WARNING, OK)
- Subject: The thing being maintained (vehicle, house, boat...)
- MaintenanceTopic: A recurring task with its interval
- MaintenanceStatus: Calculated status of one topic
- Garage: Aggregate of every subject and its topics
- MaintenanceRepository: Storage (in-memory or YAML file)
"""

from .status import Urgency
from .subject import Subject, SubjectType
from .topic import DurationType, MaintenanceStep, MaintenanceTopic
from .maintenance_status import MaintenanceStatus, SubjectSummary
from .calculations import (
    calc_due_date,
    calc_due_usage,
    calc_percent_remaining,
    classify_urgency,
    compute_status,
    days_between,
    months_between,
    summarize_subject,
)
from .garage import Garage
from .loader import load_garage, save_garage, subject_to_dict, topic_to_dict
from .repository import MaintenanceRepository, MemoryRepository, YamlRepository

__all__ = [
    "Urgency",
    "Subject",
    "SubjectType",
    "DurationType",
    "MaintenanceStep",
    "MaintenanceTopic",
    "MaintenanceStatus",
    "SubjectSummary",
    "calc_due_date",
    "calc_due_usage",
    "calc_percent_remaining",
    "classify_urgency",
    "compute_status",
    "days_between",
    "months_between",
    "summarize_subject",
    "Garage",
    "load_garage",
    "save_garage",
    "subject_to_dict",
    "topic_to_dict",
    "MaintenanceRepository",
    "MemoryRepository",
    "YamlRepository",
]
