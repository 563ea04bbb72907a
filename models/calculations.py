"""Maintenance status calculations."""

import logging
import math
from datetime import date, datetime
from typing import Optional, Union

from dateutil import tz
from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .maintenance_status import MaintenanceStatus, SubjectSummary
from .status import Urgency
from .subject import Subject
from .topic import DurationType, MaintenanceTopic

logger = logging.getLogger(__name__)

# Below this percentage of the interval left, a topic is flagged as a warning.
WARNING_PERCENT = 25
# Fixed month length used only to turn a month count into a display day count.
DAYS_PER_MONTH = 30
SECONDS_PER_DAY = 24 * 60 * 60

Moment = Union[date, datetime, str]


def to_datetime(value: Moment) -> datetime:
    """
    Normalize a date, datetime or ISO-8601 string to an aware datetime.

    Dates become midnight; naive values are treated as UTC.
    """
    if isinstance(value, str):
        value = isoparse(value)
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.UTC)
    return value


def days_between(start: Moment, end: Moment) -> int:
    """Whole days from start to end, floored."""
    delta = to_datetime(end) - to_datetime(start)
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


def months_between(start: Moment, end: Moment) -> int:
    """
    Calendar-month difference. Day of month is ignored.

    Each value is read in its own timezone, as given.
    """
    start_dt = to_datetime(start)
    end_dt = to_datetime(end)
    return (end_dt.year - start_dt.year) * 12 + (end_dt.month - start_dt.month)


def calc_percent_remaining(remaining: float, interval: float) -> float:
    """Share of the interval still left, clamped to [0, 100]."""
    return max(0.0, min(100.0, remaining / interval * 100))


def classify_urgency(is_overdue: bool, percent_remaining: float) -> Urgency:
    if is_overdue:
        return Urgency.OVERDUE
    if percent_remaining < WARNING_PERCENT:
        return Urgency.WARNING
    return Urgency.OK


def format_quantity(value: float) -> str:
    """Render a number without a trailing '.0' when it is integral."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_status_text(remaining: float, unit: str) -> str:
    if remaining < 0:
        return f"{format_quantity(abs(remaining))} {unit} overdue"
    return f"{format_quantity(remaining)} {unit} remaining"


def calc_due_date(
    last_date: Optional[Moment], interval: Optional[float], unit: Optional[DurationType]
) -> Optional[date]:
    """Next due date for day/month intervals: last + interval."""
    if last_date is None or not interval or unit is None:
        return None
    last = to_datetime(last_date).date()
    if unit == DurationType.DAYS:
        return last + relativedelta(days=int(interval))
    if unit == DurationType.MONTHS:
        months = int(interval)
        days = int((interval - months) * DAYS_PER_MONTH)
        return last + relativedelta(months=months, days=days)
    return None


def calc_due_usage(last_reading: Optional[float], interval: Optional[float]) -> Optional[float]:
    """Next due odometer/hour-meter reading: last + interval."""
    if last_reading is None or not interval:
        return None
    return last_reading + interval


def _missing_usage(topic: MaintenanceTopic, subject: Subject) -> Optional[str]:
    """Return the status text for a missing usage reading, if any."""
    if topic.duration_type == DurationType.MILES:
        if not subject.is_vehicle or subject.current_mileage is None:
            return "Current mileage not set"
        if topic.last_completed_mileage is None:
            return "Last service mileage not recorded"
    elif topic.duration_type == DurationType.HOURS:
        if subject.current_hours is None:
            return "Current hours not set"
        if topic.last_completed_hours is None:
            return "Last service hours not recorded"
    return None


def _elapsed(topic: MaintenanceTopic, subject: Subject, now: Moment) -> float:
    """Amount of the interval consumed since the last service."""
    kind = topic.duration_type
    if kind == DurationType.DAYS:
        return days_between(topic.last_completed_date, now)
    if kind == DurationType.MONTHS:
        return months_between(topic.last_completed_date, now)
    if kind == DurationType.MILES:
        return subject.current_mileage - topic.last_completed_mileage
    return subject.current_hours - topic.last_completed_hours


def compute_status(
    topic: MaintenanceTopic, subject: Subject, now: Moment
) -> MaintenanceStatus:
    """
    Calculate the completion status of a topic as of `now`.

    Missing data never raises; it resolves to a descriptive status text.
    When a usage reading is missing, percent_remaining and urgency stay None.
    """
    if not topic.has_interval:
        return MaintenanceStatus(
            topic_id=topic.id,
            status_text="No interval set",
            percent_remaining=100.0,
            is_overdue=False,
            urgency=Urgency.OK,
        )

    if not topic.last_completed_date:
        return MaintenanceStatus(
            topic_id=topic.id,
            status_text="Never completed",
            percent_remaining=0.0,
            is_overdue=True,
            urgency=Urgency.OVERDUE,
        )

    missing = _missing_usage(topic, subject)
    if missing is not None:
        logger.debug("Topic %s on subject %s: %s", topic.id, subject.id, missing)
        return MaintenanceStatus(topic_id=topic.id, status_text=missing)

    unit = topic.duration_type
    remaining = topic.duration_value - _elapsed(topic, subject, now)
    percent = calc_percent_remaining(remaining, topic.duration_value)
    is_overdue = remaining < 0

    status = MaintenanceStatus(
        topic_id=topic.id,
        status_text=format_status_text(remaining, unit.value),
        percent_remaining=percent,
        is_overdue=is_overdue,
        urgency=classify_urgency(is_overdue, percent),
    )
    if unit == DurationType.DAYS:
        status.days_until_due = remaining
    elif unit == DurationType.MONTHS:
        status.months_until_due = remaining
        status.days_until_due = remaining * DAYS_PER_MONTH
    elif unit == DurationType.MILES:
        status.miles_until_due = remaining
    else:
        status.hours_until_due = remaining
    return status


def summarize_subject(subject: Subject, now: Moment) -> SubjectSummary:
    """Roll up every topic of a subject into one urgency and label."""
    if not subject.topics:
        return SubjectSummary(subject_id=subject.id, urgency=Urgency.OK, text="No topics")

    counts = {Urgency.OVERDUE: 0, Urgency.WARNING: 0, Urgency.OK: 0}
    unknown = 0
    for topic in subject.topics:
        urgency = compute_status(topic, subject, now).urgency
        if urgency is None:
            unknown += 1
        else:
            counts[urgency] += 1

    overdue = counts[Urgency.OVERDUE]
    warning = counts[Urgency.WARNING]
    if overdue:
        urgency, text = Urgency.OVERDUE, f"{overdue} overdue"
    elif warning:
        urgency, text = Urgency.WARNING, f"{warning} due soon"
    else:
        urgency, text = Urgency.OK, "All current"

    return SubjectSummary(
        subject_id=subject.id,
        urgency=urgency,
        text=text,
        overdue=overdue,
        warning=warning,
        ok=counts[Urgency.OK],
        unknown=unknown,
    )
