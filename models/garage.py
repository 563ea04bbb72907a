"""Garage class - the aggregate of every subject and its topics."""

from typing import List, Optional, Tuple

from .calculations import Moment, compute_status, summarize_subject
from .maintenance_status import MaintenanceStatus, SubjectSummary
from .subject import Subject
from .topic import MaintenanceTopic


class Garage:
    """All subjects under maintenance, with their topics nested."""

    def __init__(self, subjects: Optional[List[Subject]] = None):
        self.subjects = subjects or []

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        """Find a subject by id."""
        for subject in self.subjects:
            if subject.id == subject_id:
                return subject
        return None

    def find_topic(self, topic_id: str) -> Optional[Tuple[Subject, MaintenanceTopic]]:
        """Find a topic by id, returned with the subject that owns it."""
        for subject in self.subjects:
            topic = subject.get_topic(topic_id)
            if topic is not None:
                return subject, topic
        return None

    def get_topics(self, subject_id: Optional[str] = None) -> List[MaintenanceTopic]:
        """All topics, or only those of one subject."""
        if subject_id is not None:
            subject = self.get_subject(subject_id)
            return list(subject.topics) if subject else []
        return [t for s in self.subjects for t in s.topics]

    def get_all_topic_status(
        self, now: Moment, subject_id: Optional[str] = None
    ) -> List[Tuple[Subject, MaintenanceTopic, MaintenanceStatus]]:
        """
        Calculate status for every topic against a single `now`.

        Args:
            now: the instant shared by the whole batch
            subject_id: limit to one subject's topics
        """
        results = []
        for subject in self.subjects:
            if subject_id is not None and subject.id != subject_id:
                continue
            for topic in subject.topics:
                results.append((subject, topic, compute_status(topic, subject, now)))
        return results

    def get_all_summaries(self, now: Moment) -> List[SubjectSummary]:
        """Roll-up per subject."""
        return [summarize_subject(subject, now) for subject in self.subjects]
