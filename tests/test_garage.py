#!/usr/bin/env python3
"""
Tests for Garage aggregate.

Includes batch status calculation: every topic in one call is measured
against the same instant.
"""

import pytest
from datetime import date

from models import DurationType, Garage, MaintenanceTopic, Subject, SubjectType, Urgency


@pytest.fixture
def garage():
    oil = MaintenanceTopic("oil", "civic", "Oil change", 10000, DurationType.MILES,
                           "2025-01-15", last_completed_mileage=50000)
    wipers = MaintenanceTopic("wipers", "civic", "Wiper blades", 12, DurationType.MONTHS,
                              "2024-01-10")
    hvac = MaintenanceTopic("hvac", "house", "HVAC filter", 90, DurationType.DAYS,
                            "2025-07-01")
    civic = Subject("civic", "2015 Honda Civic", SubjectType.VEHICLE,
                    current_mileage=55000, topics=[oil, wipers])
    house = Subject("house", "House", SubjectType.HOUSE, topics=[hvac])
    return Garage([civic, house])


class TestGarageLookup:
    """Tests for Garage lookup methods."""

    def test_get_subject(self, garage):
        assert garage.get_subject("house").name == "House"
        assert garage.get_subject("boat") is None

    def test_find_topic_returns_owner(self, garage):
        subject, topic = garage.find_topic("hvac")
        assert subject.id == "house"
        assert topic.name == "HVAC filter"

    def test_find_topic_missing(self, garage):
        assert garage.find_topic("nope") is None

    def test_get_topics_all(self, garage):
        assert [t.id for t in garage.get_topics()] == ["oil", "wipers", "hvac"]

    def test_get_topics_for_subject(self, garage):
        assert [t.id for t in garage.get_topics("house")] == ["hvac"]
        assert garage.get_topics("boat") == []

    def test_empty_garage(self):
        assert Garage().subjects == []


class TestGarageStatus:
    """Tests for batch status calculation."""

    def test_status_for_every_topic(self, garage):
        rows = garage.get_all_topic_status(date(2025, 7, 20))
        by_id = {topic.id: status for _, topic, status in rows}
        assert by_id["oil"].urgency == Urgency.OK
        assert by_id["wipers"].urgency == Urgency.OVERDUE
        assert by_id["hvac"].days_until_due == 71

    def test_status_filtered_by_subject(self, garage):
        rows = garage.get_all_topic_status(date(2025, 7, 20), subject_id="house")
        assert [(s.id, t.id) for s, t, _ in rows] == [("house", "hvac")]

    def test_summaries(self, garage):
        summaries = garage.get_all_summaries(date(2025, 7, 20))
        assert [s.subject_id for s in summaries] == ["civic", "house"]
        assert summaries[0].text == "1 overdue"
        assert summaries[1].text == "All current"
