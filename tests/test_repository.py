#!/usr/bin/env python3
"""Tests for the in-memory and YAML repositories."""

import pytest
import yaml
from datetime import datetime, timezone
from jsonschema import validate

from models import DurationType, MemoryRepository, SubjectType, YamlRepository
from validate_yaml import load_schema

FIXED_NOW = datetime(2025, 7, 20, 12, 0, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


@pytest.fixture
def repo():
    return MemoryRepository(clock=fixed_clock)


@pytest.fixture
def civic(repo):
    return repo.create_subject("2015 Honda Civic", "vehicle", current_mileage=55000, id="civic")


# =============================================================================
# Subjects
# =============================================================================


class TestSubjects:
    """Tests for subject CRUD."""

    def test_create_subject(self, repo):
        subject = repo.create_subject("House", "house")
        assert subject.type == SubjectType.HOUSE
        assert len(subject.id) == 8
        assert subject.created_at == FIXED_NOW.isoformat()
        assert subject.updated_at == subject.created_at
        assert repo.get_subject(subject.id) is subject

    def test_list_subjects(self, repo, civic):
        repo.create_subject("House", "house", id="house")
        assert [s.id for s in repo.list_subjects()] == ["civic", "house"]

    def test_duplicate_id_rejected(self, repo, civic):
        with pytest.raises(ValueError, match="already exists"):
            repo.create_subject("Other", "vehicle", id="civic")

    def test_create_validates_input(self, repo):
        with pytest.raises(ValueError):
            repo.create_subject("", "house")
        with pytest.raises(ValueError):
            repo.create_subject("Rocket", "rocket")
        with pytest.raises(ValueError):
            repo.create_subject("Civic", "vehicle", current_mileage=-10)

    def test_update_subject_reading(self, repo, civic):
        updated = repo.update_subject("civic", current_mileage=58000)
        assert updated.current_mileage == 58000
        assert updated.name == "2015 Honda Civic"

    def test_update_unknown_field_rejected(self, repo, civic):
        with pytest.raises(ValueError, match="color"):
            repo.update_subject("civic", color="red")

    def test_update_missing_subject(self, repo):
        assert repo.update_subject("nope", name="x") is None

    def test_delete_subject_cascades(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", id="oil")
        assert repo.delete_subject("civic") is True
        assert repo.get_subject("civic") is None
        assert repo.get_topic("oil") is None
        assert repo.list_topics() == []

    def test_delete_missing_subject(self, repo):
        assert repo.delete_subject("nope") is False


# =============================================================================
# Topics
# =============================================================================


class TestTopics:
    """Tests for topic CRUD."""

    def test_create_topic(self, repo, civic):
        topic = repo.create_topic(
            "civic",
            "Oil change",
            duration_value=5000,
            duration_type="miles",
            steps=[{"description": "Drain"}, {"description": "Refill", "order": 5}],
            tools=["drain pan"],
        )
        assert topic.subject_id == "civic"
        assert topic.duration_type == DurationType.MILES
        assert [s.order for s in topic.steps] == [0, 5]
        assert all(s.id for s in topic.steps)
        assert topic.last_completed_date is None
        assert repo.get_topic(topic.id) is topic

    def test_newest_topic_listed_first(self, repo, civic):
        repo.create_topic("civic", "Oil change", id="oil")
        repo.create_topic("civic", "Wipers", id="wipers")
        assert [t.id for t in repo.list_topics("civic")] == ["wipers", "oil"]

    def test_list_topics_filters_by_subject(self, repo, civic):
        repo.create_subject("House", "house", id="house")
        repo.create_topic("civic", "Oil change", id="oil")
        repo.create_topic("house", "HVAC filter", id="hvac")
        assert [t.id for t in repo.list_topics("house")] == ["hvac"]
        assert len(repo.list_topics()) == 2

    def test_create_topic_unknown_subject(self, repo):
        with pytest.raises(ValueError, match="not found"):
            repo.create_topic("nope", "Oil change")

    def test_zero_interval_rejected(self, repo, civic):
        with pytest.raises(ValueError, match="must be positive"):
            repo.create_topic("civic", "Oil change", 0, "miles")

    def test_step_without_description_rejected(self, repo, civic):
        with pytest.raises(ValueError, match="Step description"):
            repo.create_topic("civic", "Oil change", steps=[{"order": 0}])

    def test_update_topic(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", id="oil")
        topic = repo.update_topic("oil", duration_value=7500, notes="synthetic")
        assert topic.duration_value == 7500
        assert topic.duration_type == DurationType.MILES
        assert topic.notes == "synthetic"

    def test_update_topic_clears_interval(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", id="oil")
        topic = repo.update_topic("oil", duration_value=None, duration_type=None)
        assert not topic.has_interval

    def test_update_topic_unknown_field(self, repo, civic):
        repo.create_topic("civic", "Oil change", id="oil")
        with pytest.raises(ValueError):
            repo.update_topic("oil", subject_id="house")

    def test_update_missing_topic(self, repo):
        assert repo.update_topic("nope", name="x") is None

    def test_delete_topic(self, repo, civic):
        repo.create_topic("civic", "Oil change", id="oil")
        assert repo.delete_topic("oil") is True
        assert repo.delete_topic("oil") is False
        assert repo.get_subject("civic").topics == []


# =============================================================================
# Completing maintenance
# =============================================================================


class TestCompleteTopic:
    """Tests for complete_topic_maintenance."""

    def test_records_date_and_mileage(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", id="oil")
        topic = repo.complete_topic_maintenance("civic", "oil", "2025-01-15", mileage=50000)
        assert topic.last_completed_date == "2025-01-15"
        assert topic.last_completed_mileage == 50000
        assert topic.last_completed_hours is None

    def test_does_not_clear_other_fields(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", notes="5W-30", id="oil")
        repo.complete_topic_maintenance("civic", "oil", "2025-01-15", mileage=50000)

        topic = repo.complete_topic_maintenance("civic", "oil", "2025-06-01")

        assert topic.last_completed_date == "2025-06-01"
        assert topic.last_completed_mileage == 50000
        assert topic.notes == "5W-30"

    def test_subject_id_optional(self, repo, civic):
        repo.create_topic("civic", "Oil change", id="oil")
        assert repo.complete_topic_maintenance(None, "oil", "2025-01-15") is not None

    def test_wrong_subject(self, repo, civic):
        repo.create_subject("House", "house", id="house")
        repo.create_topic("civic", "Oil change", id="oil")
        assert repo.complete_topic_maintenance("house", "oil", "2025-01-15") is None

    def test_missing_topic(self, repo):
        assert repo.complete_topic_maintenance(None, "nope", "2025-01-15") is None

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_bad_date_rejected(self, repo, civic, value):
        repo.create_topic("civic", "Oil change", id="oil")
        with pytest.raises(ValueError):
            repo.complete_topic_maintenance("civic", "oil", value)

    def test_status_reflects_completion(self, repo, civic):
        repo.create_topic("civic", "Oil change", 10000, "miles", id="oil")
        repo.complete_topic_maintenance("civic", "oil", "2025-01-15", mileage=50000)

        (_, _, status), = repo.garage().get_all_topic_status(FIXED_NOW)

        assert status.status_text == "5000 miles remaining"
        assert status.percent_remaining == 50


# =============================================================================
# YAML persistence
# =============================================================================


class TestYamlRepository:
    """Tests for YamlRepository."""

    def test_missing_file_is_empty(self, tmp_path):
        repo = YamlRepository(tmp_path / "maintenance.yaml")
        assert repo.list_subjects() == []
        assert not repo.filename.exists()

    def test_changes_persist_across_instances(self, tmp_path):
        path = tmp_path / "maintenance.yaml"
        first = YamlRepository(path, clock=fixed_clock)
        first.create_subject("2015 Honda Civic", "vehicle", current_mileage=55000, id="civic")
        first.create_topic("civic", "Oil change", 5000, "miles", id="oil")
        first.complete_topic_maintenance("civic", "oil", "2025-01-15", mileage=50000)

        second = YamlRepository(path)
        topic = second.get_topic("oil")

        assert second.get_subject("civic").current_mileage == 55000
        assert topic.subject_id == "civic"
        assert topic.last_completed_mileage == 50000

    def test_written_file_matches_schema(self, tmp_path):
        path = tmp_path / "maintenance.yaml"
        repo = YamlRepository(path, clock=fixed_clock)
        repo.create_subject("Fishing skiff", "boat", current_hours=212.5, id="skiff")
        repo.create_topic(
            "skiff", "Impeller", 100, "hours",
            steps=[{"description": "Pull pump"}], tools=["impeller puller"],
        )

        data = yaml.safe_load(path.read_text())

        validate(instance=data, schema=load_schema())

    def test_delete_persists(self, tmp_path):
        path = tmp_path / "maintenance.yaml"
        repo = YamlRepository(path)
        repo.create_subject("House", "house", id="house")
        repo.delete_subject("house")
        assert YamlRepository(path).list_subjects() == []


# =============================================================================
# Rejected updates
# =============================================================================


class TestRejectedUpdates:
    """A rejected update leaves every field as it was."""

    def test_subject_unchanged_when_one_field_fails(self, repo, civic):
        with pytest.raises(ValueError):
            repo.update_subject("civic", name="Renamed", type="spaceship")
        subject = repo.get_subject("civic")
        assert subject.name == "2015 Honda Civic"
        assert subject.type == SubjectType.VEHICLE
        assert subject.updated_at == FIXED_NOW.isoformat()

    def test_topic_unchanged_when_one_field_fails(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", notes="5W-30", id="oil")
        with pytest.raises(ValueError):
            repo.update_topic("oil", name="Renamed", notes="0W-20", duration_value=0)
        topic = repo.get_topic("oil")
        assert topic.name == "Oil change"
        assert topic.notes == "5W-30"
        assert topic.duration_value == 5000

    @pytest.mark.parametrize("value", ["nan", "inf", float("nan"), float("-inf")])
    def test_non_finite_reading_rejected(self, repo, value):
        with pytest.raises(ValueError, match="finite"):
            repo.create_subject("Civic", "vehicle", current_mileage=value)

    def test_non_finite_interval_rejected(self, repo, civic):
        with pytest.raises(ValueError, match="finite"):
            repo.create_topic("civic", "Oil change", "nan", "miles")

    @pytest.mark.parametrize("steps", ["wash", ["wash"], [5], {"description": "wash"}])
    def test_malformed_steps_rejected(self, repo, civic, steps):
        with pytest.raises(ValueError):
            repo.create_topic("civic", "Wash", steps=steps)

    @pytest.mark.parametrize("tools", ["bucket", [1, 2]])
    def test_malformed_tools_rejected(self, repo, civic, tools):
        with pytest.raises(ValueError, match="tools"):
            repo.create_topic("civic", "Wash", tools=tools)

    def test_non_text_notes_rejected(self, repo, civic):
        repo.create_topic("civic", "Wash", id="wash")
        with pytest.raises(ValueError, match="notes"):
            repo.update_topic("wash", notes=["soap"])

    def test_non_string_completion_date_rejected(self, repo, civic):
        repo.create_topic("civic", "Oil change", 5000, "miles", id="oil")
        with pytest.raises(ValueError, match="ISO-8601"):
            repo.complete_topic_maintenance("civic", "oil", 20250101)
        assert repo.get_topic("oil").last_completed_date is None
