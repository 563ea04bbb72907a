#!/usr/bin/env python3
"""Tests for Urgency enum."""

from models import Urgency


class TestUrgency:
    """Tests for Urgency values and ordering."""

    def test_values_match_wire_format(self):
        assert Urgency("ok") == Urgency.OK
        assert Urgency("warning") == Urgency.WARNING
        assert Urgency("overdue") == Urgency.OVERDUE

    def test_urgency_ordering(self):
        """Lower rank = more urgent."""
        assert Urgency.OVERDUE.rank < Urgency.WARNING.rank
        assert Urgency.WARNING.rank < Urgency.OK.rank

    def test_sort_by_rank(self):
        ordered = sorted([Urgency.OK, Urgency.OVERDUE, Urgency.WARNING], key=lambda u: u.rank)
        assert ordered == [Urgency.OVERDUE, Urgency.WARNING, Urgency.OK]
