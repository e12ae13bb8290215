"""
Tests for the deadline rule table.

Tests cover:
- Minor faults: 24 calendar hours
- Relevant faults: 45 business days
- Expulsion processes: 10 business days
- Reconsideration window: 15 business days
"""
import pytest
from datetime import datetime, timedelta

from convivencia.engine import (
    DEADLINE_RULES,
    DeadlineRule,
    compute_fatal_deadline,
    compute_reconsideration_deadline,
    get_deadline_rule,
)
from convivencia.exceptions import InvalidSeverity
from convivencia.models import Severity


class TestDeadlineRuleTable:
    """Tests for the rule definitions."""

    def test_every_severity_has_a_rule(self):
        assert set(DEADLINE_RULES) == set(Severity)

    def test_minor_rule_uses_hours(self):
        rule = get_deadline_rule(Severity.MINOR)
        assert rule.hours == 24
        assert not rule.is_business_days
        assert rule.display == "24 hours"

    def test_expulsion_rule_cites_aula_segura(self):
        rule = get_deadline_rule(Severity.SERIOUS_EXPULSION)
        assert rule.business_days == 10
        assert "21.128" in rule.authority

    def test_rule_requires_exactly_one_window(self):
        with pytest.raises(ValueError):
            DeadlineRule(severity=Severity.MINOR)
        with pytest.raises(ValueError):
            DeadlineRule(severity=Severity.MINOR, hours=24, business_days=1)


class TestComputeFatalDeadline:
    """Tests for fatal deadline computation."""

    def test_minor_is_24_hours_across_weekend(self):
        opened = datetime(2025, 5, 9, 18, 0)  # Friday evening
        deadline = compute_fatal_deadline(opened, Severity.MINOR)
        assert deadline == datetime(2025, 5, 10, 18, 0)
        assert deadline - opened == timedelta(hours=24)

    def test_relevant_is_45_business_days(self):
        opened = datetime(2025, 5, 5, 9, 0)  # Monday
        assert compute_fatal_deadline(opened, Severity.RELEVANT) == datetime(2025, 7, 7, 9, 0)

    def test_expulsion_friday_to_friday(self):
        opened = datetime(2025, 5, 9, 10, 0)
        assert compute_fatal_deadline(opened, Severity.SERIOUS_EXPULSION) == datetime(2025, 5, 23, 10, 0)

    def test_accepts_labels(self):
        opened = datetime(2025, 5, 9, 10, 0)
        assert compute_fatal_deadline(opened, "expulsion") == compute_fatal_deadline(
            opened, Severity.SERIOUS_EXPULSION
        )

    def test_unknown_severity(self):
        with pytest.raises(InvalidSeverity):
            compute_fatal_deadline(datetime(2025, 5, 9), "catastrophic")

    def test_is_deterministic(self):
        opened = datetime(2025, 3, 14, 11, 45)
        for severity in Severity:
            assert compute_fatal_deadline(opened, severity) == compute_fatal_deadline(opened, severity)


class TestReconsiderationDeadline:

    def test_fifteen_business_days(self):
        resolved = datetime(2025, 5, 23, 10, 0)  # Friday
        assert compute_reconsideration_deadline(resolved) == datetime(2025, 6, 13, 10, 0)
