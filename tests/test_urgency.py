"""
Tests for urgency classification.

Tiers: expired (<= 0), critical (<= 48h), warning (<= 5 days), normal.
"""
import pytest
from datetime import datetime, timedelta

from convivencia.engine import CRITICAL_WINDOW, WARNING_WINDOW, classify
from convivencia.models import Severity, Stage, UrgencyTier

from tests.conftest import make_case

# Saturday
NOW = datetime(2025, 5, 10, 10, 0)


class TestClassify:
    """Tests for tier thresholds."""

    def test_critical_just_under_48_hours(self):
        assert classify(NOW, datetime(2025, 5, 12, 9, 0)) == UrgencyTier.CRITICAL

    def test_warning_just_over_48_hours(self):
        assert classify(NOW, datetime(2025, 5, 12, 11, 0)) == UrgencyTier.WARNING

    def test_boundaries_are_inclusive(self):
        assert classify(NOW, NOW) == UrgencyTier.EXPIRED
        assert classify(NOW, NOW + CRITICAL_WINDOW) == UrgencyTier.CRITICAL
        assert classify(NOW, NOW + WARNING_WINDOW) == UrgencyTier.WARNING
        assert classify(NOW, NOW + WARNING_WINDOW + timedelta(seconds=1)) == UrgencyTier.NORMAL

    def test_past_deadline_is_expired(self):
        assert classify(NOW, NOW - timedelta(days=3)) == UrgencyTier.EXPIRED


class TestUrgencyClassifier:
    """Tests for case-level classification and filtering."""

    def test_closed_case_has_no_tier(self, classifier):
        case = make_case(stage=Stage.CLOSED_BY_SANCTION, fatal_deadline=NOW)
        assert classifier.classify_case(case, NOW) is None
        assert classifier.assess(case, NOW) is None

    def test_classify_case(self, classifier):
        case = make_case(fatal_deadline=datetime(2025, 5, 12, 9, 0))
        assert classifier.classify_case(case, NOW) == UrgencyTier.CRITICAL

    def test_assess(self, classifier):
        case = make_case(fatal_deadline=datetime(2025, 5, 12, 9, 0))
        assessment = classifier.assess(case, NOW)

        assert assessment.tier == UrgencyTier.CRITICAL
        assert assessment.is_alert
        assert assessment.hours_remaining == pytest.approx(47.0)
        assert assessment.days_remaining == 2
        # Sunday does not count, Monday does
        assert assessment.business_days_remaining == 1

    def test_assess_lists_overdue_milestones(self, classifier):
        # Opened Monday 2025-05-05, notification due the next day
        case = make_case()
        assert classifier.assess(case, NOW).overdue_milestones == ("notified",)
        assert classifier.assess(case, datetime(2025, 5, 6, 17, 0)).overdue_milestones == ()
        assert classifier.assess(case, NOW).to_dict()["overdue_milestones"] == ["notified"]

    def test_assess_expired(self, classifier):
        case = make_case(fatal_deadline=NOW - timedelta(hours=30))
        assessment = classifier.assess(case, NOW)

        assert assessment.tier == UrgencyTier.EXPIRED
        assert assessment.days_remaining == -1
        assert assessment.business_days_remaining == 0
        assert assessment.to_dict()["hours_remaining"] == -30.0

    def test_list_urgent_filters_and_sorts(self, classifier):
        cases = [
            make_case(id="EXP-B", fatal_deadline=datetime(2025, 5, 12, 9, 0)),
            make_case(id="EXP-A", fatal_deadline=datetime(2025, 5, 11, 9, 0)),
            make_case(id="EXP-C", fatal_deadline=datetime(2025, 5, 14, 9, 0)),
            make_case(id="EXP-D", fatal_deadline=datetime(2025, 5, 11, 9, 0),
                      stage=Stage.CLOSED_BY_MEDIATION),
        ]

        urgent = classifier.list_urgent(cases, NOW, UrgencyTier.CRITICAL)

        assert [c.id for c in urgent] == ["EXP-A", "EXP-B"]

    def test_list_urgent_ties_broken_by_id(self, classifier):
        deadline = datetime(2025, 5, 11, 9, 0)
        cases = [
            make_case(id="EXP-2", fatal_deadline=deadline),
            make_case(id="EXP-1", fatal_deadline=deadline),
        ]
        assert [c.id for c in classifier.list_urgent(cases, NOW, UrgencyTier.CRITICAL)] == [
            "EXP-1", "EXP-2",
        ]

    def test_list_urgent_multiple_tiers(self, classifier):
        cases = [
            make_case(id="EXP-OLD", fatal_deadline=NOW - timedelta(days=1)),
            make_case(id="EXP-SOON", fatal_deadline=NOW + timedelta(hours=2)),
            make_case(id="EXP-LATER", fatal_deadline=NOW + timedelta(days=30)),
        ]
        urgent = classifier.list_urgent(cases, NOW, [UrgencyTier.NORMAL, UrgencyTier.EXPIRED])
        assert [c.id for c in urgent] == ["EXP-OLD", "EXP-LATER"]

    def test_list_alerts(self, classifier):
        cases = [
            make_case(id="EXP-OLD", fatal_deadline=NOW - timedelta(days=1)),
            make_case(id="EXP-SOON", fatal_deadline=NOW + timedelta(hours=2)),
            make_case(id="EXP-WEEK", fatal_deadline=NOW + timedelta(days=4)),
        ]
        assert [c.id for c in classifier.list_alerts(cases, NOW)] == ["EXP-OLD", "EXP-SOON"]

    def test_minor_case_expires_after_24_hours(self, classifier):
        case = make_case(severity=Severity.MINOR, opened_at=datetime(2025, 5, 9, 10, 0))
        assert classifier.classify_case(case, NOW) == UrgencyTier.EXPIRED
