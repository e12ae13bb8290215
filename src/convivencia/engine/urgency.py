"""
Convivencia Urgency Classifier

Classifies open cases by how close they are to their fatal deadline.

Tiers (remaining = fatal_deadline - now):
- EXPIRED:  remaining <= 0
- CRITICAL: 0 < remaining <= 48 hours
- WARNING:  48 hours < remaining <= 5 days
- NORMAL:   otherwise

CRITICAL and EXPIRED feed dashboard alerts; WARNING drives calendar
highlighting. Closed cases are never classified, whatever their stored
deadline.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional, Union

from ..calendars import SCHOOL_CALENDAR, BusinessCalendar
from ..models import Case, UrgencyTier

CRITICAL_WINDOW = timedelta(hours=48)
WARNING_WINDOW = timedelta(days=5)

ALERT_TIERS: frozenset[UrgencyTier] = frozenset({
    UrgencyTier.EXPIRED,
    UrgencyTier.CRITICAL,
})


def classify(now: datetime, fatal_deadline: datetime) -> UrgencyTier:
    """
    Classify a deadline relative to now.

    Both datetimes must be either naive or timezone-aware.
    """
    remaining = fatal_deadline - now
    if remaining <= timedelta(0):
        return UrgencyTier.EXPIRED
    if remaining <= CRITICAL_WINDOW:
        return UrgencyTier.CRITICAL
    if remaining <= WARNING_WINDOW:
        return UrgencyTier.WARNING
    return UrgencyTier.NORMAL


@dataclass(frozen=True)
class UrgencyAssessment:
    """
    Urgency of one open case at a point in time.

    Attributes:
        case_id: Assessed case
        tier: Urgency tier
        fatal_deadline: The case's stored deadline
        time_remaining: Deadline minus now (negative once expired)
        days_remaining: Whole days remaining, rounded up
        business_days_remaining: Business days left until the deadline date
        overdue_milestones: Milestones past their due date and still open
    """
    case_id: str
    tier: UrgencyTier
    fatal_deadline: datetime
    time_remaining: timedelta
    days_remaining: int
    business_days_remaining: int
    overdue_milestones: tuple[str, ...] = ()

    @property
    def is_alert(self) -> bool:
        return self.tier.is_alert

    @property
    def hours_remaining(self) -> float:
        return self.time_remaining.total_seconds() / 3600

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "tier": self.tier.value,
            "is_alert": self.is_alert,
            "fatal_deadline": self.fatal_deadline.isoformat(),
            "hours_remaining": round(self.hours_remaining, 2),
            "days_remaining": self.days_remaining,
            "business_days_remaining": self.business_days_remaining,
            "overdue_milestones": list(self.overdue_milestones),
        }


@dataclass
class UrgencyClassifier:
    """
    Classifies and filters cases by deadline urgency.

    Usage:
        classifier = UrgencyClassifier()

        tier = classifier.classify_case(case, now)
        alerts = classifier.list_alerts(repository.list_open(), now)
    """

    # Calendar for business days remaining
    calendar: BusinessCalendar = field(default_factory=lambda: SCHOOL_CALENDAR)

    def classify(self, now: datetime, fatal_deadline: datetime) -> UrgencyTier:
        return classify(now, fatal_deadline)

    def classify_case(self, case: Case, now: datetime) -> Optional[UrgencyTier]:
        """Classify a case; None for closed cases."""
        if case.is_closed:
            return None
        return classify(now, case.fatal_deadline)

    def assess(self, case: Case, now: datetime) -> Optional[UrgencyAssessment]:
        """Full urgency assessment of a case; None for closed cases."""
        if case.is_closed:
            return None

        remaining = case.fatal_deadline - now
        return UrgencyAssessment(
            case_id=case.id,
            tier=classify(now, case.fatal_deadline),
            fatal_deadline=case.fatal_deadline,
            time_remaining=remaining,
            days_remaining=math.ceil(remaining / timedelta(days=1)),
            business_days_remaining=self.calendar.business_days_between(
                now.date(), case.fatal_deadline.date()
            ),
            overdue_milestones=tuple(m.id for m in case.milestones.overdue(now.date())),
        )

    def list_urgent(
        self,
        cases: Iterable[Case],
        now: datetime,
        tier: Union[UrgencyTier, Iterable[UrgencyTier]],
    ) -> list[Case]:
        """
        Open cases in the given tier (or tiers), soonest deadline first.

        Args:
            cases: Cases to filter; closed cases are skipped
            now: Reference time
            tier: One tier or a collection of tiers to keep

        Returns:
            Matching cases sorted by fatal deadline, then ID
        """
        wanted = {tier} if isinstance(tier, UrgencyTier) else set(tier)
        matches = [
            case for case in cases
            if not case.is_closed and classify(now, case.fatal_deadline) in wanted
        ]
        return sorted(matches, key=lambda c: (c.fatal_deadline, c.id))

    def list_alerts(self, cases: Iterable[Case], now: datetime) -> list[Case]:
        """Open cases that are critical or expired."""
        return self.list_urgent(cases, now, ALERT_TIERS)
