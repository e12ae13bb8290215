"""
Convivencia Deadline Rule Table

Maps a severity to the statutory deadline formula for resolving a case.

| Severity          | Rule                                        |
|-------------------|---------------------------------------------|
| MINOR             | opened_at + 24 calendar hours               |
| RELEVANT          | 45 business days after opened_at            |
| SERIOUS_EXPULSION | 10 business days after opened_at            |

Minor faults use a hard wall-clock limit; the other two use business-day
windows under the school conduct circular. Every function here is pure so a
deadline can be recomputed from the same inputs during an audit.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from ..calendars import SCHOOL_CALENDAR, BusinessCalendar
from ..exceptions import InvalidSeverity
from ..models import Severity

HOURS_MINOR = 24
BUSINESS_DAYS_RELEVANT = 45
BUSINESS_DAYS_EXPULSION = 10
BUSINESS_DAYS_RECONSIDERATION = 15


# =============================================================================
# Deadline Rule
# =============================================================================

@dataclass(frozen=True)
class DeadlineRule:
    """
    A statutory deadline formula.

    Exactly one of ``hours`` or ``business_days`` is set.

    Attributes:
        severity: Severity the rule applies to
        hours: Calendar hours from opening (weekends included)
        business_days: Business days from opening
        authority: Norm the window comes from
        description: Human-readable description
    """
    severity: Severity
    hours: Optional[int] = None
    business_days: Optional[int] = None
    authority: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if (self.hours is None) == (self.business_days is None):
            raise ValueError(
                f"Deadline rule for {self.severity.value} must set exactly one "
                "of hours or business_days"
            )

    @property
    def is_business_days(self) -> bool:
        return self.business_days is not None

    @property
    def display(self) -> str:
        """Get human-readable window description."""
        if self.business_days is not None:
            return f"{self.business_days} business days"
        return f"{self.hours} hours"

    def apply(
        self,
        opened_at: datetime,
        calendar: BusinessCalendar = SCHOOL_CALENDAR,
    ) -> datetime:
        """Compute the deadline for a case opened at ``opened_at``."""
        if self.business_days is not None:
            return calendar.add_business_days(opened_at, self.business_days)
        return opened_at + timedelta(hours=self.hours)


DEADLINE_RULES: dict[Severity, DeadlineRule] = {
    Severity.MINOR: DeadlineRule(
        severity=Severity.MINOR,
        hours=HOURS_MINOR,
        authority="Circular 782",
        description="Minor faults are resolved within 24 calendar hours",
    ),
    Severity.RELEVANT: DeadlineRule(
        severity=Severity.RELEVANT,
        business_days=BUSINESS_DAYS_RELEVANT,
        authority="Circular 782",
        description="Relevant faults are resolved within 45 business days",
    ),
    Severity.SERIOUS_EXPULSION: DeadlineRule(
        severity=Severity.SERIOUS_EXPULSION,
        business_days=BUSINESS_DAYS_EXPULSION,
        authority="Ley 21.128 (Aula Segura)",
        description="Expulsion processes are resolved within 10 business days",
    ),
}


# =============================================================================
# Deadline Functions
# =============================================================================

def get_deadline_rule(severity: Union[Severity, str]) -> DeadlineRule:
    """
    Look up the deadline rule for a severity.

    Raises:
        InvalidSeverity: If the severity is unknown or has no rule
    """
    parsed = Severity.parse(severity)
    rule = DEADLINE_RULES.get(parsed)
    if rule is None:
        raise InvalidSeverity(
            message=f"No deadline rule for severity {parsed.value!r}",
            details={"value": parsed.value},
        )
    return rule


def compute_fatal_deadline(
    opened_at: datetime,
    severity: Union[Severity, str],
    calendar: BusinessCalendar = SCHOOL_CALENDAR,
) -> datetime:
    """
    Compute a case's fatal deadline from its open time and severity.

    Args:
        opened_at: When the case was opened
        severity: Case severity (enum or label)
        calendar: Business calendar for day-based rules

    Returns:
        The fatal deadline

    Raises:
        InvalidSeverity: If the severity is not recognized
    """
    return get_deadline_rule(severity).apply(opened_at, calendar)


def compute_reconsideration_deadline(
    resolved_at: datetime,
    calendar: BusinessCalendar = SCHOOL_CALENDAR,
) -> datetime:
    """
    Last moment to request reconsideration of a notified resolution.

    The family may appeal to the school's governing body within
    15 business days of the resolution.
    """
    return calendar.add_business_days(resolved_at, BUSINESS_DAYS_RECONSIDERATION)
