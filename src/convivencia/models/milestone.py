"""
Convivencia Milestone Models

Procedural milestones (hitos) a disciplinary case must go through.

Key components:
- Milestone: One required procedural step
- MilestoneLedger: The ordered milestones of one case
- seed_milestones: Template of milestones for a severity

The ledger is an immutable value: completing or annotating a milestone
returns a new ledger, so a rejected update never leaves partial state.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from ..exceptions import InvalidMilestoneDate, MilestoneNotFound
from .enums import Severity


# =============================================================================
# Milestone IDs
# =============================================================================

OPENED = "opened"
NOTIFIED = "notified"
REBUTTAL = "rebuttal"
INVESTIGATION = "investigation"
FACULTY_COUNCIL = "faculty_council"
DIRECTOR_RESOLUTION = "director_resolution"
RECONSIDERATION_WINDOW = "reconsideration_window"

# Guardians must be notified within 24 hours of opening
NOTIFICATION_WINDOW = timedelta(hours=24)


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


# =============================================================================
# Milestone
# =============================================================================

@dataclass(frozen=True)
class Milestone:
    """
    A required procedural step with an optional due date.

    Attributes:
        id: Stable identifier within the case ledger
        title: Short display title
        description: What the step involves
        due_date: Optional date by which the step is due
        completed: Whether the step has been recorded as done
        requires_evidence: Whether supporting evidence must be attached
        mandatory_for_expulsion: Required before an expulsion measure
        completed_on: Date the step was completed
        notes: Audit annotations, oldest first
    """
    id: str
    title: str
    description: str = ""
    due_date: Optional[date] = None
    completed: bool = False
    requires_evidence: bool = True
    mandatory_for_expulsion: bool = False
    completed_on: Optional[date] = None
    notes: tuple[str, ...] = ()

    def is_overdue(self, as_of: date) -> bool:
        """Check if the milestone is past due and still open."""
        if self.completed or self.due_date is None:
            return False
        return _as_date(as_of) > self.due_date


def seed_milestones(
    severity: Severity,
    opened_at: Optional[datetime] = None,
) -> list[Milestone]:
    """
    Build the ordered milestone template for a severity.

    The base template is Opened, Notified, Rebuttal, Investigation,
    DirectorResolution, ReconsiderationWindow. Expulsion processes add the
    mandatory faculty council consultation, which must precede the
    director's resolution.

    Args:
        severity: Case severity
        opened_at: When given, the opening milestone is recorded as completed
            on that date and the notification gets its 24-hour due date

    Returns:
        Ordered list of milestones
    """
    opened_on = _as_date(opened_at) if opened_at is not None else None
    notify_by = (
        _as_date(opened_at + NOTIFICATION_WINDOW) if opened_at is not None else None
    )

    milestones = [
        Milestone(
            id=OPENED,
            title="Case Opened",
            description="Complaint registered and case file opened.",
            completed=opened_on is not None,
            completed_on=opened_on,
        ),
        Milestone(
            id=NOTIFIED,
            title="Guardian Notification",
            description="Official notice of the proceeding to the guardians (24 hours).",
            due_date=notify_by,
        ),
        Milestone(
            id=REBUTTAL,
            title="Rebuttal Period",
            description="Statement from the student and their family is received.",
        ),
        Milestone(
            id=INVESTIGATION,
            title="Investigation and Interviews",
            description="Evidence and testimony are gathered.",
        ),
    ]

    if severity.is_expulsion:
        milestones.append(
            Milestone(
                id=FACULTY_COUNCIL,
                title="Faculty Council Consultation",
                description="Mandatory consultation before an expulsion measure.",
                mandatory_for_expulsion=True,
            )
        )

    milestones.extend([
        Milestone(
            id=DIRECTOR_RESOLUTION,
            title="Director Resolution",
            description="The director determines the formative or disciplinary measure.",
        ),
        Milestone(
            id=RECONSIDERATION_WINDOW,
            title="Reconsideration Window",
            description="Period to appeal to the school's governing body (15 business days).",
            requires_evidence=False,
        ),
    ])

    return milestones


# =============================================================================
# Milestone Ledger
# =============================================================================

@dataclass(frozen=True)
class MilestoneLedger:
    """
    Ordered milestones of one case.

    Usage:
        ledger = MilestoneLedger.seed(Severity.RELEVANT, opened_at)
        ledger = ledger.mark_completed(NOTIFIED, date(2025, 5, 6))
        assert ledger.is_milestone_complete(NOTIFIED)
    """
    opened_on: date
    milestones: tuple[Milestone, ...] = field(default_factory=tuple)
    case_id: Optional[str] = None

    @classmethod
    def seed(
        cls,
        severity: Severity,
        opened_at: datetime,
        case_id: Optional[str] = None,
    ) -> MilestoneLedger:
        """Create the ledger for a newly opened case."""
        return cls(
            opened_on=_as_date(opened_at),
            milestones=tuple(seed_milestones(severity, opened_at)),
            case_id=case_id,
        )

    def __iter__(self) -> Iterator[Milestone]:
        return iter(self.milestones)

    def __len__(self) -> int:
        return len(self.milestones)

    def __contains__(self, milestone_id: object) -> bool:
        return any(m.id == milestone_id for m in self.milestones)

    @property
    def ids(self) -> list[str]:
        return [m.id for m in self.milestones]

    def get(self, milestone_id: str) -> Milestone:
        """
        Get a milestone by ID.

        Raises:
            MilestoneNotFound: If the ID is not in the ledger
        """
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        raise MilestoneNotFound(
            message=f"Milestone '{milestone_id}' not found",
            details={"milestone_id": milestone_id, "available": self.ids},
            case_id=self.case_id,
        )

    def is_milestone_complete(self, milestone_id: str) -> bool:
        return self.get(milestone_id).completed

    def mark_completed(
        self,
        milestone_id: str,
        completion_date: Union[date, datetime],
    ) -> MilestoneLedger:
        """
        Record a milestone as completed.

        Args:
            milestone_id: Milestone to complete
            completion_date: Date the step was completed

        Returns:
            A new ledger with the milestone completed

        Raises:
            MilestoneNotFound: If the ID is not in the ledger
            InvalidMilestoneDate: If the date precedes the case open date
        """
        milestone = self.get(milestone_id)
        completed_on = _as_date(completion_date)
        if completed_on < self.opened_on:
            raise InvalidMilestoneDate(
                message=(
                    f"Milestone '{milestone_id}' cannot be completed on "
                    f"{completed_on.isoformat()}, before the case opened on "
                    f"{self.opened_on.isoformat()}"
                ),
                details={
                    "milestone_id": milestone_id,
                    "completion_date": completed_on.isoformat(),
                    "opened_on": self.opened_on.isoformat(),
                },
                case_id=self.case_id,
            )

        return self._replace(
            replace(milestone, completed=True, completed_on=completed_on)
        )

    def annotate(self, milestone_id: str, note: str) -> MilestoneLedger:
        """Append an audit note to a milestone. Allowed on closed cases."""
        milestone = self.get(milestone_id)
        return self._replace(replace(milestone, notes=milestone.notes + (note,)))

    def pending(self) -> list[Milestone]:
        """Milestones not yet completed, in order."""
        return [m for m in self.milestones if not m.completed]

    def pending_mandatory_for_expulsion(self) -> list[Milestone]:
        return [m for m in self.pending() if m.mandatory_for_expulsion]

    def overdue(self, as_of: date) -> list[Milestone]:
        return [m for m in self.milestones if m.is_overdue(as_of)]

    def _replace(self, updated: Milestone) -> MilestoneLedger:
        return replace(
            self,
            milestones=tuple(
                updated if m.id == updated.id else m for m in self.milestones
            ),
        )
