"""
Convivencia Case Models

Models for a disciplinary case (expediente) and its stage history.

Key components:
- Case: One disciplinary proceeding against a student
- StageTransition: Audit record of an accepted stage change

Cases are immutable values. The stage only changes through the stage state
machine, which returns a new Case; the fatal deadline is fixed at opening
and no update path recomputes it.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional

from .enums import Severity, Stage, TransitionKind
from .milestone import MilestoneLedger


# =============================================================================
# Stage Transition
# =============================================================================

@dataclass(frozen=True)
class StageTransition:
    """
    An accepted stage change.

    Attributes:
        from_stage: Stage before the transition
        to_stage: Stage after the transition
        kind: Forward, backward override, or closure
        reason: Free-text justification supplied by the caller
        at: When the caller applied it (the engine never reads the clock)
    """
    from_stage: Stage
    to_stage: Stage
    kind: TransitionKind
    reason: str = ""
    at: Optional[datetime] = None

    @property
    def is_override(self) -> bool:
        return self.kind == TransitionKind.BACKWARD_OVERRIDE

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_stage": self.from_stage.value,
            "to_stage": self.to_stage.value,
            "kind": self.kind.value,
            "reason": self.reason,
            "at": self.at.isoformat() if self.at else None,
        }


# =============================================================================
# Case
# =============================================================================

@dataclass(frozen=True)
class Case:
    """
    A disciplinary case.

    Attributes:
        id: Unique identifier
        subject_name: Student the proceeding concerns
        severity: Misconduct classification (fixed at opening)
        opened_at: When the case was opened
        fatal_deadline: Statutory resolution deadline (fixed at opening)
        prior_remedial_actions_recorded: A prior written warning AND a prior
            psychosocial support plan were attested at opening
        milestones: Procedural milestone ledger
        stage: Current procedural stage
        version: Optimistic concurrency token, managed by the repository
        history: Accepted stage transitions, oldest first
    """
    id: str
    subject_name: str
    severity: Severity
    opened_at: datetime
    fatal_deadline: datetime
    prior_remedial_actions_recorded: bool
    milestones: MilestoneLedger
    stage: Stage = Stage.OPENED
    version: int = 0
    history: tuple[StageTransition, ...] = field(default_factory=tuple)

    @property
    def is_closed(self) -> bool:
        return self.stage.is_terminal

    @property
    def is_expulsion(self) -> bool:
        return self.severity.is_expulsion

    @property
    def graduality_satisfied(self) -> bool:
        """Whether an expulsion resolution may be issued for this case."""
        return not self.is_expulsion or self.prior_remedial_actions_recorded

    @property
    def overrides(self) -> list[StageTransition]:
        """Backward corrections applied to this case."""
        return [t for t in self.history if t.is_override]

    def with_milestones(self, ledger: MilestoneLedger) -> Case:
        """Return a copy with an updated milestone ledger."""
        return replace(self, milestones=ledger)

    def with_version(self, version: int) -> Case:
        """Return a copy with a new concurrency version (repository use)."""
        return replace(self, version=version)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "subject_name": self.subject_name,
            "severity": self.severity.value,
            "stage": self.stage.value,
            "opened_at": self.opened_at.isoformat(),
            "fatal_deadline": self.fatal_deadline.isoformat(),
            "prior_remedial_actions_recorded": self.prior_remedial_actions_recorded,
            "is_closed": self.is_closed,
            "version": self.version,
            "milestones": [
                {
                    "id": m.id,
                    "title": m.title,
                    "description": m.description,
                    "due_date": _iso(m.due_date),
                    "completed": m.completed,
                    "completed_on": _iso(m.completed_on),
                    "requires_evidence": m.requires_evidence,
                    "mandatory_for_expulsion": m.mandatory_for_expulsion,
                    "notes": list(m.notes),
                }
                for m in self.milestones
            ],
            "history": [t.to_dict() for t in self.history],
        }


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None
