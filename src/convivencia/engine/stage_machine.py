"""
Convivencia Stage State Machine

Governs every stage change of a disciplinary case.

Transition table (initial stage OPENED):
- non-terminal -> later non-terminal:    FORWARD
- non-terminal -> earlier non-terminal:  BACKWARD_OVERRIDE (audited)
- non-terminal -> either closed stage:   CLOSURE (unconditional; mediation
  may close a case even mid-investigation)
- terminal -> anything:                  CaseClosed
- any stage -> itself:                   no-op, case returned unchanged

The graduality gate blocks RESOLUTION_PENDING for an expulsion case unless
prior remedial measures were recorded. No path bypasses it, including the
backward override.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Union

from ..exceptions import (
    BackwardTransitionNotAllowed,
    CaseClosed,
    ConvivenciaError,
    GradualityGateBlocked,
)
from ..models import Case, Stage, StageTransition, TransitionKind

logger = logging.getLogger(__name__)

# Entering this stage means the final resolution is being issued
RESOLUTION_STAGE = Stage.RESOLUTION_PENDING


def classify_transition(current: Stage, target: Stage) -> Optional[TransitionKind]:
    """
    Classify a move between two stages.

    Returns None for a same-stage reassertion. Does not check whether the
    current stage is terminal.
    """
    if target == current:
        return None
    if target.is_terminal:
        return TransitionKind.CLOSURE
    if target.order > current.order:
        return TransitionKind.FORWARD
    return TransitionKind.BACKWARD_OVERRIDE


@dataclass
class StageStateMachine:
    """
    Validates and applies stage transitions.

    The machine is stateless apart from its policy flag; it never persists
    anything. Callers save the returned case through the repository.

    Usage:
        machine = StageStateMachine()
        case = machine.transition(case, Stage.NOTIFIED)

        try:
            case = machine.transition(case, Stage.RESOLUTION_PENDING)
        except GradualityGateBlocked as e:
            show_legal_block(e.to_dict())
    """

    # Corrective backward edits (the UI lets staff click any earlier step)
    allow_backward_transitions: bool = True

    def transition(
        self,
        case: Case,
        target: Union[Stage, str],
        *,
        reason: str = "",
        at: Optional[datetime] = None,
    ) -> Case:
        """
        Move a case to a target stage.

        Args:
            case: Case to transition
            target: Target stage (enum or label)
            reason: Justification stored in the case history
            at: Time stamp stored in the case history

        Returns:
            The updated case, or the same case for a same-stage reassertion

        Raises:
            InvalidStage: If the target label is not recognized
            CaseClosed: If the case is in a terminal stage
            BackwardTransitionNotAllowed: If the backward override is disabled
            GradualityGateBlocked: If an expulsion resolution lacks prior
                remedial measures
        """
        target = Stage.parse(target)
        kind = self._check(case, target)
        if kind is None:
            return case

        record = StageTransition(
            from_stage=case.stage,
            to_stage=target,
            kind=kind,
            reason=reason,
            at=at,
        )
        log_extra = {
            "case_id": case.id,
            "from_stage": case.stage.value,
            "to_stage": target.value,
            "transition_kind": kind.value,
        }
        if kind == TransitionKind.BACKWARD_OVERRIDE:
            logger.warning(
                "Backward stage override on case %s: %s -> %s",
                case.id, case.stage.value, target.value,
                extra=log_extra,
            )
        else:
            logger.info(
                "Case %s moved %s -> %s",
                case.id, case.stage.value, target.value,
                extra=log_extra,
            )

        return replace(case, stage=target, history=case.history + (record,))

    def can_transition(self, case: Case, target: Union[Stage, str]) -> bool:
        """Check whether a transition would be accepted."""
        try:
            self._check(case, Stage.parse(target), quiet=True)
        except ConvivenciaError:
            return False
        return True

    def allowed_targets(self, case: Case) -> list[Stage]:
        """
        Stages the case may move to right now, in procedural order.

        Excludes the current stage and anything a guard would reject.
        """
        if case.is_closed:
            return []
        return [
            stage for stage in Stage
            if stage != case.stage and self.can_transition(case, stage)
        ]

    def _check(
        self,
        case: Case,
        target: Stage,
        quiet: bool = False,
    ) -> Optional[TransitionKind]:
        """Run every guard. Returns None for a no-op reassertion."""
        if case.is_closed:
            raise CaseClosed(
                message=(
                    f"Case is closed ({case.stage.value}); "
                    f"cannot move to {target.value}"
                ),
                details={"stage": case.stage.value, "target": target.value},
                case_id=case.id,
            )

        kind = classify_transition(case.stage, target)
        if kind is None:
            return None

        if kind == TransitionKind.BACKWARD_OVERRIDE and not self.allow_backward_transitions:
            raise BackwardTransitionNotAllowed(
                message=(
                    f"Backward transition {case.stage.value} -> {target.value} "
                    "is disabled"
                ),
                details={"stage": case.stage.value, "target": target.value},
                case_id=case.id,
            )

        if target == RESOLUTION_STAGE and not case.graduality_satisfied:
            if not quiet:
                logger.warning(
                    "Graduality gate blocked expulsion resolution for case %s",
                    case.id,
                    extra={
                        "case_id": case.id,
                        "from_stage": case.stage.value,
                        "to_stage": target.value,
                        "error_code": GradualityGateBlocked.code,
                    },
                )
            raise GradualityGateBlocked(
                message=(
                    "Expulsion resolution cannot be issued without a documented "
                    "prior written warning and psychosocial support plan"
                ),
                details={
                    "severity": case.severity.value,
                    "stage": case.stage.value,
                    "target": target.value,
                    "prior_remedial_actions_recorded": False,
                },
                case_id=case.id,
            )

        return kind
