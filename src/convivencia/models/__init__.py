"""
Convivencia Models

Domain models for disciplinary case tracking.

    from convivencia.models import (
        # Enums
        Severity, Stage, TransitionKind, UrgencyTier,
        # Milestones
        Milestone, MilestoneLedger, seed_milestones,
        # Case
        Case, StageTransition,
    )
"""
from __future__ import annotations

from .enums import (
    PROCEDURAL_STAGES,
    TERMINAL_STAGES,
    Severity,
    Stage,
    TransitionKind,
    UrgencyTier,
)
from .milestone import (
    DIRECTOR_RESOLUTION,
    FACULTY_COUNCIL,
    INVESTIGATION,
    NOTIFIED,
    OPENED,
    REBUTTAL,
    RECONSIDERATION_WINDOW,
    Milestone,
    MilestoneLedger,
    seed_milestones,
)
from .case import Case, StageTransition

__all__ = [
    # Enums
    "Severity",
    "Stage",
    "TransitionKind",
    "UrgencyTier",
    "PROCEDURAL_STAGES",
    "TERMINAL_STAGES",
    # Milestones
    "Milestone",
    "MilestoneLedger",
    "seed_milestones",
    "OPENED",
    "NOTIFIED",
    "REBUTTAL",
    "INVESTIGATION",
    "FACULTY_COUNCIL",
    "DIRECTOR_RESOLUTION",
    "RECONSIDERATION_WINDOW",
    # Case
    "Case",
    "StageTransition",
]
