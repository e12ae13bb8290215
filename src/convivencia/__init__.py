"""
Convivencia - Disciplinary Case Deadline and Stage Engine

Tracks Chilean school disciplinary cases (expedientes) through the legally
mandated sequence of stages.

Core responsibilities:
- Fatal deadline per severity, with Saturday/Sunday excluded business days
- Guarded stage transitions, including the expulsion graduality gate
- Urgency classification of open cases for dashboards and calendars

The engine does not decide guilt, write resolutions, or store files.

Quick Start:
    from datetime import datetime
    from convivencia import CaseService, InMemoryCaseRepository, Severity, Stage

    service = CaseService(repository=InMemoryCaseRepository())
    case = service.open_case(
        subject_name="Student Name",
        severity=Severity.RELEVANT,
        opened_at=datetime(2025, 5, 5, 9, 0),
        prior_remedial_actions_recorded=False,
    )
    case = service.transition_stage(case.id, Stage.NOTIFIED)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

from .exceptions import (
    BackwardTransitionNotAllowed,
    CaseClosed,
    CaseNotFound,
    ConcurrentModification,
    ConfigurationError,
    ConvivenciaError,
    DeadlineCalculationError,
    GradualityGateBlocked,
    InvalidMilestoneDate,
    InvalidSeverity,
    InvalidStage,
    MilestoneNotFound,
    StorageError,
)
from .models import (
    Case,
    Milestone,
    MilestoneLedger,
    Severity,
    Stage,
    StageTransition,
    TransitionKind,
    UrgencyTier,
)
from .repository import CaseRepository, InMemoryCaseRepository, JsonFileCaseRepository
from .service import CaseService

__all__ = [
    "__version__",
    # Errors
    "ConvivenciaError",
    "InvalidSeverity",
    "InvalidStage",
    "InvalidMilestoneDate",
    "MilestoneNotFound",
    "CaseClosed",
    "GradualityGateBlocked",
    "BackwardTransitionNotAllowed",
    "DeadlineCalculationError",
    "CaseNotFound",
    "ConcurrentModification",
    "StorageError",
    "ConfigurationError",
    # Models
    "Case",
    "Milestone",
    "MilestoneLedger",
    "Severity",
    "Stage",
    "StageTransition",
    "TransitionKind",
    "UrgencyTier",
    # Service and storage
    "CaseService",
    "CaseRepository",
    "InMemoryCaseRepository",
    "JsonFileCaseRepository",
]
