"""
Convivencia Exception Hierarchy

Domain-specific exceptions for the disciplinary case engine.
All exceptions carry a machine-readable code so callers can branch on the
kind of failure instead of parsing messages.

Exception codes follow the pattern: CV_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional


@dataclass
class ConvivenciaError(Exception):
    """
    Base exception for all engine errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (CV_*)
        details: Additional context about the error
        case_id: Associated case ID if applicable
    """
    message: str
    code: str = "CV_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    case_id: Optional[str] = None

    # Only repository races are worth retrying (after a reload)
    retryable: ClassVar[bool] = False

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.case_id:
            parts.append(f"(case: {self.case_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.case_id:
            result["case_id"] = self.case_id
        return result


# =============================================================================
# Input Errors
# =============================================================================

@dataclass
class InvalidSeverity(ConvivenciaError):
    """Unrecognized severity value at case creation."""
    code: str = "CV_INVALID_SEVERITY"


@dataclass
class InvalidStage(ConvivenciaError):
    """Unrecognized stage value."""
    code: str = "CV_INVALID_STAGE"


# =============================================================================
# Milestone Errors
# =============================================================================

@dataclass
class InvalidMilestoneDate(ConvivenciaError):
    """Milestone completion date precedes the case open date."""
    code: str = "CV_INVALID_MILESTONE_DATE"


@dataclass
class MilestoneNotFound(ConvivenciaError):
    """Milestone ID is not part of the case ledger."""
    code: str = "CV_MILESTONE_NOT_FOUND"


# =============================================================================
# Stage Transition Errors
# =============================================================================

@dataclass
class CaseClosed(ConvivenciaError):
    """Transition attempted on a case in a terminal stage."""
    code: str = "CV_CASE_CLOSED"


@dataclass
class GradualityGateBlocked(ConvivenciaError):
    """
    Expulsion resolution attempted without prior remedial measures.

    This is a blocking legal warning, not a transient failure.
    """
    code: str = "CV_GRADUALITY_GATE_BLOCKED"


@dataclass
class BackwardTransitionNotAllowed(ConvivenciaError):
    """Backward stage correction attempted while the override is disabled."""
    code: str = "CV_BACKWARD_TRANSITION_DISABLED"


# =============================================================================
# Deadline Errors
# =============================================================================

@dataclass
class DeadlineCalculationError(ConvivenciaError):
    """Deadline arithmetic received invalid input."""
    code: str = "CV_DEADLINE_ERROR"


# =============================================================================
# Repository Errors
# =============================================================================

@dataclass
class CaseNotFound(ConvivenciaError):
    """Requested case does not exist in the repository."""
    code: str = "CV_CASE_NOT_FOUND"


@dataclass
class ConcurrentModification(ConvivenciaError):
    """Case was saved against stale state; reload and retry."""
    code: str = "CV_CONCURRENT_MODIFICATION"

    retryable: ClassVar[bool] = True


@dataclass
class StorageError(ConvivenciaError):
    """Persisted case data could not be read or decoded."""
    code: str = "CV_STORAGE_ERROR"


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigurationError(ConvivenciaError):
    """Engine settings failed to load or validate."""
    code: str = "CV_CONFIGURATION_ERROR"
