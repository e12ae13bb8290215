"""
Convivencia Enumerations

All enumeration types used throughout the case engine.

All enums inherit from (str, Enum) for JSON serialization compatibility.
Severity and Stage are closed sets: the rule table and the state machine
branch over every member.
"""
from __future__ import annotations

from enum import Enum
from typing import Union

from ..exceptions import InvalidSeverity, InvalidStage


# =============================================================================
# Severity (Gravedad)
# =============================================================================

class Severity(str, Enum):
    """Classification of the alleged misconduct. Drives the fatal deadline."""
    MINOR = "minor"                          # Falta leve
    RELEVANT = "relevant"                    # Falta relevante
    SERIOUS_EXPULSION = "serious_expulsion"  # Gravisima, expulsion process

    @property
    def is_expulsion(self) -> bool:
        return self is Severity.SERIOUS_EXPULSION

    @classmethod
    def parse(cls, value: Union[str, Severity]) -> Severity:
        """
        Parse a severity from an enum member, its value, or a legacy label.

        Raises:
            InvalidSeverity: If the value is not recognized
        """
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in _SEVERITY_ALIASES:
                return _SEVERITY_ALIASES[key]
        raise InvalidSeverity(
            message=f"Unrecognized severity: {value!r}",
            details={
                "value": value if isinstance(value, str) else repr(value),
                "allowed": [s.value for s in cls],
            },
        )


# Labels used by the school application's table rows
_SEVERITY_ALIASES: dict[str, Severity] = {
    **{s.value: s for s in Severity},
    "leve": Severity.MINOR,
    "relevante": Severity.RELEVANT,
    "grave": Severity.RELEVANT,
    "expulsion": Severity.SERIOUS_EXPULSION,
    "gravisima_expulsion": Severity.SERIOUS_EXPULSION,
}


# =============================================================================
# Stage (Etapa)
# =============================================================================

class Stage(str, Enum):
    """
    Position of a case in the legally defined procedural sequence.

    Declaration order is the canonical procedural order. The two closed
    stages are terminal and absorbing.
    """
    OPENED = "opened"                            # Inicio
    NOTIFIED = "notified"                        # Notificado
    REBUTTAL = "rebuttal"                        # Descargos
    INVESTIGATION = "investigation"              # Investigacion
    RESOLUTION_PENDING = "resolution_pending"    # Resolucion pendiente
    RECONSIDERATION = "reconsideration"          # Reconsideracion
    CLOSED_BY_SANCTION = "closed_by_sanction"    # Cerrado por sancion
    CLOSED_BY_MEDIATION = "closed_by_mediation"  # Cerrado por GCC

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STAGES

    @property
    def order(self) -> int:
        """Position in the canonical procedural order."""
        return _STAGE_ORDER[self]

    @classmethod
    def parse(cls, value: Union[str, Stage]) -> Stage:
        """
        Parse a stage from an enum member, its value, or a legacy label.

        Raises:
            InvalidStage: If the value is not recognized
        """
        if isinstance(value, Stage):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in _STAGE_ALIASES:
                return _STAGE_ALIASES[key]
        raise InvalidStage(
            message=f"Unrecognized stage: {value!r}",
            details={
                "value": value if isinstance(value, str) else repr(value),
                "allowed": [s.value for s in cls],
            },
        )


TERMINAL_STAGES: frozenset[Stage] = frozenset({
    Stage.CLOSED_BY_SANCTION,
    Stage.CLOSED_BY_MEDIATION,
})

PROCEDURAL_STAGES: tuple[Stage, ...] = tuple(
    s for s in Stage if s not in TERMINAL_STAGES
)

_STAGE_ORDER: dict[Stage, int] = {s: i for i, s in enumerate(Stage)}

_STAGE_ALIASES: dict[str, Stage] = {
    **{s.value: s for s in Stage},
    "inicio": Stage.OPENED,
    "apertura": Stage.OPENED,
    "notificado": Stage.NOTIFIED,
    "descargos": Stage.REBUTTAL,
    "investigacion": Stage.INVESTIGATION,
    "resolucion": Stage.RESOLUTION_PENDING,
    "resolucion_pendiente": Stage.RESOLUTION_PENDING,
    "reconsideracion": Stage.RECONSIDERATION,
    "cerrado": Stage.CLOSED_BY_SANCTION,
    "cerrado_sancion": Stage.CLOSED_BY_SANCTION,
    "cerrado_gcc": Stage.CLOSED_BY_MEDIATION,
}


# =============================================================================
# Transition Kind
# =============================================================================

class TransitionKind(str, Enum):
    """How an accepted stage transition relates to the procedural order."""
    FORWARD = "forward"                        # Normal workflow advancement
    BACKWARD_OVERRIDE = "backward_override"    # Corrective edit, audited
    CLOSURE = "closure"                        # Move to a terminal stage


# =============================================================================
# Urgency Tier
# =============================================================================

class UrgencyTier(str, Enum):
    """Urgency of an open case relative to its fatal deadline."""
    EXPIRED = "expired"      # Deadline reached or passed
    CRITICAL = "critical"    # 48 hours or less remaining
    WARNING = "warning"      # 5 days or less remaining
    NORMAL = "normal"

    @property
    def is_alert(self) -> bool:
        """Only critical and expired cases are surfaced as dashboard alerts."""
        return self in (UrgencyTier.EXPIRED, UrgencyTier.CRITICAL)
