"""
Convivencia Case Row Codec

Converts cases to and from the JSON rows the school application stores.

Row field names follow the application's case table (``tipo_falta``,
``etapa_proceso``, ``plazo_fatal``...). They are a storage detail: nothing
outside the repository package reads them.

Rows written by older versions of the application may lack a deadline or a
milestone list. The deadline is then recomputed from the open time and
severity (the rule table is pure, so the result is the one computed at
opening) and the milestones are seeded from the severity template.

Timestamps stored with an offset are read back as naive school-local time.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..calendars import to_school_time
from ..engine.deadline_rules import compute_fatal_deadline
from ..exceptions import ConvivenciaError, StorageError
from ..models import (
    Case,
    Milestone,
    MilestoneLedger,
    Severity,
    Stage,
    StageTransition,
    TransitionKind,
)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return to_school_time(datetime.fromisoformat(value)) if value else None


# =============================================================================
# Encoding
# =============================================================================

def milestone_to_row(milestone: Milestone) -> dict[str, Any]:
    return {
        "id": milestone.id,
        "titulo": milestone.title,
        "descripcion": milestone.description,
        "fecha_limite": _iso(milestone.due_date),
        "completado": milestone.completed,
        "fecha_cumplimiento": _iso(milestone.completed_on),
        "requiere_evidencia": milestone.requires_evidence,
        "es_obligatorio_expulsion": milestone.mandatory_for_expulsion,
        "notas": list(milestone.notes),
    }


def transition_to_row(transition: StageTransition) -> dict[str, Any]:
    return {
        "desde": transition.from_stage.value,
        "hacia": transition.to_stage.value,
        "tipo": transition.kind.value,
        "motivo": transition.reason,
        "fecha": transition.at.isoformat() if transition.at else None,
    }


def case_to_row(case: Case) -> dict[str, Any]:
    """Encode a case as a JSON-compatible row."""
    return {
        "id": case.id,
        "nna_nombre": case.subject_name,
        "tipo_falta": case.severity.value,
        "etapa_proceso": case.stage.value,
        "fecha_inicio": case.opened_at.isoformat(),
        "plazo_fatal": case.fatal_deadline.isoformat(),
        "acciones_previas": case.prior_remedial_actions_recorded,
        "version": case.version,
        "hitos": [milestone_to_row(m) for m in case.milestones],
        "historial": [transition_to_row(t) for t in case.history],
    }


# =============================================================================
# Decoding
# =============================================================================

def milestone_from_row(row: dict[str, Any]) -> Milestone:
    return Milestone(
        id=row["id"],
        title=row.get("titulo", ""),
        description=row.get("descripcion", ""),
        due_date=_parse_date(row.get("fecha_limite")),
        completed=bool(row.get("completado", False)),
        completed_on=_parse_date(row.get("fecha_cumplimiento")),
        requires_evidence=bool(row.get("requiere_evidencia", True)),
        mandatory_for_expulsion=bool(row.get("es_obligatorio_expulsion", False)),
        notes=tuple(row.get("notas", ())),
    )


def transition_from_row(row: dict[str, Any]) -> StageTransition:
    return StageTransition(
        from_stage=Stage.parse(row["desde"]),
        to_stage=Stage.parse(row["hacia"]),
        kind=TransitionKind(row["tipo"]),
        reason=row.get("motivo", ""),
        at=_parse_datetime(row.get("fecha")),
    )


def case_from_row(row: dict[str, Any]) -> Case:
    """
    Decode a stored row into a case.

    Raises:
        StorageError: If the row is malformed or holds unknown labels
    """
    case_id = row.get("id") if isinstance(row, dict) else None
    try:
        severity = Severity.parse(row["tipo_falta"])
        opened_at = to_school_time(datetime.fromisoformat(row["fecha_inicio"]))
        fatal_deadline = (
            _parse_datetime(row.get("plazo_fatal"))
            or compute_fatal_deadline(opened_at, severity)
        )

        rows = row.get("hitos")
        if rows:
            ledger = MilestoneLedger(
                opened_on=opened_at.date(),
                milestones=tuple(milestone_from_row(m) for m in rows),
                case_id=row["id"],
            )
        else:
            ledger = MilestoneLedger.seed(severity, opened_at, case_id=row["id"])

        return Case(
            id=row["id"],
            subject_name=row["nna_nombre"],
            severity=severity,
            opened_at=opened_at,
            fatal_deadline=fatal_deadline,
            prior_remedial_actions_recorded=bool(row.get("acciones_previas", False)),
            milestones=ledger,
            stage=Stage.parse(row.get("etapa_proceso") or Stage.OPENED),
            version=int(row.get("version", 0)),
            history=tuple(transition_from_row(t) for t in row.get("historial", ())),
        )
    except ConvivenciaError as e:
        raise StorageError(
            message=f"Stored case has invalid data: {e.message}",
            details={"cause": e.to_dict()},
            case_id=case_id,
        ) from e
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(
            message=f"Stored case row is malformed: {e!r}",
            case_id=case_id,
        ) from e
