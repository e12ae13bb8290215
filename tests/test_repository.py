"""
Tests for case repositories.

Tests cover:
- Optimistic version checks
- Open-case listing
- JSON file persistence
- Row decoding of legacy application data
"""
import json

import pytest
from datetime import date, datetime, timezone

from convivencia.exceptions import CaseNotFound, ConcurrentModification, StorageError
from convivencia.models import FACULTY_COUNCIL, NOTIFIED, Severity, Stage
from convivencia.repository import (
    CaseRepository,
    InMemoryCaseRepository,
    JsonFileCaseRepository,
    case_from_row,
    case_to_row,
)
from convivencia.engine import StageStateMachine

from tests.conftest import FRIDAY, make_case, make_expulsion_case


# =============================================================================
# In-Memory Repository
# =============================================================================

class TestInMemoryRepository:
    """Tests for the in-memory store."""

    def test_satisfies_protocol(self, repository):
        assert isinstance(repository, CaseRepository)

    def test_save_assigns_version(self, repository):
        saved = repository.save(make_case())
        assert saved.version == 1
        assert repository.load("EXP-001") == saved

    def test_load_missing(self, repository):
        with pytest.raises(CaseNotFound) as exc_info:
            repository.load("EXP-404")
        assert exc_info.value.case_id == "EXP-404"

    def test_stale_write_rejected(self, repository):
        saved = repository.save(make_case())
        repository.save(saved.with_milestones(saved.milestones.annotate(NOTIFIED, "first")))

        with pytest.raises(ConcurrentModification) as exc_info:
            repository.save(saved.with_milestones(saved.milestones.annotate(NOTIFIED, "second")))

        assert exc_info.value.retryable
        assert repository.load("EXP-001").milestones.get(NOTIFIED).notes == ("first",)

    def test_new_case_must_have_version_zero(self, repository):
        with pytest.raises(ConcurrentModification):
            repository.save(make_case(version=3))

    def test_sequential_saves_increment(self, repository):
        case = repository.save(make_case())
        case = repository.save(StageStateMachine().transition(case, Stage.NOTIFIED))
        assert case.version == 2

    def test_list_open(self):
        repository = InMemoryCaseRepository([
            make_case(id="EXP-1", severity=Severity.RELEVANT),
            make_case(id="EXP-2", severity=Severity.MINOR),
            make_case(id="EXP-3", stage=Stage.CLOSED_BY_SANCTION),
        ])
        assert [c.id for c in repository.list_open()] == ["EXP-2", "EXP-1"]
        assert len(repository) == 3
        assert "EXP-3" in repository


# =============================================================================
# JSON File Repository
# =============================================================================

class TestJsonFileRepository:
    """Tests for the JSON file store."""

    def test_missing_file_starts_empty(self, tmp_path):
        repository = JsonFileCaseRepository(tmp_path / "cases.json")
        assert len(repository) == 0
        assert not (tmp_path / "cases.json").exists()

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "data" / "cases.json"
        repository = JsonFileCaseRepository(path)

        case = repository.save(make_expulsion_case(prior_remedial_actions_recorded=True))
        case = repository.save(
            StageStateMachine().transition(
                case, Stage.RESOLUTION_PENDING, reason="Council consulted",
                at=datetime(2025, 5, 20, 16, 0),
            )
        )

        reloaded = JsonFileCaseRepository(path).load(case.id)
        assert reloaded == case
        assert reloaded.version == 2

    def test_file_uses_application_field_names(self, tmp_path):
        path = tmp_path / "cases.json"
        JsonFileCaseRepository(path).save(make_case())

        rows = json.loads(path.read_text(encoding="utf-8"))
        assert rows[0]["tipo_falta"] == "relevant"
        assert rows[0]["etapa_proceso"] == "opened"
        assert rows[0]["version"] == 1
        assert not (tmp_path / "cases.json.tmp").exists()

    def test_stale_write_not_persisted(self, tmp_path):
        path = tmp_path / "cases.json"
        repository = JsonFileCaseRepository(path)
        saved = repository.save(make_case())
        repository.save(saved)

        with pytest.raises(ConcurrentModification):
            repository.save(saved)

        assert json.loads(path.read_text(encoding="utf-8"))[0]["version"] == 2

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cases.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileCaseRepository(path)

    def test_non_list_file(self, tmp_path):
        path = tmp_path / "cases.json"
        path.write_text('{"id": "EXP-1"}', encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileCaseRepository(path)


# =============================================================================
# Row Codec
# =============================================================================

class TestCaseRows:
    """Tests for decoding stored rows."""

    def test_roundtrip_with_history_and_notes(self):
        machine = StageStateMachine()
        case = make_expulsion_case(prior_remedial_actions_recorded=True)
        case = case.with_milestones(
            case.milestones
            .mark_completed(FACULTY_COUNCIL, date(2025, 5, 19))
            .annotate(FACULTY_COUNCIL, "Acta N. 12")
        )
        case = machine.transition(case, Stage.NOTIFIED, reason="Correction")

        assert case_from_row(case_to_row(case)) == case

    @pytest.mark.parametrize("label,expected", [
        ("leve", Severity.MINOR),
        ("grave", Severity.RELEVANT),
        ("expulsion", Severity.SERIOUS_EXPULSION),
    ])
    def test_legacy_severity_labels(self, label, expected):
        row = {
            "id": "EXP-9",
            "nna_nombre": "Estudiante",
            "tipo_falta": label,
            "fecha_inicio": "2025-05-09T10:00:00",
        }
        assert case_from_row(row).severity == expected

    def test_minimal_row_gets_deadline_and_milestones(self):
        row = {
            "id": "EXP-9",
            "nna_nombre": "Estudiante",
            "tipo_falta": "expulsion",
            "etapa_proceso": "descargos",
            "fecha_inicio": FRIDAY.isoformat(),
        }
        case = case_from_row(row)

        assert case.fatal_deadline == datetime(2025, 5, 23, 10, 0)
        assert case.stage == Stage.REBUTTAL
        assert FACULTY_COUNCIL in case.milestones
        assert case.version == 0
        assert not case.prior_remedial_actions_recorded

    def test_unknown_label_is_storage_error(self):
        row = {
            "id": "EXP-9",
            "nna_nombre": "Estudiante",
            "tipo_falta": "catastrophic",
            "fecha_inicio": "2025-05-09T10:00:00",
        }
        with pytest.raises(StorageError) as exc_info:
            case_from_row(row)
        assert exc_info.value.case_id == "EXP-9"
        assert exc_info.value.details["cause"]["code"] == "CV_INVALID_SEVERITY"

    def test_missing_field_is_storage_error(self):
        with pytest.raises(StorageError):
            case_from_row({"id": "EXP-9", "tipo_falta": "leve"})

    def test_offset_timestamps_read_as_local(self):
        row = {
            "id": "EXP-9",
            "nna_nombre": "Estudiante",
            "tipo_falta": "leve",
            "fecha_inicio": "2025-05-09T14:00:00+00:00",
            "plazo_fatal": "2025-05-10T14:00:00+00:00",
        }
        case = case_from_row(row)

        opened_utc = datetime(2025, 5, 9, 14, 0, tzinfo=timezone.utc)
        assert case.opened_at == opened_utc.astimezone().replace(tzinfo=None)
        assert case.fatal_deadline.tzinfo is None
