"""
Pytest configuration and fixtures for Convivencia tests.

Provides helper factories and common fixtures matching the model definitions.
"""
import pytest
from datetime import datetime

from convivencia.engine import StageStateMachine, UrgencyClassifier, compute_fatal_deadline
from convivencia.models import Case, MilestoneLedger, Severity, Stage
from convivencia.repository import InMemoryCaseRepository
from convivencia.service import CaseService


# Friday
FRIDAY = datetime(2025, 5, 9, 10, 0)
# Monday
MONDAY = datetime(2025, 5, 5, 9, 0)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_case(
    id: str = "EXP-001",
    subject_name: str = "Estudiante Prueba",
    severity: Severity = Severity.RELEVANT,
    opened_at: datetime = None,
    prior_remedial_actions_recorded: bool = False,
    stage: Stage = Stage.OPENED,
    fatal_deadline: datetime = None,
    version: int = 0,
) -> Case:
    """Create a Case with its deadline and milestones derived from severity."""
    if opened_at is None:
        opened_at = MONDAY
    if fatal_deadline is None:
        fatal_deadline = compute_fatal_deadline(opened_at, severity)

    return Case(
        id=id,
        subject_name=subject_name,
        severity=severity,
        opened_at=opened_at,
        fatal_deadline=fatal_deadline,
        prior_remedial_actions_recorded=prior_remedial_actions_recorded,
        milestones=MilestoneLedger.seed(severity, opened_at, case_id=id),
        stage=stage,
        version=version,
    )


def make_expulsion_case(
    id: str = "EXP-100",
    prior_remedial_actions_recorded: bool = False,
    stage: Stage = Stage.INVESTIGATION,
    **kwargs,
) -> Case:
    """Create an expulsion case, by default ready for resolution."""
    return make_case(
        id=id,
        severity=Severity.SERIOUS_EXPULSION,
        opened_at=kwargs.pop("opened_at", FRIDAY),
        prior_remedial_actions_recorded=prior_remedial_actions_recorded,
        stage=stage,
        **kwargs,
    )


def make_service(repository=None, **kwargs) -> CaseService:
    """Create a CaseService over an in-memory repository."""
    if repository is None:
        repository = InMemoryCaseRepository()
    return CaseService(repository=repository, **kwargs)


# =============================================================================
# Common Fixtures
# =============================================================================

@pytest.fixture
def machine():
    """State machine with backward overrides enabled."""
    return StageStateMachine()


@pytest.fixture
def strict_machine():
    """State machine that rejects backward moves."""
    return StageStateMachine(allow_backward_transitions=False)


@pytest.fixture
def classifier():
    return UrgencyClassifier()


@pytest.fixture
def repository():
    return InMemoryCaseRepository()


@pytest.fixture
def service(repository):
    return make_service(repository)
