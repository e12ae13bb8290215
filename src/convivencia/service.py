"""
Convivencia Case Service

Application-facing API over the engine. The service loads a case from the
injected repository, applies a pure engine operation, and saves the result.

Every mutation is a read-modify-write cycle checked by the repository's
optimistic version. With ``transition_attempts > 1`` a conflicting update is
re-run against a freshly loaded case (all guards evaluated again); the stale
case is never resubmitted.

Timestamps are stored as naive school-local time. Aware inputs (opening
times, transition times, ``now``) are converted on the way in, so cases
opened with and without an offset can be compared and sorted together.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Union
from uuid import uuid4

from .calendars import SCHOOL_CALENDAR, BusinessCalendar, to_school_time
from .config import EngineSettings
from .engine import (
    StageStateMachine,
    UrgencyAssessment,
    UrgencyClassifier,
    compute_fatal_deadline,
)
from .exceptions import ConcurrentModification
from .models import Case, MilestoneLedger, Severity, Stage, UrgencyTier
from .repository import CaseRepository, InMemoryCaseRepository, JsonFileCaseRepository

logger = logging.getLogger(__name__)


def new_case_id() -> str:
    return f"EXP-{uuid4().hex[:8].upper()}"


@dataclass
class CaseService:
    """
    Opens cases, moves them through stages, and reports urgency.

    Usage:
        service = CaseService(repository=InMemoryCaseRepository())

        case = service.open_case(
            subject_name="Student Name",
            severity=Severity.SERIOUS_EXPULSION,
            opened_at=datetime(2025, 5, 9, 10, 0),
            prior_remedial_actions_recorded=True,
        )
        case = service.transition_stage(case.id, Stage.NOTIFIED)
        tier = service.classify_urgency(case.id, now=datetime.now())
    """

    repository: CaseRepository
    machine: StageStateMachine = field(default_factory=StageStateMachine)
    classifier: UrgencyClassifier = field(default_factory=UrgencyClassifier)
    calendar: BusinessCalendar = field(default_factory=lambda: SCHOOL_CALENDAR)

    # Attempts per mutation when the repository reports a race
    transition_attempts: int = 1

    id_factory: Callable[[], str] = new_case_id

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        repository: Optional[CaseRepository] = None,
    ) -> CaseService:
        """Build a service from settings, choosing storage when not given."""
        if repository is None:
            if settings.storage_path:
                repository = JsonFileCaseRepository(settings.storage_path)
            else:
                repository = InMemoryCaseRepository()

        return cls(
            repository=repository,
            machine=StageStateMachine(
                allow_backward_transitions=settings.allow_backward_transitions,
            ),
            transition_attempts=settings.transition_attempts,
        )

    # =========================================================================
    # Cases
    # =========================================================================

    def open_case(
        self,
        subject_name: str,
        severity: Union[Severity, str],
        opened_at: datetime,
        prior_remedial_actions_recorded: bool,
        case_id: Optional[str] = None,
    ) -> Case:
        """
        Open a case: compute its fatal deadline and seed its milestones.

        Raises:
            InvalidSeverity: If the severity is not recognized
        """
        severity = Severity.parse(severity)
        opened_at = to_school_time(opened_at)
        case_id = case_id or self.id_factory()

        case = Case(
            id=case_id,
            subject_name=subject_name,
            severity=severity,
            opened_at=opened_at,
            fatal_deadline=compute_fatal_deadline(opened_at, severity, self.calendar),
            prior_remedial_actions_recorded=prior_remedial_actions_recorded,
            milestones=MilestoneLedger.seed(severity, opened_at, case_id=case_id),
            stage=Stage.OPENED,
        )
        saved = self.repository.save(case)

        logger.info(
            "Opened %s case %s, fatal deadline %s",
            severity.value, case_id, saved.fatal_deadline.isoformat(),
            extra={"case_id": case_id},
        )
        return saved

    def get_case(self, case_id: str) -> Case:
        return self.repository.load(case_id)

    def transition_stage(
        self,
        case_id: str,
        target: Union[Stage, str],
        reason: str = "",
        at: Optional[datetime] = None,
    ) -> Case:
        """
        Move a case to a new stage and persist it.

        Raises:
            CaseNotFound, InvalidStage, CaseClosed, GradualityGateBlocked,
            BackwardTransitionNotAllowed, ConcurrentModification
        """
        if at is not None:
            at = to_school_time(at)
        return self._update(
            case_id,
            lambda case: self.machine.transition(case, target, reason=reason, at=at),
        )

    def record_milestone(
        self,
        case_id: str,
        milestone_id: str,
        completion_date: Union[date, datetime],
    ) -> Case:
        """
        Mark a milestone completed.

        Raises:
            CaseNotFound, MilestoneNotFound, InvalidMilestoneDate,
            ConcurrentModification
        """
        if isinstance(completion_date, datetime):
            completion_date = to_school_time(completion_date)
        return self._update(
            case_id,
            lambda case: case.with_milestones(
                case.milestones.mark_completed(milestone_id, completion_date)
            ),
        )

    def annotate_milestone(self, case_id: str, milestone_id: str, note: str) -> Case:
        """Append an audit note to a milestone, including on closed cases."""
        return self._update(
            case_id,
            lambda case: case.with_milestones(
                case.milestones.annotate(milestone_id, note)
            ),
        )

    def allowed_targets(self, case_id: str) -> list[Stage]:
        return self.machine.allowed_targets(self.repository.load(case_id))

    # =========================================================================
    # Urgency
    # =========================================================================

    def classify_urgency(self, case_id: str, now: datetime) -> Optional[UrgencyTier]:
        """Urgency tier of a case; None once the case is closed."""
        return self.classifier.classify_case(
            self.repository.load(case_id), to_school_time(now)
        )

    def assess_urgency(self, case_id: str, now: datetime) -> Optional[UrgencyAssessment]:
        return self.classifier.assess(self.repository.load(case_id), to_school_time(now))

    def list_urgent(
        self,
        cases: Optional[Iterable[Case]],
        now: datetime,
        tier: Union[UrgencyTier, Iterable[UrgencyTier]],
    ) -> list[Case]:
        """Cases in a tier; ``cases=None`` means every open case."""
        if cases is None:
            cases = self.repository.list_open()
        return self.classifier.list_urgent(cases, to_school_time(now), tier)

    def list_alerts(self, now: datetime) -> list[Case]:
        """Open cases that are critical or expired."""
        return self.classifier.list_alerts(self.repository.list_open(), to_school_time(now))

    # =========================================================================
    # Internals
    # =========================================================================

    def _update(self, case_id: str, change: Callable[[Case], Case]) -> Case:
        attempt = 0
        while True:
            attempt += 1
            case = self.repository.load(case_id)
            updated = change(case)
            if updated is case:
                return case
            try:
                return self.repository.save(updated)
            except ConcurrentModification:
                if attempt >= self.transition_attempts:
                    raise
                logger.info(
                    "Reloading case %s after concurrent modification (attempt %d/%d)",
                    case_id, attempt, self.transition_attempts,
                    extra={"case_id": case_id},
                )
