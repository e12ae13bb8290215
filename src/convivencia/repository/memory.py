"""In-memory case repository with optimistic concurrency."""
from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from ..exceptions import CaseNotFound, ConcurrentModification
from ..models import Case

logger = logging.getLogger(__name__)


class InMemoryCaseRepository:
    """
    Case store backed by a dict.

    The version compare-and-swap in ``save`` runs under a lock, so two
    writers racing on the same case cannot both succeed.
    """

    def __init__(self, cases: Optional[Iterable[Case]] = None):
        self._cases: dict[str, Case] = {}
        self._lock = threading.Lock()
        for case in cases or ():
            self._cases[case.id] = case

    def __len__(self) -> int:
        return len(self._cases)

    def __contains__(self, case_id: object) -> bool:
        return case_id in self._cases

    def load(self, case_id: str) -> Case:
        case = self._cases.get(case_id)
        if case is None:
            raise CaseNotFound(
                message=f"Case '{case_id}' not found",
                case_id=case_id,
            )
        return case

    def save(self, case: Case) -> Case:
        with self._lock:
            stored = self._cases.get(case.id)
            expected = stored.version if stored is not None else 0
            if case.version != expected:
                logger.warning(
                    "Rejected stale write for case %s (version %d, stored %d)",
                    case.id, case.version, expected,
                    extra={"case_id": case.id, "error_code": ConcurrentModification.code},
                )
                raise ConcurrentModification(
                    message=(
                        f"Case was modified concurrently (saved against version "
                        f"{case.version}, current version is {expected})"
                    ),
                    details={"expected_version": expected, "actual_version": case.version},
                    case_id=case.id,
                )

            saved = case.with_version(expected + 1)
            self._cases[case.id] = saved
            try:
                self._persist()
            except OSError:
                if stored is None:
                    del self._cases[case.id]
                else:
                    self._cases[case.id] = stored
                raise
            return saved

    def list_open(self) -> list[Case]:
        return sorted(
            (c for c in self._cases.values() if not c.is_closed),
            key=lambda c: (c.fatal_deadline, c.id),
        )

    def list_all(self) -> list[Case]:
        return sorted(self._cases.values(), key=lambda c: (c.opened_at, c.id))

    def _persist(self) -> None:
        """Hook for durable subclasses; called under the lock after a save."""
