"""
Convivencia Case Repository Protocol

The persistence boundary the engine consumes. Storage technology is the
implementation's business; the engine only relies on this contract.

Concurrency contract: every case carries a ``version``. ``save`` must reject
a case whose version differs from the stored one with
``ConcurrentModification`` and return the stored copy with ``version + 1``.
A case that does not exist yet is saved with version 0.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models import Case


@runtime_checkable
class CaseRepository(Protocol):
    """Protocol for case storage."""

    def load(self, case_id: str) -> Case:
        """
        Load a case by ID.

        Raises:
            CaseNotFound: If no case has this ID
        """
        ...

    def save(self, case: Case) -> Case:
        """
        Store a case with an optimistic version check.

        Returns:
            The stored case, with its version incremented

        Raises:
            ConcurrentModification: If the case was saved against stale state
        """
        ...

    def list_open(self) -> list[Case]:
        """All cases not in a terminal stage."""
        ...
