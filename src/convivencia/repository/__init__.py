"""
Convivencia Repositories

The case persistence boundary and two reference implementations.

- CaseRepository: protocol the engine consumes
- InMemoryCaseRepository: dict-backed store
- JsonFileCaseRepository: local JSON cache (one file, atomic rewrites)
"""
from __future__ import annotations

from .base import CaseRepository
from .codec import case_from_row, case_to_row
from .json_file import JsonFileCaseRepository
from .memory import InMemoryCaseRepository

__all__ = [
    "CaseRepository",
    "InMemoryCaseRepository",
    "JsonFileCaseRepository",
    "case_from_row",
    "case_to_row",
]
