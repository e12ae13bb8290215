"""
JSON file case repository.

Local cache of cases as a JSON array of rows, the way the school
application keeps its offline copy. Every accepted save rewrites the file
atomically: write a temp file, fsync, then rename over the original.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Union

from ..exceptions import StorageError
from .codec import case_from_row, case_to_row
from .memory import InMemoryCaseRepository

logger = logging.getLogger(__name__)


class JsonFileCaseRepository(InMemoryCaseRepository):
    """
    Case store persisted to a single JSON file.

    Usage:
        repo = JsonFileCaseRepository("data/expedientes.json")
        saved = repo.save(case)
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._read())
        logger.info("Loaded %d cases from %s", len(self), self.path)

    def _read(self) -> list:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(
                message=f"Case file {self.path} is not valid JSON: {e}",
                details={"path": str(self.path)},
            ) from e

        if not isinstance(rows, list):
            raise StorageError(
                message=f"Case file {self.path} must hold a JSON array",
                details={"path": str(self.path)},
            )
        return [case_from_row(row) for row in rows]

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_file = self.path.with_name(self.path.name + ".tmp")

        data = json.dumps(
            [case_to_row(c) for c in self.list_all()],
            indent=2,
            ensure_ascii=False,
        )
        with open(tmp_file, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_file, self.path)
