"""Checked-in table-count baselines for component pages.

Each component page has a stable number of API tables. When a page's count
changes, either its markdown broke table rendering or the page really gained
or lost a table; a maintainer accepts the latter explicitly.
"""

from __future__ import annotations

import json
from pathlib import Path

from sitecheck.exceptions import BaselineMismatch, SetupError
from sitecheck.logging import get_logger

logger = get_logger(__name__)

BASELINE_SCHEMA_VERSION = 1


class BaselineStore:
    """Mapping of page identifier -> expected table count, backed by a JSON file."""

    def __init__(self, path: str | Path | None = None):
        """Initialize store.

        Args:
            path: Path to the baseline JSON file. If None, uses in-memory only.
        """
        self._path = Path(path) if path else None
        self._counts: dict[str, int] = {}
        self._dirty = False
        self._load()

    def _load(self) -> None:
        if not self._path or not self._path.exists():
            return

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SetupError(f"Baseline file {self._path} is not valid JSON: {e}") from e
        if not isinstance(data, dict) or data.get("schema_version") != BASELINE_SCHEMA_VERSION:
            version = data.get("schema_version") if isinstance(data, dict) else None
            raise SetupError(f"Unsupported baseline schema in {self._path}: {version!r}")
        self._counts = {key: int(value) for key, value in data.get("table_counts", {}).items()}

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def dirty(self) -> bool:
        return self._dirty

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._counts

    def items(self) -> list[tuple[str, int]]:
        return sorted(self._counts.items())

    def expected(self, identifier: str) -> int | None:
        return self._counts.get(identifier)

    def check(self, identifier: str, actual: int) -> None:
        """Compare ``actual`` with the recorded count.

        Raises:
            BaselineMismatch: If no count is recorded or it differs.
        """
        expected = self.expected(identifier)
        if expected != actual:
            raise BaselineMismatch(identifier, expected, actual)

    def accept(self, identifier: str, count: int) -> None:
        """Record ``count`` as the new baseline for ``identifier``."""
        previous = self._counts.get(identifier)
        if previous == count:
            return
        self._counts[identifier] = count
        self._dirty = True
        logger.info("baseline_accepted", identifier=identifier, previous=previous, count=count)

    def save(self) -> None:
        """Write the store to disk if it has a path and unsaved changes."""
        if not self._path or not self._dirty:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "schema_version": BASELINE_SCHEMA_VERSION,
            "table_counts": dict(sorted(self._counts.items())),
        }
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        self._path.write_text(text, encoding="utf-8")
        self._dirty = False
