"""
JSON-file persistence for reading history.

HistoryStore is the single owner of the mutable history list. It hands the
core an immutable snapshot for every enrichment and appends the result
afterwards, so enrichment always sees the history as it was at insertion time.
"""

import os
import tempfile
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from adapters.codecs import from_json, to_json
from core.domain.models import DEFAULT_CRITERIA, EnrichedReading, OrthostaticCriteria, Reading
from core.domain.result import Result
from core.services.enrichment import enrich

logger = structlog.get_logger(__name__)


class ImportReport:
    """Outcome of a bulk import: what was added and which rows were rejected."""

    def __init__(self) -> None:
        self.added: list[EnrichedReading] = []
        self.rejected: list[tuple[int, str]] = []

    def __repr__(self) -> str:
        return f"<ImportReport added={len(self.added)} rejected={len(self.rejected)}>"


class HistoryStore:
    """Append-only reading history backed by a JSON file."""

    def __init__(self, path: str | Path, criteria: OrthostaticCriteria = DEFAULT_CRITERIA) -> None:
        self.path = Path(path)
        self.criteria = criteria
        self._history: list[EnrichedReading] = []
        self.logger = logger.bind(component="history_store", path=str(self.path))

    @property
    def history(self) -> tuple[EnrichedReading, ...]:
        """Immutable snapshot of the current history, in insertion order."""
        return tuple(self._history)

    def load(self) -> Result[list[EnrichedReading], Exception]:
        """
        Load history from disk. A missing file is an empty history.

        Returns:
            Result containing the loaded readings, or the decode/validation error.
            On error the in-memory history is left unchanged.
        """
        if not self.path.exists():
            self._history = []
            self.logger.info("history_file_missing")
            return Result.ok([])

        # ValueError covers UnicodeDecodeError, CodecError and ValidationError
        try:
            raw = from_json(self.path.read_text(encoding="utf-8"))
            loaded = [EnrichedReading.model_validate(item) for item in raw]
        except (OSError, ValueError) as e:
            self.logger.error("history_load_failed", error=str(e))
            return Result.err(e)

        self._history = loaded
        self.logger.info("history_loaded", count=len(loaded))
        return Result.ok(list(loaded))

    def save(self, readings: Sequence[EnrichedReading] | None = None) -> None:
        """Write ``readings`` (default: the current history) atomically."""
        readings = self._history if readings is None else readings
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(to_json(readings))
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self.logger.info("history_saved", count=len(readings))

    def _commit(self, readings: list[EnrichedReading]) -> None:
        # In-memory history only changes once the file write succeeded
        self.save(readings)
        self._history = readings

    def add(self, raw: Reading | Mapping[str, Any]) -> EnrichedReading:
        """
        Enrich a new reading against the current history, append it and save.

        Raises:
            pydantic.ValidationError: if the reading is malformed. Nothing is stored.
            OSError: if the history cannot be written. The in-memory history
                is left unchanged.
        """
        enriched = enrich(raw, self.history, criteria=self.criteria)
        self._commit([*self._history, enriched])
        self.logger.info(
            "reading_added",
            reading_id=enriched.id,
            severity_level=enriched.severity_level.value,
            orthostatic=enriched.orthostatic_flag,
        )
        return enriched

    def extend(self, raws: Iterable[Reading | Mapping[str, Any]]) -> ImportReport:
        """
        Import many readings in order, each enriched against those before it.

        Malformed rows are skipped and reported; valid rows are kept. If the
        final save fails nothing is imported.
        """
        report = ImportReport()
        pending = list(self._history)
        for row_number, raw in enumerate(raws, start=1):
            try:
                enriched = enrich(raw, tuple(pending), criteria=self.criteria)
            except ValidationError as e:
                self.logger.warning("import_row_rejected", row=row_number, error=str(e))
                report.rejected.append((row_number, str(e)))
                continue
            pending.append(enriched)
            report.added.append(enriched)

        if report.added:
            self._commit(pending)
        self.logger.info(
            "import_completed", added=len(report.added), rejected=len(report.rejected)
        )
        return report

    def clear(self) -> None:
        """Drop every reading and persist the empty history."""
        self._commit([])
        self.logger.info("history_cleared")
