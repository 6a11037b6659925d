"""Local history of completed predictions."""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
import structlog

from montego.config import get_config
from montego.events.models import SimulationRecord
from montego.exceptions import HistoryError

logger = structlog.get_logger(__name__)


class HistoryStore:
    """JSON-backed list of simulation records, newest first.

    Records are keyed by timestamp: adding a record with a timestamp already
    present replaces the old entry. The list is capped at max_entries.
    """

    def __init__(
        self,
        history_file: Optional[Path] = None,
        max_entries: Optional[int] = None,
    ) -> None:
        """Initialize history store.

        Args:
            history_file: JSON file to persist to; defaults to the configured location
            max_entries: Maximum records kept; defaults to the configured limit
        """
        config = get_config().history
        self.history_file = Path(history_file) if history_file else config.history_file
        self.max_entries = max_entries if max_entries is not None else config.max_entries
        self.logger = logger.bind(component="history_store")
        self._records: list[SimulationRecord] = self._load()

    def _load(self) -> list[SimulationRecord]:
        if not self.history_file.exists():
            return []

        try:
            with open(self.history_file, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error("history_load_failed", path=str(self.history_file), error=str(e))
            return []

        if not isinstance(raw, list):
            self.logger.error("history_load_failed", path=str(self.history_file), error="not a list")
            return []

        records = []
        for item in raw:
            try:
                records.append(SimulationRecord.model_validate(item))
            except ValidationError as e:
                self.logger.warning("history_record_skipped", error=str(e))
        return records[: self.max_entries]

    def _write(self) -> None:
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.history_file, "w", encoding="utf-8") as f:
                json.dump([r.to_json_dict() for r in self._records], f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise HistoryError(f"Could not write history: {e}") from e

    def add(self, record: SimulationRecord) -> None:
        """Prepend a record and persist."""
        self._records = [record] + [r for r in self._records if r.timestamp != record.timestamp]
        self._records = self._records[: self.max_entries]
        self._write()
        self.logger.info("history_saved", event_text=record.event, entries=len(self._records))

    def records(self) -> list[SimulationRecord]:
        """All records, newest first."""
        return list(self._records)

    def get(self, timestamp: int) -> Optional[SimulationRecord]:
        """Find a record by timestamp."""
        for record in self._records:
            if record.timestamp == timestamp:
                return record
        return None

    def clear(self) -> None:
        """Remove all records."""
        self._records = []
        self._write()
        self.logger.info("history_cleared")

    def __len__(self) -> int:
        return len(self._records)
