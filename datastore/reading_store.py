from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import List, Optional

from pydantic import ValidationError

from app.schemas import Reading
from datastore.errors import PersistenceError
from settings import get_settings

logger = logging.getLogger(__name__)


class ReadingStore:
    """Append-only collection of readings, optionally mirrored to a JSON Lines file.

    Each reading is written as one line in append mode, so a write never
    touches earlier readings. Lines that cannot be decoded on load, such as
    a final line cut short by a crash, are skipped.
    """

    def __init__(self, name: str = "sensor_data", persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._readings: List[Reading] = []
        self._lock = Lock()
        self._needs_separator = False
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def append(self, reading: Reading) -> None:
        with self._lock:
            try:
                self._persist(reading)
            except OSError as exc:
                raise PersistenceError(
                    f"Could not write reading to {self.persistence_path}: {exc}"
                ) from exc
            self._readings.append(reading)

    def list_all(self) -> list[Reading]:
        """Return every stored reading ordered by timestamp, oldest first."""

        with self._lock:
            snapshot = list(self._readings)
        # sorted() is stable, so readings sharing a timestamp keep insertion order.
        return sorted(snapshot, key=lambda reading: reading.timestamp)

    def count(self) -> int:
        with self._lock:
            return len(self._readings)

    def _persist(self, reading: Reading) -> None:
        if not self.persistence_path:
            return
        line = json.dumps(reading.model_dump(mode="json", by_alias=True))
        prefix = "\n" if self._needs_separator else ""
        with self.persistence_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{prefix}{line}\n")
        self._needs_separator = False

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise PersistenceError(
                f"Could not load readings from {self.persistence_path}: {exc}"
            ) from exc

        # A torn final line must not swallow the next appended reading.
        self._needs_separator = bool(raw) and not raw.endswith("\n")

        for line_number, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                self._readings.append(Reading.model_validate_json(line))
            except ValidationError:
                logger.warning(
                    "Skipping unreadable stored reading on line %d",
                    line_number,
                    extra={"reason": "invalid document"},
                )


@lru_cache
def build_default_reading_store(path: Optional[str] = None) -> ReadingStore:
    settings = get_settings()
    store_path = settings.readings_persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return ReadingStore(persistence_path=persistence)
