from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from app.schemas import UserRecord
from datastore.errors import DuplicateKeyError, PersistenceError
from settings import get_settings


class UserStore:
    """User documents keyed by email, optionally written through to a JSON file."""

    def __init__(self, name: str = "users", persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[str, UserRecord] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def insert(self, user: UserRecord) -> None:
        with self._lock:
            if user.email in self._items:
                raise DuplicateKeyError(f"User with email {user.email!r} already exists.")
            self._items[user.email] = user.model_copy(deep=True)
            try:
                self._persist()
            except OSError as exc:
                del self._items[user.email]
                raise PersistenceError(
                    f"Could not write user to {self.persistence_path}: {exc}"
                ) from exc

    def get_item(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            item = self._items.get(email)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            email: item.model_dump(mode="json", by_alias=True)
            for email, item in self._items.items()
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(
                f"Could not load users from {self.persistence_path}: {exc}"
            ) from exc

        for email, payload in data.items():
            self._items[email] = UserRecord.model_validate(payload)


@lru_cache
def build_default_user_store(path: Optional[str] = None) -> UserStore:
    settings = get_settings()
    store_path = settings.users_persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return UserStore(persistence_path=persistence)
