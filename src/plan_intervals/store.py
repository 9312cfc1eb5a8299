"""Persisted API keys and user preferences.

A small string key/value file holding three entries: the Intervals.icu key,
the Google AI key and a JSON-encoded preferences object. The store is
created at the application edge and handed to whatever needs it.

Storage problems (unreadable file, bad JSON, full disk) are logged and
ignored; callers simply see missing values.
"""

import json
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ValidationError

Service = Literal["intervals", "googleai"]

_STORAGE_KEYS: dict[str, str] = {
    "intervals": "intervals_icu_api_key",
    "googleai": "google_ai_api_key",
}
_PREFERENCES_KEY = "user_preferences"


class Preferences(BaseModel):
    default_workout_type: str | None = None
    default_intensity: str | None = None
    time_format: Literal["12h", "24h"] | None = None
    distance_unit: Literal["km", "mi"] | None = None


class KeyStore:
    """File-backed key/value store for credentials and preferences."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict[str, str] = {}

    @classmethod
    def load(cls, path: Path) -> "KeyStore":
        store = cls(path)
        store._read()
        return store

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read(self) -> None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._data = {}
            return
        except OSError as exc:
            logger.error("Failed to read store {}: {}", self._path, exc)
            self._data = {}
            return

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Store {} is not valid JSON, ignoring it: {}", self._path, exc)
            self._data = {}
            return
        if not isinstance(data, dict):
            logger.error("Store {} does not hold an object, ignoring it", self._path)
            self._data = {}
            return
        self._data = {str(k): str(v) for k, v in data.items()}

    def _write(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            self._path.chmod(0o600)
        except OSError as exc:
            logger.error("Failed to save store {}: {}", self._path, exc)

    # ------------------------------------------------------------------
    # API keys
    # ------------------------------------------------------------------

    def save_api_key(self, service: Service, key: str) -> None:
        self._data[_STORAGE_KEYS[service]] = key
        self._write()

    def get_api_key(self, service: Service) -> str | None:
        return self._data.get(_STORAGE_KEYS[service]) or None

    def clear_api_keys(self) -> None:
        for storage_key in _STORAGE_KEYS.values():
            self._data.pop(storage_key, None)
        self._write()

    def has_api_keys(self) -> dict[str, bool]:
        return {service: bool(self.get_api_key(service)) for service in _STORAGE_KEYS}  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def save_preferences(self, preferences: Preferences) -> None:
        self._data[_PREFERENCES_KEY] = preferences.model_dump_json(exclude_none=True)
        self._write()

    def get_preferences(self) -> Preferences:
        stored = self._data.get(_PREFERENCES_KEY)
        if not stored:
            return Preferences()
        try:
            return Preferences.model_validate_json(stored)
        except ValidationError as exc:
            logger.error("Failed to read preferences: {}", exc)
            return Preferences()

    def clear_all(self) -> None:
        self._data = {}
        self._write()
