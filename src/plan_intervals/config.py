"""Configuration management for plan-intervals.

Settings are loaded from .env in the current directory, with environment
variables taking highest priority. API keys may also live in the key store
(see `plan_intervals.store`); a key set in the environment wins.

Run `plan-intervals config` to save keys to the store interactively.
"""

from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from plan_intervals.store import KeyStore

_LOCAL_ENV = Path(".env")
_DEFAULT_STORE = Path.home() / ".config" / "plan-intervals" / "store.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_LOCAL_ENV),
        env_file_encoding="utf-8",
        env_prefix="PLAN_INTERVALS_",
        extra="ignore",
    )

    intervals_api_key: SecretStr | None = None
    # "0" means the athlete that owns the API key
    intervals_athlete_id: str = "0"
    intervals_base_url: str = "https://intervals.icu"

    google_ai_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"

    # Pause between consecutive event uploads, in seconds.
    upload_delay_seconds: float = 0.2

    store_path: Path = _DEFAULT_STORE
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()


def resolve_api_key(
    settings: Settings,
    store: KeyStore,
    service: Literal["intervals", "googleai"],
) -> SecretStr | None:
    """Return the key for ``service`` from the environment, else from the store."""
    if service == "intervals":
        from_env = settings.intervals_api_key
    else:
        from_env = settings.google_ai_api_key
    if from_env is not None and from_env.get_secret_value():
        return from_env

    stored = store.get_api_key(service)
    return SecretStr(stored) if stored else None
