"""
Application Configuration.

Pydantic Settings model for the Vaccination Registry client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

from app.errors import ConfigurationError


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    # The EXPO_PUBLIC_* names are accepted so an existing mobile .env can
    # be reused as-is.
    SUPABASE_URL: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL"),
    )
    SUPABASE_ANON_KEY: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY",
        ),
    )

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "vaccination_registry.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env_file(self) -> "AppConfig":
        """Emit a startup warning when no ``.env`` file is present."""
        if not Path(".env").exists():
            logging.getLogger("app.config").warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )
        return self

    def validate_connection(self) -> None:
        """Fail fast when the backend connection parameters are missing.

        Raises:
            ConfigurationError: If ``SUPABASE_URL`` or ``SUPABASE_ANON_KEY``
                is absent or blank.
        """
        missing: list[str] = []
        if not self.SUPABASE_URL.strip():
            missing.append("SUPABASE_URL")
        if not self.SUPABASE_ANON_KEY.get_secret_value().strip():
            missing.append("SUPABASE_ANON_KEY")
        if missing:
            raise ConfigurationError(
                f"Missing Supabase environment variables: {', '.join(missing)}"
            )

    @property
    def log_level(self) -> int:
        """Numeric logging level for ``LOG_LEVEL`` (defaults to INFO)."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached, validated ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``)
    and checks the connection parameters.  Subsequent calls return the same
    instance.  Uses a check-lock-check pattern to avoid the lock overhead on
    the fast path while remaining thread-safe during first initialisation.

    Raises:
        ConfigurationError: If the Supabase URL or key is missing.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                config = AppConfig()
                config.validate_connection()
                _config_instance = config
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next ``get_config()`` re-reads the environment."""
    global _config_instance
    with _config_lock:
        _config_instance = None
