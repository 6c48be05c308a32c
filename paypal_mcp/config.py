"""Process configuration, read once at start-up.

Each key is looked up in the secrets file (``SECRETS_PATH``), then in the
environment. ``.env.local`` and ``.env`` in the working directory are loaded
into the environment first without overriding variables already set.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

from common.logging import resolve_level
from common.secrets import get_secret
from integrations.paypal import BASE_URLS, DEFAULT_BUFFER_SECONDS, DEFAULT_TIMEOUT_SECONDS, SANDBOX

__all__ = ["ConfigError", "Settings", "load_env_files"]

_LOG = logging.getLogger(__name__)

_ENV_FILES = (".env.local", ".env")


class ConfigError(ValueError):
    """Raised when a setting is missing or has an unusable value."""


def load_env_files(directory: Path | str | None = None, names: Iterable[str] = _ENV_FILES) -> list[Path]:
    """Load dotenv files from *directory* (default: cwd); return those found."""

    base = Path(directory or os.getcwd())
    loaded: list[Path] = []
    for name in names:
        path = base / name
        if path.is_file():
            load_dotenv(dotenv_path=path, override=False)
            loaded.append(path)
    return loaded


def _number(key: str, default: float, *, integer: bool = False) -> float:
    raw = get_secret(key, None)
    if raw is None:
        return default
    try:
        value = int(raw) if integer else float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{key} must be >= 0")
    return value


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str = field(repr=False)
    environment: str = SANDBOX
    log_level: str = "info"
    log_format: str = "text"
    token_buffer_seconds: int = DEFAULT_BUFFER_SECONDS
    http_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.client_id or not self.client_secret:
            raise ConfigError("PAYPAL_CLIENT_ID and PAYPAL_CLIENT_SECRET are required")
        if self.environment not in BASE_URLS:
            raise ConfigError(
                f"PAYPAL_ENVIRONMENT must be one of {sorted(BASE_URLS)}, got {self.environment!r}"
            )
        try:
            resolve_level(self.log_level)
        except ValueError as exc:
            raise ConfigError(str(exc)) from None
        if self.log_format not in {"text", "json"}:
            raise ConfigError(f"LOG_FORMAT must be 'text' or 'json', got {self.log_format!r}")
        if self.http_timeout_seconds <= 0:
            raise ConfigError("PAYPAL_HTTP_TIMEOUT_SECONDS must be > 0")

    @classmethod
    def load(cls, *, env_dir: Optional[Path | str] = None) -> "Settings":
        for path in load_env_files(env_dir):
            _LOG.debug("Loaded env file %s", path)
        return cls(
            client_id=get_secret("PAYPAL_CLIENT_ID", ""),
            client_secret=get_secret("PAYPAL_CLIENT_SECRET", ""),
            environment=str(get_secret("PAYPAL_ENVIRONMENT", SANDBOX)).strip().lower(),
            log_level=str(get_secret("LOG_LEVEL", "info")).strip().lower(),
            log_format=str(get_secret("LOG_FORMAT", "text")).strip().lower(),
            token_buffer_seconds=int(
                _number("PAYPAL_TOKEN_BUFFER_SECONDS", DEFAULT_BUFFER_SECONDS, integer=True)
            ),
            http_timeout_seconds=_number("PAYPAL_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        )
