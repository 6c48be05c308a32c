"""File-backed secret lookup for the gateway.

PayPal client credentials are read from a JSON document mounted by the
deployment (``SECRETS_PATH``) before falling back to the environment, so the
client secret never has to live in a process listing or a shell history.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

__all__ = ["SecretsManager", "secrets", "get_secret"]

_DEFAULT_PATH = "/var/run/secrets/paypal_mcp.json"


class SecretsManager:
    """Load secrets from a JSON file pointed to by ``SECRETS_PATH``.

    The file is read once and cached. Tests replace or extend the cache via
    :meth:`set_override` and :meth:`update` instead of touching the disk.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path or os.getenv("SECRETS_PATH", _DEFAULT_PATH))
        self._cache: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._cache is None:
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except FileNotFoundError:
                data = {}
            if not isinstance(data, dict):
                raise ValueError(f"Secrets file {self._path} must hold a JSON object")
            self._cache = data
        return self._cache

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return secret value for *key* or *default* if missing or empty."""

        value = self._load().get(key)
        if value in (None, ""):
            return default
        return value

    def set_override(self, data: dict[str, Any]) -> None:
        """Replace the entire secret cache (test helper)."""

        self._cache = dict(data)

    def update(self, data: dict[str, Any]) -> None:
        """Merge *data* into the existing cache (test helper)."""

        current = self._load()
        current.update(data)
        self._cache = current


# Global default manager
secrets = SecretsManager()


def get_secret(key: str, default: Optional[Any] = None) -> Any:
    """Return *key* from the secrets file, else the environment, else *default*."""

    value = secrets.get(key)
    if value is not None:
        return value
    env_value = os.getenv(key)
    if env_value not in (None, ""):
        return env_value
    return default
