"""JSON secrets file used as a fallback credential source.

The file (``SECRETS_PATH``) may hold either the environment-style keys::

    {"REVOLUT_CLIENT_ID": "...", "REVOLUT_SIGNING_KEY": "-----BEGIN ..."}

or a ``revolut`` section keyed by configuration attribute::

    {"revolut": {"client_id": "...", "signing_key": "..."}}
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

_LOG = logging.getLogger(__name__)

DEFAULT_SECRETS_PATH = "/var/run/secrets/revolut.json"

__all__ = ["SecretsFile", "secrets", "get_secret"]


class SecretsFile:
    def __init__(self, path: str | Path | None = None) -> None:
        self._explicit_path = Path(path) if path else None
        self._data: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._explicit_path or Path(os.getenv("SECRETS_PATH", DEFAULT_SECRETS_PATH))

    def _read(self) -> dict[str, Any]:
        if self._data is None:
            try:
                self._data = json.loads(self.path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                self._data = {}
            except (OSError, ValueError) as exc:
                _LOG.warning("ignoring unreadable secrets file %s: %s", self.path, exc)
                self._data = {}
        return self._data

    def lookup(self, env_key: str, attribute: Optional[str] = None) -> Any:
        """Return the secret stored under *env_key* or ``revolut.<attribute>``."""
        data = self._read()
        if env_key in data:
            return data[env_key]
        section = data.get("revolut")
        if attribute and isinstance(section, dict):
            return section.get(attribute)
        return None

    def reload(self) -> None:
        self._data = None

    # test helpers
    def set_override(self, data: dict[str, Any]) -> None:
        self._data = dict(data)


secrets = SecretsFile()


def get_secret(env_key: str, attribute: Optional[str] = None, default: Any = None) -> Any:
    value = secrets.lookup(env_key, attribute)
    return default if value is None else value
