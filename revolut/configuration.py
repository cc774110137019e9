"""Process-wide configuration for the Revolut client.

Values are resolved, highest priority first, from:

1. explicit assignment or :func:`configure`;
2. ``REVOLUT_*`` environment variables (optionally seeded from ``.env`` via
   :func:`load_env`);
3. the JSON secrets file (see :mod:`revolut.secrets`);
4. built-in defaults.

Per-client overrides (``Client(environment="production")``) sit on top of all
of this and never touch the shared configuration.
"""
from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .secrets import get_secret

__all__ = [
    "Environment",
    "Configuration",
    "config",
    "configure",
    "env",
    "is_sandbox",
    "reset_config",
    "load_env",
]

_LOG = logging.getLogger(__name__)

DEFAULT_API_VERSION = "1.0"
DEFAULT_ENVIRONMENT = "sandbox"
DEFAULT_ISS = "example.com"
DEFAULT_REQUEST_TIMEOUT = 120
DEFAULT_TOKEN_DURATION = 120  # 2 minutes

_TRUTHY = {"1", "true", "yes", "on"}

OPTIONS = frozenset(
    {
        "client_id",
        "signing_key",
        "iss",
        "authorize_redirect_uri",
        "token_duration",
        "request_timeout",
        "auth_json",
        "auth_file",
        "scope",
        "api_version",
        "environment",
        "global_headers",
        "console",
    }
)


class Environment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: "Environment | str") -> "Environment":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown Revolut environment: {value!r}") from None


def load_env(directory: str | Path | None = None) -> Optional[Path]:
    """Load ``.env.local`` (preferred) or ``.env`` without overriding real env vars."""
    root = Path(directory) if directory else Path.cwd()
    for candidate in (root / ".env.local", root / ".env"):
        if candidate.exists():
            load_dotenv(dotenv_path=candidate, override=False)
            _LOG.debug("loaded env file %s", candidate)
            return candidate
    return None


def _lookup(env_key: str, attribute: str, default: Any = None) -> Any:
    value = os.getenv(env_key)
    if value is None:
        value = get_secret(env_key, attribute)
    return default if value is None else value


def _normalize_key(value: Optional[str]) -> Optional[str]:
    # keys pasted into a single-line env var carry literal "\n" sequences
    return value.replace("\\n", "\n") if value else value


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Revolut {name} must be an integer, got {value!r}") from None


class Configuration:
    def __init__(self, **overrides: Any) -> None:
        self.global_headers: Dict[str, str] = {}
        self.client_id = _lookup("REVOLUT_CLIENT_ID", "client_id")
        self.signing_key = _lookup("REVOLUT_SIGNING_KEY", "signing_key")
        self.iss = _lookup("REVOLUT_ISS", "iss", DEFAULT_ISS)
        self.authorize_redirect_uri = _lookup(
            "REVOLUT_AUTHORIZE_REDIRECT_URI", "authorize_redirect_uri"
        )
        self.token_duration = _lookup("REVOLUT_TOKEN_DURATION", "token_duration", DEFAULT_TOKEN_DURATION)
        self.request_timeout = _lookup(
            "REVOLUT_REQUEST_TIMEOUT", "request_timeout", DEFAULT_REQUEST_TIMEOUT
        )
        self.auth_json: Optional[str] = os.getenv("REVOLUT_AUTH_JSON")
        self.auth_file: Optional[str] = os.getenv("REVOLUT_AUTH_FILE")
        self.scope: Optional[str] = os.getenv("REVOLUT_SCOPE")
        self.api_version: str = os.getenv("REVOLUT_API_VERSION", DEFAULT_API_VERSION)
        self.environment = os.getenv("REVOLUT_ENVIRONMENT", DEFAULT_ENVIRONMENT)
        self._console: Optional[bool] = None

        for key, value in overrides.items():
            self.set(key, value)

    # -- required values -------------------------------------------------------
    # Reading one of these while unset is a configuration bug on the caller's
    # side, so fail loudly instead of sending a request that cannot succeed.

    @property
    def client_id(self) -> str:
        return self._required("client_id")

    @client_id.setter
    def client_id(self, value: Optional[str]) -> None:
        self._client_id = value

    @property
    def signing_key(self) -> str:
        return self._required("signing_key")

    @signing_key.setter
    def signing_key(self, value: Optional[str]) -> None:
        self._signing_key = _normalize_key(value)

    @property
    def iss(self) -> str:
        return self._required("iss")

    @iss.setter
    def iss(self, value: Optional[str]) -> None:
        self._iss = value

    @property
    def authorize_redirect_uri(self) -> str:
        return self._required("authorize_redirect_uri")

    @authorize_redirect_uri.setter
    def authorize_redirect_uri(self, value: Optional[str]) -> None:
        self._authorize_redirect_uri = value

    def _required(self, name: str) -> str:
        value = getattr(self, f"_{name}")
        if not value:
            raise ConfigurationError(f"Revolut {name} missing!")
        return value

    # -- coerced values ----------------------------------------------------------

    @property
    def environment(self) -> Environment:
        return self._environment

    @environment.setter
    def environment(self, value: "Environment | str") -> None:
        self._environment = Environment.parse(value)

    @property
    def token_duration(self) -> int:
        return self._token_duration

    @token_duration.setter
    def token_duration(self, value: Any) -> None:
        self._token_duration = _as_int("token_duration", value)

    @property
    def request_timeout(self) -> int:
        return self._request_timeout

    @request_timeout.setter
    def request_timeout(self, value: Any) -> None:
        self._request_timeout = _as_int("request_timeout", value)

    @property
    def console(self) -> bool:
        """Interactive mode: API errors carry the server's message.

        Follows the ``CONSOLE`` env var at call time unless set explicitly.
        """
        if self._console is not None:
            return self._console
        return os.getenv("CONSOLE", "").lower() in _TRUTHY

    @console.setter
    def console(self, value: Optional[bool]) -> None:
        self._console = value

    @property
    def sandbox(self) -> bool:
        return self.environment is Environment.SANDBOX

    def set(self, key: str, value: Any) -> None:
        if key not in OPTIONS:
            raise ConfigurationError(f"Unknown Revolut configuration option: {key}")
        setattr(self, key, value)

    def __repr__(self) -> str:
        return (
            f"Configuration(environment={self.environment.value!r}, "
            f"api_version={self.api_version!r}, client_id={self._client_id!r})"
        )


_config: Optional[Configuration] = None
_config_lock = threading.Lock()


def config() -> Configuration:
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Configuration()
    return _config


def configure(**options: Any) -> Configuration:
    """Update the shared configuration, e.g. ``configure(environment="production")``."""
    cfg = config()
    for key, value in options.items():
        cfg.set(key, value)
    return cfg


def env() -> Environment:
    return config().environment


def is_sandbox() -> bool:
    return config().sandbox


def reset_config() -> None:
    global _config
    with _config_lock:
        _config = None
