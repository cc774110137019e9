"""Python client for the Revolut Business API.

Typical use::

    import revolut

    revolut.configure(client_id="...", signing_key=pem, authorize_redirect_uri="https://...")
    print(revolut.auth.authorize_url())      # owner approves the app
    revolut.auth.exchange("code-from-redirect")

    client = revolut.Client.instance()
    for account in client.accounts.list():
        print(account.name, account.balance, account.currency)

Tokens stored in ``REVOLUT_AUTH_JSON`` (or ``REVOLUT_AUTH_FILE``) are loaded on
import, so long-running services do not need the consent step again.
"""
from __future__ import annotations

from typing import Any

from . import configuration as _config
from .oauth import Auth, auth, client_assertion
from .client import Client
from .configuration import Configuration, Environment, config, env, is_sandbox, load_env
from .errors import (
    APIError,
    AuthenticationError,
    BadRequestError,
    ClientError,
    ConfigurationError,
    ConflictError,
    ConnectionFailed,
    Error,
    ForbiddenError,
    ResourceNotFound,
    ServerError,
    SignatureVerificationError,
    TooManyRequestsError,
    UnauthorizedError,
    UnprocessableEntityError,
    UnsupportedOperationError,
)
from .http import Response
from .version import __version__

__all__ = [
    "__version__",
    "Auth",
    "auth",
    "client_assertion",
    "Client",
    "Configuration",
    "Environment",
    "Response",
    "config",
    "configure",
    "env",
    "is_sandbox",
    "load_env",
    "reset",
    "Error",
    "ConfigurationError",
    "UnsupportedOperationError",
    "SignatureVerificationError",
    "AuthenticationError",
    "ConnectionFailed",
    "APIError",
    "ClientError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "ResourceNotFound",
    "ConflictError",
    "UnprocessableEntityError",
    "TooManyRequestsError",
    "ServerError",
]


def configure(**options: Any) -> Configuration:
    """Update the shared configuration; the default client picks it up on next use."""
    cfg = _config.configure(**options)
    Client.reset_instance()
    return cfg


def reset() -> None:
    """Forget configuration, default client and cached tokens."""
    Client.reset_instance()
    _config.reset_config()
    auth.clear()


auth.load_from_env()
