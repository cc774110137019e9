"""Synchronous Revolut Business API client.

``Client.instance()`` is the process-wide client built from the shared
configuration; ``Client(environment="production", ...)`` builds one whose
options override the shared ones without touching them.
"""
from __future__ import annotations

import logging
import threading
from functools import cached_property
from typing import Any, Dict, Mapping, Optional

import requests

from .oauth import Auth, auth as default_auth, client_assertion
from .configuration import Environment, config
from .errors import ConfigurationError
from .http import Response, RevolutHTTP

__all__ = ["Client", "BASE_URIS", "TOKEN_PATH", "CLIENT_ASSERTION_TYPE"]

_LOG = logging.getLogger(__name__)

BASE_URIS = {
    Environment.SANDBOX: "https://sandbox-b2b.revolut.com/api/",
    Environment.PRODUCTION: "https://b2b.revolut.com/api/",
}
TOKEN_PATH = "auth/token"
CLIENT_ASSERTION_TYPE = "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"

_REQUIRED = ("client_id", "signing_key", "iss", "authorize_redirect_uri")
_OPTIONS = _REQUIRED + (
    "api_version",
    "environment",
    "request_timeout",
    "token_duration",
    "scope",
    "global_headers",
    "console",
)


def _query(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class Client:
    _instance: Optional["Client"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        *,
        auth: Optional[Auth] = None,
        session: Optional[requests.Session] = None,
        **overrides: Any,
    ) -> None:
        unknown = set(overrides) - set(_OPTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown Revolut client option(s): {', '.join(sorted(unknown))}")
        if "environment" in overrides:
            overrides["environment"] = Environment.parse(overrides["environment"])
        self._overrides = overrides
        self.auth = auth or default_auth
        self._session = session

    @classmethod
    def instance(cls) -> "Client":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.close()
            cls._instance = None

    # ------------------------------------------------------------------
    # option resolution: per-client override, then shared configuration
    # ------------------------------------------------------------------

    def _option(self, name: str) -> Any:
        if name in self._overrides:
            value = self._overrides[name]
            if name in _REQUIRED and not value:
                raise ConfigurationError(f"Revolut {name} missing!")
            return value
        return getattr(config(), name)

    @property
    def client_id(self) -> str:
        return self._option("client_id")

    @property
    def signing_key(self) -> str:
        return self._option("signing_key")

    @property
    def iss(self) -> str:
        return self._option("iss")

    @property
    def authorize_redirect_uri(self) -> str:
        return self._option("authorize_redirect_uri")

    @property
    def api_version(self) -> str:
        return self._option("api_version")

    @property
    def environment(self) -> Environment:
        return self._option("environment")

    @property
    def request_timeout(self) -> int:
        return int(self._option("request_timeout"))

    @property
    def token_duration(self) -> int:
        return int(self._option("token_duration"))

    @property
    def scope(self) -> Optional[str]:
        return self._option("scope")

    @property
    def global_headers(self) -> Dict[str, str]:
        return dict(self._option("global_headers") or {})

    @property
    def console(self) -> bool:
        return bool(self._option("console"))

    @property
    def sandbox(self) -> bool:
        return self.environment is Environment.SANDBOX

    def base_uri_for(self, api_version: str) -> str:
        return f"{BASE_URIS[self.environment]}{api_version}/"

    @property
    def base_uri(self) -> str:
        return self.base_uri_for(self.api_version)

    # ------------------------------------------------------------------
    # connection
    # ------------------------------------------------------------------

    @cached_property
    def conn(self) -> RevolutHTTP:
        _LOG.debug(
            "Revolut client resolved: base_uri=%s",
            self.base_uri,
            extra={"environment": self.environment.value},
        )
        return RevolutHTTP(
            self.base_uri,
            token_getter=lambda: self.auth.token(client=self),
            refresher=lambda force=False, stale=None: self.auth.refresh(
                force=force, stale=stale, client=self
            ),
            timeout=self.request_timeout,
            global_headers=self.global_headers,
            console=lambda: self.console,
            session=self._session,
        )

    def close(self) -> None:
        if "conn" in self.__dict__:
            self.conn.close()
            del self.__dict__["conn"]

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # verbs
    # ------------------------------------------------------------------

    def get(self, path: str, *, headers: Optional[Mapping[str, str]] = None, **query: Any) -> Response:
        return self.conn.request("GET", path, headers=headers, params=_query(query))

    def post(
        self,
        path: str,
        *,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        **query: Any,
    ) -> Response:
        return self.conn.request("POST", path, data=data, headers=headers, params=_query(query))

    def patch(
        self,
        path: str,
        *,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        **query: Any,
    ) -> Response:
        return self.conn.request("PATCH", path, data=data, headers=headers, params=_query(query))

    def delete(self, path: str, *, headers: Optional[Mapping[str, str]] = None, **query: Any) -> Response:
        return self.conn.request("DELETE", path, headers=headers, params=_query(query))

    # ------------------------------------------------------------------
    # token endpoint
    # ------------------------------------------------------------------

    def _assertion_form(self) -> Dict[str, str]:
        return {
            "client_id": self.client_id,
            "client_assertion_type": CLIENT_ASSERTION_TYPE,
            "client_assertion": client_assertion(
                client_id=self.client_id,
                signing_key=self.signing_key,
                iss=self.iss,
                token_duration=self.token_duration,
            ),
        }

    def get_access_token(self, authorization_code: str) -> Response:
        form = {"grant_type": "authorization_code", "code": authorization_code}
        form.update(self._assertion_form())
        return self.conn.request_form(TOKEN_PATH, form)

    def refresh_access_token(self, refresh_token: str) -> Response:
        form = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        form.update(self._assertion_form())
        return self.conn.request_form(TOKEN_PATH, form)

    # ------------------------------------------------------------------
    # resources
    # ------------------------------------------------------------------

    @cached_property
    def accounts(self):
        from .resources import Accounts

        return Accounts(self)

    @cached_property
    def counterparties(self):
        from .resources import Counterparties

        return Counterparties(self)

    @cached_property
    def transactions(self):
        from .resources import Transactions

        return Transactions(self)

    @cached_property
    def transfers(self):
        from .resources import Transfers

        return Transfers(self)

    @cached_property
    def payment_drafts(self):
        from .resources import PaymentDrafts

        return PaymentDrafts(self)

    @cached_property
    def foreign_exchange(self):
        from .resources import ForeignExchange

        return ForeignExchange(self)

    @cached_property
    def webhooks(self):
        from .resources import Webhooks

        return Webhooks(self)

    @cached_property
    def simulations(self):
        from .resources import Simulations

        return Simulations(self)

    def __repr__(self) -> str:
        return f"Client(environment={self.environment.value!r}, base_uri={self.base_uri!r})"
