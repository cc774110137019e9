"""OAuth token lifecycle for the Revolut Business API.

Revolut issues tokens through the authorization-code flow: the account owner
approves the app at :meth:`Auth.authorize_url`, the redirect carries a one-time
``code`` that :meth:`Auth.exchange` trades for an access/refresh token pair,
and from then on :meth:`Auth.refresh` mints new access tokens from the stored
refresh token. Token requests are authenticated with a short-lived RS256 JWT
(:func:`client_assertion`) signed with the app's private key.

State lives in the process-wide :data:`auth` object, cached in memory and,
when ``auth_file`` is configured, on disk.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

import jwt

from .configuration import Environment, config
from .errors import AuthenticationError, ConfigurationError, Error
from .metrics import oauth_refresh_errors_total, oauth_tokens_issued_total

if TYPE_CHECKING:  # pragma: no cover
    from .client import Client

__all__ = ["Auth", "auth", "client_assertion", "AUTHORIZE_HOSTS"]

_LOG = logging.getLogger(__name__)

AUTHORIZE_HOSTS = {
    Environment.SANDBOX: "https://sandbox-business.revolut.com",
    Environment.PRODUCTION: "https://business.revolut.com",
}
JWT_AUDIENCE = "https://revolut.com"
DEFAULT_SKEW = 10


def client_assertion(
    *,
    client_id: str,
    signing_key: str,
    iss: str,
    token_duration: int,
    now: Optional[float] = None,
) -> str:
    """Return the signed JWT proving the caller owns the app's private key."""
    issued = int(now if now is not None else time.time())
    claims = {
        "iss": iss,
        "sub": client_id,
        "aud": JWT_AUDIENCE,
        "exp": issued + int(token_duration),
    }
    try:
        return jwt.encode(claims, signing_key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise ConfigurationError(f"Revolut signing_key is not a valid RSA private key: {exc}") from exc


def _expiry(data: Mapping[str, Any]) -> Tuple[Optional[float], int]:
    """Return ``(expires_at, skew)`` from an absolute or relative expiry."""
    try:
        if data.get("expires_at") is not None:
            return float(data["expires_at"]), DEFAULT_SKEW
        if data.get("expires_in") is not None:
            expires_in = int(data["expires_in"])
            # bounded so very short-lived tokens are not refreshed immediately
            return time.time() + expires_in, max(1, min(60, expires_in // 3))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Revolut auth expiry is not a number: {exc}") from exc
    return None, DEFAULT_SKEW


class Auth:
    """Cached access/refresh token pair with refresh-when-expired semantics."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.clear()

    def clear(self) -> None:
        self._access_token: Optional[str] = None
        self.token_type: Optional[str] = None
        self.expires_at: Optional[float] = None
        self.refresh_token: Optional[str] = None
        self._skew: int = DEFAULT_SKEW

    @staticmethod
    def _client(client: Optional["Client"]) -> "Client":
        if client is not None:
            return client
        from .client import Client

        return Client.instance()

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def authenticated(self) -> bool:
        return self._access_token is not None

    @property
    def expired(self) -> bool:
        if self._access_token is None or self.expires_at is None:
            return True
        # refresh a bit before actual expiry
        return time.time() >= self.expires_at - self._skew

    @property
    def access_token(self) -> Optional[str]:
        """Current access token, refreshed first if it has expired."""
        return self.token()

    def token(self, *, client: Optional["Client"] = None) -> Optional[str]:
        if self.expired:
            self.refresh(client=client)
        return self._access_token

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self._access_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at,
            "refresh_token": self.refresh_token,
        }

    def load(self, data: Union[str, Mapping[str, Any]]) -> "Auth":
        """Restore state from a token response or a previous :meth:`to_dict` dump."""
        if isinstance(data, (str, bytes)):
            try:
                data = json.loads(data)
            except ValueError as exc:
                raise ConfigurationError(f"Revolut auth JSON is not valid JSON: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ConfigurationError("Revolut auth JSON must be an object")

        expires_at, skew = _expiry(data)
        with self._lock:
            self._access_token = data.get("access_token")
            self.token_type = data.get("token_type", self.token_type)
            self.refresh_token = data.get("refresh_token") or self.refresh_token
            self.expires_at = expires_at
            self._skew = skew
        return self

    def load_from_env(self) -> bool:
        """Load ``REVOLUT_AUTH_JSON`` or, failing that, the configured auth file."""
        cfg = config()
        if cfg.auth_json:
            self.load(cfg.auth_json)
            _LOG.debug("loaded Revolut auth from REVOLUT_AUTH_JSON")
            return True
        if cfg.auth_file and Path(cfg.auth_file).exists():
            self.load(Path(cfg.auth_file).read_text(encoding="utf-8"))
            _LOG.debug("loaded Revolut auth from %s", cfg.auth_file)
            return True
        return False

    def _store(self, payload: Any, grant: str) -> None:
        if not isinstance(payload, Mapping) or not payload.get("access_token"):
            oauth_refresh_errors_total.labels("malformed_response").inc()
            raise AuthenticationError("Token response missing 'access_token'")
        try:
            self.load(payload)
        except ConfigurationError as exc:
            oauth_refresh_errors_total.labels("malformed_response").inc()
            raise AuthenticationError(f"Malformed token response: {exc}") from exc
        oauth_tokens_issued_total.labels(grant).inc()
        _LOG.info("Issued Revolut %s token; expires_in=%s", grant, payload.get("expires_in"))
        self._persist()

    def _persist(self) -> None:
        path = config().auth_file
        if not path:
            return
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_dict()
        data["refreshed_at"] = int(time.time())
        target.write_text(json.dumps(data, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # flows
    # ------------------------------------------------------------------

    def authorize_url(self, state: Optional[str] = None, *, client: Optional["Client"] = None) -> str:
        """URL where the business owner grants this app access."""
        c = self._client(client)
        query = {
            "client_id": c.client_id,
            "redirect_uri": c.authorize_redirect_uri,
            "response_type": "code",
        }
        if c.scope:
            query["scope"] = c.scope
        if state:
            query["state"] = state
        return f"{AUTHORIZE_HOSTS[c.environment]}/app-confirm?{urlencode(query)}"

    def exchange(self, authorization_code: str, *, client: Optional["Client"] = None) -> Dict[str, Any]:
        """Trade an authorization code for tokens and keep them."""
        response = self._client(client).get_access_token(authorization_code=authorization_code)
        with self._lock:
            self._store(response.body, "authorization_code")
            return self.to_dict()

    def refresh(
        self,
        force: bool = False,
        *,
        stale: Optional[str] = None,
        client: Optional["Client"] = None,
    ) -> Optional[str]:
        """Mint a new access token unless the current one is still valid.

        *stale* is the token the API just rejected. When another thread has
        already replaced it, that newer token is returned instead of refreshing
        again.

        Raises:
            AuthenticationError: no refresh token is held.
        """
        with self._lock:
            if not force and not self.expired:
                return self._access_token
            if stale is not None and self._access_token not in (None, stale) and not self.expired:
                return self._access_token
            if not self.refresh_token:
                oauth_refresh_errors_total.labels("no_refresh_token").inc()
                raise AuthenticationError(
                    "No Revolut refresh token available; exchange an authorization code first"
                )
            try:
                response = self._client(client).refresh_access_token(refresh_token=self.refresh_token)
            except Error as exc:
                oauth_refresh_errors_total.labels(type(exc).__name__).inc()
                _LOG.warning("Revolut token refresh failed: %s", exc)
                raise
            self._store(response.body, "refresh_token")
            return self._access_token


auth = Auth()
