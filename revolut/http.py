"""HTTP plumbing shared by every Revolut API call.

* ``requests.Session`` with a urllib3 ``Retry`` adapter: transient failures
  (connect errors, 429, 5xx) on idempotent methods are retried by the library
  with exponential back-off, honouring ``Retry-After``.
* Bearer token injection on every attempt.
* 401 handling: the token is force-refreshed and the request replayed exactly
  once, for every method. Replaying POST/PATCH is safe here because a 401 means
  the API rejected the request before acting on it.
* Non-2xx answers are classified by ``requests`` and re-raised as
  :class:`revolut.errors.APIError` subclasses.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import urljoin, urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import ConnectionFailed, error_for_response
from .metrics import (
    http_latency_seconds,
    http_requests_total,
    http_unauthorized_retries_total,
)
from .version import __version__

__all__ = ["Response", "RevolutHTTP", "build_session", "RETRY_STATUSES", "IDEMPOTENT_METHODS"]

_LOG = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)
IDEMPOTENT_METHODS = frozenset(["GET", "HEAD", "OPTIONS", "PUT", "DELETE"])
USER_AGENT = f"revolut-connect-python/{__version__}"


def build_session(total: int = 3, backoff: float = 0.5) -> requests.Session:
    s = requests.Session()
    retry = Retry(
        total=total,
        read=total,
        connect=total,
        backoff_factor=backoff,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=IDEMPOTENT_METHODS,
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    s.mount("https://", HTTPAdapter(max_retries=retry))
    s.mount("http://", HTTPAdapter(max_retries=retry))
    return s


@dataclass
class Response:
    """Decoded API answer; ``raw`` keeps the underlying ``requests.Response``."""

    status: int
    headers: Mapping[str, str]
    body: Any
    request_headers: Mapping[str, str]
    raw: requests.Response

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _decode(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    # gateways sometimes answer with HTML under a JSON content type
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _endpoint_label(path: str) -> str:
    # bounded label cardinality: path only, uuid segments collapsed
    path = urlsplit(path).path
    parts = []
    for segment in path.strip("/").split("/"):
        try:
            uuid.UUID(segment)
            parts.append(":id")
        except ValueError:
            parts.append(segment)
    return "/" + "/".join(parts)


class RevolutHTTP:
    def __init__(
        self,
        base_uri: str,
        *,
        token_getter: Callable[[], str],
        refresher: Callable[..., Any],
        timeout: float = 120,
        global_headers: Optional[Mapping[str, str]] = None,
        console: Union[bool, Callable[[], bool]] = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_uri = base_uri if base_uri.endswith("/") else base_uri + "/"
        self.timeout = timeout
        self.global_headers = dict(global_headers or {})
        self.session = session or build_session()
        self._token_getter = token_getter
        self._refresher = refresher
        self._console = console

    @property
    def console(self) -> bool:
        return bool(self._console() if callable(self._console) else self._console)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_uri, path.lstrip("/"))

    # ------------------------------------------------------------------
    # core request helpers
    # ------------------------------------------------------------------

    def _headers(self, extra: Mapping[str, str], *, token: Optional[str] = None) -> Dict[str, str]:
        h = {"Accept": "application/json", "User-Agent": USER_AGENT}
        h.update(self.global_headers)
        if token is not None:
            h["Authorization"] = f"Bearer {token}"
        h.update(extra)
        return h

    def _send(self, method: str, url: str, endpoint: str, **kwargs) -> requests.Response:
        start = time.perf_counter()
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            http_requests_total.labels(method, endpoint, "error").inc()
            _LOG.warning("%s %s failed: %s", method, endpoint, exc, extra={"endpoint": endpoint})
            raise ConnectionFailed(f"{method} {url} failed: {exc}") from exc
        elapsed = time.perf_counter() - start
        http_latency_seconds.labels(method, endpoint).observe(elapsed)
        http_requests_total.labels(method, endpoint, str(resp.status_code)).inc()
        _LOG.debug(
            "%s %s -> %s (%.3fs)",
            method,
            endpoint,
            resp.status_code,
            elapsed,
            extra={"endpoint": endpoint, "status": resp.status_code},
        )
        return resp

    def _finish(self, resp: requests.Response) -> Response:
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise error_for_response(resp, console=self.console) from exc
        return Response(
            status=resp.status_code,
            headers=resp.headers,
            body=_decode(resp),
            request_headers=resp.request.headers if resp.request is not None else {},
            raw=resp,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Response:
        method = method.upper()
        url = self.url_for(path)
        endpoint = _endpoint_label(path)
        extra = dict(headers or {})
        extra.setdefault("X-Request-ID", str(uuid.uuid4()))
        kwargs: Dict[str, Any] = {"params": dict(params) if params else None}
        if data is not None:
            kwargs["json"] = data

        refreshed = False
        while True:
            token = self._token_getter()
            resp = self._send(method, url, endpoint, headers=self._headers(extra, token=token), **kwargs)
            if resp.status_code == 401 and not refreshed:
                # token likely expired or revoked; refresh and replay once
                _LOG.info(
                    "401 on %s %s; refreshing access token and retrying",
                    method,
                    endpoint,
                    extra={"endpoint": endpoint, "request_id": extra["X-Request-ID"]},
                )
                http_unauthorized_retries_total.inc()
                self._refresher(force=True, stale=token)
                refreshed = True
                continue
            return self._finish(resp)

    def request_form(self, path: str, form: Mapping[str, Any]) -> Response:
        """Unauthenticated url-encoded POST (token endpoint)."""
        url = self.url_for(path)
        headers = self._headers({"Content-Type": "application/x-www-form-urlencoded"})
        resp = self._send("POST", url, _endpoint_label(path), headers=headers, data=dict(form))
        return self._finish(resp)

    def close(self) -> None:
        self.session.close()
