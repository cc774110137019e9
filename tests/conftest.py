import json
from http.client import responses as _REASONS
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

import revolut
from revolut.http import build_session
from revolut.secrets import secrets as secrets_file

SANDBOX_BASE = "https://sandbox-b2b.revolut.com/api/1.0/"
PRODUCTION_BASE = "https://b2b.revolut.com/api/1.0/"

_REVOLUT_ENV = (
    "REVOLUT_CLIENT_ID",
    "REVOLUT_SIGNING_KEY",
    "REVOLUT_ISS",
    "REVOLUT_AUTHORIZE_REDIRECT_URI",
    "REVOLUT_TOKEN_DURATION",
    "REVOLUT_REQUEST_TIMEOUT",
    "REVOLUT_AUTH_JSON",
    "REVOLUT_AUTH_FILE",
    "REVOLUT_SCOPE",
    "REVOLUT_API_VERSION",
    "REVOLUT_ENVIRONMENT",
    "CONSOLE",
    "SECRETS_PATH",
)


def pytest_configure(config):
    """If pytest-socket is installed, make sure nothing reaches the network."""
    try:
        import pytest_socket

        pytest_socket.disable_socket()
    except ImportError:
        pass


# ---------------------------------------------------------------------------
# Signing key + isolated configuration
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_keys():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return SimpleNamespace(private=private_pem, public=public_pem)


@pytest.fixture(autouse=True)
def _revolut_env(monkeypatch, rsa_keys):
    """Fresh configuration, tokens and default client for every test."""
    for key in _REVOLUT_ENV:
        # set-then-delete so teardown also removes values written by dotenv
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setenv("REVOLUT_CLIENT_ID", "fake_client_id")
    monkeypatch.setenv("REVOLUT_SIGNING_KEY", rsa_keys.private)
    monkeypatch.setenv("REVOLUT_AUTHORIZE_REDIRECT_URI", "https://example.com")
    secrets_file.set_override({})
    revolut.reset()
    yield
    revolut.reset()
    secrets_file.reload()


# ---------------------------------------------------------------------------
# HTTP stubbing at the requests adapter level
# ---------------------------------------------------------------------------


class StubAdapter(BaseAdapter):
    """Adapter returning canned responses and recording every request.

    Responses registered for one route are served in order; the last one is
    repeated once the queue is drained.
    """

    def __init__(self) -> None:
        super().__init__()
        self.requests: List[requests.PreparedRequest] = []
        self._routes: Dict[tuple, List[Dict[str, Any]]] = {}

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        text: Optional[str] = None,
        base: str = SANDBOX_BASE,
    ) -> None:
        url = path if path.startswith("http") else base + path
        self._routes.setdefault((method.upper(), url), []).append(
            {"status": status, "json_body": json_body, "headers": headers or {}, "text": text}
        )

    def send(self, request, **kwargs):  # type: ignore[override]
        self.requests.append(request)
        parts = urlsplit(request.url)
        url = f"{parts.scheme}://{parts.netloc}{parts.path}"
        queue = self._routes.get((request.method, url))
        if not queue:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        return _build_response(request, **canned)

    def close(self) -> None:
        pass

    # helpers for assertions
    @property
    def last(self) -> requests.PreparedRequest:
        return self.requests[-1]

    def query(self, index: int = -1) -> Dict[str, str]:
        return dict(parse_qsl(urlsplit(self.requests[index].url).query))

    def json(self, index: int = -1) -> Any:
        body = self.requests[index].body
        return json.loads(body) if body else None

    def form(self, index: int = -1) -> Dict[str, str]:
        return dict(parse_qsl(self.requests[index].body))


def _build_response(
    request, *, status: int, json_body: Any, headers: Dict[str, str], text: Optional[str]
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = _REASONS.get(status, "")
    resp.request = request
    resp.url = request.url
    resp.encoding = "utf-8"
    resp.headers = CaseInsensitiveDict({"Content-Type": "application/json", **headers})
    if text is not None:
        resp._content = text.encode()
    else:
        resp._content = b"" if json_body is None else json.dumps(json_body).encode()
    return resp


@pytest.fixture
def stub():
    return StubAdapter()


@pytest.fixture
def session(stub):
    """Real client session (retry adapter config intact) with the stub mounted."""
    s = build_session()
    s.mount("https://", stub)
    return s


@pytest.fixture
def client(session):
    return revolut.Client(session=session)


@pytest.fixture
def authenticated():
    """Valid cached tokens, as if loaded from REVOLUT_AUTH_JSON."""
    return revolut.auth.load(
        {
            "access_token": "fake_access_token",
            "token_type": "bearer",
            "expires_in": 2399,
            "refresh_token": "fake_refresh_token",
        }
    )


def token_response(access_token: str = "new_access_token", **extra: Any) -> Dict[str, Any]:
    body = {"access_token": access_token, "token_type": "bearer", "expires_in": 2399}
    body.update(extra)
    return body
