"""Exception hierarchy for the Revolut client.

HTTP status classification is left to ``requests`` (``raise_for_status``);
:func:`error_for_response` only maps the resulting status code onto one of the
classes below so callers can catch e.g. :class:`ResourceNotFound` directly.
"""
from __future__ import annotations

from typing import Any, Optional

import requests

__all__ = [
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
    "error_for_response",
]


class Error(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(Error):
    pass


class UnsupportedOperationError(Error, NotImplementedError):
    """The resource does not expose the requested operation."""


class SignatureVerificationError(Error):
    pass


class AuthenticationError(Error):
    """No usable token, or the token endpoint answered with garbage."""


class ConnectionFailed(Error):
    pass


class APIError(Error):
    """Non-2xx answer from the API."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        body: Any = None,
        response: Optional[requests.Response] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.response = response


class ClientError(APIError):
    pass


class BadRequestError(ClientError):
    pass


class UnauthorizedError(ClientError):
    pass


class ForbiddenError(ClientError):
    pass


class ResourceNotFound(ClientError):
    pass


class ConflictError(ClientError):
    pass


class UnprocessableEntityError(ClientError):
    pass


class TooManyRequestsError(ClientError):
    pass


class ServerError(APIError):
    pass


_BY_STATUS = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: ResourceNotFound,
    409: ConflictError,
    422: UnprocessableEntityError,
    429: TooManyRequestsError,
}


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def error_for_response(response: requests.Response, *, console: bool = False) -> APIError:
    """Return (not raise) the :class:`APIError` matching *response*.

    With *console* set the message is taken from the body's ``message`` field
    when there is one, which is far more useful in an interactive session.
    """
    status = response.status_code
    body = _decode_body(response)
    if status in _BY_STATUS:
        cls = _BY_STATUS[status]
    elif status >= 500:
        cls = ServerError
    elif status >= 400:
        cls = ClientError
    else:
        cls = APIError

    message = f"the server responded with status {status}"
    if console and isinstance(body, dict) and body.get("message"):
        message = str(body["message"])
    return cls(message, status=status, body=body, response=response)
