import json
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Union

import httpx
from pydantic import ValidationError


class SpotifyError(Exception):
    """Base class for every error raised by the runtime."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class AuthorizationErrorKind(str, Enum):
    """Reasons an access token could not be produced."""

    NO_CREDENTIAL = "no_credential"
    EXPIRED = "expired"
    INSUFFICIENT_SCOPES = "insufficient_scopes"
    REAUTHORIZATION_REQUIRED = "reauthorization_required"


_AUTHORIZATION_MESSAGES = {
    AuthorizationErrorKind.NO_CREDENTIAL: "Not authorized. Request access and refresh tokens first.",
    AuthorizationErrorKind.EXPIRED: "The access token is expired and could not be refreshed right now.",
    AuthorizationErrorKind.INSUFFICIENT_SCOPES: "The access token was not granted the required scopes.",
    AuthorizationErrorKind.REAUTHORIZATION_REQUIRED: "The refresh token is missing or was rejected. Authorize again.",
}


class AuthorizationError(SpotifyError):
    """Raised when a usable access token cannot be obtained.

    ``kind`` tells the caller what to do next: ``EXPIRED`` may be retried,
    ``INSUFFICIENT_SCOPES`` and ``REAUTHORIZATION_REQUIRED`` need the user to
    go through the authorization flow again.
    """

    def __init__(
        self,
        kind: AuthorizationErrorKind,
        message: Optional[str] = None,
        *,
        required_scopes: Iterable[str] = (),
        granted_scopes: Iterable[str] = (),
    ) -> None:
        self.kind = kind
        self.required_scopes = frozenset(required_scopes)
        self.granted_scopes = frozenset(granted_scopes)
        super().__init__(message or _AUTHORIZATION_MESSAGES[kind])

    @property
    def missing_scopes(self) -> frozenset:
        return self.required_scopes - self.granted_scopes

    def __repr__(self) -> str:
        return f"AuthorizationError(kind={self.kind.value!r}, message={self.message!r})"


class NetworkError(SpotifyError):
    """Transport level failure: connection problems or a timed out attempt."""

    def __init__(self, message: str, *, is_timeout: bool = False) -> None:
        self.is_timeout = is_timeout
        super().__init__(message)

    @classmethod
    def from_transport_error(cls, error: httpx.TransportError) -> "NetworkError":
        is_timeout = isinstance(error, httpx.TimeoutException)
        try:
            target = f" ({error.request.method} {error.request.url})"
        except RuntimeError:
            # request is only attached once the exception reached the client
            target = ""
        kind = "timed out" if is_timeout else "failed"
        return cls(f"Request {kind}{target}: {error!r}", is_timeout=is_timeout)


class APIError(SpotifyError):
    """A non-2xx response from the Web API or the accounts service."""

    def __init__(
        self,
        message: str,
        status_code: int,
        *,
        reason: Optional[str] = None,
        retry_after: Optional[float] = None,
        body: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.retry_after = retry_after
        self.body = body
        super().__init__(message)

    @classmethod
    def from_response(
        cls, response: httpx.Response, *, retry_after: Optional[float] = None
    ) -> "APIError":
        """Decode the error object of a failed response.

        The Web API wraps errors as ``{"error": {"status": 404, "message": "..."}}``
        while the accounts service answers ``{"error": "invalid_grant",
        "error_description": "..."}``. Both shapes are handled; anything else
        falls back to the reason phrase.
        """
        try:
            payload: Any = response.json()
        except ValueError:
            payload = None

        message: Optional[str] = None
        reason: Optional[str] = None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                reason = error.get("reason")
            elif isinstance(error, str):
                reason = error
                message = payload.get("error_description") or error
            body = json.dumps(payload)
        else:
            body = response.text or None

        return cls(
            message or response.reason_phrase or f"HTTP {response.status_code}",
            response.status_code,
            reason=reason,
            retry_after=retry_after,
            body=body,
        )

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"


class DecodingError(SpotifyError):
    """The response body could not be decoded into the expected type."""

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        response_type: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        self.path = path
        self.response_type = response_type
        self.body = body
        super().__init__(message)

    @classmethod
    def from_validation_error(
        cls,
        error: ValidationError,
        *,
        response_type: Optional[str] = None,
        body: Optional[str] = None,
    ) -> "DecodingError":
        first = error.errors(include_url=False)[0]
        path = format_location(first["loc"])
        target = response_type or error.title
        message = f"Could not decode {target} at '{path or '<root>'}': {first['msg']}"
        return cls(message, path=path, response_type=response_type, body=body)


def format_location(location: Sequence[Union[str, int]]) -> str:
    """Render a pydantic error location as ``items[27].track.album``."""
    formatted = ""
    for key in location:
        if isinstance(key, int):
            formatted += f"[{key}]"
        else:
            if formatted:
                formatted += "."
            formatted += str(key)
    return formatted
