"""
Error types for the Connected Papers and Semantic Scholar clients.

Every failure leaves the public API as an ApiError subclass:
- TransportError: the request never produced a response (connection, timeout)
- HttpStatusError: the server answered with a non-success status
- MalformedPayloadError: the body did not parse into the expected shape
- MissingApiKeyError / InvalidParameterError: client-side problems

httpx exceptions are wrapped, never re-raised as-is.
"""

from enum import Enum
from typing import Any

_PAYLOAD_EXCERPT_CHARS = 200


class ApiErrorKind(str, Enum):
    """Failure category of an ApiError."""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    MALFORMED = "malformed"
    CONFIGURATION = "configuration"
    INVALID_PARAMS = "invalid_params"


class ApiError(Exception):
    """
    Base exception for API client errors.

    Carries a kind and optional details so the failure can be surfaced
    verbatim to callers (CLI, MCP tools).
    """

    kind: ApiErrorKind = ApiErrorKind.TRANSPORT

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "ok": False,
            "error_code": self.kind.value,
            "error": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class TransportError(ApiError):
    """Raised when the network exchange fails (connection drop, timeout, TLS)."""

    kind = ApiErrorKind.TRANSPORT

    def __init__(self, message: str, *, url: str | None = None):
        super().__init__(message, details={"url": url} if url else None)
        self.url = url


class HttpStatusError(ApiError):
    """Raised when the server responds with a non-success status code.

    Attributes:
        status: HTTP status code, as received
        body: Response body text (may be empty)
    """

    kind = ApiErrorKind.HTTP_STATUS

    def __init__(self, status: int, body: str = "", *, url: str | None = None):
        details: dict[str, Any] = {"status": status}
        if body:
            details["body"] = body[:_PAYLOAD_EXCERPT_CHARS]
        if url:
            details["url"] = url
        super().__init__(f"HTTP {status}", details=details)
        self.status = status
        self.body = body
        self.url = url


class MalformedPayloadError(ApiError):
    """Raised when a response body does not parse into the expected shape.

    Attributes:
        detail: Parser or validation message
        payload: Excerpt of the offending payload
    """

    kind = ApiErrorKind.MALFORMED

    def __init__(self, detail: str, *, payload: bytes | str | None = None):
        excerpt: str | None = None
        if payload is not None:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8", errors="replace")
            excerpt = payload[:_PAYLOAD_EXCERPT_CHARS]
        super().__init__(
            f"Malformed payload: {detail}",
            details={"payload": excerpt} if excerpt else None,
        )
        self.detail = detail
        self.payload = excerpt


class MissingApiKeyError(ApiError):
    """Raised when an API key is required but not configured."""

    kind = ApiErrorKind.CONFIGURATION

    def __init__(self, env_var: str):
        super().__init__(
            f"API key not found: set {env_var}",
            details={"env_var": env_var},
        )
        self.env_var = env_var


class InvalidParameterError(ApiError, ValueError):
    """Raised when request parameters fail client-side validation."""

    kind = ApiErrorKind.INVALID_PARAMS

    def __init__(self, message: str, *, param_name: str | None = None, received: Any = None):
        details: dict[str, Any] = {}
        if param_name:
            details["param_name"] = param_name
        if received is not None:
            details["received"] = str(received)
        super().__init__(message, details=details if details else None)
        self.param_name = param_name
