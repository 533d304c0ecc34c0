"""
MCP error codes for connected-papers tools.

Tool failures are returned to the MCP client as structured payloads:
    {"ok": false, "error_code": ..., "error": ..., "error_id"?, "details"?}

Error codes follow the pattern:
- INVALID_*: Input validation errors (client-side fix needed)
- *_NOT_FOUND / *_NOT_AVAILABLE: Requested data is absent
- UPSTREAM_*: The remote API failed
- *_ERROR: Configuration or internal errors
"""

import uuid
from enum import Enum
from typing import Any

from connected_papers.apis.errors import ApiError, ApiErrorKind


class MCPErrorCode(str, Enum):
    """MCP error codes."""

    INVALID_PARAMS = "INVALID_PARAMS"
    """Input parameters are invalid or malformed."""

    PAPER_NOT_FOUND = "PAPER_NOT_FOUND"
    """The graph has no node for the requested paper."""

    GRAPH_NOT_AVAILABLE = "GRAPH_NOT_AVAILABLE"
    """The graph endpoint answered without a graph (queued, in progress, bad ID...)."""

    UPSTREAM_TRANSPORT_ERROR = "UPSTREAM_TRANSPORT_ERROR"
    """Connection to the remote API failed or timed out."""

    UPSTREAM_HTTP_ERROR = "UPSTREAM_HTTP_ERROR"
    """The remote API answered with a non-success status."""

    UPSTREAM_MALFORMED = "UPSTREAM_MALFORMED"
    """The remote API answered with an unparseable body."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Missing API key or invalid configuration."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Unexpected error; see error_id in the logs."""


_API_ERROR_CODES = {
    ApiErrorKind.TRANSPORT: MCPErrorCode.UPSTREAM_TRANSPORT_ERROR,
    ApiErrorKind.HTTP_STATUS: MCPErrorCode.UPSTREAM_HTTP_ERROR,
    ApiErrorKind.MALFORMED: MCPErrorCode.UPSTREAM_MALFORMED,
    ApiErrorKind.CONFIGURATION: MCPErrorCode.CONFIGURATION_ERROR,
    ApiErrorKind.INVALID_PARAMS: MCPErrorCode.INVALID_PARAMS,
}


class MCPError(Exception):
    """
    Base exception for MCP tool errors.

    Provides structured error responses for MCP protocol.
    """

    def __init__(
        self,
        code: MCPErrorCode,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_id: str | None = None,
    ):
        """
        Initialize MCP error.

        Args:
            code: Error code from MCPErrorCode enum.
            message: Human-readable error message.
            details: Optional additional error details.
            error_id: Optional unique error ID for log correlation.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.error_id = error_id

    def to_dict(self) -> dict[str, Any]:
        """
        Convert error to MCP response format.

        Returns:
            Dictionary suitable for MCP error response.
        """
        result: dict[str, Any] = {
            "ok": False,
            "error_code": self.code.value,
            "error": self.message,
        }

        if self.error_id:
            result["error_id"] = self.error_id

        if self.details:
            result["details"] = self.details

        return result

    @classmethod
    def from_api_error(cls, error: ApiError, *, context: str | None = None) -> "MCPError":
        """Wrap an API client error, keeping its details."""
        message = f"{context}: {error.message}" if context else error.message
        return cls(_API_ERROR_CODES[error.kind], message, details=error.details)


class InvalidParamsError(MCPError):
    """Invalid input parameters."""

    def __init__(
        self,
        message: str,
        *,
        param_name: str | None = None,
        expected: str | None = None,
        received: Any = None,
    ):
        details = {}
        if param_name:
            details["param_name"] = param_name
        if expected:
            details["expected"] = expected
        if received is not None:
            details["received"] = str(received)

        super().__init__(
            MCPErrorCode.INVALID_PARAMS,
            message,
            details=details if details else None,
        )


class GraphNotAvailableError(MCPError):
    """The graph endpoint did not return a graph."""

    def __init__(self, paper_id: str, status: str, progress: float | None = None):
        details: dict[str, Any] = {"paper_id": paper_id, "status": status}
        if progress is not None:
            details["progress"] = progress
        super().__init__(
            MCPErrorCode.GRAPH_NOT_AVAILABLE,
            f"Graph not available. Status: {status}",
            details=details,
        )


class PaperNotFoundError(MCPError):
    """The graph does not contain the requested paper."""

    def __init__(self, paper_id: str):
        super().__init__(
            MCPErrorCode.PAPER_NOT_FOUND,
            f"Paper {paper_id} not found in graph",
            details={"paper_id": paper_id},
        )


def generate_error_id() -> str:
    """
    Generate unique error ID for log correlation.

    Returns:
        Unique error ID string.
    """
    return f"err_{uuid.uuid4().hex[:12]}"
