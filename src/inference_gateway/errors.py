"""Exception hierarchy for Inference Gateway client errors.

Every failure surfaced by the client is one of these typed exceptions so
callers can tell transport, protocol and decode problems apart without
inspecting raw ``httpx`` or ``pydantic`` internals.
"""


class GatewayError(Exception):
    """Base exception for all Inference Gateway client errors.

    Attributes:
        message: Human-readable error description.
        original_error: The upstream exception that caused this error, if any.
    """

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
    ) -> None:
        self.message = message
        self.original_error = original_error
        super().__init__(message)


class TransportError(GatewayError):
    """Raised when the HTTP layer fails (DNS, connect, timeout, broken read).

    Never retried by the client; retry policy belongs to the caller.
    """


class HttpStatusError(GatewayError):
    """Raised for any non-2xx response from the gateway.

    Attributes:
        status: HTTP status code returned by the gateway.
        body: The upstream ``error`` message when the body is JSON, otherwise
            the raw response text.  ``None`` for an empty body.
    """

    def __init__(
        self,
        message: str,
        status: int,
        body: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error=original_error)
        self.status = status
        self.body = body


class BadRequestError(HttpStatusError):
    """Raised when the gateway rejects the request as malformed (HTTP 400)."""


class UnauthorizedError(HttpStatusError):
    """Raised when the bearer token is missing or invalid (HTTP 401)."""


class ForbiddenError(HttpStatusError):
    """Raised for HTTP 403.

    ``list_tools`` receives this when MCP is not exposed by the gateway, which
    is distinct from a generic authentication failure.
    """


class NotFoundError(HttpStatusError):
    """Raised when the requested resource does not exist (HTTP 404)."""


class InternalServerError(HttpStatusError):
    """Raised when the gateway or an upstream provider fails (HTTP 5xx)."""


class DecodeError(GatewayError):
    """Raised when a body is present but does not match the expected schema.

    Covers malformed JSON, missing fields, and unknown values for the closed
    :class:`~inference_gateway.models.MessageRole` and
    :class:`~inference_gateway.models.Provider` sets.
    """


class ConfigError(GatewayError):
    """Raised when a client configuration value is invalid."""
