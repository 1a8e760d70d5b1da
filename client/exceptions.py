"""Exceptions raised by the Kitchen CPQ client.

Server errors are mapped by status code onto the workflow error kinds the
API reports, so callers can react to a rejected rule, a command issued in
the wrong phase or a missing entity separately.

    CPQClientError
    ├── ConnectionError - server unreachable
    ├── TimeoutError - no response in time
    └── APIError - error response from the server
        ├── BadRequestError (400)
        ├── NotFoundError (404)
        ├── ConflictError (409)
        ├── ValidationError (422)
        └── ServerError (5xx)

Example:
    try:
        client.workflow.advance()
    except ValidationError as e:
        print(f"{e.rule}: {e.reason}")
"""

from typing import Any


class CPQClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(CPQClientError):
    """The CPQ server could not be reached.

    Attributes:
        url: The URL that failed to connect.
        cause: The underlying httpx error.
    """

    def __init__(self, message: str, url: str | None = None, cause: Exception | None = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (url: {self.url})" if self.url else self.message


class TimeoutError(CPQClientError):
    def __init__(self, message: str, timeout: float | None = None, url: str | None = None) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        if self.timeout is None:
            return self.message
        return f"{self.message} (timeout: {self.timeout}s)"


class APIError(CPQClientError):
    """The server answered with an error status.

    Subclasses fix the status code and error type for their category and
    lift the body fields named in `detail_fields` onto attributes.

    Attributes:
        status_code: HTTP status code.
        error_type: Error category ("conflict", "validation_error", ...), or
            the body's "error" field for uncategorized statuses.
        details: Structured body fields besides the message.
        response_body: Raw response body, for debugging.
    """

    default_status_code: int | None = None
    default_error_type: str | None = None
    detail_fields: tuple[str, ...] = ()

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code if status_code is not None else self.default_status_code
        self.error_type = self.default_error_type or error_type
        self.details = details or {}
        self.response_body = response_body
        for name in self.detail_fields:
            setattr(self, name, self.details.get(name))
        super().__init__(message)

    def __str__(self) -> str:
        prefix = f"[HTTP {self.status_code}]"
        if self.error_type:
            prefix += f" [{self.error_type}]"
        return f"{prefix} {self.message}"


class BadRequestError(APIError):
    """A value was rejected by the quote engine (HTTP 400)."""

    default_status_code = 400
    default_error_type = "bad_request"


class NotFoundError(APIError):
    """A referenced customer, room, product, processing or fee does not exist (HTTP 404)."""

    default_status_code = 404
    default_error_type = "not_found"
    detail_fields = ("entity", "entity_id")

    def __init__(
        self,
        message: str,
        entity: str | None = None,
        entity_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = dict(kwargs.pop("details", None) or {})
        if entity is not None:
            details["entity"] = entity
        if entity_id is not None:
            details["entity_id"] = entity_id
        super().__init__(message, details=details, **kwargs)


class ConflictError(APIError):
    """The command is not allowed in the current phase (HTTP 409).

    For example adding a fee before fees_config, opening the processing
    modal twice, or undoing while the print preview is shown.
    """

    default_status_code = 409
    default_error_type = "conflict"
    detail_fields = ("command", "phase")


class ValidationError(APIError):
    """Request or workflow validation failed (HTTP 422).

    Malformed request bodies and rejected workflow rules both land here;
    only the latter populate `rule` and `reason`.
    """

    default_status_code = 422
    default_error_type = "validation_error"
    detail_fields = ("rule", "reason")


class ServerError(APIError):
    """Server-side failure (HTTP 5xx); retried first for 502/503/504 when retry is on."""

    default_status_code = 500
    default_error_type = "server_error"
