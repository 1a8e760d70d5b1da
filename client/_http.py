"""HTTP layer shared by all sub-clients.

Sends requests through httpx, turns error responses into the exceptions of
client.exceptions and optionally retries transient failures with
exponential backoff.

This is an internal module. Import from `client` instead.
"""

import logging
import time
from typing import Any, Literal

import httpx

from client.exceptions import (
    APIError,
    BadRequestError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

# Retried only when retry is enabled
RETRYABLE_STATUS_CODES = {502, 503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds

_STATUS_ERRORS: dict[int, type[APIError]] = {
    400: BadRequestError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _parse_error_response(response: httpx.Response) -> tuple[str, str | None, dict | None]:
    """Extract (message, error_type, details) from an error response.

    The API's exception handlers answer with {"error": ..., "detail": ...}
    plus structured keys (rule, entity, phase...), which become the details.
    FastAPI's request validation answers with a list under "detail".
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or f"HTTP {response.status_code} error", None, None

    if not isinstance(body, dict):
        return str(body), None, None

    detail = body.get("detail")
    if isinstance(detail, list):
        fields = [f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}" for err in detail]
        return "; ".join(fields), "validation_error", {"errors": detail}

    extra = {k: v for k, v in body.items() if k not in ("error", "detail")}
    if isinstance(detail, str):
        return detail, body.get("error"), extra
    if "error" in body:
        return str(body["error"]), None, extra
    return str(body), None, None


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the client exception matching an error response.

    Raises:
        BadRequestError, NotFoundError, ConflictError, ValidationError: For
            400, 404, 409 and 422.
        ServerError: For any 5xx.
        APIError: For every other error status.
    """
    if response.is_success:
        return

    message, error_type, details = _parse_error_response(response)
    status_code = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = response.text

    error_class = _STATUS_ERRORS.get(status_code)
    if error_class is None:
        error_class = ServerError if status_code >= 500 else APIError
    raise error_class(
        message,
        status_code=status_code,
        error_type=error_type,
        details=details,
        response_body=body,
    )


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Delay before retry number attempt (0-indexed): base * 2^attempt, capped."""
    return min(base * (2 ** attempt), DEFAULT_RETRY_BACKOFF_MAX)


class HTTPClient:
    """Synchronous JSON client for the CPQ API, built on httpx.Client.

    Attributes:
        base_url: Server URL without trailing slash.
        timeout: Request timeout in seconds.
        retry_enabled: Retry connection errors, timeouts and 502/503/504.
        max_retries: Retries after the first attempt when retry is enabled.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _send(self, method: HttpMethod, path: str, params: dict[str, Any] | None, json: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return self._client.request(method=method, url=path, params=params, json=json)
        except httpx.ConnectError as e:
            raise ConnectionError(f"Failed to connect to {url}", url=url, cause=e) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Request to {url} timed out", timeout=self.timeout, url=url) from e

    def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        raw: bool = False,
    ) -> Any:
        """Send a request and decode the response.

        Args:
            method: HTTP method.
            path: Path below base_url (e.g., "/quote/rooms").
            params: Query parameters; None values are left out.
            json: JSON body.
            raw: Return the response text instead of decoded JSON.

        Returns:
            Decoded JSON, the text when raw, or None for an empty body.

        Raises:
            ConnectionError: If the server can't be reached.
            TimeoutError: If the request times out.
            APIError: If the server answers with an error status.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        attempts = self.max_retries + 1 if self.retry_enabled else 1
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = self._send(method, path, params, json)
            except (ConnectionError, TimeoutError) as e:
                if last_attempt:
                    raise
                delay = _calculate_backoff(attempt)
                logger.warning(f"{method} {path} failed ({e.message}), retrying in {delay}s")
                time.sleep(delay)
                continue

            if response.status_code in RETRYABLE_STATUS_CODES and not last_attempt:
                delay = _calculate_backoff(attempt)
                logger.warning(f"{method} {path} returned {response.status_code}, retrying in {delay}s")
                time.sleep(delay)
                continue

            _raise_for_status(response)
            if raw:
                return response.text
            return response.json() if response.content else None

        raise RuntimeError("request retry loop exited without a response")

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, params: dict[str, Any] | None = None, raw: bool = False) -> Any:
        return self.request("POST", path, params=params, json=json, raw=raw)

    def put(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", path, params=params, json=json)

    def patch(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("PATCH", path, params=params, json=json)

    def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("DELETE", path, params=params)
