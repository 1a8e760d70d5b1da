"""Kitchen CPQ API Client Library.

A type-safe Python client for the Kitchen CPQ REST API.

Example:
    from client import CPQClient

    with CPQClient(base_url="http://localhost:8000") as client:
        client.quote.new()
        client.quote.select_customer("cust_01")
        client.workflow.advance()

Exports:
    CPQClient: Synchronous client for the Kitchen CPQ REST API.

    Exceptions:
        CPQClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the server.
        TimeoutError: Request timed out.
        APIError: Server returned an error response.
        BadRequestError: Invalid value (HTTP 400).
        NotFoundError: Entity not found (HTTP 404).
        ConflictError: Command not allowed in the current phase (HTTP 409).
        ValidationError: Validation failed (HTTP 422).
        ServerError: Server-side error (HTTP 5xx).
"""

from client._catalog import CatalogClient
from client._preview import PreviewClient
from client._processing import ProcessingClient
from client._quote import QuoteClient
from client._workflow import WorkflowClient
from client.client import CPQClient
from client.exceptions import (
    APIError,
    BadRequestError,
    ConflictError,
    ConnectionError,
    CPQClientError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)
from client.models import (
    HealthResponse,
    HistoryResponse,
    ListResponse,
    NotificationsPage,
    PhaseChange,
    QuoteSummary,
    WorkflowStatus,
)

__all__ = [
    # Main client
    "CPQClient",
    # Sub-clients
    "CatalogClient",
    "PreviewClient",
    "ProcessingClient",
    "QuoteClient",
    "WorkflowClient",
    # Models
    "HealthResponse",
    "HistoryResponse",
    "ListResponse",
    "NotificationsPage",
    "PhaseChange",
    "QuoteSummary",
    "WorkflowStatus",
    # Exceptions
    "APIError",
    "BadRequestError",
    "ConflictError",
    "ConnectionError",
    "CPQClientError",
    "NotFoundError",
    "ServerError",
    "TimeoutError",
    "ValidationError",
]
