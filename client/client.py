"""Main Kitchen CPQ client class.

CPQClient is the entry point for driving the quote workflow over HTTP. All
API functionality is reached through namespaced sub-client properties
(client.catalog, client.quote, ...).

Example:
    Building a quote end to end::

        from client import CPQClient

        with CPQClient(base_url="http://localhost:8000") as client:
            client.quote.new()
            client.quote.select_customer("John Smith Construction")
            client.workflow.advance()
            client.quote.create_room({"room_type": "Kitchen", "style_id": "mod_traditional_oak"})
            client.workflow.advance()
            product = client.quote.add_product('12" Base Cabinet')
            client.processing.open(product.id, "Dark Stain")
            client.processing.apply(config={"stain_color": "walnut"})
            client.workflow.advance()
            client.quote.add_fee("Delivery", "150.00")
            print(client.preview.text())
"""

from typing import Any

from client._catalog import CatalogClient
from client._http import HTTPClient
from client._preview import PreviewClient
from client._processing import ProcessingClient
from client._quote import QuoteClient
from client._workflow import WorkflowClient
from client.models import HealthResponse


class CPQClient:
    """Synchronous client for the Kitchen CPQ REST API.

    Supports the context manager protocol for automatic resource cleanup.

    Attributes:
        base_url: The base URL of the CPQ server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL of the CPQ server.
            timeout: Request timeout in seconds (default: 30.0).
            retry_enabled: Whether to automatically retry on transient
                failures (connection errors, timeouts and HTTP 502/503/504),
                with exponential backoff.
            max_retries: Maximum number of retry attempts when retry is enabled.
            transport: Custom HTTP transport (e.g., one wrapping a TestClient).
        """
        self._base_url = base_url
        self._timeout = timeout
        self._retry_enabled = retry_enabled
        self._max_retries = max_retries

        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        # Sub-clients are created on first access
        self._catalog: CatalogClient | None = None
        self._quote: QuoteClient | None = None
        self._processing: ProcessingClient | None = None
        self._workflow: WorkflowClient | None = None
        self._preview: PreviewClient | None = None

    def __enter__(self) -> "CPQClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    # Sub-client properties (lazy initialization)

    @property
    def catalog(self) -> CatalogClient:
        """Access catalog endpoints (/catalog/*): customers, styles, products, processings."""
        if self._catalog is None:
            self._catalog = CatalogClient(self._http)
        return self._catalog

    @property
    def quote(self) -> QuoteClient:
        """Access quote editing endpoints (/quote/*).

        Provides methods for:
        - Starting a quote and selecting the customer
        - Creating, selecting and removing rooms
        - Adding, re-quantifying and removing products
        - Adding and removing fees, setting notes
        - Reading the quote and its totals
        """
        if self._quote is None:
            self._quote = QuoteClient(self._http)
        return self._quote

    @property
    def processing(self) -> ProcessingClient:
        """Access the processing configuration modal (/processing/*)."""
        if self._processing is None:
            self._processing = ProcessingClient(self._http)
        return self._processing

    @property
    def workflow(self) -> WorkflowClient:
        """Access phase navigation, undo/redo and notifications (/workflow/*)."""
        if self._workflow is None:
            self._workflow = WorkflowClient(self._http)
        return self._workflow

    @property
    def preview(self) -> PreviewClient:
        if self._preview is None:
            self._preview = PreviewClient(self._http)
        return self._preview

    # Convenience methods

    def health(self) -> HealthResponse:
        """Check the server's health endpoint."""
        return HealthResponse(**self._http.get("/health"))

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def retry_enabled(self) -> bool:
        return self._retry_enabled

    @property
    def max_retries(self) -> int:
        return self._max_retries
