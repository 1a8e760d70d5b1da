"""Processing configuration sub-client for the Kitchen CPQ API.

This module provides ProcessingClient for the processing modal endpoints
(/processing/*).

This is an internal module. Import from `client` instead.
"""

from typing import Any

from client._base import BaseClient
from models.phases import ProcessingDraft
from models.quote import Processing


class ProcessingClient(BaseClient):
    """Client for the processing configuration modal (/processing/*).

    Example:
        with CPQClient() as client:
            client.processing.open(product.id, "Dark Stain")
            client.processing.set_option("stain_color", "walnut")
            applied = client.processing.apply()
            print(applied.surcharge)
    """

    _BASE_PATH = "/processing"

    def open(self, product_id: str, processing: str) -> ProcessingDraft:
        """Open the configuration modal for a product.

        Args:
            product_id: Product to configure.
            processing: Processing definition id or display name.

        Returns:
            The draft, pre-filled with option defaults.

        Raises:
            ConflictError: If the workflow is not in product_config or a
                modal is already open.
            NotFoundError: If the product or processing is unknown.
        """
        data = self._post(
            f"{self._BASE_PATH}/open",
            json={"product_id": product_id, "processing": processing},
        )
        return ProcessingDraft(**data)

    def get_draft(self) -> ProcessingDraft:
        return ProcessingDraft(**self._get(f"{self._BASE_PATH}/draft"))

    def set_option(self, option_id: str, value: Any) -> ProcessingDraft:
        """Set one option on the open draft; None clears it."""
        data = self._put(f"{self._BASE_PATH}/options/{option_id}", json={"value": value})
        return ProcessingDraft(**data)

    def apply(
        self,
        product_id: str | None = None,
        processing: str | None = None,
        config: dict[str, Any] | None = None,
    ) -> Processing:
        """Apply the open draft, or a processing given directly.

        With the modal open, `config` is merged into the draft before
        validation. A rejected draft keeps the modal open so it can be fixed.

        Args:
            product_id: Product to apply to (required without a modal).
            processing: Processing id or name (required without a modal).
            config: Option values.

        Returns:
            The processing as stored on the product, with its surcharge.

        Raises:
            ValidationError: If the configuration fails validation.
        """
        data = self._post(
            f"{self._BASE_PATH}/apply",
            json={"product_id": product_id, "processing": processing, "config": config or {}},
        )
        return Processing(**data)

    def cancel(self) -> ProcessingDraft:
        """Close the modal, discarding the draft."""
        return ProcessingDraft(**self._post(f"{self._BASE_PATH}/cancel"))
