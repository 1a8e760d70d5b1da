"""Quote editing sub-client for the Kitchen CPQ API.

This module provides QuoteClient for the quote endpoints (/quote/*).

This is an internal module. Import from `client` instead.
"""

from decimal import Decimal
from typing import Any

from client._base import BaseClient
from client.models import QuoteSummary
from models.catalog import Customer
from models.pricing import QuoteTotals
from models.quote import Fee, Processing, Product, Quote, Room, RoomSpec


class QuoteClient(BaseClient):
    """Client for quote editing endpoints (/quote/*).

    Commands are only accepted in the workflow phase that owns them; a
    command sent in the wrong phase raises ConflictError.

    Example:
        with CPQClient() as client:
            client.quote.new()
            client.quote.select_customer("John Smith Construction")
            client.workflow.advance()
            room = client.quote.create_room({"room_type": "Kitchen", "style_id": "mod_traditional_oak"})
    """

    _BASE_PATH = "/quote"

    def new(self) -> QuoteSummary:
        """Start a new quote, discarding any quote in progress."""
        return QuoteSummary(**self._post(f"{self._BASE_PATH}/new"))

    def get(self) -> Quote:
        return Quote(**self._get(self._BASE_PATH))

    def summary(self) -> QuoteSummary:
        return QuoteSummary(**self._get(f"{self._BASE_PATH}/summary"))

    def totals(self) -> QuoteTotals:
        """Get the current totals, including the approval flag.

        Raises:
            ConflictError: If no quote is in progress.
        """
        return QuoteTotals(**self._get(f"{self._BASE_PATH}/totals"))

    def select_customer(self, customer: str) -> Customer:
        """Select the quote's customer by id or exact name.

        Args:
            customer: Customer id or display name.

        Returns:
            The selected customer.

        Raises:
            NotFoundError: If no customer matches.
            ConflictError: If a customer is already selected or the
                workflow is past customer_select.
        """
        data = self._post(f"{self._BASE_PATH}/customer", json={"customer": customer})
        return Customer(**data)

    def create_room(self, spec: RoomSpec | dict[str, Any]) -> Room:
        """Create a room and make it the active room.

        Args:
            spec: Room type, style id, optional description, dimensions and
                processings activated for every product of the room.

        Returns:
            The created room.

        Raises:
            ValidationError: If the room type or style is missing.
            NotFoundError: If the style or an activated processing is unknown.
        """
        if isinstance(spec, RoomSpec):
            spec = spec.model_dump(mode="json")
        return Room(**self._post(f"{self._BASE_PATH}/rooms", json=spec))

    def select_room(self, room_id: str) -> Room:
        return Room(**self._post(f"{self._BASE_PATH}/rooms/{room_id}/select"))

    def remove_room(self, room_id: str) -> Room:
        """Remove a room together with its products and their processings."""
        return Room(**self._delete(f"{self._BASE_PATH}/rooms/{room_id}"))

    def add_product(self, product: str, quantity: int = 1, room_id: str | None = None) -> Product:
        """Add a catalog product to a room.

        Args:
            product: Catalog product id or display name.
            quantity: Number of units (at least 1).
            room_id: Target room; the active room when omitted.

        Returns:
            The product as stored, with processings inherited from the room.
        """
        data = self._post(
            f"{self._BASE_PATH}/products",
            json={"room_id": room_id, "product": product, "quantity": quantity},
        )
        return Product(**data)

    def update_quantity(self, product_id: str, quantity: int) -> Product:
        data = self._patch(f"{self._BASE_PATH}/products/{product_id}", json={"quantity": quantity})
        return Product(**data)

    def remove_product(self, product_id: str) -> Product:
        return Product(**self._delete(f"{self._BASE_PATH}/products/{product_id}"))

    def remove_processing(self, product_id: str, processing_id: str) -> Processing:
        data = self._delete(f"{self._BASE_PATH}/products/{product_id}/processings/{processing_id}")
        return Processing(**data)

    def add_fee(self, label: str, amount: Decimal | int | float | str) -> Fee:
        """Add a fee to the quote.

        Args:
            label: Fee label (non-blank).
            amount: Non-negative amount; sent as a string to keep cents exact.

        Returns:
            The stored fee.
        """
        data = self._post(f"{self._BASE_PATH}/fees", json={"label": label, "amount": str(amount)})
        return Fee(**data)

    def remove_fee(self, fee_id: str) -> Fee:
        return Fee(**self._delete(f"{self._BASE_PATH}/fees/{fee_id}"))

    def set_notes(self, notes: str) -> str:
        data = self._put(f"{self._BASE_PATH}/notes", json={"notes": notes})
        return data["notes"]
