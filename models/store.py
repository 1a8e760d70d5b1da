"""Entity store holding the in-progress quote.

The store performs pure data mutations with reference checks. Every check runs
before any mutation, so a rejected call leaves the quote untouched. Each
successful mutation bumps the revision counter and notifies listeners with a
StoreChange describing what happened.

Phase gating is not enforced here; that is the QuoteSession's job. The store
only rejects structural order violations such as adding a room before a
customer has been selected.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from pydantic import BaseModel

from models.catalog import CatalogProduct, Customer
from models.errors import InvalidReferenceError, InvalidStateError
from models.phases import Phase
from models.quote import (
    Fee,
    Processing,
    Product,
    Quote,
    QuoteStatus,
    Room,
    RoomSpec,
)

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Generate a short unique entity id such as 'room_3f9a1c2b4d5e'."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class StoreChange(BaseModel):
    """Describes one successful store mutation.

    Args:
        action: What happened (e.g., "created", "removed", "updated", "restored").
        entity: Kind of entity affected (e.g., "room", "product", "quote").
        entity_id: Id of the affected entity.
        revision: Store revision after the mutation.
    """

    action: str
    entity: str
    entity_id: str
    revision: int


StoreListener = Callable[[StoreChange], None]


class QuoteStore:
    """Owner of the single in-progress Quote.

    Read accessors return deep copies, so callers can never mutate the stored
    quote except through the methods below.
    """

    def __init__(self):
        self._quote: Optional[Quote] = None
        self._revision = 0
        self._listeners: list[StoreListener] = []

    # ===== Listeners and state =====

    @property
    def revision(self) -> int:
        """Counter incremented by every successful mutation."""
        return self._revision

    @property
    def has_quote(self) -> bool:
        return self._quote is not None

    def subscribe(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _commit(self, action: str, entity: str, entity_id: str) -> None:
        self._revision += 1
        change = StoreChange(
            action=action, entity=entity, entity_id=entity_id, revision=self._revision
        )
        logger.debug(f"Store {action} {entity} {entity_id} (revision {self._revision})")
        for listener in list(self._listeners):
            listener(change)

    def _require_quote(self, command: str) -> Quote:
        if self._quote is None:
            raise InvalidStateError(command, "no quote in progress; start a new quote first")
        return self._quote

    def _require_customer(self, command: str) -> Quote:
        quote = self._require_quote(command)
        if quote.customer is None:
            raise InvalidStateError(command, "a customer must be selected first")
        return quote

    def _locate_room(self, quote: Quote, room_id: str) -> Room:
        room = quote.find_room(room_id)
        if room is None:
            raise InvalidReferenceError("room", room_id)
        return room

    def _locate_product(self, quote: Quote, product_id: str) -> tuple[Room, Product]:
        for room in quote.rooms:
            product = room.find_product(product_id)
            if product is not None:
                return room, product
        raise InvalidReferenceError("product", product_id)

    # ===== Read accessors =====

    def snapshot(self) -> Quote:
        """Return a deep copy of the current quote.

        Raises:
            InvalidStateError: If no quote has been started.
        """
        return self._require_quote("read quote").model_copy(deep=True)

    def get_room(self, room_id: str) -> Room:
        quote = self._require_quote("read room")
        return self._locate_room(quote, room_id).model_copy(deep=True)

    def get_product(self, product_id: str) -> Product:
        quote = self._require_quote("read product")
        _, product = self._locate_product(quote, product_id)
        return product.model_copy(deep=True)

    def get_fee(self, fee_id: str) -> Fee:
        quote = self._require_quote("read fee")
        fee = quote.find_fee(fee_id)
        if fee is None:
            raise InvalidReferenceError("fee", fee_id)
        return fee.model_copy(deep=True)

    # ===== Quote lifecycle =====

    def create_quote(
        self, quote_id: str, quote_number: str, created_at: datetime, expires_at: datetime
    ) -> Quote:
        """Replace any existing quote with a fresh draft in customer_select."""
        self._quote = Quote(
            id=quote_id,
            quote_number=quote_number,
            created_at=created_at,
            expires_at=expires_at,
        )
        self._commit("created", "quote", quote_id)
        return self.snapshot()

    def select_customer(self, customer: Customer) -> None:
        """Attach the customer. A quote's customer can be set only once.

        Raises:
            InvalidStateError: If no quote exists or a customer is already selected.
        """
        quote = self._require_quote("select_customer")
        if quote.customer is not None:
            raise InvalidStateError(
                "select_customer",
                f"customer '{quote.customer.name}' is already selected and cannot be changed",
            )
        quote.customer = customer
        self._commit("selected", "customer", customer.id)

    def set_phase(self, phase: Phase, status: QuoteStatus) -> None:
        quote = self._require_quote("change phase")
        quote.phase = phase
        quote.status = status
        self._commit("updated", "phase", quote.id)

    def set_notes(self, notes: str) -> str:
        """Replace the quote notes and return the previous text."""
        quote = self._require_quote("set_notes")
        previous = quote.notes
        quote.notes = notes
        self._commit("updated", "notes", quote.id)
        return previous

    # ===== Rooms =====

    def create_room(self, spec: RoomSpec, room_id: Optional[str] = None) -> Room:
        """Create a room from a spec.

        Args:
            spec: Room fields; must already satisfy the Create Room rule.
            room_id: Id to use instead of a generated one (used by redo).

        Returns:
            A copy of the created room.

        Raises:
            InvalidStateError: If no customer has been selected.
        """
        quote = self._require_customer("create_room")
        room = Room(
            id=room_id or new_id("room"),
            room_type=spec.room_type.strip(),
            style_id=spec.style_id.strip(),
            description=spec.description,
            dimensions=spec.dimensions,
            activated_processings=list(spec.activated_processings),
        )
        quote.rooms.append(room)
        self._commit("created", "room", room.id)
        return room.model_copy(deep=True)

    def remove_room(self, room_id: str) -> tuple[Room, int]:
        """Remove a room together with its products and their processings.

        Returns:
            The removed room and its former position.
        """
        quote = self._require_quote("remove_room")
        room = self._locate_room(quote, room_id)
        index = quote.rooms.index(room)
        quote.rooms.pop(index)
        self._commit("removed", "room", room_id)
        return room, index

    def restore_room(self, room: Room, index: int) -> None:
        quote = self._require_customer("restore room")
        if quote.find_room(room.id) is not None:
            raise InvalidStateError("restore room", f"room '{room.id}' already exists")
        quote.rooms.insert(min(index, len(quote.rooms)), room.model_copy(deep=True))
        self._commit("restored", "room", room.id)

    # ===== Products =====

    def add_product(
        self,
        room_id: str,
        catalog_product: CatalogProduct,
        quantity: int = 1,
        product_id: Optional[str] = None,
    ) -> Product:
        """Add a catalog product to a room.

        Raises:
            InvalidStateError: If no customer has been selected.
            InvalidReferenceError: If the room does not exist.
        """
        quote = self._require_customer("add_product")
        room = self._locate_room(quote, room_id)
        product = Product(
            id=product_id or new_id("prod"),
            room_id=room.id,
            catalog_ref=catalog_product.id,
            name=catalog_product.name,
            category=catalog_product.category,
            quantity=quantity,
            base_price=catalog_product.base_price,
            dimensions=catalog_product.dimensions,
        )
        room.products.append(product)
        self._commit("created", "product", product.id)
        return product.model_copy(deep=True)

    def remove_product(self, product_id: str) -> tuple[Product, int]:
        """Remove a product and, with it, every processing attached to it."""
        quote = self._require_quote("remove_product")
        room, product = self._locate_product(quote, product_id)
        index = room.products.index(product)
        room.products.pop(index)
        self._commit("removed", "product", product_id)
        return product, index

    def restore_product(self, product: Product, index: int) -> None:
        quote = self._require_customer("restore product")
        room = self._locate_room(quote, product.room_id)
        if room.find_product(product.id) is not None:
            raise InvalidStateError("restore product", f"product '{product.id}' already exists")
        room.products.insert(min(index, len(room.products)), product.model_copy(deep=True))
        self._commit("restored", "product", product.id)

    def set_quantity(
        self,
        product_id: str,
        quantity: int,
        surcharges: Optional[dict[str, Decimal]] = None,
    ) -> int:
        """Change a product's quantity and re-price its processings.

        Args:
            product_id: Product to update.
            quantity: New quantity (>= 1).
            surcharges: New surcharge per processing instance id.

        Returns:
            The previous quantity.

        Raises:
            ValueError: If quantity is below 1 or a surcharge targets an unknown processing.
        """
        quote = self._require_quote("update_product_quantity")
        _, product = self._locate_product(quote, product_id)
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        surcharges = surcharges or {}
        known = {processing.id for processing in product.processings}
        unknown = set(surcharges) - known
        if unknown:
            raise ValueError(f"Unknown processings for product {product_id}: {sorted(unknown)}")

        previous = product.quantity
        product.quantity = quantity
        for processing in product.processings:
            if processing.id in surcharges:
                processing.surcharge = surcharges[processing.id]
        self._commit("updated", "product", product_id)
        return previous

    # ===== Processings =====

    def add_processing(self, product_id: str, processing: Processing) -> Processing:
        """Attach a processing to a product.

        Raises:
            InvalidReferenceError: If the product does not exist.
            InvalidStateError: If the processing belongs to another product or
                its id is already in use.
        """
        quote = self._require_customer("apply_processing")
        _, product = self._locate_product(quote, product_id)
        if processing.product_id != product_id:
            raise InvalidStateError(
                "apply_processing",
                f"processing belongs to product '{processing.product_id}', not '{product_id}'",
            )
        if any(existing.id == processing.id for existing in product.processings):
            raise InvalidStateError(
                "apply_processing", f"processing '{processing.id}' already exists"
            )
        product.processings.append(processing.model_copy(deep=True))
        self._commit("created", "processing", processing.id)
        return processing.model_copy(deep=True)

    def remove_processing(self, product_id: str, processing_ref: str) -> tuple[Processing, int]:
        """Remove a processing by instance id or catalog definition id."""
        quote = self._require_quote("remove_processing")
        _, product = self._locate_product(quote, product_id)
        processing = product.find_processing(processing_ref)
        if processing is None:
            raise InvalidReferenceError("processing", processing_ref)
        index = product.processings.index(processing)
        product.processings.pop(index)
        self._commit("removed", "processing", processing.id)
        return processing, index

    def restore_processing(self, processing: Processing, index: int) -> None:
        quote = self._require_customer("restore processing")
        _, product = self._locate_product(quote, processing.product_id)
        if any(existing.id == processing.id for existing in product.processings):
            raise InvalidStateError(
                "restore processing", f"processing '{processing.id}' already exists"
            )
        product.processings.insert(
            min(index, len(product.processings)), processing.model_copy(deep=True)
        )
        self._commit("restored", "processing", processing.id)

    # ===== Fees =====

    def add_fee(self, label: str, amount: Decimal, fee_id: Optional[str] = None) -> Fee:
        quote = self._require_customer("add_fee")
        fee = Fee(id=fee_id or new_id("fee"), label=label, amount=amount)
        quote.fees.append(fee)
        self._commit("created", "fee", fee.id)
        return fee.model_copy(deep=True)

    def remove_fee(self, fee_id: str) -> tuple[Fee, int]:
        quote = self._require_quote("remove_fee")
        fee = quote.find_fee(fee_id)
        if fee is None:
            raise InvalidReferenceError("fee", fee_id)
        index = quote.fees.index(fee)
        quote.fees.pop(index)
        self._commit("removed", "fee", fee_id)
        return fee, index

    def restore_fee(self, fee: Fee, index: int) -> None:
        quote = self._require_customer("restore fee")
        if quote.find_fee(fee.id) is not None:
            raise InvalidStateError("restore fee", f"fee '{fee.id}' already exists")
        quote.fees.insert(min(index, len(quote.fees)), fee.model_copy(deep=True))
        self._commit("restored", "fee", fee.id)
