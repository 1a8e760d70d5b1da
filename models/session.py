"""QuoteSession - the single entry point for quote workflow commands.

The session owns the entity store, the phase state machine, the pricing engine,
the notification bus and the undo history for one operator editing one quote.
Every inbound command goes through a method on this class, which:

1. checks that the current phase permits the command,
2. validates references and rules before touching anything,
3. mutates the store,
4. records undo data and publishes notifications.

A rejected command raises a WorkflowError subclass and leaves the quote exactly
as it was. Phase-order and rule violations are also published as
validation_failed notifications.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterator, Optional

from pydantic import ValidationError

from models.catalog import Catalog, CatalogProduct, Customer, ProcessingDefinition
from models.errors import (
    InvalidReferenceError,
    InvalidStateError,
    ValidationFailedError,
)
from models.notifications import NotificationBus
from models.phases import Phase, PhaseStateMachine, ProcessingDraft
from models.preview import DEFAULT_COMPANY_NAME, PrintPreview, build_print_preview
from models.pricing import (
    DEFAULT_APPROVAL_THRESHOLD,
    PricingEngine,
    QuoteTotals,
    processing_surcharge,
    quantize_money,
)
from models.quote import Fee, Processing, Product, Quote, QuoteStatus, Room, RoomSpec
from models.store import QuoteStore, StoreChange, new_id
from models.undo import UndoEntry, UndoStack
from models.validation import (
    RuleResult,
    can_advance_from_customer,
    can_advance_from_fees,
    can_advance_from_product,
    can_advance_from_room,
    can_apply_processing,
    can_create_room,
)

logger = logging.getLogger(__name__)

# Phases in which each command may be issued.
CUSTOMER_PHASES = [Phase.CUSTOMER_SELECT]
ROOM_PHASES = [Phase.ROOM_CONFIG]
ROOM_SELECT_PHASES = [Phase.ROOM_CONFIG, Phase.PRODUCT_CONFIG]
PRODUCT_PHASES = [Phase.PRODUCT_CONFIG]
MODAL_PHASES = [Phase.PROCESSING_CONFIG]
APPLY_PHASES = [Phase.PRODUCT_CONFIG, Phase.PROCESSING_CONFIG]
FEE_PHASES = [Phase.FEES_CONFIG]
PREVIEW_PHASES = [Phase.FEES_CONFIG, Phase.PRINT_PREVIEW]
ADVANCE_PHASES = [
    Phase.CUSTOMER_SELECT,
    Phase.ROOM_CONFIG,
    Phase.PRODUCT_CONFIG,
    Phase.FEES_CONFIG,
]
BACK_PHASES = [
    Phase.ROOM_CONFIG,
    Phase.PRODUCT_CONFIG,
    Phase.FEES_CONFIG,
    Phase.PRINT_PREVIEW,
]
HISTORY_PHASES = [
    Phase.CUSTOMER_SELECT,
    Phase.ROOM_CONFIG,
    Phase.PRODUCT_CONFIG,
    Phase.FEES_CONFIG,
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuoteSession:
    """Explicit session object for building one quote at a time.

    Args:
        catalog: Reference data; the built-in sample catalog when omitted.
        approval_threshold: Totals above this require approval.
        validity_days: Days a quote stays valid after creation.
        undo_max_size: Maximum depth of the undo history.
        notification_history: Number of notifications kept for polling.
        company_name: Name printed at the top of the print preview.
        clock: Returns the current time; used for quote creation dates.

    Example:
        session = QuoteSession()
        session.start_new_quote()
        session.select_customer("John Smith Construction")
        session.advance_phase()
        room = session.create_room(RoomSpec(room_type="Kitchen", style_id="mod_traditional_oak"))
        session.advance_phase()
        product = session.add_product(room.id, '12" Base Cabinet')
        session.apply_processing(product.id, "Dark Stain", {"stain_color": "walnut"})
    """

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        approval_threshold: Decimal = DEFAULT_APPROVAL_THRESHOLD,
        validity_days: int = 30,
        undo_max_size: Optional[int] = 100,
        notification_history: int = 500,
        company_name: str = DEFAULT_COMPANY_NAME,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if validity_days <= 0:
            raise ValueError("validity_days must be positive")
        self.catalog = catalog or Catalog.default()
        self.validity_days = validity_days
        self.company_name = company_name
        self._clock = clock or _utcnow

        self.store = QuoteStore()
        self.pricing = PricingEngine(self.store, approval_threshold)
        self.phases = PhaseStateMachine()
        self.notifications = NotificationBus(history_size=notification_history)
        self.undo_stack = UndoStack(max_size=undo_max_size)

        self._active_room_id: Optional[str] = None
        self._preview_cache: Optional[tuple[int, PrintPreview]] = None
        self.store.subscribe(self._on_store_change)

    # ===== Internal helpers =====

    def _on_store_change(self, change: StoreChange) -> None:
        if change.action == "created":
            self.notifications.entity_created(change.entity, change.entity_id)

    @contextmanager
    def _command(self, name: str) -> Iterator[None]:
        """Wrap a command: publish rejections and a state_changed on success."""
        revision = self.store.revision
        try:
            yield
        except (InvalidStateError, ValidationFailedError) as e:
            logger.warning(f"Rejected {name}: {e.message}")
            self.notifications.validation_failed(e.rule, e.reason)
            raise
        except InvalidReferenceError as e:
            logger.warning(f"Rejected {name}: {e.message}")
            raise
        if self.store.revision != revision:
            self.notifications.state_changed(
                self.store.snapshot().model_dump(mode="json"), self.store.revision
            )

    def _require(self, command: str, phases: list[Phase]) -> None:
        if not self.store.has_quote:
            raise InvalidStateError(command, "no quote in progress; start a new quote first")
        self.phases.require(command, phases)

    @staticmethod
    def _check(result: RuleResult) -> None:
        if not result:
            raise ValidationFailedError(result.rule, result.reason or "rule failed")

    def _sync_phase(self, previous: Phase) -> None:
        """Mirror the machine's phase onto the quote and announce the change."""
        current = self.phases.current
        status = QuoteStatus.FINALIZED if current == Phase.PRINT_PREVIEW else QuoteStatus.DRAFT
        self.store.set_phase(current, status)
        self.notifications.phase_changed(current.value, previous.value)

    def _record(self, command: str, undo_data: dict[str, Any], redo_data: dict[str, Any]) -> None:
        self.undo_stack.push(
            UndoEntry(
                command_id=new_id("cmd"),
                command=command,
                undo_data=undo_data,
                redo_data=redo_data,
                executed_at=self._clock(),
            )
        )

    def _ensure_active_room(self) -> None:
        quote = self.store.snapshot()
        if self._active_room_id is not None and quote.find_room(self._active_room_id):
            return
        self._active_room_id = quote.rooms[0].id if quote.rooms else None

    def _build_processing(
        self,
        definition: ProcessingDefinition,
        product: Product,
        configuration: dict[str, Any],
        inherited: bool = False,
    ) -> Processing:
        return Processing(
            id=new_id("proc"),
            product_id=product.id,
            processing_id=definition.id,
            kind=definition.kind,
            label=definition.name,
            configuration=dict(configuration),
            surcharge=processing_surcharge(
                definition, product.base_price, product.quantity, product.dimensions, configuration
            ),
            inherited=inherited,
        )

    def _inherited_processings(self, room: Room, product: Product) -> list[Processing]:
        """Processings a new product picks up from its room's activated list.

        Activated processings that don't fit the product (wrong category,
        excluded, or missing required options) are skipped.
        """
        processings: list[Processing] = []
        candidate = product.model_copy(deep=True)
        for processing_id in room.activated_processings:
            definition = self.catalog.get_processing(processing_id)
            draft = ProcessingDraft(
                product_id=product.id,
                processing_id=definition.id,
                options=definition.default_configuration(),
            )
            result = can_apply_processing(
                draft, definition, candidate, self.catalog.exclusion_rules
            )
            if not result:
                logger.debug(f"Room processing {definition.id} skipped for {product.name}: {result.reason}")
                continue
            processing = self._build_processing(definition, candidate, draft.options, inherited=True)
            candidate.processings.append(processing)
            processings.append(processing)
        return processings

    # ===== Read access =====

    @property
    def active_room_id(self) -> Optional[str]:
        return self._active_room_id

    @property
    def phase(self) -> Phase:
        return self.phases.current

    @property
    def has_quote(self) -> bool:
        return self.store.has_quote

    def snapshot(self) -> Quote:
        """Deep copy of the current quote.

        Raises:
            InvalidStateError: If no quote has been started.
        """
        return self.store.snapshot()

    @property
    def totals(self) -> QuoteTotals:
        return self.pricing.totals

    def gate_for(self, phase: Phase) -> Optional[RuleResult]:
        """Evaluate the advance gate of a top-level phase.

        Returns:
            The RuleResult, or None when the phase has no forward transition.
        """
        quote = self.store.snapshot()
        if phase == Phase.CUSTOMER_SELECT:
            return can_advance_from_customer(quote)
        if phase == Phase.ROOM_CONFIG:
            return can_advance_from_room(quote, self._active_room_id)
        if phase == Phase.PRODUCT_CONFIG:
            return can_advance_from_product(quote, self._active_room_id)
        if phase == Phase.FEES_CONFIG:
            return can_advance_from_fees(quote)
        return None

    def gate_chain(self, phase: Phase) -> Optional[RuleResult]:
        """Evaluate the gates of every top-level phase up to and including phase.

        Undo may have removed what an earlier gate required (e.g. every
        product while in fees_config), so leaving a phase needs the whole chain.

        Returns:
            The first failing RuleResult, else the phase's own result; None
            when the phase has no forward transition.
        """
        if phase not in ADVANCE_PHASES:
            return None
        for gated in ADVANCE_PHASES:
            result = self.gate_for(gated)
            if not result or gated == phase:
                return result
        return None

    def _check_gates_through(self, phase: Phase) -> None:
        self._check(self.gate_chain(phase))

    def status(self) -> dict[str, Any]:
        """Summarize the workflow position for display.

        Returns:
            Dict with phase, modal/draft, active room, gate result for the
            current top-level phase, and undo/redo availability.
        """
        if not self.store.has_quote:
            return {
                "has_quote": False,
                "phase": None,
                "top_level_phase": None,
                "status": None,
                "modal_open": False,
                "draft": None,
                "active_room_id": None,
                "gate": None,
                "can_advance": False,
                "can_go_back": False,
                "can_undo": False,
                "can_redo": False,
                "revision": self.store.revision,
            }

        quote = self.store.snapshot()
        gate = None if self.phases.modal_open else self.gate_chain(self.phases.top_level)
        draft = self.phases.draft
        return {
            "has_quote": True,
            "phase": self.phases.current.value,
            "top_level_phase": self.phases.top_level.value,
            "status": quote.status.value,
            "modal_open": self.phases.modal_open,
            "draft": draft.model_dump(mode="json") if draft else None,
            "active_room_id": self._active_room_id,
            "gate": gate.model_dump() if gate else None,
            "can_advance": bool(gate) and self.phases.next_phase() is not None,
            "can_go_back": not self.phases.modal_open and self.phases.previous_phase() is not None,
            "can_undo": self.undo_stack.can_undo and self.phases.current in HISTORY_PHASES,
            "can_redo": self.undo_stack.can_redo and self.phases.current in HISTORY_PHASES,
            "revision": self.store.revision,
        }

    # ===== Quote lifecycle =====

    def start_new_quote(self) -> Quote:
        """Discard any quote in progress and start a new draft in customer_select."""
        with self._command("start_new_quote"):
            previous = self.phases.current
            created_at = self._clock()
            quote_number = f"Q-{int(created_at.timestamp() * 1000) % 1_000_000:06d}"
            self.phases.reset()
            self.undo_stack.clear()
            self._active_room_id = None
            self._preview_cache = None
            quote = self.store.create_quote(
                quote_id=str(uuid.uuid4()),
                quote_number=quote_number,
                created_at=created_at,
                expires_at=created_at + timedelta(days=self.validity_days),
            )
            self.notifications.phase_changed(Phase.CUSTOMER_SELECT.value, previous.value)
            logger.info(f"Started quote {quote.quote_number} ({quote.id})")
        return quote

    def select_customer(self, customer_ref: str) -> Customer:
        """Attach a customer by id or display name.

        Raises:
            InvalidStateError: Outside customer_select, or if a customer is already set.
            InvalidReferenceError: If the customer is unknown.
        """
        with self._command("select_customer"):
            self._require("select_customer", CUSTOMER_PHASES)
            customer = self.catalog.find_customer(customer_ref)
            self.store.select_customer(customer)
            logger.info(f"Customer selected: {customer.name}")
        return customer

    # ===== Rooms =====

    @staticmethod
    def _room_spec(data: dict[str, Any]) -> RoomSpec:
        try:
            return RoomSpec.model_validate(data)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            raise ValidationFailedError("can_create_room", f"{field}: {error['msg']}") from e

    def create_room(self, spec: RoomSpec | dict[str, Any]) -> Room:
        """Create a room and make it the active room.

        Raises:
            InvalidStateError: Outside room_config.
            ValidationFailedError: If room_type or style_id is empty, or a
                dimension is not positive.
            InvalidReferenceError: If the style or an activated processing is unknown.
        """
        with self._command("create_room"):
            self._require("create_room", ROOM_PHASES)
            if isinstance(spec, dict):
                spec = self._room_spec(spec)
            self._check(can_create_room(spec))
            self.catalog.get_style(spec.style_id.strip())
            for processing_id in spec.activated_processings:
                self.catalog.get_processing(processing_id)

            room = self.store.create_room(spec)
            self._active_room_id = room.id
            self._record(
                "create_room",
                {"action": "remove_room", "room_id": room.id},
                {
                    "action": "restore_room",
                    "room": room.model_dump(mode="json"),
                    "index": len(self.store.snapshot().rooms) - 1,
                },
            )
            logger.info(f"Room created: {room.room_type} ({room.style_id}) {room.id}")
        return room

    def select_room(self, room_id: str) -> Room:
        with self._command("select_room"):
            self._require("select_room", ROOM_SELECT_PHASES)
            room = self.store.get_room(room_id)
            self._active_room_id = room.id
            logger.debug(f"Active room: {room.id}")
        return room

    def remove_room(self, room_id: str) -> Room:
        """Remove a room with all of its products and processings."""
        with self._command("remove_room"):
            self._require("remove_room", ROOM_PHASES)
            room, index = self.store.remove_room(room_id)
            self._ensure_active_room()
            self._record(
                "remove_room",
                {"action": "restore_room", "room": room.model_dump(mode="json"), "index": index},
                {"action": "remove_room", "room_id": room.id},
            )
            logger.info(f"Room removed: {room.id} ({len(room.products)} products)")
        return room

    # ===== Products =====

    def add_product(self, room_id: Optional[str], ref: str, quantity: int = 1) -> Product:
        """Add a catalog product to a room.

        Args:
            room_id: Target room; the active room when None.
            ref: Catalog product id or display name (e.g., '12" Base Cabinet').
            quantity: Number of units (>= 1).

        Returns:
            The stored product, including processings inherited from the room.

        Raises:
            InvalidStateError: Outside product_config.
            InvalidReferenceError: If the room or catalog product is unknown.
            ValidationFailedError: If quantity is below 1.
        """
        with self._command("add_product"):
            self._require("add_product", PRODUCT_PHASES)
            room_id = room_id or self._active_room_id
            if room_id is None:
                raise ValidationFailedError("add_product", "Select a room first")
            room = self.store.get_room(room_id)
            if quantity < 1:
                raise ValidationFailedError("product_quantity", "Quantity must be at least 1")
            catalog_product: CatalogProduct = self.catalog.resolve_product(ref, room.style_id)

            product_id = new_id("prod")
            provisional = Product(
                id=product_id,
                room_id=room.id,
                catalog_ref=catalog_product.id,
                name=catalog_product.name,
                category=catalog_product.category,
                quantity=quantity,
                base_price=catalog_product.base_price,
                dimensions=catalog_product.dimensions,
            )
            inherited = self._inherited_processings(room, provisional)

            self.store.add_product(room.id, catalog_product, quantity, product_id=product_id)
            for processing in inherited:
                self.store.add_processing(product_id, processing)

            product = self.store.get_product(product_id)
            self._record(
                "add_product",
                {"action": "remove_product", "product_id": product_id},
                {
                    "action": "restore_product",
                    "product": product.model_dump(mode="json"),
                    "index": len(self.store.get_room(room.id).products) - 1,
                },
            )
            logger.info(
                f"Product added: {product.name} x{quantity} to room {room.id}"
                + (f" with {len(inherited)} room processings" if inherited else "")
            )
        return product

    def update_product_quantity(self, product_id: str, quantity: int) -> Product:
        """Change a product's quantity; its processing surcharges are re-priced."""
        with self._command("update_product_quantity"):
            self._require("update_product_quantity", PRODUCT_PHASES)
            product = self.store.get_product(product_id)
            if quantity < 1:
                raise ValidationFailedError("product_quantity", "Quantity must be at least 1")

            previous_surcharges = {p.id: str(p.surcharge) for p in product.processings}
            surcharges = {
                processing.id: processing_surcharge(
                    self.catalog.get_processing(processing.processing_id),
                    product.base_price,
                    quantity,
                    product.dimensions,
                    processing.configuration,
                )
                for processing in product.processings
            }
            previous = self.store.set_quantity(product_id, quantity, surcharges)
            self._record(
                "update_product_quantity",
                {
                    "action": "set_quantity",
                    "product_id": product_id,
                    "quantity": previous,
                    "surcharges": previous_surcharges,
                },
                {
                    "action": "set_quantity",
                    "product_id": product_id,
                    "quantity": quantity,
                    "surcharges": {k: str(v) for k, v in surcharges.items()},
                },
            )
            logger.debug(f"Quantity of {product_id}: {previous} -> {quantity}")
        return self.store.get_product(product_id)

    def remove_product(self, product_id: str) -> Product:
        """Remove a product and all processings attached to it."""
        with self._command("remove_product"):
            self._require("remove_product", PRODUCT_PHASES)
            product, index = self.store.remove_product(product_id)
            self._record(
                "remove_product",
                {"action": "restore_product", "product": product.model_dump(mode="json"), "index": index},
                {"action": "remove_product", "product_id": product.id},
            )
            logger.info(f"Product removed: {product.name} ({product.id})")
        return product

    # ===== Processings =====

    def open_processing_config(self, product_id: str, processing_kind: str) -> ProcessingDraft:
        """Open the processing configuration modal for a product.

        Args:
            product_id: Product to configure.
            processing_kind: Processing definition id or display name.

        Returns:
            The new draft, pre-filled with option defaults.
        """
        with self._command("open_processing_config"):
            self._require("open_processing_config", PRODUCT_PHASES)
            self.store.get_product(product_id)
            definition = self.catalog.resolve_processing(processing_kind)
            draft = ProcessingDraft(
                product_id=product_id,
                processing_id=definition.id,
                options=definition.default_configuration(),
            )
            previous = self.phases.current
            self.phases.open_modal(draft)
            self._sync_phase(previous)
        return draft.model_copy(deep=True)

    def set_processing_option(self, option_id: str, value: Any) -> ProcessingDraft:
        """Set (or clear, with None) one option of the open draft."""
        with self._command("set_processing_option"):
            self._require("set_processing_option", MODAL_PHASES)
            draft = self.phases.draft
            definition = self.catalog.get_processing(draft.processing_id)
            if definition.get_option(option_id) is None:
                raise InvalidReferenceError("option", option_id)
            if value is None:
                draft.options.pop(option_id, None)
            else:
                draft.options[option_id] = value
            logger.debug(f"Draft option {option_id} = {value!r}")
        return draft.model_copy(deep=True)

    def apply_processing(
        self,
        product_id: Optional[str] = None,
        processing_kind: Optional[str] = None,
        config: Optional[dict[str, Any]] = None,
    ) -> Processing:
        """Apply a processing to a product.

        In processing_config the open draft is applied; `config` values are
        merged into it and any given product/processing must match the draft.
        A rejected draft keeps the modal open so it can be corrected. In
        product_config the processing is applied directly from the arguments.

        Raises:
            InvalidStateError: In any other phase, or if arguments don't match the draft.
            InvalidReferenceError: If the product or processing is unknown.
            ValidationFailedError: If can_apply_processing rejects the configuration.
        """
        with self._command("apply_processing"):
            self._require("apply_processing", APPLY_PHASES)

            if self.phases.modal_open:
                draft = self.phases.draft.model_copy(deep=True)
                if product_id is not None and product_id != draft.product_id:
                    raise InvalidStateError(
                        "apply_processing",
                        f"the open configuration is for product '{draft.product_id}'",
                        phase=self.phases.current.value,
                    )
                if processing_kind is not None:
                    requested = self.catalog.resolve_processing(processing_kind)
                    if requested.id != draft.processing_id:
                        raise InvalidStateError(
                            "apply_processing",
                            f"the open configuration is for '{draft.processing_id}'",
                            phase=self.phases.current.value,
                        )
                draft.options.update(config or {})
            else:
                if product_id is None or processing_kind is None:
                    raise ValidationFailedError(
                        "can_apply_processing", "A product and a processing are required"
                    )
                definition = self.catalog.resolve_processing(processing_kind)
                options = definition.default_configuration()
                options.update(config or {})
                draft = ProcessingDraft(
                    product_id=product_id, processing_id=definition.id, options=options
                )

            definition = self.catalog.get_processing(draft.processing_id)
            product = self.store.get_product(draft.product_id)
            self._check(
                can_apply_processing(draft, definition, product, self.catalog.exclusion_rules)
            )

            processing = self._build_processing(definition, product, draft.options)
            self.store.add_processing(product.id, processing)
            self._record(
                "apply_processing",
                {
                    "action": "remove_processing",
                    "product_id": product.id,
                    "processing_id": processing.id,
                },
                {
                    "action": "restore_processing",
                    "processing": processing.model_dump(mode="json"),
                    "index": len(product.processings),
                },
            )

            if self.phases.modal_open:
                previous = self.phases.current
                self.phases.close_modal()
                self._sync_phase(previous)
            logger.info(
                f"Processing applied: {processing.label} on {product.name} "
                f"(+{processing.surcharge})"
            )
        return processing

    def cancel_processing_config(self) -> ProcessingDraft:
        """Close the modal and discard the draft."""
        with self._command("cancel_processing_config"):
            self._require("cancel_processing_config", MODAL_PHASES)
            previous = self.phases.current
            draft = self.phases.close_modal()
            self._sync_phase(previous)
            logger.debug(f"Processing configuration discarded for {draft.product_id}")
        return draft

    def remove_processing(self, product_id: str, processing_id: str) -> Processing:
        """Remove a processing by instance id or catalog definition id."""
        with self._command("remove_processing"):
            self._require("remove_processing", PRODUCT_PHASES)
            processing, index = self.store.remove_processing(product_id, processing_id)
            self._record(
                "remove_processing",
                {
                    "action": "restore_processing",
                    "processing": processing.model_dump(mode="json"),
                    "index": index,
                },
                {
                    "action": "remove_processing",
                    "product_id": product_id,
                    "processing_id": processing.id,
                },
            )
            logger.info(f"Processing removed: {processing.label} from {product_id}")
        return processing

    # ===== Navigation =====

    def advance_phase(self) -> Phase:
        """Move to the next top-level phase if the current phase's gate passes.

        Raises:
            InvalidStateError: In processing_config or print_preview.
            ValidationFailedError: If the gate rule fails; the phase is unchanged.
        """
        with self._command("advance_phase"):
            self._require("advance_phase", ADVANCE_PHASES)
            previous = self.phases.current
            self._check_gates_through(previous)
            self.phases.advance()
            self._sync_phase(previous)
        return self.phases.current

    def go_back(self) -> Phase:
        """Move one top-level phase back, keeping all entered data.

        Leaving print_preview returns the quote to draft. The customer phase
        cannot be re-entered.
        """
        with self._command("go_back"):
            self._require("go_back", BACK_PHASES)
            previous = self.phases.current
            self.phases.retreat()
            self._sync_phase(previous)
        return self.phases.current

    # ===== Fees and notes =====

    def add_fee(self, label: str, amount: Decimal | int | float | str) -> Fee:
        """Add a quote-level fee.

        Raises:
            InvalidStateError: Outside fees_config.
            ValidationFailedError: If the label is empty or the amount is negative
                or not a number.
        """
        with self._command("add_fee"):
            self._require("add_fee", FEE_PHASES)
            if not label or not label.strip():
                raise ValidationFailedError("fee_label", "Fee label cannot be empty")
            try:
                value = quantize_money(amount)
            except (InvalidOperation, ValueError) as e:
                raise ValidationFailedError("fee_amount", f"'{amount}' is not a valid amount") from e
            if not value.is_finite() or value < 0:
                raise ValidationFailedError("fee_amount", "Fee amount cannot be negative")

            fee = self.store.add_fee(label.strip(), value)
            self._record(
                "add_fee",
                {"action": "remove_fee", "fee_id": fee.id},
                {
                    "action": "restore_fee",
                    "fee": fee.model_dump(mode="json"),
                    "index": len(self.store.snapshot().fees) - 1,
                },
            )
            logger.info(f"Fee added: {fee.label} {fee.amount}")
        return fee

    def remove_fee(self, fee_id: str) -> Fee:
        with self._command("remove_fee"):
            self._require("remove_fee", FEE_PHASES)
            fee, index = self.store.remove_fee(fee_id)
            self._record(
                "remove_fee",
                {"action": "restore_fee", "fee": fee.model_dump(mode="json"), "index": index},
                {"action": "remove_fee", "fee_id": fee.id},
            )
            logger.info(f"Fee removed: {fee.label}")
        return fee

    def set_notes(self, text: str) -> str:
        with self._command("set_notes"):
            self._require("set_notes", FEE_PHASES)
            previous = self.store.set_notes(text)
            self._record(
                "set_notes",
                {"action": "set_notes", "notes": previous},
                {"action": "set_notes", "notes": text},
            )
        return text

    # ===== Print preview =====

    def request_print_preview(self) -> PrintPreview:
        """Finalize the quote and return its print preview.

        From fees_config this advances to print_preview first. Repeated
        requests without an intervening change return the cached preview, so
        the text is byte-identical.
        """
        with self._command("request_print_preview"):
            self._require("request_print_preview", PREVIEW_PHASES)
            if self.phases.current == Phase.FEES_CONFIG:
                previous = self.phases.current
                self._check_gates_through(previous)
                self.phases.advance()
                self._sync_phase(previous)

            revision = self.store.revision
            if self._preview_cache is not None and self._preview_cache[0] == revision:
                return self._preview_cache[1].model_copy(deep=True)

            preview = build_print_preview(
                self.store.snapshot(), self.pricing.totals, self.catalog, self.company_name
            )
            self._preview_cache = (revision, preview)
            logger.info(f"Print preview built for {preview.quote_number}: total {preview.total}")
        return preview.model_copy(deep=True)

    # ===== Undo/Redo =====

    def _apply_recorded(self, data: dict[str, Any]) -> None:
        """Perform one recorded store operation from an undo entry."""
        action = data["action"]
        if action == "remove_room":
            self.store.remove_room(data["room_id"])
        elif action == "restore_room":
            self.store.restore_room(Room.model_validate(data["room"]), data["index"])
        elif action == "remove_product":
            self.store.remove_product(data["product_id"])
        elif action == "restore_product":
            self.store.restore_product(Product.model_validate(data["product"]), data["index"])
        elif action == "set_quantity":
            self.store.set_quantity(
                data["product_id"],
                data["quantity"],
                {k: Decimal(v) for k, v in data["surcharges"].items()},
            )
        elif action == "remove_processing":
            self.store.remove_processing(data["product_id"], data["processing_id"])
        elif action == "restore_processing":
            self.store.restore_processing(
                Processing.model_validate(data["processing"]), data["index"]
            )
        elif action == "remove_fee":
            self.store.remove_fee(data["fee_id"])
        elif action == "restore_fee":
            self.store.restore_fee(Fee.model_validate(data["fee"]), data["index"])
        elif action == "set_notes":
            self.store.set_notes(data["notes"])
        else:
            raise ValueError(f"Unknown undo action: {action}")

    def _step(self, entry: UndoEntry, undoing: bool) -> None:
        """Apply one entry and move it to the opposite stack."""
        if undoing:
            self._apply_recorded(entry.undo_data)
            self.undo_stack.push_to_redo(entry)
        else:
            self._apply_recorded(entry.redo_data)
            self.undo_stack.push_to_undo(entry)

    def _walk_history(self, count: int, undoing: bool) -> list[UndoEntry]:
        """Undo (or redo) up to count entries, one entry at a time.

        When an entry fails, it goes back on its stack and the entries
        already applied by this call are reversed, so the quote and both
        stacks are left as they were before the call.

        Raises:
            RuntimeError: If an entry can no longer be applied.
        """
        stack = self.undo_stack
        if undoing:
            verb, take, put_back, take_applied = "undo", stack.pop_for_undo, stack.push_to_undo, stack.pop_for_redo
        else:
            verb, take, put_back, take_applied = "redo", stack.pop_for_redo, stack.push_to_redo, stack.pop_for_undo

        applied: list[UndoEntry] = []
        for _ in range(count):
            popped = take(1)
            if not popped:
                break
            entry = popped[0]
            try:
                self._step(entry, undoing)
            except Exception as e:
                logger.error(f"Failed to {verb} {entry.command} ({entry.command_id}): {e}", exc_info=True)
                put_back(entry)
                for done in reversed(applied):
                    take_applied(1)
                    self._step(done, not undoing)
                raise RuntimeError(f"{verb.capitalize()} failed for {entry.command}: {e}") from e
            applied.append(entry)
            data = entry.undo_data if undoing else entry.redo_data
            logger.info(f"{verb.capitalize()} {entry.command}: action={data['action']}")
        return applied

    def undo(self, count: int = 1) -> dict[str, Any]:
        """Undo the most recent quote edits.

        Args:
            count: Number of commands to undo (default: 1).

        Returns:
            Dict with:
                - undone_count: Number of commands actually undone.
                - undone_commands: Details of the commands that were undone.
                - can_undo: Whether more undos are available.
                - can_redo: Whether redos are now available.

        Raises:
            ValueError: If count is not positive.
            InvalidStateError: In processing_config or print_preview.
            RuntimeError: If an entry can no longer be applied.
        """
        if count <= 0:
            raise ValueError("count must be positive")

        with self._command("undo"):
            self._require("undo", HISTORY_PHASES)
            if not self.undo_stack.can_undo:
                return {
                    "undone_count": 0,
                    "undone_commands": [],
                    "can_undo": False,
                    "can_redo": self.undo_stack.can_redo,
                    "message": "Nothing to undo",
                }

            undone = [
                {
                    "command_id": entry.command_id,
                    "command": entry.command,
                    "action": entry.undo_data["action"],
                }
                for entry in self._walk_history(count, undoing=True)
            ]
            self._ensure_active_room()

        return {
            "undone_count": len(undone),
            "undone_commands": undone,
            "can_undo": self.undo_stack.can_undo,
            "can_redo": self.undo_stack.can_redo,
        }

    def redo(self, count: int = 1) -> dict[str, Any]:
        """Re-apply previously undone quote edits.

        Returns:
            Dict with redone_count, redone_commands, can_undo and can_redo.

        Raises:
            ValueError: If count is not positive.
            InvalidStateError: In processing_config or print_preview.
            RuntimeError: If an entry can no longer be applied.
        """
        if count <= 0:
            raise ValueError("count must be positive")

        with self._command("redo"):
            self._require("redo", HISTORY_PHASES)
            if not self.undo_stack.can_redo:
                return {
                    "redone_count": 0,
                    "redone_commands": [],
                    "can_undo": self.undo_stack.can_undo,
                    "can_redo": False,
                    "message": "Nothing to redo",
                }

            redone = [
                {
                    "command_id": entry.command_id,
                    "command": entry.command,
                    "action": entry.redo_data["action"],
                }
                for entry in self._walk_history(count, undoing=False)
            ]
            self._ensure_active_room()

        return {
            "redone_count": len(redone),
            "redone_commands": redone,
            "can_undo": self.undo_stack.can_undo,
            "can_redo": self.undo_stack.can_redo,
        }
