"""Pricing and aggregation for quotes.

All arithmetic uses Decimal quantised to cents (ROUND_HALF_UP), so totals are
exact and independent of the order in which entities were added.

Formulas:
    processing surcharge
        per_unit:       price * quantity
        percentage:     base_price * quantity * (price + selected choice modifiers)
        per_dimension:  product width * price (0 when the product has no width)
        Non-percentage processings add selected choice modifiers * quantity.
    product subtotal = base_price * quantity + sum of processing surcharges
    room subtotal    = sum of product subtotals
    quote total      = sum of room subtotals + sum of fee amounts
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from models.catalog import Dimensions, PricingType, ProcessingDefinition
from models.quote import Product, Quote, Room
from models.store import QuoteStore, StoreChange

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
DEFAULT_APPROVAL_THRESHOLD = Decimal("5000")


def quantize_money(value: Decimal | int | float | str) -> Decimal:
    """Round a monetary value to cents, half-up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _choice_modifiers(definition: ProcessingDefinition, configuration: dict[str, Any]) -> Decimal:
    total = Decimal("0")
    for option in definition.options:
        if not option.choices or option.id not in configuration:
            continue
        choice = option.find_choice(configuration[option.id])
        if choice is not None:
            total += choice.price_modifier
    return total


def processing_surcharge(
    definition: ProcessingDefinition,
    base_price: Decimal,
    quantity: int,
    dimensions: Optional[Dimensions],
    configuration: dict[str, Any],
) -> Decimal:
    """Compute the surcharge of a processing for a product.

    Args:
        definition: Catalog definition of the processing.
        base_price: Unit price of the product.
        quantity: Product quantity.
        dimensions: Product dimensions; only the width is used.
        configuration: Selected option values.

    Returns:
        Surcharge rounded to cents.
    """
    modifiers = _choice_modifiers(definition, configuration)

    if definition.pricing_type == PricingType.PERCENTAGE:
        amount = base_price * quantity * (definition.price + modifiers)
    elif definition.pricing_type == PricingType.PER_UNIT:
        amount = definition.price * quantity + modifiers * quantity
    else:
        width = dimensions.width if dimensions and dimensions.width else 0
        amount = Decimal(str(width)) * definition.price + modifiers * quantity

    return quantize_money(amount)


def product_subtotal(product: Product) -> Decimal:
    """base_price * quantity plus the product's processing surcharges."""
    subtotal = product.base_price * product.quantity
    subtotal += sum((processing.surcharge for processing in product.processings), Decimal("0"))
    return quantize_money(subtotal)


def room_subtotal(room: Room) -> Decimal:
    return quantize_money(sum((product_subtotal(p) for p in room.products), Decimal("0")))


class ProductTotal(BaseModel):
    """Priced line for one product."""

    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    processings_total: Decimal
    subtotal: Decimal


class RoomTotal(BaseModel):
    """Priced rollup for one room."""

    room_id: str
    room_type: str
    subtotal: Decimal
    products: list[ProductTotal] = Field(default_factory=list)


class QuoteTotals(BaseModel):
    """Aggregated figures for a quote.

    Args:
        rooms: Per-room rollups in room order.
        products_subtotal: Sum of all room subtotals.
        fees_total: Sum of all fee amounts.
        total: products_subtotal + fees_total.
        approval_threshold: Totals above this require approval.
        requires_approval: Whether total exceeds approval_threshold.
        product_count: Number of product lines.
    """

    rooms: list[RoomTotal] = Field(default_factory=list)
    products_subtotal: Decimal = ZERO
    fees_total: Decimal = ZERO
    total: Decimal = ZERO
    approval_threshold: Decimal = DEFAULT_APPROVAL_THRESHOLD
    requires_approval: bool = False
    product_count: int = 0

    def room(self, room_id: str) -> Optional[RoomTotal]:
        for room in self.rooms:
            if room.room_id == room_id:
                return room
        return None


def price_quote(quote: Quote, approval_threshold: Decimal = DEFAULT_APPROVAL_THRESHOLD) -> QuoteTotals:
    """Compute all totals for a quote snapshot. Pure and deterministic."""
    rooms = []
    for room in quote.rooms:
        lines = [
            ProductTotal(
                product_id=product.id,
                name=product.name,
                quantity=product.quantity,
                unit_price=quantize_money(product.base_price),
                processings_total=quantize_money(
                    sum((p.surcharge for p in product.processings), Decimal("0"))
                ),
                subtotal=product_subtotal(product),
            )
            for product in room.products
        ]
        rooms.append(
            RoomTotal(
                room_id=room.id,
                room_type=room.room_type,
                subtotal=room_subtotal(room),
                products=lines,
            )
        )

    products_total = quantize_money(sum((room.subtotal for room in rooms), Decimal("0")))
    fees_total = quantize_money(sum((fee.amount for fee in quote.fees), Decimal("0")))
    total = products_total + fees_total

    return QuoteTotals(
        rooms=rooms,
        products_subtotal=products_total,
        fees_total=fees_total,
        total=total,
        approval_threshold=approval_threshold,
        requires_approval=total > approval_threshold,
        product_count=quote.product_count,
    )


class PricingEngine:
    """Keeps quote totals current by recomputing on every store change.

    Args:
        store: Store to observe.
        approval_threshold: Totals above this require approval.
    """

    def __init__(self, store: QuoteStore, approval_threshold: Decimal = DEFAULT_APPROVAL_THRESHOLD):
        self._store = store
        self._approval_threshold = quantize_money(approval_threshold)
        self._totals = QuoteTotals(approval_threshold=self._approval_threshold)
        store.subscribe(self._on_store_change)

    @property
    def approval_threshold(self) -> Decimal:
        return self._approval_threshold

    @property
    def totals(self) -> QuoteTotals:
        """Totals as of the latest store revision."""
        return self._totals.model_copy(deep=True)

    def _on_store_change(self, change: StoreChange) -> None:
        self.recompute()

    def recompute(self) -> QuoteTotals:
        if not self._store.has_quote:
            self._totals = QuoteTotals(approval_threshold=self._approval_threshold)
        else:
            previous = self._totals.total
            self._totals = price_quote(self._store.snapshot(), self._approval_threshold)
            if self._totals.total != previous:
                logger.debug(f"Quote total {previous} -> {self._totals.total}")
        return self.totals
