"""Quote aggregate and its owned entities.

A Quote owns Rooms, Rooms own Products, and Products own Processings. Fees hang
off the Quote itself. The Customer is referenced, not owned. The quote total is
never stored here; models/pricing.py derives it from these entities.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from models.catalog import Customer, Dimensions, ProductCategory
from models.phases import Phase


class QuoteStatus(str, Enum):
    """Whether a quote is still being edited."""

    DRAFT = "draft"
    FINALIZED = "finalized"


class RoomDimensions(BaseModel):
    """Room dimensions in inches. Each value must be positive when supplied."""

    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    depth: Optional[float] = Field(default=None, gt=0)


class RoomSpec(BaseModel):
    """Input for creating a room.

    Empty room_type or style_id is accepted here so that the Create Room rule
    can report a reason instead of a schema error.

    Args:
        room_type: Room type (e.g., "Kitchen").
        style_id: Catalog style id (e.g., "mod_traditional_oak").
        description: Free-text description (e.g., "Test Kitchen").
        dimensions: Optional room dimensions.
        activated_processings: Processing ids inherited by applicable products.
    """

    room_type: str = ""
    style_id: str = ""
    description: str = ""
    dimensions: Optional[RoomDimensions] = None
    activated_processings: list[str] = Field(default_factory=list)


class Processing(BaseModel):
    """A processing applied to one product.

    Args:
        id: Unique processing instance id.
        product_id: Owning product.
        processing_id: Catalog processing definition id.
        kind: Processing kind (e.g., "Stain").
        label: Definition display name (e.g., "Dark Stain").
        configuration: Chosen option values (option id -> value).
        surcharge: Surcharge for the owning product's current quantity.
        inherited: True when applied from the room's activated processings.
    """

    id: str
    product_id: str
    processing_id: str
    kind: str
    label: str
    configuration: dict[str, Any] = Field(default_factory=dict)
    surcharge: Decimal = Field(default=Decimal("0.00"), ge=0)
    inherited: bool = False


class Product(BaseModel):
    """A catalog product placed in a room."""

    id: str
    room_id: str
    catalog_ref: str = Field(description="Catalog product id")
    name: str
    category: ProductCategory
    quantity: int = Field(default=1, ge=1)
    base_price: Decimal = Field(ge=0, description="Unit price")
    dimensions: Optional[Dimensions] = None
    processings: list[Processing] = Field(default_factory=list)

    def processing_ids(self) -> set[str]:
        """Catalog definition ids of the processings on this product."""
        return {processing.processing_id for processing in self.processings}

    def find_processing(self, processing_ref: str) -> Optional[Processing]:
        """Find a processing by instance id or catalog definition id."""
        for processing in self.processings:
            if processing.id == processing_ref or processing.processing_id == processing_ref:
                return processing
        return None


class Room(BaseModel):
    """A room of the quote, holding its products."""

    id: str
    room_type: str
    style_id: str
    description: str = ""
    dimensions: Optional[RoomDimensions] = None
    activated_processings: list[str] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)

    @field_validator("room_type", "style_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("room_type and style_id cannot be empty")
        return v

    def find_product(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None


class Fee(BaseModel):
    """A quote-level charge such as delivery or installation."""

    id: str
    label: str
    amount: Decimal = Field(ge=0)

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Fee label cannot be empty")
        return v.strip()


class Quote(BaseModel):
    """Aggregate root of the workflow.

    Args:
        id: Unique quote id.
        quote_number: Human-facing number (e.g., "Q-482913").
        customer: Selected customer; None until customer_select completes.
        rooms: Rooms in creation order.
        fees: Quote-level fees.
        phase: Current workflow phase (mirrors the phase state machine).
        status: draft while editing, finalized while in print_preview.
        notes: Free-text notes printed on the preview.
        created_at: When the quote was started.
        expires_at: End of the quote's validity period.
    """

    id: str
    quote_number: str
    customer: Optional[Customer] = None
    rooms: list[Room] = Field(default_factory=list)
    fees: list[Fee] = Field(default_factory=list)
    phase: Phase = Phase.CUSTOMER_SELECT
    status: QuoteStatus = QuoteStatus.DRAFT
    notes: str = ""
    created_at: datetime
    expires_at: datetime

    def find_room(self, room_id: str) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def find_product(self, product_id: str) -> Optional[Product]:
        for room in self.rooms:
            product = room.find_product(product_id)
            if product is not None:
                return product
        return None

    def find_fee(self, fee_id: str) -> Optional[Fee]:
        for fee in self.fees:
            if fee.id == fee_id:
                return fee
        return None

    @property
    def product_count(self) -> int:
        return sum(len(room.products) for room in self.rooms)
