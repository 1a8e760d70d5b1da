"""Quote editing endpoints.

These endpoints expose the QuoteSession's entity commands: starting a quote,
selecting the customer, and managing rooms, products, processings, fees and
notes. Phase rules are enforced by the session; rejected commands surface as
404 (unknown entity), 409 (wrong phase) or 422 (validation rule failed).
"""

from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from api.dependencies import QuoteSessionDep
from api.utils import quote_summary
from models.catalog import Customer
from models.errors import InvalidStateError
from models.pricing import QuoteTotals
from models.quote import Fee, Processing, Product, Quote, Room, RoomSpec

router = APIRouter(
    prefix="/quote",
    tags=["quote"],
)


# Request/Response Models


class QuoteSummaryResponse(BaseModel):
    """Short description of the quote in progress.

    Attributes:
        quote_id: Id of the new quote.
        quote_number: Human-facing quote number.
        phase: Current phase.
        status: Quote status (draft or finalized).
        customer: Selected customer name (None for a new quote).
        room_count: Number of rooms.
        product_count: Number of products.
        fee_count: Number of fees.
    """

    quote_id: str
    quote_number: str
    phase: str
    status: str
    customer: Optional[str] = None
    room_count: int
    product_count: int
    fee_count: int


class SelectCustomerRequest(BaseModel):
    """Customer id or exact display name."""

    customer: str = Field(..., min_length=1)


class AddProductRequest(BaseModel):
    """Request model for adding a product.

    Attributes:
        room_id: Target room (the active room when omitted).
        product: Catalog product id or display name.
        quantity: Number of units.
    """

    room_id: Optional[str] = None
    product: str = Field(..., min_length=1)
    quantity: int = Field(default=1)


class UpdateQuantityRequest(BaseModel):
    quantity: int


class AddFeeRequest(BaseModel):
    label: str
    amount: Decimal


class NotesRequest(BaseModel):
    notes: str = ""


class NotesResponse(BaseModel):
    notes: str


# Route Handlers


@router.post("/new", response_model=QuoteSummaryResponse, status_code=status.HTTP_201_CREATED)
async def start_new_quote(session: QuoteSessionDep):
    """Start a new quote, discarding any quote in progress."""
    quote = session.start_new_quote()
    return QuoteSummaryResponse(**quote_summary(quote))


@router.get("", response_model=Quote)
async def get_quote(session: QuoteSessionDep):
    """Get the full quote snapshot."""
    return session.snapshot()


@router.get("/summary", response_model=QuoteSummaryResponse)
async def get_quote_summary(session: QuoteSessionDep):
    return QuoteSummaryResponse(**quote_summary(session.snapshot()))


@router.get("/totals", response_model=QuoteTotals)
async def get_totals(session: QuoteSessionDep):
    """Get the current totals, including the approval flag."""
    if not session.has_quote:
        raise InvalidStateError("read totals", "no quote in progress; start a new quote first")
    return session.totals


@router.post("/customer", response_model=Customer)
async def select_customer(request: SelectCustomerRequest, session: QuoteSessionDep):
    return session.select_customer(request.customer)


@router.post("/rooms", response_model=Room, status_code=status.HTTP_201_CREATED)
async def create_room(spec: RoomSpec, session: QuoteSessionDep):
    """Create a room and make it active.

    Args:
        spec: Room type, style, description, optional dimensions and
            processings activated for the room.
        session: The QuoteSession instance (injected by FastAPI).

    Returns:
        The created room.
    """
    return session.create_room(spec)


@router.post("/rooms/{room_id}/select", response_model=Room)
async def select_room(room_id: str, session: QuoteSessionDep):
    return session.select_room(room_id)


@router.delete("/rooms/{room_id}", response_model=Room)
async def remove_room(room_id: str, session: QuoteSessionDep):
    """Remove a room with its products and processings."""
    return session.remove_room(room_id)


@router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
async def add_product(request: AddProductRequest, session: QuoteSessionDep):
    return session.add_product(request.room_id, request.product, request.quantity)


@router.patch("/products/{product_id}", response_model=Product)
async def update_product_quantity(
    product_id: str, request: UpdateQuantityRequest, session: QuoteSessionDep
):
    return session.update_product_quantity(product_id, request.quantity)


@router.delete("/products/{product_id}", response_model=Product)
async def remove_product(product_id: str, session: QuoteSessionDep):
    """Remove a product and all of its processings."""
    return session.remove_product(product_id)


@router.delete(
    "/products/{product_id}/processings/{processing_id}", response_model=Processing
)
async def remove_processing(product_id: str, processing_id: str, session: QuoteSessionDep):
    """Remove a processing by instance id or catalog processing id."""
    return session.remove_processing(product_id, processing_id)


@router.post("/fees", response_model=Fee, status_code=status.HTTP_201_CREATED)
async def add_fee(request: AddFeeRequest, session: QuoteSessionDep):
    return session.add_fee(request.label, request.amount)


@router.delete("/fees/{fee_id}", response_model=Fee)
async def remove_fee(fee_id: str, session: QuoteSessionDep):
    return session.remove_fee(fee_id)


@router.put("/notes", response_model=NotesResponse)
async def set_notes(request: NotesRequest, session: QuoteSessionDep) -> dict[str, Any]:
    return {"notes": session.set_notes(request.notes)}
