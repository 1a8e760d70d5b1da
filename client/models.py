"""Client response models for the Kitchen CPQ API client.

This module re-exports the shared models from the API layer and defines
client-side models for endpoints whose response models live next to their
routes.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

# Re-export common models from API layer for client convenience
from api.models import HistoryResponse, ListResponse
from models.notifications import WorkflowNotification

__all__ = [
    # Re-exported from api.models
    "HistoryResponse",
    "ListResponse",
    # Client-specific models
    "HealthResponse",
    "NotificationsPage",
    "PhaseChange",
    "QuoteSummary",
    "WorkflowStatus",
]


class HealthResponse(BaseModel):
    """Response model for the health check."""

    status: str = Field(..., description="Health status")


class QuoteSummary(BaseModel):
    """Short description of the quote in progress.

    Attributes:
        quote_id: Id of the quote.
        quote_number: Human-facing quote number.
        phase: Current phase.
        status: Quote status (draft or finalized).
        customer: Selected customer name, if any.
        room_count: Number of rooms.
        product_count: Number of products across all rooms.
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


class PhaseChange(BaseModel):
    """Result of advancing or going back."""

    phase: str
    previous_phase: str


class WorkflowStatus(BaseModel):
    """Snapshot of where the workflow stands.

    Attributes:
        has_quote: Whether a quote is in progress.
        phase: Current phase, including the modal.
        top_level_phase: Phase underneath the modal, if one is open.
        status: Quote status.
        modal_open: Whether the processing configuration modal is open.
        draft: Draft of the open modal.
        active_room_id: Room products are added to by default.
        gate: Result of the current phase's advance rule.
        can_advance: Whether advancing would succeed.
        can_go_back: Whether going back would succeed.
        can_undo: Whether undo is available.
        can_redo: Whether redo is available.
        revision: Server-side revision counter of the quote.
    """

    has_quote: bool
    phase: Optional[str] = None
    top_level_phase: Optional[str] = None
    status: Optional[str] = None
    modal_open: bool = False
    draft: Optional[dict[str, Any]] = None
    active_room_id: Optional[str] = None
    gate: Optional[dict[str, Any]] = None
    can_advance: bool = False
    can_go_back: bool = False
    can_undo: bool = False
    can_redo: bool = False
    revision: int = 0


class NotificationsPage(BaseModel):
    """Notifications newer than the requested sequence number."""

    notifications: list[WorkflowNotification]
    last_sequence: int
