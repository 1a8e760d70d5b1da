"""Workflow navigation endpoints.

Phase status and navigation, undo/redo, and polling of outbound
notifications.
"""

from typing import Any, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from api.dependencies import QuoteSessionDep
from api.models import HistoryResponse
from models.notifications import NotificationKind, WorkflowNotification

router = APIRouter(
    prefix="/workflow",
    tags=["workflow"],
)


# Request/Response Models


class WorkflowStatusResponse(BaseModel):
    """Response model for workflow status.

    Attributes:
        has_quote: Whether a quote is in progress.
        phase: Current phase, including the modal.
        top_level_phase: Top-level phase underneath any modal.
        status: Quote status (draft/finalized).
        modal_open: Whether the processing configuration modal is open.
        draft: Draft of the open modal.
        active_room_id: Room products are added to by default.
        gate: Result of the current phase's advance rule.
        can_advance: Whether advance_phase would succeed.
        can_go_back: Whether go_back would succeed.
        can_undo: Whether undo is available in this phase.
        can_redo: Whether redo is available in this phase.
        revision: Store revision counter.
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


class PhaseChangeResponse(BaseModel):
    phase: str
    previous_phase: str


class HistoryRequest(BaseModel):
    count: int = Field(default=1, ge=1)


class NotificationsResponse(BaseModel):
    """Response model for notification polling.

    Attributes:
        notifications: Notifications newer than the requested sequence.
        last_sequence: Sequence of the most recent notification published.
    """

    notifications: list[WorkflowNotification]
    last_sequence: int


# Route Handlers


@router.get("/status", response_model=WorkflowStatusResponse)
async def get_status(session: QuoteSessionDep):
    return WorkflowStatusResponse(**session.status())


@router.post("/advance", response_model=PhaseChangeResponse)
async def advance_phase(session: QuoteSessionDep):
    """Continue to the next phase if the current phase's rule passes."""
    previous = session.phase
    phase = session.advance_phase()
    return PhaseChangeResponse(phase=phase.value, previous_phase=previous.value)


@router.post("/back", response_model=PhaseChangeResponse)
async def go_back(session: QuoteSessionDep):
    """Return to the previous phase without discarding data."""
    previous = session.phase
    phase = session.go_back()
    return PhaseChangeResponse(phase=phase.value, previous_phase=previous.value)


@router.post("/undo", response_model=HistoryResponse)
async def undo(session: QuoteSessionDep, request: Optional[HistoryRequest] = None):
    """Undo the most recent quote edits.

    Args:
        session: The QuoteSession instance (injected by FastAPI).
        request: Number of commands to undo (default 1).

    Returns:
        The commands undone and undo/redo availability.
    """
    count = request.count if request else 1
    result = session.undo(count)
    return HistoryResponse(
        count=result["undone_count"],
        commands=result["undone_commands"],
        can_undo=result["can_undo"],
        can_redo=result["can_redo"],
        message=result.get("message"),
    )


@router.post("/redo", response_model=HistoryResponse)
async def redo(session: QuoteSessionDep, request: Optional[HistoryRequest] = None):
    count = request.count if request else 1
    result = session.redo(count)
    return HistoryResponse(
        count=result["redone_count"],
        commands=result["redone_commands"],
        can_undo=result["can_undo"],
        can_redo=result["can_redo"],
        message=result.get("message"),
    )


@router.get("/history")
async def get_history(session: QuoteSessionDep) -> dict[str, Any]:
    """List the commands available for undo and redo, most recent first."""
    return {
        "undo": session.undo_stack.get_undo_summary(),
        "redo": session.undo_stack.get_redo_summary(),
    }


@router.get("/notifications", response_model=NotificationsResponse)
async def get_notifications(
    session: QuoteSessionDep,
    since: int = Query(default=0, ge=0, description="Return notifications after this sequence"),
    kind: Optional[NotificationKind] = None,
):
    return NotificationsResponse(
        notifications=session.notifications.history(since=since, kind=kind),
        last_sequence=session.notifications.last_sequence,
    )
