"""Processing configuration endpoints.

These drive the processing configuration modal: open it for a product, set
option values on the draft, then apply or cancel. A processing can also be
applied directly from product_config with POST /processing/apply.
"""

from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import QuoteSessionDep
from models.errors import InvalidStateError
from models.phases import ProcessingDraft
from models.quote import Processing

router = APIRouter(
    prefix="/processing",
    tags=["processing"],
)


class OpenProcessingRequest(BaseModel):
    """Request model for opening the configuration modal.

    Attributes:
        product_id: Product to configure.
        processing: Processing definition id or display name (e.g., "Dark Stain").
    """

    product_id: str
    processing: str = Field(..., min_length=1)


class SetOptionRequest(BaseModel):
    """Value for one option; null clears it."""

    value: Any = None


class ApplyProcessingRequest(BaseModel):
    """Request model for applying a processing.

    With the modal open every field is optional and `config` is merged into
    the draft. Without the modal, product_id and processing are required.
    """

    product_id: Optional[str] = None
    processing: Optional[str] = None
    config: dict[str, Any] = Field(default_factory=dict)


@router.post("/open", response_model=ProcessingDraft)
async def open_processing_config(request: OpenProcessingRequest, session: QuoteSessionDep):
    return session.open_processing_config(request.product_id, request.processing)


@router.get("/draft", response_model=ProcessingDraft)
async def get_draft(session: QuoteSessionDep):
    """Get the draft of the open configuration modal."""
    draft = session.phases.draft
    if draft is None:
        raise InvalidStateError(
            "read processing draft",
            "no processing configuration is open",
            phase=session.phases.current.value,
        )
    return draft


@router.put("/options/{option_id}", response_model=ProcessingDraft)
async def set_processing_option(
    option_id: str, request: SetOptionRequest, session: QuoteSessionDep
):
    return session.set_processing_option(option_id, request.value)


@router.post("/apply", response_model=Processing)
async def apply_processing(request: ApplyProcessingRequest, session: QuoteSessionDep):
    """Apply the open draft, or a processing given directly.

    Args:
        request: Optional product, processing and option values.
        session: The QuoteSession instance (injected by FastAPI).

    Returns:
        The processing as stored on the product, with its surcharge.
    """
    return session.apply_processing(request.product_id, request.processing, request.config)


@router.post("/cancel", response_model=ProcessingDraft)
async def cancel_processing_config(session: QuoteSessionDep):
    """Close the modal; the returned draft has been discarded."""
    return session.cancel_processing_config()
