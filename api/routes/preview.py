"""Print preview endpoints.

Requesting a preview finalizes the quote (moving from fees_config to
print_preview when needed). Repeated requests without edits return identical
output.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from api.dependencies import QuoteSessionDep
from models.preview import PrintPreview

router = APIRouter(
    prefix="/preview",
    tags=["preview"],
)


@router.post("", response_model=PrintPreview)
async def request_print_preview(session: QuoteSessionDep):
    """Build the structured print preview, including its text rendering."""
    return session.request_print_preview()


@router.post("/text", response_class=PlainTextResponse)
async def request_print_preview_text(session: QuoteSessionDep):
    """Build the print preview and return only the plain-text rendering."""
    return PlainTextResponse(session.request_print_preview().text)
