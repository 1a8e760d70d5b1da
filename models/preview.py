"""Print-preview formatting.

Projects a quote and its totals into a structured PrintPreview grouped as
Room -> Product -> Processing, plus a plain-text rendering. The rendering has
no clock or random input: dates come from the quote itself, so the same quote
always renders to the same text.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from models.catalog import Catalog, OptionType, ProcessingDefinition, ProcessingOption
from models.errors import InvalidReferenceError
from models.pricing import QuoteTotals
from models.quote import Quote, RoomDimensions

DEFAULT_COMPANY_NAME = "Kitchen CPQ Solutions"
LINE_WIDTH = 64


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_dimensions(value: dict[str, Any]) -> str:
    """Render dimensions as 'W: 24" × H: 34.5" × D: 24"', skipping missing fields."""
    parts = []
    for key, prefix in (("width", "W"), ("height", "H"), ("depth", "D")):
        if value.get(key) is not None:
            parts.append(f'{prefix}: {_format_number(value[key])}"')
    return " × ".join(parts)


def format_option_value(option: ProcessingOption, value: Any) -> Optional[str]:
    """Format one selected option value for display.

    Select values show their choice label, booleans show Yes/No and
    dimensions use the W/H/D form. Empty values return None.
    """
    if value is None or value == "":
        return None
    if option.type == OptionType.SELECT:
        choice = option.find_choice(value)
        return choice.label if choice else str(value)
    if option.type == OptionType.BOOLEAN:
        return "Yes" if value else "No"
    if option.type == OptionType.DIMENSIONS and isinstance(value, dict):
        return format_dimensions(value) or None
    return _format_number(value)


def format_processing_display(
    definition: ProcessingDefinition, configuration: Optional[dict[str, Any]] = None
) -> str:
    """Build the display string for an applied processing.

    Returns the definition name, followed by the formatted option values in
    option order when any are set, e.g. "Dark Stain (Dark Walnut)".
    """
    if not configuration:
        return definition.name
    values = []
    for option in definition.options:
        formatted = format_option_value(option, configuration.get(option.id))
        if formatted:
            values.append(formatted)
    if not values:
        return definition.name
    return f"{definition.name} ({', '.join(values)})"


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


class PreviewProcessing(BaseModel):
    label: str
    kind: str
    display: str
    surcharge: Decimal
    inherited: bool = False


class PreviewProduct(BaseModel):
    name: str
    catalog_ref: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    processings: list[PreviewProcessing] = Field(default_factory=list)


class PreviewRoom(BaseModel):
    room_type: str
    style_name: str
    description: str = ""
    dimensions: Optional[str] = None
    subtotal: Decimal
    products: list[PreviewProduct] = Field(default_factory=list)


class PreviewFee(BaseModel):
    label: str
    amount: Decimal


class PrintPreview(BaseModel):
    """Read-only projection of a finalized quote.

    Args:
        company_name: Header name.
        quote_number: Human-facing quote number.
        customer_name: Selected customer's name.
        quote_date: Creation date (ISO format).
        valid_until: Expiry date (ISO format).
        rooms: Rooms with their products and processings.
        fees: Quote-level fees.
        products_subtotal: Sum of room subtotals.
        fees_total: Sum of fee amounts.
        total: Quote total.
        requires_approval: Whether the total exceeds the approval threshold.
        approval_notice: Notice printed when approval is required.
        notes: Quote notes.
        text: Plain-text rendering of everything above.
    """

    company_name: str
    quote_number: str
    customer_name: str
    quote_date: str
    valid_until: str
    rooms: list[PreviewRoom] = Field(default_factory=list)
    fees: list[PreviewFee] = Field(default_factory=list)
    products_subtotal: Decimal
    fees_total: Decimal
    total: Decimal
    requires_approval: bool
    approval_notice: Optional[str] = None
    notes: str = ""
    text: str = ""


def _room_dimensions(dimensions: Optional[RoomDimensions]) -> Optional[str]:
    if dimensions is None:
        return None
    return format_dimensions(dimensions.model_dump()) or None


def _style_name(catalog: Catalog, style_id: str) -> str:
    try:
        return catalog.get_style(style_id).name
    except InvalidReferenceError:
        return style_id


def build_print_preview(
    quote: Quote,
    totals: QuoteTotals,
    catalog: Catalog,
    company_name: str = DEFAULT_COMPANY_NAME,
) -> PrintPreview:
    """Project a quote into a PrintPreview, including its text rendering.

    Args:
        quote: Quote snapshot to render.
        totals: Totals computed for the same snapshot.
        catalog: Catalog used to resolve style and processing names.
        company_name: Header printed at the top.

    Returns:
        A fully populated PrintPreview.
    """
    rooms = []
    for room in quote.rooms:
        room_totals = totals.room(room.id)
        lines = {line.product_id: line for line in room_totals.products} if room_totals else {}
        products = []
        for product in room.products:
            processings = []
            for processing in product.processings:
                definition = catalog.get_processing(processing.processing_id)
                processings.append(
                    PreviewProcessing(
                        label=processing.label,
                        kind=processing.kind,
                        display=format_processing_display(definition, processing.configuration),
                        surcharge=processing.surcharge,
                        inherited=processing.inherited,
                    )
                )
            line = lines.get(product.id)
            products.append(
                PreviewProduct(
                    name=product.name,
                    catalog_ref=product.catalog_ref,
                    quantity=product.quantity,
                    unit_price=line.unit_price if line else product.base_price,
                    subtotal=line.subtotal if line else Decimal("0.00"),
                    processings=processings,
                )
            )
        rooms.append(
            PreviewRoom(
                room_type=room.room_type,
                style_name=_style_name(catalog, room.style_id),
                description=room.description,
                dimensions=_room_dimensions(room.dimensions),
                subtotal=room_totals.subtotal if room_totals else Decimal("0.00"),
                products=products,
            )
        )

    approval_notice = None
    if totals.requires_approval:
        approval_notice = (
            f"Quote total exceeds {format_money(totals.approval_threshold)} and requires approval"
        )

    preview = PrintPreview(
        company_name=company_name,
        quote_number=quote.quote_number,
        customer_name=quote.customer.name if quote.customer else "",
        quote_date=quote.created_at.date().isoformat(),
        valid_until=quote.expires_at.date().isoformat(),
        rooms=rooms,
        fees=[PreviewFee(label=fee.label, amount=fee.amount) for fee in quote.fees],
        products_subtotal=totals.products_subtotal,
        fees_total=totals.fees_total,
        total=totals.total,
        requires_approval=totals.requires_approval,
        approval_notice=approval_notice,
        notes=quote.notes,
    )
    preview.text = render_preview_text(preview)
    return preview


def _line(left: str, right: str) -> str:
    gap = max(LINE_WIDTH - len(left) - len(right), 1)
    return f"{left}{' ' * gap}{right}"


def render_preview_text(preview: PrintPreview) -> str:
    """Render a PrintPreview as plain text.

    Every processing is printed with its full display string, so each applied
    processing label appears verbatim in the output.
    """
    lines = [
        preview.company_name,
        f"Quote {preview.quote_number}",
        f"Customer: {preview.customer_name}",
        f"Date: {preview.quote_date}",
        f"Valid until: {preview.valid_until}",
        "=" * LINE_WIDTH,
    ]

    for room in preview.rooms:
        lines.append(f"Room: {room.room_type} - {room.style_name}")
        if room.description:
            lines.append(f"  {room.description}")
        if room.dimensions:
            lines.append(f"  Dimensions: {room.dimensions}")
        if not room.products:
            lines.append("  (no products)")
        for product in room.products:
            lines.append(
                _line(
                    f"  {product.name} x{product.quantity} @ {format_money(product.unit_price)}",
                    format_money(product.subtotal),
                )
            )
            for processing in product.processings:
                marker = " [room]" if processing.inherited else ""
                lines.append(
                    _line(f"    + {processing.display}{marker}", format_money(processing.surcharge))
                )
        lines.append(_line("  Room subtotal", format_money(room.subtotal)))
        lines.append("-" * LINE_WIDTH)

    if preview.fees:
        lines.append("Fees:")
        for fee in preview.fees:
            lines.append(_line(f"  {fee.label}", format_money(fee.amount)))
        lines.append("-" * LINE_WIDTH)

    lines.append(_line("Products subtotal", format_money(preview.products_subtotal)))
    lines.append(_line("Fees total", format_money(preview.fees_total)))
    lines.append(_line("TOTAL", format_money(preview.total)))

    if preview.approval_notice:
        lines.append(f"** {preview.approval_notice} **")
    if preview.notes:
        lines.append("Notes:")
        lines.extend(f"  {note}" for note in preview.notes.splitlines())

    return "\n".join(lines) + "\n"
