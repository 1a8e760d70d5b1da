"""Helpers shared by the route modules.

Catalog listings are searched and paginated in memory; command responses
describe the quote with quote_summary().
"""

from typing import Any, TypeVar

from pydantic import BaseModel

from models.quote import Quote

ModelT = TypeVar("ModelT", bound=BaseModel)


def apply_pagination(
    items: list[Any],
    limit: int | None = None,
    offset: int = 0,
) -> tuple[list[Any], int, int]:
    """Slice a listing.

    Returns:
        Tuple of (page, total_count, returned_count).
    """
    end = None if limit is None else offset + limit
    page = items[offset:end]
    return page, len(items), len(page)


def filter_by_text_search(
    items: list[ModelT],
    search_text: str | None = None,
    search_fields: list[str] | None = None,
) -> list[ModelT]:
    """Keep models whose string fields contain search_text (case-insensitive).

    Args:
        items: Models to filter (customers, catalog products...).
        search_text: Text to look for; empty or None keeps everything.
        search_fields: Attributes to search (None = every field of the model).
    """
    if not search_text:
        return items

    needle = search_text.lower()

    def matches(item: ModelT) -> bool:
        for field in search_fields or type(item).model_fields:
            value = getattr(item, field, None)
            if isinstance(value, str) and needle in value.lower():
                return True
        return False

    return [item for item in items if matches(item)]


def quote_summary(quote: Quote) -> dict[str, Any]:
    """Short quote description returned by command endpoints."""
    return {
        "quote_id": quote.id,
        "quote_number": quote.quote_number,
        "phase": quote.phase.value,
        "status": quote.status.value,
        "customer": quote.customer.name if quote.customer else None,
        "room_count": len(quote.rooms),
        "product_count": quote.product_count,
        "fee_count": len(quote.fees),
    }
