"""Catalog browsing endpoints.

Read-only access to the reference data an operator picks from: customers,
room types, styles, products and processing definitions.
"""

from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from api.dependencies import QuoteSessionDep
from api.models import ListResponse
from api.utils import apply_pagination, filter_by_text_search
from models.catalog import (
    CatalogProduct,
    Customer,
    ExclusionRule,
    ProcessingDefinition,
    ProductCategory,
    Style,
    StyleCategory,
)

router = APIRouter(
    prefix="/catalog",
    tags=["catalog"],
)


class RoomTypesResponse(BaseModel):
    """Suggested room types."""

    room_types: list[str]


@router.get("/customers", response_model=ListResponse[Customer])
async def list_customers(
    session: QuoteSessionDep,
    search: Optional[str] = Query(default=None, description="Case-insensitive name search"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
):
    """List customers, optionally filtered by name."""
    customers = filter_by_text_search(session.catalog.customers, search, ["name", "id"])
    results, total, returned = apply_pagination(customers, limit, offset)
    return ListResponse[Customer](
        query={"search": search, "limit": limit, "offset": offset},
        results=results,
        total_count=total,
        returned_count=returned,
    )


@router.get("/room-types", response_model=RoomTypesResponse)
async def list_room_types(session: QuoteSessionDep):
    return RoomTypesResponse(room_types=session.catalog.room_types)


@router.get("/styles", response_model=ListResponse[Style])
async def list_styles(
    session: QuoteSessionDep,
    category: Optional[StyleCategory] = None,
):
    """List styles (front models), optionally by category."""
    styles = session.catalog.styles
    if category is not None:
        styles = [style for style in styles if style.category == category]
    return ListResponse[Style](
        query={"category": category.value if category else None},
        results=styles,
        total_count=len(styles),
        returned_count=len(styles),
    )


@router.get("/styles/{style_id}", response_model=Style)
async def get_style(style_id: str, session: QuoteSessionDep):
    return session.catalog.get_style(style_id)


@router.get("/products", response_model=ListResponse[CatalogProduct])
async def list_products(
    session: QuoteSessionDep,
    style_id: Optional[str] = None,
    category: Optional[ProductCategory] = None,
    in_stock_only: bool = False,
    search: Optional[str] = Query(default=None, description="Search in name and description"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
):
    """List catalog products with filtering and pagination.

    Args:
        session: The QuoteSession instance (injected by FastAPI).
        style_id: Only products of this style.
        category: Only products of this category.
        in_stock_only: Hide out-of-stock products.
        search: Case-insensitive text in name or description.
        limit: Maximum number of products to return.
        offset: Number of products to skip.

    Returns:
        Matching products and counts.
    """
    products = session.catalog.list_products(
        style_id=style_id, category=category, in_stock_only=in_stock_only
    )
    products = filter_by_text_search(products, search, ["name", "description"])
    results, total, returned = apply_pagination(products, limit, offset)
    return ListResponse[CatalogProduct](
        query={
            "style_id": style_id,
            "category": category.value if category else None,
            "in_stock_only": in_stock_only,
            "search": search,
            "limit": limit,
            "offset": offset,
        },
        results=results,
        total_count=total,
        returned_count=returned,
    )


@router.get("/products/{product_id}", response_model=CatalogProduct)
async def get_product(product_id: str, session: QuoteSessionDep):
    return session.catalog.get_product(product_id)


@router.get(
    "/products/{product_id}/processings",
    response_model=ListResponse[ProcessingDefinition],
)
async def list_product_processings(product_id: str, session: QuoteSessionDep):
    """List processings applicable to a catalog product's category."""
    product = session.catalog.get_product(product_id)
    processings = session.catalog.processings_for(product.category)
    return ListResponse[ProcessingDefinition](
        query={"product_id": product_id, "category": product.category.value},
        results=processings,
        total_count=len(processings),
        returned_count=len(processings),
    )


@router.get("/processings", response_model=ListResponse[ProcessingDefinition])
async def list_processings(
    session: QuoteSessionDep,
    category: Optional[ProductCategory] = Query(
        default=None, description="Only processings applicable to this product category"
    ),
):
    processings = session.catalog.processings
    if category is not None:
        processings = session.catalog.processings_for(category)
    return ListResponse[ProcessingDefinition](
        query={"category": category.value if category else None},
        results=processings,
        total_count=len(processings),
        returned_count=len(processings),
    )


@router.get("/processings/{processing_id}", response_model=ProcessingDefinition)
async def get_processing(processing_id: str, session: QuoteSessionDep):
    return session.catalog.get_processing(processing_id)


@router.get("/exclusion-rules", response_model=list[ExclusionRule])
async def list_exclusion_rules(session: QuoteSessionDep):
    return session.catalog.exclusion_rules
