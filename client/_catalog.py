"""Catalog sub-client for the Kitchen CPQ API.

This module provides CatalogClient for the read-only catalog endpoints
(/catalog/*).

This is an internal module. Import from `client` instead.
"""

from client._base import BaseClient
from client.models import ListResponse
from models.catalog import (
    CatalogProduct,
    Customer,
    ExclusionRule,
    ProcessingDefinition,
    ProductCategory,
    Style,
    StyleCategory,
)


class CatalogClient(BaseClient):
    """Client for catalog browsing endpoints (/catalog/*).

    Example:
        with CPQClient() as client:
            styles = client.catalog.list_styles(category="modern")
            doors = client.catalog.list_products(style_id=styles.results[0].id)
    """

    _BASE_PATH = "/catalog"

    def list_customers(
        self,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> ListResponse[Customer]:
        """List customers, optionally filtered by name.

        Args:
            search: Case-insensitive text in the customer name or id.
            limit: Maximum number of customers to return.
            offset: Number of customers to skip.

        Returns:
            Matching customers and counts.
        """
        data = self._get(
            f"{self._BASE_PATH}/customers",
            params={"search": search, "limit": limit, "offset": offset},
        )
        return ListResponse[Customer](**data)

    def list_room_types(self) -> list[str]:
        data = self._get(f"{self._BASE_PATH}/room-types")
        return data["room_types"]

    def list_styles(self, category: StyleCategory | str | None = None) -> ListResponse[Style]:
        if isinstance(category, StyleCategory):
            category = category.value
        data = self._get(f"{self._BASE_PATH}/styles", params={"category": category})
        return ListResponse[Style](**data)

    def get_style(self, style_id: str) -> Style:
        """Get one style.

        Raises:
            NotFoundError: If the style does not exist.
        """
        return Style(**self._get(f"{self._BASE_PATH}/styles/{style_id}"))

    def list_products(
        self,
        style_id: str | None = None,
        category: ProductCategory | str | None = None,
        in_stock_only: bool = False,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> ListResponse[CatalogProduct]:
        """List catalog products with filtering and pagination.

        Args:
            style_id: Only products of this style.
            category: Only products of this category.
            in_stock_only: Hide out-of-stock products.
            search: Case-insensitive text in name or description.
            limit: Maximum number of products to return.
            offset: Number of products to skip.

        Returns:
            Matching products and counts.
        """
        if isinstance(category, ProductCategory):
            category = category.value
        data = self._get(
            f"{self._BASE_PATH}/products",
            params={
                "style_id": style_id,
                "category": category,
                "in_stock_only": in_stock_only,
                "search": search,
                "limit": limit,
                "offset": offset,
            },
        )
        return ListResponse[CatalogProduct](**data)

    def get_product(self, product_id: str) -> CatalogProduct:
        return CatalogProduct(**self._get(f"{self._BASE_PATH}/products/{product_id}"))

    def list_product_processings(self, product_id: str) -> ListResponse[ProcessingDefinition]:
        """List the processings applicable to a catalog product."""
        data = self._get(f"{self._BASE_PATH}/products/{product_id}/processings")
        return ListResponse[ProcessingDefinition](**data)

    def list_processings(
        self, category: ProductCategory | str | None = None
    ) -> ListResponse[ProcessingDefinition]:
        if isinstance(category, ProductCategory):
            category = category.value
        data = self._get(f"{self._BASE_PATH}/processings", params={"category": category})
        return ListResponse[ProcessingDefinition](**data)

    def get_processing(self, processing_id: str) -> ProcessingDefinition:
        return ProcessingDefinition(**self._get(f"{self._BASE_PATH}/processings/{processing_id}"))

    def list_exclusion_rules(self) -> list[ExclusionRule]:
        data = self._get(f"{self._BASE_PATH}/exclusion-rules")
        return [ExclusionRule(**rule) for rule in data]
