"""Catalog models - the selectable reference data for building quotes.

The catalog holds everything an operator can pick from while building a quote:
customers, room types, styles (front models), catalog products, processing
definitions with their configurable options, and the exclusion rules that keep
incompatible processings off the same product.
"""

import json
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.errors import InvalidReferenceError


class StyleCategory(str, Enum):
    """Broad family a style belongs to."""

    TRADITIONAL = "traditional"
    MODERN = "modern"
    TRANSITIONAL = "transitional"


class ProductCategory(str, Enum):
    """Category of a catalog product; processings declare which they apply to."""

    CABINET = "cabinet"
    DOOR = "door"
    HARDWARE = "hardware"
    COUNTERTOP = "countertop"
    APPLIANCE = "appliance"
    ACCESSORY = "accessory"


class ProductUnit(str, Enum):
    """Unit a catalog product is sold by."""

    EACH = "each"
    SQFT = "sqft"
    LINFT = "linft"


class PricingType(str, Enum):
    """How a processing's surcharge is calculated."""

    PER_UNIT = "per_unit"
    PER_DIMENSION = "per_dimension"
    PERCENTAGE = "percentage"


class OptionType(str, Enum):
    """Input type of a processing option."""

    SELECT = "select"
    COLOR = "color"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DIMENSIONS = "dimensions"


class Dimensions(BaseModel):
    """Physical dimensions in inches. Any field may be omitted."""

    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    depth: Optional[float] = Field(default=None, ge=0)


class Customer(BaseModel):
    """A customer a quote can be built for.

    Args:
        id: Unique customer identifier.
        name: Display name (e.g., "John Smith Construction").
    """

    id: str = Field(description="Unique customer identifier")
    name: str = Field(description="Customer display name")

    model_config = {"frozen": True}


class Style(BaseModel):
    """A front model / style that determines colors and finishes of a room.

    Args:
        id: Unique style identifier (e.g., "mod_traditional_oak").
        name: Display name.
        description: Short marketing description.
        category: Style family.
    """

    id: str
    name: str
    description: str = ""
    category: StyleCategory


class CatalogProduct(BaseModel):
    """A product that can be added to a room.

    Args:
        id: Unique product identifier.
        style_id: Style this product belongs to.
        name: Display name (e.g., '12" Base Cabinet').
        category: Product category used to match processings.
        sub_category: Finer grouping (base, wall, knob, ...).
        base_price: Unit price.
        unit: Unit the product is sold by.
        dimensions: Nominal dimensions, if the product has any.
        in_stock: Whether the product is currently stocked.
        lead_time_days: Delivery lead time.
        description: Long description.
    """

    id: str
    style_id: str
    name: str
    category: ProductCategory
    sub_category: str = ""
    base_price: Decimal = Field(ge=0)
    unit: ProductUnit = ProductUnit.EACH
    dimensions: Optional[Dimensions] = None
    in_stock: bool = True
    lead_time_days: int = Field(default=0, ge=0)
    description: str = ""


class OptionChoice(BaseModel):
    """One choice of a select option.

    For percentage-priced processings the price modifier is an additional
    rate; otherwise it is an amount added per unit.
    """

    value: str
    label: str
    price_modifier: Decimal = Decimal("0")


class ProcessingOption(BaseModel):
    """A configurable option of a processing (e.g., stain color).

    Args:
        id: Option identifier, unique within its processing.
        name: Display name.
        type: Input type; decides how values are validated and displayed.
        required: Whether a value must be chosen before the processing applies.
        description: Help text.
        default_value: Value pre-filled when the configuration is opened.
        choices: Allowed values for select options.
        color_palette: Allowed values for color options (empty = any color).
        min: Lower bound for number options.
        max: Upper bound for number options.
        unit: Unit label for number options.
        dimension_fields: Fields collected by dimensions options.
    """

    id: str
    name: str
    type: OptionType
    required: bool = False
    description: str = ""
    default_value: Any = None
    choices: list[OptionChoice] = Field(default_factory=list)
    color_palette: list[str] = Field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    unit: Optional[str] = None
    dimension_fields: list[str] = Field(default_factory=list)

    def find_choice(self, value: Any) -> Optional[OptionChoice]:
        """Return the choice with the given value, or None."""
        for choice in self.choices:
            if choice.value == value:
                return choice
        return None


class ProcessingDefinition(BaseModel):
    """A processing (add-on) that can be applied to products.

    Args:
        id: Unique processing identifier (e.g., "proc_stain_dark").
        name: Display name (e.g., "Dark Stain").
        kind: Short kind label (e.g., "Stain", "Cut-to-Size", "Hardware").
        description: Long description.
        category: Grouping used by the catalog UI.
        pricing_type: How the surcharge is calculated.
        price: Rate (percentage) or amount (per unit / per inch of width).
        applicable_product_categories: Product categories this processing fits.
        options: Configurable options.
    """

    id: str
    name: str
    kind: str
    description: str = ""
    category: str = ""
    pricing_type: PricingType
    price: Decimal = Field(ge=0)
    applicable_product_categories: list[ProductCategory] = Field(default_factory=list)
    options: list[ProcessingOption] = Field(default_factory=list)

    @property
    def requires_configuration(self) -> bool:
        """Whether any option must be chosen before applying."""
        return any(option.required for option in self.options)

    def applies_to(self, category: ProductCategory) -> bool:
        return category in self.applicable_product_categories

    def get_option(self, option_id: str) -> Optional[ProcessingOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def default_configuration(self) -> dict[str, Any]:
        """Option values pre-filled when the configuration is opened."""
        return {
            option.id: option.default_value
            for option in self.options
            if option.default_value is not None
        }


class ExclusionRule(BaseModel):
    """Processings that cannot be combined on the same product.

    A product carrying any of `processing_ids` cannot receive any of
    `excludes`, and vice versa.
    """

    id: str
    processing_ids: list[str]
    excludes: list[str]
    description: str = ""

    def conflicts(self, existing_ids: set[str], new_id: str) -> bool:
        if new_id in self.excludes and existing_ids.intersection(self.processing_ids):
            return True
        if new_id in self.processing_ids and existing_ids.intersection(self.excludes):
            return True
        return False


class Catalog(BaseModel):
    """All selectable reference data, with lookups used by the session.

    Lookups raise InvalidReferenceError for unknown identifiers so that a
    command referencing catalog data fails without touching the quote.
    """

    room_types: list[str] = Field(default_factory=list)
    customers: list[Customer] = Field(default_factory=list)
    styles: list[Style] = Field(default_factory=list)
    products: list[CatalogProduct] = Field(default_factory=list)
    processings: list[ProcessingDefinition] = Field(default_factory=list)
    exclusion_rules: list[ExclusionRule] = Field(default_factory=list)

    @field_validator("customers", "styles", "products", "processings")
    @classmethod
    def validate_unique_ids(cls, v: list[Any]) -> list[Any]:
        """Reject duplicate identifiers within a collection."""
        seen: set[str] = set()
        for item in v:
            if item.id in seen:
                raise ValueError(f"Duplicate catalog id '{item.id}'")
            seen.add(item.id)
        return v

    @model_validator(mode="after")
    def validate_references(self) -> "Catalog":
        """Ensure products and rules only reference known styles and processings."""
        style_ids = {style.id for style in self.styles}
        for product in self.products:
            if product.style_id not in style_ids:
                raise ValueError(
                    f"Product '{product.id}' references unknown style '{product.style_id}'"
                )
        processing_ids = {processing.id for processing in self.processings}
        for rule in self.exclusion_rules:
            unknown = set(rule.processing_ids + rule.excludes) - processing_ids
            if unknown:
                raise ValueError(
                    f"Exclusion rule '{rule.id}' references unknown processings: {sorted(unknown)}"
                )
        return self

    @classmethod
    def default(cls) -> "Catalog":
        """Build the built-in sample catalog."""
        from models.catalog_data import DEFAULT_CATALOG

        return cls.model_validate(DEFAULT_CATALOG)

    @classmethod
    def from_file(cls, path: str | Path) -> "Catalog":
        """Load a catalog from a JSON file with the same shape as the model."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)

    # ===== Lookups =====

    def get_customer(self, customer_id: str) -> Customer:
        for customer in self.customers:
            if customer.id == customer_id:
                return customer
        raise InvalidReferenceError("customer", customer_id)

    def find_customer(self, ref: str) -> Customer:
        """Resolve a customer by id or by exact display name."""
        for customer in self.customers:
            if customer.id == ref or customer.name == ref:
                return customer
        raise InvalidReferenceError("customer", ref)

    def get_style(self, style_id: str) -> Style:
        for style in self.styles:
            if style.id == style_id:
                return style
        raise InvalidReferenceError("style", style_id)

    def has_style(self, style_id: str) -> bool:
        return any(style.id == style_id for style in self.styles)

    def get_product(self, product_id: str) -> CatalogProduct:
        for product in self.products:
            if product.id == product_id:
                return product
        raise InvalidReferenceError("catalog product", product_id)

    def resolve_product(self, ref: str, style_id: Optional[str] = None) -> CatalogProduct:
        """Resolve a catalog product by id or display name.

        Display names repeat across styles, so a name match prefers the
        product of the given style and falls back to the first match.

        Raises:
            InvalidReferenceError: If nothing matches.
        """
        for product in self.products:
            if product.id == ref:
                return product

        matches = [product for product in self.products if product.name == ref]
        if not matches:
            raise InvalidReferenceError("catalog product", ref)
        for product in matches:
            if product.style_id == style_id:
                return product
        return matches[0]

    def list_products(
        self,
        style_id: Optional[str] = None,
        category: Optional[ProductCategory] = None,
        in_stock_only: bool = False,
    ) -> list[CatalogProduct]:
        results = self.products
        if style_id is not None:
            results = [p for p in results if p.style_id == style_id]
        if category is not None:
            results = [p for p in results if p.category == category]
        if in_stock_only:
            results = [p for p in results if p.in_stock]
        return list(results)

    def get_processing(self, processing_id: str) -> ProcessingDefinition:
        for processing in self.processings:
            if processing.id == processing_id:
                return processing
        raise InvalidReferenceError("processing", processing_id)

    def resolve_processing(self, ref: str) -> ProcessingDefinition:
        """Resolve a processing definition by id or display name."""
        for processing in self.processings:
            if processing.id == ref or processing.name == ref:
                return processing
        raise InvalidReferenceError("processing", ref)

    def processings_for(self, category: ProductCategory) -> list[ProcessingDefinition]:
        """List processings applicable to a product category."""
        return [p for p in self.processings if p.applies_to(category)]
