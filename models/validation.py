"""Validation rules for the quote workflow.

Every rule is a pure function returning a RuleResult. Rules never mutate the
quote; the QuoteSession decides what to do with a failed result (usually raise
ValidationFailedError and publish a validation_failed notification).
"""

from numbers import Number
from typing import Any, Optional

from pydantic import BaseModel

from models.catalog import ExclusionRule, OptionType, ProcessingDefinition, ProcessingOption
from models.phases import ProcessingDraft
from models.quote import Product, Quote, RoomSpec


class RuleResult(BaseModel):
    """Outcome of a validation rule.

    Truthiness mirrors `allowed`, so results can be used directly in conditions.

    Args:
        rule: Name of the rule that produced this result.
        allowed: Whether the guarded action may proceed.
        reason: Human-readable reason when not allowed.
    """

    rule: str
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def ok(cls, rule: str) -> "RuleResult":
        return cls(rule=rule, allowed=True)

    @classmethod
    def fail(cls, rule: str, reason: str) -> "RuleResult":
        return cls(rule=rule, allowed=False, reason=reason)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def can_create_room(spec: RoomSpec) -> RuleResult:
    """Create Room is enabled once a room type and a style are chosen.

    Dimensions are optional and do not affect this rule.
    """
    rule = "can_create_room"
    if _blank(spec.room_type):
        return RuleResult.fail(rule, "Select a room type")
    if _blank(spec.style_id):
        return RuleResult.fail(rule, "Select a style")
    return RuleResult.ok(rule)


def can_advance_from_customer(quote: Quote) -> RuleResult:
    rule = "can_advance_from_customer"
    if quote.customer is None:
        return RuleResult.fail(rule, "Select a customer before continuing")
    return RuleResult.ok(rule)


def can_advance_from_room(quote: Quote, active_room_id: Optional[str]) -> RuleResult:
    rule = "can_advance_from_room"
    if not quote.rooms:
        return RuleResult.fail(rule, "Create at least one room before continuing")
    if active_room_id is None or quote.find_room(active_room_id) is None:
        return RuleResult.fail(rule, "Select a room before continuing")
    return RuleResult.ok(rule)


def can_advance_from_product(quote: Quote, active_room_id: Optional[str]) -> RuleResult:
    """The active room must contain at least one product."""
    rule = "can_advance_from_product"
    room = quote.find_room(active_room_id) if active_room_id else None
    if room is None:
        return RuleResult.fail(rule, "Select a room before continuing")
    if not room.products:
        return RuleResult.fail(rule, f"Add at least one product to {room.room_type} before continuing")
    return RuleResult.ok(rule)


def can_advance_from_fees(quote: Quote) -> RuleResult:
    """Fees are optional, so this gate always passes."""
    return RuleResult.ok("can_advance_from_fees")


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_option_value(option: ProcessingOption, value: Any) -> Optional[str]:
    """Return a reason string if `value` is not acceptable for `option`."""
    if option.type == OptionType.SELECT:
        if option.find_choice(value) is None:
            allowed = ", ".join(choice.value for choice in option.choices)
            return f"'{value}' is not a valid {option.name} (choose one of: {allowed})"
    elif option.type == OptionType.COLOR:
        if not isinstance(value, str):
            return f"{option.name} must be a color string"
        palette = [color.upper() for color in option.color_palette]
        if palette and value.upper() not in palette:
            return f"{value} is not in the {option.name} palette"
    elif option.type == OptionType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, Number):
            return f"{option.name} must be a number"
        if option.min is not None and value < option.min:
            return f"{option.name} must be at least {option.min}"
        if option.max is not None and value > option.max:
            return f"{option.name} must be at most {option.max}"
    elif option.type == OptionType.BOOLEAN:
        if not isinstance(value, bool):
            return f"{option.name} must be true or false"
    elif option.type == OptionType.DIMENSIONS:
        if not isinstance(value, dict):
            return f"{option.name} must be a set of dimensions"
        for field, dimension in value.items():
            if option.dimension_fields and field not in option.dimension_fields:
                return f"{option.name} has no '{field}' dimension"
            if isinstance(dimension, bool) or not isinstance(dimension, Number) or dimension <= 0:
                return f"{option.name} {field} must be a positive number"
    return None


def can_apply_processing(
    draft: ProcessingDraft,
    definition: ProcessingDefinition,
    product: Product,
    exclusion_rules: list[ExclusionRule],
) -> RuleResult:
    """Decide whether a processing configuration can be applied to a product.

    Checks, in order: the definition fits the product's category, the product
    doesn't already carry it, no exclusion rule conflicts, every required
    option has a value, and every supplied value is valid for its option.

    Args:
        draft: The configuration being applied.
        definition: Catalog definition of the processing.
        product: Target product as currently stored.
        exclusion_rules: Catalog exclusion rules.

    Returns:
        RuleResult with a reason naming the first problem found.
    """
    rule = "can_apply_processing"

    if not definition.applies_to(product.category):
        return RuleResult.fail(
            rule, f"{definition.name} cannot be applied to {product.category.value} products"
        )

    existing = product.processing_ids()
    if definition.id in existing:
        return RuleResult.fail(rule, f"{definition.name} is already applied to {product.name}")

    for exclusion in exclusion_rules:
        if exclusion.conflicts(existing, definition.id):
            return RuleResult.fail(rule, exclusion.description or f"{definition.name} conflicts with an existing processing")

    for option in definition.options:
        value = draft.options.get(option.id)
        if _missing(value):
            if option.required:
                return RuleResult.fail(rule, f"{option.name} is required for {definition.name}")
            continue
        reason = _check_option_value(option, value)
        if reason is not None:
            return RuleResult.fail(rule, reason)

    unknown = set(draft.options) - {option.id for option in definition.options}
    if unknown:
        return RuleResult.fail(
            rule, f"{definition.name} has no option(s): {', '.join(sorted(unknown))}"
        )

    return RuleResult.ok(rule)
