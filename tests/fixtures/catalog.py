"""Fixtures for catalog testing.

Most tests use the built-in sample catalog. create_small_catalog() builds a
compact catalog with one processing per pricing type and one option per
option type, for tests that need exact control over prices.
"""

import pytest

from models.catalog import Catalog


def create_small_catalog(**overrides) -> Catalog:
    """Create a compact catalog with predictable prices.

    Contents:
        - Products: p_base (cabinet, $100, 24" wide), p_top (countertop, $50,
          96" wide), p_knob (hardware, $5)
        - Processings: pr_finish (percentage 10%, required select with a 5%
          gloss modifier), pr_install and pr_push (per unit, mutually
          exclusive), pr_edge (per dimension $2/inch), pr_engrave (per unit,
          text/number/color/dimensions options)

    Args:
        **overrides: Top-level catalog fields to replace.

    Returns:
        A validated Catalog.
    """
    data = {
        "room_types": ["Kitchen", "Bath"],
        "customers": [
            {"id": "cust_a", "name": "Acme Builders"},
            {"id": "cust_b", "name": "Beta Homes"},
        ],
        "styles": [
            {"id": "style_a", "name": "Alpha", "category": "modern"},
            {"id": "style_b", "name": "Beta", "category": "traditional"},
        ],
        "products": [
            {
                "id": "p_base",
                "style_id": "style_a",
                "name": "Base Cabinet",
                "category": "cabinet",
                "base_price": "100",
                "dimensions": {"width": 24, "height": 34.5, "depth": 24},
            },
            {
                "id": "p_base_b",
                "style_id": "style_b",
                "name": "Base Cabinet",
                "category": "cabinet",
                "base_price": "120",
            },
            {
                "id": "p_top",
                "style_id": "style_a",
                "name": "Quartz Top",
                "category": "countertop",
                "base_price": "50",
                "unit": "sqft",
                "dimensions": {"width": 96},
            },
            {
                "id": "p_knob",
                "style_id": "style_a",
                "name": "Knob",
                "category": "hardware",
                "base_price": "5",
                "in_stock": False,
            },
        ],
        "processings": [
            {
                "id": "pr_finish",
                "name": "Finish",
                "kind": "Finish",
                "pricing_type": "percentage",
                "price": "0.10",
                "applicable_product_categories": ["cabinet"],
                "options": [
                    {
                        "id": "sheen",
                        "name": "Sheen",
                        "type": "select",
                        "required": True,
                        "choices": [
                            {"value": "matte", "label": "Matte", "price_modifier": "0"},
                            {"value": "gloss", "label": "Gloss", "price_modifier": "0.05"},
                        ],
                    }
                ],
            },
            {
                "id": "pr_install",
                "name": "Install",
                "kind": "Hardware",
                "pricing_type": "per_unit",
                "price": "20",
                "applicable_product_categories": ["cabinet"],
            },
            {
                "id": "pr_push",
                "name": "Push Open",
                "kind": "Hardware",
                "pricing_type": "per_unit",
                "price": "30",
                "applicable_product_categories": ["cabinet"],
            },
            {
                "id": "pr_edge",
                "name": "Edge",
                "kind": "Edge Profile",
                "pricing_type": "per_dimension",
                "price": "2",
                "applicable_product_categories": ["countertop"],
                "options": [
                    {"id": "polish", "name": "Polish", "type": "boolean", "default_value": False}
                ],
            },
            {
                "id": "pr_engrave",
                "name": "Engrave",
                "kind": "Engraving",
                "pricing_type": "per_unit",
                "price": "10",
                "applicable_product_categories": ["cabinet"],
                "options": [
                    {"id": "text", "name": "Text", "type": "text", "required": True},
                    {"id": "depth", "name": "Depth", "type": "number", "min": 1, "max": 5},
                    {
                        "id": "ink",
                        "name": "Ink",
                        "type": "color",
                        "color_palette": ["#000000", "#FFFFFF"],
                    },
                    {
                        "id": "size",
                        "name": "Size",
                        "type": "dimensions",
                        "dimension_fields": ["width", "height"],
                    },
                ],
            },
        ],
        "exclusion_rules": [
            {
                "id": "rule_handles",
                "processing_ids": ["pr_install"],
                "excludes": ["pr_push"],
                "description": "Push-open cannot be combined with installed handles",
            }
        ],
    }
    data.update(overrides)
    return Catalog.model_validate(data)


@pytest.fixture
def catalog():
    """Provide the built-in sample catalog."""
    return Catalog.default()


@pytest.fixture
def small_catalog():
    """Provide the compact test catalog (see create_small_catalog)."""
    return create_small_catalog()
