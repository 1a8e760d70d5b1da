"""Fixtures for QuoteSession testing.

Each fixture returns a session advanced to a known point of the workflow,
built through the public commands so the fixtures exercise the same paths as
real callers. All sessions use a fixed clock for predictable dates.
"""

from datetime import datetime, timezone

import pytest

from models.catalog import Catalog
from models.quote import RoomSpec
from models.session import QuoteSession

FIXED_NOW = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)

SAMPLE_CUSTOMER = "John Smith Construction"
SAMPLE_STYLE = "mod_traditional_oak"
SAMPLE_PRODUCT = '12" Base Cabinet'


def fixed_clock() -> datetime:
    return FIXED_NOW


def create_session(catalog: Catalog | None = None, **kwargs) -> QuoteSession:
    """Create a session with a started quote.

    Args:
        catalog: Catalog to use (built-in sample catalog when None).
        **kwargs: Extra QuoteSession constructor arguments.

    Returns:
        A QuoteSession in customer_select.
    """
    kwargs.setdefault("clock", fixed_clock)
    session = QuoteSession(catalog=catalog, **kwargs)
    session.start_new_quote()
    return session


def advance_to_room_config(session: QuoteSession, customer: str = SAMPLE_CUSTOMER) -> QuoteSession:
    session.select_customer(customer)
    session.advance_phase()
    return session


def advance_to_product_config(
    session: QuoteSession,
    room_type: str = "Kitchen",
    style_id: str = SAMPLE_STYLE,
    customer: str = SAMPLE_CUSTOMER,
) -> QuoteSession:
    """Select the customer, create one room and continue to product_config."""
    advance_to_room_config(session, customer)
    session.create_room(
        RoomSpec(room_type=room_type, style_id=style_id, description=f"Test {room_type}")
    )
    session.advance_phase()
    return session


@pytest.fixture
def session():
    """Provide a session with a new quote in customer_select."""
    return create_session()


@pytest.fixture
def room_session():
    """Provide a session in room_config with the customer selected."""
    return advance_to_room_config(create_session())


@pytest.fixture
def product_session():
    """Provide a session in product_config with one empty Kitchen room."""
    return advance_to_product_config(create_session())


@pytest.fixture
def fees_session():
    """Provide a session in fees_config.

    The Kitchen room holds one 12" Base Cabinet with Dark Stain (walnut).
    """
    session = advance_to_product_config(create_session())
    product = session.add_product(None, SAMPLE_PRODUCT)
    session.apply_processing(product.id, "Dark Stain", {"stain_color": "walnut"})
    session.advance_phase()
    return session


@pytest.fixture
def small_session(small_catalog):
    """Provide a session on the compact catalog, in product_config with one room."""
    session = create_session(catalog=small_catalog)
    return advance_to_product_config(
        session, room_type="Kitchen", style_id="style_a", customer="cust_a"
    )
