"""Helper functions for API integration tests.

These drive the workflow through HTTP calls only, so each helper exercises
the same endpoints a real client would use. Every helper asserts the status
code of each call it makes and returns the parsed body of the last one that
matters to the caller.
"""

from typing import Any, Optional

from fastapi.testclient import TestClient

SAMPLE_STYLE = "mod_traditional_oak"
SAMPLE_PRODUCT = '12" Base Cabinet'


def room_request(
    room_type: str = "Kitchen",
    style_id: str = SAMPLE_STYLE,
    description: Optional[str] = None,
    **extra: Any,
) -> dict[str, Any]:
    """Create a room creation request body.

    Example:
        >>> client.post("/quote/rooms", json=room_request(dimensions={"width": 120}))
    """
    request: dict[str, Any] = {
        "room_type": room_type,
        "style_id": style_id,
        "description": description if description is not None else f"Test {room_type}",
    }
    request.update(extra)
    return request


def advance(client: TestClient) -> dict[str, Any]:
    response = client.post("/workflow/advance")
    assert response.status_code == 200, response.json()
    return response.json()


def to_room_config(client: TestClient) -> None:
    """From customer_select with a customer selected, continue to room_config."""
    advance(client)


def to_product_config(client: TestClient, **room: Any) -> dict[str, Any]:
    """From customer_select, create one room and continue to product_config.

    Returns:
        The created room.
    """
    to_room_config(client)
    response = client.post("/quote/rooms", json=room_request(**room))
    assert response.status_code == 201, response.json()
    advance(client)
    return response.json()


def add_product(client: TestClient, product: str = SAMPLE_PRODUCT, **extra: Any) -> dict[str, Any]:
    response = client.post("/quote/products", json={"product": product, **extra})
    assert response.status_code == 201, response.json()
    return response.json()


def to_fees_config(client: TestClient) -> dict[str, Any]:
    """From customer_select, build a one-cabinet quote with Dark Stain and reach fees_config.

    Returns:
        The added product (before the stain was applied).
    """
    to_product_config(client)
    product = add_product(client)
    response = client.post(
        "/processing/apply",
        json={
            "product_id": product["id"],
            "processing": "Dark Stain",
            "config": {"stain_color": "walnut"},
        },
    )
    assert response.status_code == 200, response.json()
    advance(client)
    return product
