"""Unit tests for the client exception hierarchy."""

import pytest

from client import (
    APIError,
    BadRequestError,
    ConflictError,
    ConnectionError,
    CPQClientError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_type", [BadRequestError, NotFoundError, ConflictError, ValidationError, ServerError]
    )
    def test_api_errors(self, exc_type):
        assert issubclass(exc_type, APIError)
        assert issubclass(exc_type, CPQClientError)

    @pytest.mark.parametrize("exc_type", [ConnectionError, TimeoutError])
    def test_transport_errors_are_not_api_errors(self, exc_type):
        assert issubclass(exc_type, CPQClientError)
        assert not issubclass(exc_type, APIError)


class TestMessages:
    def test_api_error_str(self):
        error = APIError("boom", status_code=418, error_type="teapot")
        assert str(error) == "[HTTP 418] [teapot] boom"
        assert error.details == {}

    def test_connection_error_str(self):
        error = ConnectionError("Failed to connect", url="http://localhost:8000/health")
        assert str(error) == "Failed to connect (url: http://localhost:8000/health)"

    def test_timeout_error_str(self):
        assert str(TimeoutError("Timed out", timeout=5.0)) == "Timed out (timeout: 5.0s)"
        assert str(TimeoutError("Timed out")) == "Timed out"


class TestStructuredFields:
    def test_validation_error_rule_and_reason(self):
        error = ValidationError(
            "can_advance_from_product: Add at least one product to Kitchen before continuing",
            details={
                "rule": "can_advance_from_product",
                "reason": "Add at least one product to Kitchen before continuing",
            },
        )
        assert error.status_code == 422
        assert error.rule == "can_advance_from_product"
        assert error.reason.startswith("Add at least one product")

    def test_validation_error_without_details(self):
        error = ValidationError("customer: Field required")
        assert error.rule is None
        assert error.reason is None

    def test_conflict_error_fields(self):
        error = ConflictError("Cannot add_fee", details={"command": "add_fee", "phase": "room_config"})
        assert error.status_code == 409
        assert error.command == "add_fee"
        assert error.phase == "room_config"

    def test_not_found_fields(self):
        error = NotFoundError("Customer 'x' does not exist", entity="customer", entity_id="x")
        assert error.status_code == 404
        assert error.entity == "customer"

    def test_server_error_status(self):
        assert ServerError("down", status_code=503).status_code == 503
        assert BadRequestError("bad").status_code == 400
