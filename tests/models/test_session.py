"""Tests for QuoteSession, the workflow command surface.

Sessions are built through the fixtures in tests/fixtures/sessions.py, so
every test starts from a state reached through the public commands.
"""

from decimal import Decimal

import pytest

from models.errors import InvalidReferenceError, InvalidStateError, ValidationFailedError
from models.notifications import NotificationKind
from models.phases import Phase
from models.quote import QuoteStatus, RoomSpec
from models.session import QuoteSession
from tests.fixtures.sessions import (
    SAMPLE_CUSTOMER,
    SAMPLE_PRODUCT,
    SAMPLE_STYLE,
    advance_to_product_config,
    advance_to_room_config,
    create_session,
)


def fail_on_call(session: QuoteSession, monkeypatch, call_number: int) -> None:
    """Make the session's nth replayed history entry raise."""
    original = session._apply_recorded
    calls = []

    def flaky(data):
        calls.append(data["action"])
        if len(calls) == call_number:
            raise ValueError("entry no longer applies")
        return original(data)

    monkeypatch.setattr(session, "_apply_recorded", flaky)


# =============================================================================
# End-to-end
# =============================================================================


class TestEndToEnd:
    def test_kitchen_quote_with_dark_stain(self, session):
        session.select_customer(SAMPLE_CUSTOMER)
        assert session.advance_phase() == Phase.ROOM_CONFIG

        room = session.create_room(
            RoomSpec(room_type="Kitchen", style_id=SAMPLE_STYLE, description="Test Kitchen")
        )
        assert session.advance_phase() == Phase.PRODUCT_CONFIG

        product = session.add_product(room.id, SAMPLE_PRODUCT)
        session.open_processing_config(product.id, "Dark Stain")
        assert session.phase == Phase.PROCESSING_CONFIG
        session.set_processing_option("stain_color", "walnut")
        processing = session.apply_processing()
        assert session.phase == Phase.PRODUCT_CONFIG
        assert processing.surcharge == Decimal("42.75")

        assert session.advance_phase() == Phase.FEES_CONFIG
        session.add_fee("Delivery", "150.00")

        preview = session.request_print_preview()

        assert session.phase == Phase.PRINT_PREVIEW
        assert session.snapshot().status == QuoteStatus.FINALIZED
        assert preview.total == Decimal("477.75")
        assert preview.customer_name == SAMPLE_CUSTOMER
        assert "Dark Stain (Dark Walnut)" in preview.text
        assert "$477.75" in preview.text
        assert preview.quote_date == "2025-01-15"
        assert preview.valid_until == "2025-02-14"

    def test_preview_is_idempotent(self, fees_session):
        first = fees_session.request_print_preview()
        revision = fees_session.store.revision

        second = fees_session.request_print_preview()

        assert second.text == first.text
        assert fees_session.store.revision == revision

    def test_preview_changes_after_going_back(self, fees_session):
        first = fees_session.request_print_preview()

        assert fees_session.go_back() == Phase.FEES_CONFIG
        assert fees_session.snapshot().status == QuoteStatus.DRAFT
        fees_session.add_fee("Install", "200")
        second = fees_session.request_print_preview()

        assert second.total == first.total + Decimal("200.00")

    def test_preview_rechecks_product_gate_after_undo(self, fees_session):
        fees_session.undo(2)
        assert fees_session.snapshot().product_count == 0

        with pytest.raises(ValidationFailedError) as exc_info:
            fees_session.request_print_preview()

        assert exc_info.value.rule == "can_advance_from_product"
        assert fees_session.phase == Phase.FEES_CONFIG
        assert fees_session.snapshot().status == QuoteStatus.DRAFT
        assert fees_session.status()["gate"]["rule"] == "can_advance_from_product"

    def test_approval_required_above_threshold(self):
        session = advance_to_product_config(create_session(approval_threshold=Decimal("100")))
        session.add_product(None, SAMPLE_PRODUCT)
        session.advance_phase()

        preview = session.request_print_preview()

        assert preview.requires_approval
        assert "requires approval" in preview.text


# =============================================================================
# Phase ordering
# =============================================================================


class TestPhaseOrdering:
    def test_commands_need_a_quote(self):
        with pytest.raises(InvalidStateError, match="no quote in progress"):
            QuoteSession().select_customer(SAMPLE_CUSTOMER)

    def test_cannot_advance_without_customer(self, session):
        with pytest.raises(ValidationFailedError) as exc_info:
            session.advance_phase()
        assert exc_info.value.rule == "can_advance_from_customer"
        assert session.phase == Phase.CUSTOMER_SELECT

    def test_customer_is_immutable(self, session):
        session.select_customer(SAMPLE_CUSTOMER)
        with pytest.raises(InvalidStateError):
            session.select_customer("cust_02")
        session.advance_phase()
        with pytest.raises(InvalidStateError):
            session.go_back()
        assert session.snapshot().customer.name == SAMPLE_CUSTOMER

    def test_unknown_customer(self, session):
        with pytest.raises(InvalidReferenceError) as exc_info:
            session.select_customer("Nobody")
        assert exc_info.value.entity == "customer"
        assert session.snapshot().customer is None

    def test_room_commands_rejected_outside_room_config(self, product_session):
        with pytest.raises(InvalidStateError) as exc_info:
            product_session.create_room(RoomSpec(room_type="Bath", style_id=SAMPLE_STYLE))
        assert exc_info.value.phase == "product_config"

    def test_fees_rejected_outside_fees_config(self, product_session):
        with pytest.raises(InvalidStateError):
            product_session.add_fee("Delivery", "10")

    def test_cannot_advance_past_print_preview(self, fees_session):
        fees_session.request_print_preview()
        with pytest.raises(InvalidStateError):
            fees_session.advance_phase()

    def test_rejected_command_leaves_quote_unchanged(self, product_session):
        before = product_session.snapshot()
        with pytest.raises(InvalidReferenceError):
            product_session.add_product(None, "No Such Cabinet")
        assert product_session.snapshot() == before


# =============================================================================
# Rooms
# =============================================================================


class TestRooms:
    def test_create_room_requires_type_and_style(self, room_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            room_session.create_room({"room_type": "Kitchen"})
        assert exc_info.value.rule == "can_create_room"
        assert exc_info.value.reason == "Select a style"
        assert room_session.snapshot().rooms == []

    def test_non_positive_dimension_is_a_rule_failure(self, room_session):
        received = []
        room_session.notifications.subscribe(received.append)

        with pytest.raises(ValidationFailedError) as exc_info:
            room_session.create_room(
                {"room_type": "Kitchen", "style_id": SAMPLE_STYLE, "dimensions": {"width": 0}}
            )

        assert exc_info.value.rule == "can_create_room"
        assert exc_info.value.reason.startswith("dimensions.width")
        assert [n.kind for n in received] == [NotificationKind.VALIDATION_FAILED]
        assert room_session.snapshot().rooms == []

    def test_create_room_unknown_style(self, room_session):
        with pytest.raises(InvalidReferenceError):
            room_session.create_room({"room_type": "Kitchen", "style_id": "style_missing"})

    def test_new_room_becomes_active(self, room_session):
        first = room_session.create_room({"room_type": "Kitchen", "style_id": SAMPLE_STYLE})
        second = room_session.create_room({"room_type": "Bath", "style_id": SAMPLE_STYLE})
        assert room_session.active_room_id == second.id

        room_session.select_room(first.id)
        assert room_session.active_room_id == first.id

    def test_cannot_advance_without_room(self, room_session):
        with pytest.raises(ValidationFailedError, match="at least one room"):
            room_session.advance_phase()

    def test_remove_room_cascades(self, product_session):
        product = product_session.add_product(None, SAMPLE_PRODUCT)
        product_session.apply_processing(product.id, "Dark Stain", {"stain_color": "walnut"})
        product_session.go_back()

        room_id = product_session.active_room_id
        product_session.remove_room(room_id)

        quote = product_session.snapshot()
        assert quote.rooms == []
        assert quote.find_product(product.id) is None
        assert product_session.active_room_id is None
        assert product_session.totals.total == Decimal("0.00")


# =============================================================================
# Products and processings
# =============================================================================


class TestProducts:
    def test_cannot_advance_with_empty_room(self, product_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            product_session.advance_phase()
        assert exc_info.value.reason == "Add at least one product to Kitchen before continuing"
        assert product_session.phase == Phase.PRODUCT_CONFIG

    def test_add_product_by_name_uses_room_style(self, small_session):
        product = small_session.add_product(None, "Base Cabinet")
        assert product.catalog_ref == "p_base"
        assert product.base_price == Decimal("100")

    def test_quantity_below_one_rejected(self, small_session):
        with pytest.raises(ValidationFailedError):
            small_session.add_product(None, "p_base", quantity=0)
        product = small_session.add_product(None, "p_base")
        with pytest.raises(ValidationFailedError):
            small_session.update_product_quantity(product.id, 0)

    def test_quantity_change_reprices_processings(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.apply_processing(product.id, "pr_install")
        small_session.apply_processing(product.id, "pr_finish", {"sheen": "gloss"})

        updated = small_session.update_product_quantity(product.id, 3)

        surcharges = {p.processing_id: p.surcharge for p in updated.processings}
        assert surcharges == {"pr_install": Decimal("60.00"), "pr_finish": Decimal("45.00")}
        assert small_session.totals.total == Decimal("405.00")

    def test_room_processings_are_inherited(self, small_catalog):
        session = advance_to_room_config(create_session(catalog=small_catalog), "cust_a")
        session.create_room(
            RoomSpec(
                room_type="Kitchen",
                style_id="style_a",
                activated_processings=["pr_install", "pr_edge"],
            )
        )
        session.advance_phase()

        cabinet = session.add_product(None, "p_base")
        top = session.add_product(None, "p_top")

        assert [(p.processing_id, p.inherited) for p in cabinet.processings] == [("pr_install", True)]
        assert [p.processing_id for p in top.processings] == ["pr_edge"]
        assert top.processings[0].surcharge == Decimal("192.00")

    def test_remove_product_removes_its_processings(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.apply_processing(product.id, "pr_install")
        small_session.remove_product(product.id)
        assert small_session.totals.total == Decimal("0.00")

    def test_remove_product_reduces_room_subtotal_by_its_line(self, small_session):
        room_id = small_session.active_room_id
        kept = small_session.add_product(None, "p_base")
        removed = small_session.add_product(None, "p_base", quantity=2)
        small_session.apply_processing(removed.id, "pr_install")
        small_session.apply_processing(removed.id, "pr_finish", {"sheen": "gloss"})

        before = small_session.totals.room(room_id)
        line = next(p for p in before.products if p.product_id == removed.id)
        assert line.subtotal == Decimal("270.00")

        small_session.remove_product(removed.id)

        after = small_session.totals.room(room_id)
        assert before.subtotal - after.subtotal == line.subtotal
        assert [p.product_id for p in after.products] == [kept.id]

    def test_processing_order_does_not_change_total(self):
        configs = {"Dark Stain": {"stain_color": "cherry"}, "Install Pulls": None}
        totals = []
        for order in (["Dark Stain", "Install Pulls"], ["Install Pulls", "Dark Stain"]):
            session = advance_to_product_config(create_session())
            product = session.add_product(None, SAMPLE_PRODUCT)
            for name in order:
                session.apply_processing(product.id, name, configs[name])
            totals.append(session.totals.total)

        assert totals[0] == totals[1] == Decimal("345.45")


class TestProcessingModal:
    def test_navigation_blocked_while_open(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "Finish")

        with pytest.raises(InvalidStateError):
            small_session.advance_phase()
        with pytest.raises(InvalidStateError):
            small_session.go_back()
        with pytest.raises(InvalidStateError):
            small_session.add_product(None, "p_base")

    def test_rejected_apply_keeps_modal_open(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "pr_finish")

        with pytest.raises(ValidationFailedError, match="Sheen is required for Finish"):
            small_session.apply_processing()

        assert small_session.phase == Phase.PROCESSING_CONFIG
        small_session.set_processing_option("sheen", "matte")
        processing = small_session.apply_processing()
        assert processing.surcharge == Decimal("10.00")
        assert small_session.phase == Phase.PRODUCT_CONFIG

    def test_cancel_discards_draft(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "pr_finish")
        small_session.set_processing_option("sheen", "gloss")

        small_session.cancel_processing_config()

        assert small_session.phase == Phase.PRODUCT_CONFIG
        assert small_session.snapshot().find_product(product.id).processings == []

    def test_unknown_option(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "pr_finish")
        with pytest.raises(InvalidReferenceError):
            small_session.set_processing_option("color", "red")

    def test_apply_must_match_open_draft(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "pr_finish")
        with pytest.raises(InvalidStateError):
            small_session.apply_processing(product.id, "pr_install")

    def test_exclusion_rule_blocks_conflict(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.apply_processing(product.id, "pr_install")

        with pytest.raises(ValidationFailedError) as exc_info:
            small_session.apply_processing(product.id, "pr_push")

        assert exc_info.value.reason == "Push-open cannot be combined with installed handles"

    def test_remove_processing_by_definition_id(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.apply_processing(product.id, "pr_install")
        removed = small_session.remove_processing(product.id, "pr_install")
        assert removed.label == "Install"
        assert small_session.snapshot().find_product(product.id).processings == []


# =============================================================================
# Fees and notes
# =============================================================================


class TestFees:
    def test_add_and_remove_fee(self, fees_session):
        fee = fees_session.add_fee("  Delivery ", 150)
        assert fee.label == "Delivery"
        assert fee.amount == Decimal("150.00")

        fees_session.remove_fee(fee.id)
        assert fees_session.snapshot().fees == []

    @pytest.mark.parametrize(
        "label,amount,rule",
        [("", "10", "fee_label"), ("Delivery", "-1", "fee_amount"), ("Delivery", "ten", "fee_amount")],
    )
    def test_invalid_fee(self, fees_session, label, amount, rule):
        with pytest.raises(ValidationFailedError) as exc_info:
            fees_session.add_fee(label, amount)
        assert exc_info.value.rule == rule

    def test_notes_are_printed(self, fees_session):
        fees_session.set_notes("Deliver after 9am")
        assert "Deliver after 9am" in fees_session.request_print_preview().text


# =============================================================================
# Undo/Redo
# =============================================================================


class TestUndoRedo:
    def test_undo_and_redo_processing(self, small_session):
        product = small_session.add_product(None, "p_base")
        processing = small_session.apply_processing(product.id, "pr_install")

        result = small_session.undo()
        assert result["undone_count"] == 1
        assert result["undone_commands"][0]["command"] == "apply_processing"
        assert small_session.snapshot().find_product(product.id).processings == []

        result = small_session.redo()
        assert result["redone_count"] == 1
        restored = small_session.snapshot().find_product(product.id).processings
        assert [p.id for p in restored] == [processing.id]

    def test_undo_multiple(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.update_product_quantity(product.id, 4)

        small_session.undo(2)

        room = small_session.snapshot().find_room(small_session.active_room_id)
        assert room.products == []
        assert small_session.undo_stack.redo_count == 2

    def test_undo_restores_quantity_and_surcharges(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.apply_processing(product.id, "pr_install")
        small_session.update_product_quantity(product.id, 5)

        small_session.undo()

        restored = small_session.snapshot().find_product(product.id)
        assert restored.quantity == 1
        assert restored.processings[0].surcharge == Decimal("20.00")

    def test_new_command_clears_redo(self, small_session):
        small_session.add_product(None, "p_base")
        small_session.undo()
        small_session.add_product(None, "p_top")
        assert not small_session.undo_stack.can_redo

    def test_nothing_to_undo(self, session):
        result = session.undo()
        assert result["undone_count"] == 0
        assert result["message"] == "Nothing to undo"

    def test_undo_disallowed_in_modal(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "pr_finish")
        with pytest.raises(InvalidStateError):
            small_session.undo()

    def test_count_must_be_positive(self, small_session):
        with pytest.raises(ValueError):
            small_session.undo(0)
        with pytest.raises(ValueError):
            small_session.redo(-1)

    def test_failed_undo_rolls_back_whole_batch(self, small_session, monkeypatch):
        for ref in ("p_base", "p_top", "p_base"):
            small_session.add_product(None, ref)
        quote_before = small_session.snapshot()
        history_before = [e.command_id for e in small_session.undo_stack.undo_entries]
        fail_on_call(small_session, monkeypatch, 2)

        with pytest.raises(RuntimeError, match="Undo failed for add_product"):
            small_session.undo(3)

        assert [e.command_id for e in small_session.undo_stack.undo_entries] == history_before
        assert small_session.undo_stack.redo_count == 0
        assert small_session.snapshot().rooms == quote_before.rooms

    def test_failed_redo_rolls_back_whole_batch(self, small_session, monkeypatch):
        for ref in ("p_base", "p_top", "p_base"):
            small_session.add_product(None, ref)
        small_session.undo(3)
        redo_before = [e.command_id for e in small_session.undo_stack.redo_entries]
        fail_on_call(small_session, monkeypatch, 2)

        with pytest.raises(RuntimeError, match="Redo failed for add_product"):
            small_session.redo(3)

        assert [e.command_id for e in small_session.undo_stack.redo_entries] == redo_before
        assert small_session.undo_stack.undo_count == 1
        room = small_session.snapshot().find_room(small_session.active_room_id)
        assert room.products == []

    def test_undo_room_creation_resets_active_room(self, room_session):
        room_session.create_room({"room_type": "Kitchen", "style_id": SAMPLE_STYLE})
        room_session.undo()
        assert room_session.snapshot().rooms == []
        assert room_session.active_room_id is None


# =============================================================================
# Notifications and status
# =============================================================================


class TestNotifications:
    def test_successful_commands_publish_events(self, room_session):
        since = room_session.notifications.last_sequence

        room = room_session.create_room({"room_type": "Kitchen", "style_id": SAMPLE_STYLE})
        room_session.advance_phase()

        kinds = [n.kind for n in room_session.notifications.history(since=since)]
        assert NotificationKind.ENTITY_CREATED in kinds
        assert NotificationKind.STATE_CHANGED in kinds
        assert NotificationKind.PHASE_CHANGED in kinds
        created = room_session.notifications.history(since=since, kind=NotificationKind.ENTITY_CREATED)
        assert created[0].payload == {"entity": "room", "id": room.id}
        phase = room_session.notifications.history(since=since, kind=NotificationKind.PHASE_CHANGED)
        assert phase[-1].payload == {"phase": "product_config", "previous": "room_config"}

    def test_rejections_publish_validation_failed(self, product_session):
        received = []
        product_session.notifications.subscribe(received.append)

        with pytest.raises(ValidationFailedError):
            product_session.advance_phase()

        assert [n.kind for n in received] == [NotificationKind.VALIDATION_FAILED]
        assert received[0].payload["rule"] == "can_advance_from_product"

    def test_state_changed_carries_snapshot(self, room_session):
        received = []
        room_session.notifications.subscribe(received.append)

        room_session.create_room({"room_type": "Kitchen", "style_id": SAMPLE_STYLE})

        state = [n for n in received if n.kind == NotificationKind.STATE_CHANGED]
        assert len(state) == 1
        assert state[0].payload["revision"] == room_session.store.revision
        assert state[0].payload["snapshot"]["rooms"][0]["room_type"] == "Kitchen"


class TestStatus:
    def test_status_without_quote(self):
        status = QuoteSession().status()
        assert not status["has_quote"]
        assert not status["can_advance"]

    def test_status_reports_gate(self, product_session):
        status = product_session.status()
        assert status["phase"] == "product_config"
        assert not status["can_advance"]
        assert status["can_go_back"]
        assert status["gate"]["reason"] == "Add at least one product to Kitchen before continuing"

    def test_status_with_open_modal(self, small_session):
        product = small_session.add_product(None, "p_base")
        small_session.open_processing_config(product.id, "pr_finish")

        status = small_session.status()

        assert status["modal_open"]
        assert status["top_level_phase"] == "product_config"
        assert status["draft"]["processing_id"] == "pr_finish"
        assert status["gate"] is None
        assert not status["can_undo"]

    def test_start_new_quote_resets_everything(self, fees_session):
        fees_session.start_new_quote()
        assert fees_session.phase == Phase.CUSTOMER_SELECT
        assert fees_session.snapshot().rooms == []
        assert not fees_session.undo_stack.can_undo
        assert fees_session.active_room_id is None
