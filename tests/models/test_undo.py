"""Unit tests for UndoEntry and UndoStack models.

This module tests undo infrastructure including:
- UndoEntry: Captures undo and redo instructions for one quote command
- UndoStack: Manages undo/redo stacks with capacity limits
"""

from datetime import datetime, timezone

import pytest

from models.undo import UndoEntry, UndoStack


# =============================================================================
# Helper Functions
# =============================================================================


def create_undo_entry(
    command_id: str = "cmd-1",
    command: str = "add_fee",
    undo_action: str = "remove_fee",
    redo_action: str = "restore_fee",
) -> UndoEntry:
    """Create an UndoEntry with sensible defaults for testing."""
    return UndoEntry(
        command_id=command_id,
        command=command,
        undo_data={"action": undo_action, "fee_id": "fee_1"},
        redo_data={"action": redo_action, "fee": {"id": "fee_1"}, "index": 0},
        executed_at=datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
    )


# =============================================================================
# UndoEntry Tests
# =============================================================================


class TestUndoEntryValidation:
    """Test validation rules for UndoEntry.

    GENERAL PATTERN: identifiers must be non-blank and both instruction
    dicts must name an action.
    """

    def test_valid_entry(self):
        entry = create_undo_entry()
        assert entry.undo_data["action"] == "remove_fee"
        assert entry.redo_data["action"] == "restore_fee"

    @pytest.mark.parametrize("field", ["command_id", "command"])
    def test_blank_identifier_raises(self, field):
        data = create_undo_entry().model_dump()
        data[field] = "   "
        with pytest.raises(ValueError, match="cannot be empty"):
            UndoEntry.model_validate(data)

    @pytest.mark.parametrize("field", ["undo_data", "redo_data"])
    def test_missing_action_raises(self, field):
        data = create_undo_entry().model_dump()
        data[field] = {"fee_id": "fee_1"}
        with pytest.raises(ValueError, match="'action'"):
            UndoEntry.model_validate(data)


# =============================================================================
# UndoStack Tests
# =============================================================================


class TestUndoStackInstantiation:
    def test_defaults(self):
        stack = UndoStack()
        assert not stack.can_undo
        assert not stack.can_redo
        assert stack.max_size is None

    @pytest.mark.parametrize("max_size", [0, -1])
    def test_non_positive_max_size_raises(self, max_size):
        with pytest.raises(ValueError):
            UndoStack(max_size=max_size)

    def test_instantiation_trims_to_max_size(self):
        entries = [create_undo_entry(command_id=f"cmd-{i}") for i in range(5)]
        stack = UndoStack(undo_entries=entries, max_size=3)
        assert [e.command_id for e in stack.undo_entries] == ["cmd-2", "cmd-3", "cmd-4"]


class TestUndoStackPush:
    def test_push_clears_redo_stack(self):
        stack = UndoStack()
        stack.push_to_redo(create_undo_entry(command_id="old"))

        stack.push(create_undo_entry(command_id="new"))

        assert stack.undo_count == 1
        assert stack.redo_count == 0

    def test_push_returns_dropped_entry_at_capacity(self):
        stack = UndoStack(max_size=2)
        assert stack.push(create_undo_entry(command_id="cmd-0")) is None
        stack.push(create_undo_entry(command_id="cmd-1"))

        dropped = stack.push(create_undo_entry(command_id="cmd-2"))

        assert dropped.command_id == "cmd-0"
        assert stack.undo_count == 2


class TestUndoStackWorkflow:
    """Test the undo -> redo -> undo cycle as the session drives it."""

    def test_undo_then_redo_cycle(self):
        stack = UndoStack()
        for i in range(3):
            stack.push(create_undo_entry(command_id=f"cmd-{i}"))

        undone = stack.pop_for_undo(2)
        assert [e.command_id for e in undone] == ["cmd-2", "cmd-1"]
        for entry in undone:
            stack.push_to_redo(entry)

        redone = stack.pop_for_redo(1)
        assert [e.command_id for e in redone] == ["cmd-1"]
        stack.push_to_undo(redone[0])

        assert [e.command_id for e in stack.undo_entries] == ["cmd-0", "cmd-1"]
        assert [e.command_id for e in stack.redo_entries] == ["cmd-2"]

    def test_pop_returns_fewer_when_stack_is_short(self):
        stack = UndoStack()
        stack.push(create_undo_entry())
        assert len(stack.pop_for_undo(5)) == 1
        assert stack.pop_for_undo(1) == []

    @pytest.mark.parametrize("count", [0, -2])
    def test_non_positive_count_raises(self, count):
        stack = UndoStack()
        with pytest.raises(ValueError):
            stack.pop_for_undo(count)
        with pytest.raises(ValueError):
            stack.pop_for_redo(count)

    def test_clear_empties_both_stacks(self):
        stack = UndoStack()
        stack.push(create_undo_entry())
        stack.push_to_redo(create_undo_entry(command_id="cmd-2"))
        stack.clear()
        assert stack.undo_count == 0
        assert stack.redo_count == 0


class TestUndoStackSummary:
    def test_undo_summary_is_most_recent_first(self):
        stack = UndoStack()
        stack.push(create_undo_entry(command_id="cmd-1", command="create_room", undo_action="remove_room"))
        stack.push(create_undo_entry(command_id="cmd-2"))

        summary = stack.get_undo_summary()

        assert [s["command_id"] for s in summary] == ["cmd-2", "cmd-1"]
        assert summary[1] == {
            "command_id": "cmd-1",
            "command": "create_room",
            "action": "remove_room",
            "executed_at": "2025-01-15T10:30:00+00:00",
        }

    def test_redo_summary_uses_redo_action(self):
        stack = UndoStack()
        stack.push_to_redo(create_undo_entry())
        assert stack.get_redo_summary()[0]["action"] == "restore_fee"
