"""Undo/redo history for quote edits.

Every mutating session command records one UndoEntry holding two
instruction dicts: undo_data reverses the command against the store and
redo_data re-applies it. Additive commands (create_room, add_fee, ...) only
need the new entity's id to undo but keep the full entity to redo, so the
entity comes back with the same id. Destructive commands mirror that, and
set_quantity/set_notes keep the previous and new values.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class UndoEntry(BaseModel):
    """One recorded quote command.

    Both instruction dicts carry an "action" key naming the store operation
    to run (e.g., "remove_room", "restore_product", "set_quantity"); the other
    keys are that operation's arguments.

    Args:
        command_id: Unique identifier of the executed command.
        command: Session command that produced the entry (e.g., "add_fee").
        undo_data: Instructions that reverse the command.
        redo_data: Instructions that re-apply the command.
        executed_at: When the command ran.

    Examples:
        UndoEntry(
            command_id="cmd_1a2b3c4d5e6f",
            command="add_fee",
            undo_data={"action": "remove_fee", "fee_id": "fee_9f8e7d6c5b4a"},
            redo_data={
                "action": "restore_fee",
                "fee": {"id": "fee_9f8e7d6c5b4a", "label": "Delivery", "amount": "150.00"},
                "index": 0,
            },
            executed_at=datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
        )
    """

    command_id: str = Field(description="Unique identifier of the executed command")
    command: str = Field(description="Session command that produced the entry")
    undo_data: dict[str, Any] = Field(description="Instructions that reverse the command")
    redo_data: dict[str, Any] = Field(description="Instructions that re-apply the command")
    executed_at: datetime = Field(description="When the command ran")

    @field_validator("command_id", "command")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("command_id and command cannot be empty")
        return v

    @field_validator("undo_data", "redo_data")
    @classmethod
    def validate_action(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Both instruction dicts must name the store action to run.

        Raises:
            ValueError: If the "action" key is missing.
        """
        if "action" not in v:
            raise ValueError("undo_data and redo_data must contain 'action' field")
        return v

    def summary(self, side: str) -> dict[str, Any]:
        """Describe the entry for history listings.

        Args:
            side: "undo" or "redo"; picks which action is reported.
        """
        data = self.undo_data if side == "undo" else self.redo_data
        return {
            "command_id": self.command_id,
            "command": self.command,
            "action": data.get("action"),
            "executed_at": self.executed_at.isoformat(),
        }


class UndoStack(BaseModel):
    """Undo and redo stacks for one quote session.

    push() records a new command and drops the redo stack, since the quote
    has diverged from what was undone. Undoing moves entries from the undo
    stack to the redo stack (pop_for_undo then push_to_redo, one entry at a
    time so a failed reversal leaves the rest in place); redoing moves them
    back. With max_size set, each stack keeps only its newest entries.

    Args:
        undo_entries: Entries available for undo, most recent last.
        redo_entries: Entries available for redo, most recent last.
        max_size: Maximum entries per stack (None = unlimited).
    """

    undo_entries: list[UndoEntry] = Field(
        default_factory=list,
        description="Entries available for undo, most recent last",
    )
    redo_entries: list[UndoEntry] = Field(
        default_factory=list,
        description="Entries available for redo, most recent last",
    )
    max_size: Optional[int] = Field(
        default=None,
        description="Maximum entries per stack (None = unlimited)",
    )

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("max_size must be positive")
        return v

    @model_validator(mode="after")
    def trim_entries_to_max_size(self) -> "UndoStack":
        if self.max_size is not None:
            self.undo_entries = self.undo_entries[-self.max_size :]
            self.redo_entries = self.redo_entries[-self.max_size :]
        return self

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_entries)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_entries)

    @property
    def undo_count(self) -> int:
        return len(self.undo_entries)

    @property
    def redo_count(self) -> int:
        return len(self.redo_entries)

    def _append(self, entries: list[UndoEntry], entry: UndoEntry) -> Optional[UndoEntry]:
        entries.append(entry)
        if self.max_size is not None and len(entries) > self.max_size:
            return entries.pop(0)
        return None

    @staticmethod
    def _pop(entries: list[UndoEntry], count: int) -> list[UndoEntry]:
        if count <= 0:
            raise ValueError("count must be positive")
        return [entries.pop() for _ in range(min(count, len(entries)))]

    def push(self, entry: UndoEntry) -> Optional[UndoEntry]:
        """Record a newly executed command.

        Clears the redo stack.

        Returns:
            The oldest entry if it was dropped to respect max_size, else None.
        """
        self.redo_entries.clear()
        return self._append(self.undo_entries, entry)

    def pop_for_undo(self, count: int = 1) -> list[UndoEntry]:
        """Take up to count entries off the undo stack, most recent first.

        Raises:
            ValueError: If count is not positive.
        """
        return self._pop(self.undo_entries, count)

    def push_to_redo(self, entry: UndoEntry) -> None:
        self._append(self.redo_entries, entry)

    def pop_for_redo(self, count: int = 1) -> list[UndoEntry]:
        """Take up to count entries off the redo stack, most recently undone first.

        Raises:
            ValueError: If count is not positive.
        """
        return self._pop(self.redo_entries, count)

    def push_to_undo(self, entry: UndoEntry) -> None:
        """Return a redone entry to the undo stack; the redo stack is kept."""
        self._append(self.undo_entries, entry)

    def clear(self) -> None:
        """Forget all history (a new quote was started)."""
        self.undo_entries.clear()
        self.redo_entries.clear()

    def get_undo_summary(self) -> list[dict[str, Any]]:
        """Undo history, next entry to undo first."""
        return [entry.summary("undo") for entry in reversed(self.undo_entries)]

    def get_redo_summary(self) -> list[dict[str, Any]]:
        """Redo history, next entry to redo first."""
        return [entry.summary("redo") for entry in reversed(self.redo_entries)]
