"""Shared request and response models for API endpoints.

This module contains generic models used by more than one route module.
Endpoint-specific models live next to their routes.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar("ItemT")


class ListResponse(BaseModel, Generic[ItemT]):
    """Response model for list/query endpoints.

    Attributes:
        query: Echo of the filters that were applied (for debugging).
        results: The matching items after pagination.
        total_count: Number of items matching the filters.
        returned_count: Number of items returned (after pagination).
    """

    query: dict[str, Any] = Field(default_factory=dict)
    results: list[ItemT]
    total_count: int
    returned_count: int


class HistoryResponse(BaseModel):
    """Response model for undo and redo.

    Attributes:
        count: Number of commands actually undone or redone.
        commands: Details of each command (command_id, command, action).
        can_undo: Whether more undos are available.
        can_redo: Whether redos are available.
        message: Set when there was nothing to do.
    """

    count: int
    commands: list[dict[str, Any]] = Field(default_factory=list)
    can_undo: bool
    can_redo: bool
    message: Optional[str] = None

