"""Workflow navigation sub-client for the Kitchen CPQ API.

This module provides WorkflowClient for phase navigation, undo/redo and
notification polling (/workflow/*).

This is an internal module. Import from `client` instead.
"""

from typing import Any

from client._base import BaseClient
from client.models import HistoryResponse, NotificationsPage, PhaseChange, WorkflowStatus
from models.notifications import NotificationKind


class WorkflowClient(BaseClient):
    """Client for workflow endpoints (/workflow/*).

    Example:
        with CPQClient() as client:
            status = client.workflow.status()
            if status.can_advance:
                client.workflow.advance()
            page = client.workflow.notifications(since=last_seen)
    """

    _BASE_PATH = "/workflow"

    def status(self) -> WorkflowStatus:
        return WorkflowStatus(**self._get(f"{self._BASE_PATH}/status"))

    def advance(self) -> PhaseChange:
        """Continue to the next phase.

        Raises:
            ValidationError: If the current phase's rule rejects the move;
                `rule` and `reason` say why.
            ConflictError: If the workflow is in a phase that can't advance.
        """
        return PhaseChange(**self._post(f"{self._BASE_PATH}/advance"))

    def back(self) -> PhaseChange:
        """Return to the previous phase without discarding data."""
        return PhaseChange(**self._post(f"{self._BASE_PATH}/back"))

    def undo(self, count: int = 1) -> HistoryResponse:
        """Undo the most recent quote edits.

        Args:
            count: Number of commands to undo.

        Returns:
            The commands undone and undo/redo availability.
        """
        return HistoryResponse(**self._post(f"{self._BASE_PATH}/undo", json={"count": count}))

    def redo(self, count: int = 1) -> HistoryResponse:
        return HistoryResponse(**self._post(f"{self._BASE_PATH}/redo", json={"count": count}))

    def history(self) -> dict[str, Any]:
        return self._get(f"{self._BASE_PATH}/history")

    def notifications(
        self,
        since: int = 0,
        kind: NotificationKind | str | None = None,
    ) -> NotificationsPage:
        """Poll notifications published after a sequence number.

        Args:
            since: Sequence number of the last notification already seen.
            kind: Only notifications of this kind.

        Returns:
            The new notifications and the latest sequence number.
        """
        if isinstance(kind, NotificationKind):
            kind = kind.value
        data = self._get(
            f"{self._BASE_PATH}/notifications",
            params={"since": since, "kind": kind},
        )
        return NotificationsPage(**data)
