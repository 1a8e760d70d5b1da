"""Outbound workflow notifications.

The NotificationBus is the observer interface between the workflow engine and
whatever presents it. Subscribers are called synchronously after each event;
a subscriber that raises is logged and skipped so the command that triggered
the notification is never affected. A bounded history is kept so that
clients without a callback (such as the REST API) can poll for events.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    STATE_CHANGED = "state_changed"
    VALIDATION_FAILED = "validation_failed"
    PHASE_CHANGED = "phase_changed"
    ENTITY_CREATED = "entity_created"


class WorkflowNotification(BaseModel):
    """A single outbound notification.

    Args:
        sequence: Monotonically increasing number, starting at 1.
        kind: Notification kind.
        payload: Kind-specific data:
            state_changed: {"snapshot": <quote dict>, "revision": int}
            validation_failed: {"rule": str, "reason": str}
            phase_changed: {"phase": str, "previous": str}
            entity_created: {"entity": str, "id": str}
        created_at: Wall-clock time the notification was published.
    """

    sequence: int
    kind: NotificationKind
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


Subscriber = Callable[[WorkflowNotification], None]


class NotificationBus:
    """Publishes workflow notifications to subscribers and keeps recent history.

    Args:
        history_size: Number of notifications retained for polling.
    """

    def __init__(self, history_size: int = 500):
        if history_size <= 0:
            raise ValueError("history_size must be positive")
        self._subscribers: list[Subscriber] = []
        self._history: deque[WorkflowNotification] = deque(maxlen=history_size)
        self._sequence = 0

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function that removes the subscription when called.
        """
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, kind: NotificationKind, **payload: Any) -> WorkflowNotification:
        self._sequence += 1
        notification = WorkflowNotification(sequence=self._sequence, kind=kind, payload=payload)
        self._history.append(notification)

        for subscriber in list(self._subscribers):
            try:
                subscriber(notification)
            except Exception:
                logger.exception(f"Notification subscriber failed on {kind.value} #{self._sequence}")
        return notification

    def state_changed(self, snapshot: dict[str, Any], revision: int) -> WorkflowNotification:
        return self.publish(NotificationKind.STATE_CHANGED, snapshot=snapshot, revision=revision)

    def validation_failed(self, rule: str, reason: str) -> WorkflowNotification:
        return self.publish(NotificationKind.VALIDATION_FAILED, rule=rule, reason=reason)

    def phase_changed(self, phase: str, previous: Optional[str]) -> WorkflowNotification:
        return self.publish(NotificationKind.PHASE_CHANGED, phase=phase, previous=previous)

    def entity_created(self, entity: str, entity_id: str) -> WorkflowNotification:
        return self.publish(NotificationKind.ENTITY_CREATED, entity=entity, id=entity_id)

    def history(
        self, since: int = 0, kind: Optional[NotificationKind] = None
    ) -> list[WorkflowNotification]:
        """Return retained notifications with a sequence greater than `since`."""
        return [
            notification
            for notification in self._history
            if notification.sequence > since and (kind is None or notification.kind == kind)
        ]

    def clear_history(self) -> None:
        self._history.clear()
