"""Phase state machine for the guided quote workflow.

The workflow is a stack of frames. The bottom frame holds the current top-level
phase; the processing configuration modal is pushed on top of product_config
and popped again when the processing is applied or cancelled:

    customer_select -> room_config -> product_config -> fees_config -> print_preview
                                           |
                                           +-- processing_config (modal)

Top-level navigation is one step at a time. Gate rules are evaluated by the
QuoteSession before calling advance(); this module only enforces ordering.
"""

import logging
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field

from models.errors import InvalidStateError

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """Stages of the quote workflow."""

    CUSTOMER_SELECT = "customer_select"
    ROOM_CONFIG = "room_config"
    PRODUCT_CONFIG = "product_config"
    PROCESSING_CONFIG = "processing_config"
    FEES_CONFIG = "fees_config"
    PRINT_PREVIEW = "print_preview"


TOP_LEVEL_PHASES: list[Phase] = [
    Phase.CUSTOMER_SELECT,
    Phase.ROOM_CONFIG,
    Phase.PRODUCT_CONFIG,
    Phase.FEES_CONFIG,
    Phase.PRINT_PREVIEW,
]

# Customer is immutable once selected, so backward navigation stops here.
EARLIEST_REVISITABLE_PHASE = Phase.ROOM_CONFIG


class ProcessingDraft(BaseModel):
    """Unconfirmed processing configuration held by the modal frame.

    Args:
        product_id: Product the processing will be applied to.
        processing_id: Catalog processing definition being configured.
        options: Option values chosen so far (option id -> value).
    """

    product_id: str
    processing_id: str
    options: dict[str, Any] = Field(default_factory=dict)


class PhaseFrame(BaseModel):
    """One entry of the phase stack."""

    phase: Phase
    draft: Optional[ProcessingDraft] = None


class PhaseStateMachine:
    """Stack-based phase tracker.

    The machine starts in customer_select. Only the session mutates it, and
    only after the relevant gate rule has passed.

    Example:
        machine = PhaseStateMachine()
        machine.advance()                 # room_config
        machine.advance()                 # product_config
        machine.open_modal(draft)         # processing_config
        machine.close_modal()             # back to product_config, draft returned
    """

    def __init__(self):
        self._frames: list[PhaseFrame] = [PhaseFrame(phase=Phase.CUSTOMER_SELECT)]

    @property
    def current(self) -> Phase:
        """The phase of the top frame (the modal if one is open)."""
        return self._frames[-1].phase

    @property
    def top_level(self) -> Phase:
        """The top-level phase underneath any open modal."""
        return self._frames[0].phase

    @property
    def modal_open(self) -> bool:
        return len(self._frames) > 1

    @property
    def draft(self) -> Optional[ProcessingDraft]:
        """The draft of the open processing modal, if any."""
        return self._frames[-1].draft

    @property
    def frames(self) -> list[PhaseFrame]:
        return [frame.model_copy(deep=True) for frame in self._frames]

    def next_phase(self) -> Optional[Phase]:
        """The top-level phase after the current one, or None at the terminal phase."""
        index = TOP_LEVEL_PHASES.index(self.top_level)
        if index + 1 >= len(TOP_LEVEL_PHASES):
            return None
        return TOP_LEVEL_PHASES[index + 1]

    def previous_phase(self) -> Optional[Phase]:
        """The top-level phase before the current one, or None if going back is not possible."""
        index = TOP_LEVEL_PHASES.index(self.top_level)
        if index <= TOP_LEVEL_PHASES.index(EARLIEST_REVISITABLE_PHASE):
            return None
        return TOP_LEVEL_PHASES[index - 1]

    def require(self, command: str, allowed: Iterable[Phase]) -> None:
        """Ensure the current phase permits a command.

        Args:
            command: Name of the command being issued.
            allowed: Phases in which the command is valid.

        Raises:
            InvalidStateError: If the current phase is not in `allowed`.
        """
        allowed = list(allowed)
        if self.current not in allowed:
            names = ", ".join(phase.value for phase in allowed)
            raise InvalidStateError(
                command,
                f"only allowed in {names} (current phase: {self.current.value})",
                phase=self.current.value,
            )

    def advance(self) -> Phase:
        """Move one top-level step forward.

        Returns:
            The new phase.

        Raises:
            InvalidStateError: If the modal is open or the terminal phase is reached.
        """
        if self.modal_open:
            raise InvalidStateError(
                "advance_phase",
                "processing configuration is open; apply or cancel it first",
                phase=self.current.value,
            )
        target = self.next_phase()
        if target is None:
            raise InvalidStateError(
                "advance_phase",
                f"{self.top_level.value} is the final phase",
                phase=self.current.value,
            )
        logger.info(f"Phase advanced: {self.top_level.value} -> {target.value}")
        self._frames[0] = PhaseFrame(phase=target)
        return target

    def retreat(self) -> Phase:
        """Move one top-level step back without discarding any quote data.

        Returns:
            The new phase.

        Raises:
            InvalidStateError: If the modal is open or there is no earlier editable phase.
        """
        if self.modal_open:
            raise InvalidStateError(
                "go_back",
                "processing configuration is open; apply or cancel it first",
                phase=self.current.value,
            )
        target = self.previous_phase()
        if target is None:
            raise InvalidStateError(
                "go_back",
                f"cannot go back from {self.top_level.value}; the customer cannot be changed",
                phase=self.current.value,
            )
        logger.info(f"Phase retreated: {self.top_level.value} -> {target.value}")
        self._frames[0] = PhaseFrame(phase=target)
        return target

    def open_modal(self, draft: ProcessingDraft) -> None:
        """Push the processing configuration frame on top of product_config.

        Raises:
            InvalidStateError: If not in product_config or a modal is already open.
        """
        self.require("open_processing_config", [Phase.PRODUCT_CONFIG])
        self._frames.append(PhaseFrame(phase=Phase.PROCESSING_CONFIG, draft=draft))
        logger.debug(
            f"Processing modal opened for product {draft.product_id} ({draft.processing_id})"
        )

    def close_modal(self) -> ProcessingDraft:
        """Pop the processing configuration frame.

        Returns:
            The draft that was being edited.

        Raises:
            InvalidStateError: If no modal is open.
        """
        if not self.modal_open:
            raise InvalidStateError(
                "close processing configuration",
                "no processing configuration is open",
                phase=self.current.value,
            )
        frame = self._frames.pop()
        logger.debug(f"Processing modal closed for product {frame.draft.product_id}")
        return frame.draft

    def reset(self) -> None:
        """Return to customer_select with no modal open."""
        self._frames = [PhaseFrame(phase=Phase.CUSTOMER_SELECT)]
