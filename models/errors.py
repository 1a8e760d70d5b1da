"""Exceptions raised by quote workflow commands.

Every command on the QuoteSession either succeeds completely or raises one of
these exceptions with the prior state left unchanged. The API layer maps them
to HTTP responses in api/exceptions.py.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for all quote workflow errors.

    Args:
        message: Human-readable description of why the command was rejected.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidReferenceError(WorkflowError):
    """Raised when a command targets an entity that doesn't exist.

    Args:
        entity: The kind of entity that was looked up (e.g., "room", "product").
        entity_id: The identifier that could not be resolved.
    """

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} '{entity_id}' does not exist")


class InvalidStateError(WorkflowError):
    """Raised when a command is issued while the workflow forbids it.

    Args:
        command: Name of the rejected command.
        reason: Why the command is not allowed right now.
        phase: The phase the workflow was in, if a quote is in progress.
    """

    rule = "phase_order"

    def __init__(self, command: str, reason: str, phase: Optional[str] = None):
        self.command = command
        self.reason = reason
        self.phase = phase
        super().__init__(f"Cannot {command}: {reason}")


class ValidationFailedError(WorkflowError):
    """Raised when a validation rule blocks a command or phase advance.

    Always recoverable: fix the reported problem and retry.

    Args:
        rule: Name of the validation rule that failed.
        reason: Human-readable reason suitable for UI display.
    """

    def __init__(self, rule: str, reason: str):
        self.rule = rule
        self.reason = reason
        super().__init__(f"{rule}: {reason}")
