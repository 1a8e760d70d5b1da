"""Kitchen CPQ data models package.

This package contains the quote workflow engine: catalog reference data, the
quote entities and their store, validation rules, the phase state machine,
pricing, print-preview formatting, notifications, undo history, and the
QuoteSession that coordinates them.
"""

from models.catalog import (
    Catalog,
    CatalogProduct,
    Customer,
    ExclusionRule,
    ProcessingDefinition,
    ProcessingOption,
    Style,
)
from models.errors import (
    InvalidReferenceError,
    InvalidStateError,
    ValidationFailedError,
    WorkflowError,
)
from models.notifications import NotificationBus, NotificationKind, WorkflowNotification
from models.phases import Phase, PhaseStateMachine, ProcessingDraft
from models.preview import PrintPreview, build_print_preview, format_processing_display
from models.pricing import PricingEngine, QuoteTotals, price_quote
from models.quote import Fee, Processing, Product, Quote, QuoteStatus, Room, RoomSpec
from models.session import QuoteSession
from models.store import QuoteStore, StoreChange
from models.undo import UndoEntry, UndoStack
from models.validation import RuleResult

__all__ = [
    "Catalog",
    "CatalogProduct",
    "Customer",
    "ExclusionRule",
    "ProcessingDefinition",
    "ProcessingOption",
    "Style",
    "WorkflowError",
    "InvalidReferenceError",
    "InvalidStateError",
    "ValidationFailedError",
    "NotificationBus",
    "NotificationKind",
    "WorkflowNotification",
    "Phase",
    "PhaseStateMachine",
    "ProcessingDraft",
    "PrintPreview",
    "build_print_preview",
    "format_processing_display",
    "PricingEngine",
    "QuoteTotals",
    "price_quote",
    "Fee",
    "Processing",
    "Product",
    "Quote",
    "QuoteStatus",
    "Room",
    "RoomSpec",
    "QuoteSession",
    "QuoteStore",
    "StoreChange",
    "UndoEntry",
    "UndoStack",
    "RuleResult",
]
