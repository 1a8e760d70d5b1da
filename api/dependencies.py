"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to the shared QuoteSession.
"""

import logging
from typing import Annotated

from fastapi import Depends

from api.config import Settings
from models.catalog import Catalog
from models.session import QuoteSession

logger = logging.getLogger(__name__)

# Global state
# The workflow is single-operator, so one session serves the whole app.
_quote_session: QuoteSession | None = None


def get_quote_session() -> QuoteSession:
    """Get the shared QuoteSession instance.

    This function is a FastAPI dependency. When you add it to a route handler's
    parameters, FastAPI will automatically call this function and inject the result.

    Returns:
        The shared QuoteSession instance.

    Raises:
        RuntimeError: If the session hasn't been initialized yet.

    Example:
        @router.get("/some-endpoint")
        async def my_handler(session: QuoteSessionDep):
            return session.status()
    """
    if _quote_session is None:
        raise RuntimeError("QuoteSession not initialized. Call initialize_quote_session() first.")

    return _quote_session


def build_quote_session(settings: Settings) -> QuoteSession:
    """Create a QuoteSession configured from settings."""
    if settings.catalog_path:
        catalog = Catalog.from_file(settings.catalog_path)
        logger.info(f"Loaded catalog from {settings.catalog_path}")
    else:
        catalog = Catalog.default()

    return QuoteSession(
        catalog=catalog,
        approval_threshold=settings.approval_threshold,
        validity_days=settings.quote_validity_days,
        undo_max_size=settings.undo_max_size,
        notification_history=settings.notification_history,
        company_name=settings.company_name,
    )


def initialize_quote_session(settings: Settings | None = None) -> QuoteSession:
    """Initialize the shared QuoteSession instance.

    This should be called once when the FastAPI app starts up.

    Args:
        settings: Configuration to use; read from the environment when omitted.

    Returns:
        The newly created QuoteSession instance.
    """
    global _quote_session

    _quote_session = build_quote_session(settings or Settings.from_env())
    logger.info(
        f"QuoteSession initialized with {len(_quote_session.catalog.products)} catalog products"
    )
    return _quote_session


def shutdown_quote_session() -> None:
    """Drop the shared QuoteSession when the app shuts down."""
    global _quote_session

    _quote_session = None


# Type alias for dependency injection
QuoteSessionDep = Annotated[QuoteSession, Depends(get_quote_session)]
