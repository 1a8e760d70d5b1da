"""Main entry point for the Kitchen CPQ FastAPI application.

This module creates and configures the FastAPI app instance that serves the REST API
for building kitchen cabinetry quotes through the guided quote workflow.

To run the development server:
    uvicorn main:app --reload

To run in production:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.config import Settings
from api.dependencies import initialize_quote_session, shutdown_quote_session
from api.exceptions import (
    generic_exception_handler,
    invalid_reference_handler,
    invalid_state_handler,
    runtime_error_handler,
    validation_exception_handler,
    validation_failed_handler,
    value_error_handler,
)
from api.routes import catalog as catalog_routes
from api.routes import preview as preview_routes
from api.routes import processing as processing_routes
from api.routes import quote as quote_routes
from api.routes import workflow as workflow_routes
from models.errors import InvalidReferenceError, InvalidStateError, ValidationFailedError

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Reads settings, configures logging and creates the shared QuoteSession at
    startup; drops the session at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Kitchen CPQ - initializing QuoteSession...")
    initialize_quote_session(settings)

    yield  # App runs and handles requests here

    logger.info("Shutting down Kitchen CPQ")
    shutdown_quote_session()


app = FastAPI(
    title="Kitchen CPQ",
    description="Configure-price-quote workflow API for kitchen cabinetry",
    version=VERSION,
    lifespan=lifespan,
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(InvalidReferenceError, invalid_reference_handler)
app.add_exception_handler(InvalidStateError, invalid_state_handler)
app.add_exception_handler(ValidationFailedError, validation_failed_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(RuntimeError, runtime_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register route modules
app.include_router(catalog_routes.router)
app.include_router(quote_routes.router)
app.include_router(processing_routes.router)
app.include_router(workflow_routes.router)
app.include_router(preview_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message.

    Returns:
        A dictionary with a welcome message.
    """
    return {
        "message": "Welcome to the Kitchen CPQ API",
        "version": VERSION,
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
