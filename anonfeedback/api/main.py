"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from anonfeedback.adapters.mail import ConsoleEmailSender, ResendEmailSender
from anonfeedback.adapters.repository import (
    Database,
    InMemoryAccountRepository,
    PostgresAccountRepository,
)
from anonfeedback.api.errors import install_exception_handlers
from anonfeedback.api.v1 import router as v1_router
from anonfeedback.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Anonymous feedback API v1 - Verify accounts and exchange anonymous messages",
    },
]


def build_email_sender(settings: Settings) -> ConsoleEmailSender | ResendEmailSender:
    """Resend when an API key is configured, console logging otherwise."""
    if settings.resend_api_key:
        return ResendEmailSender(settings.resend_api_key, settings.email_from)
    logger.warning("RESEND_API_KEY not set, verification emails will be logged to console")
    return ConsoleEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Opens the database connection pool and runs migrations on startup
    - Selects the email sender
    - Closes the pool and the email client on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    logger.info("Starting application...")

    database: Database | None = None
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage, data is lost on restart")
        app.state.repository = InMemoryAccountRepository()
    else:
        logger.info("Connecting to database...")
        database = Database(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        pool = await database.connect()
        app.state.repository = PostgresAccountRepository(pool)

    email_sender = build_email_sender(settings)
    app.state.email_sender = email_sender

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if isinstance(email_sender, ResendEmailSender):
        await email_sender.close()
    if database is not None:
        await database.close()


app = FastAPI(
    title="anonfeedback",
    description="Anonymous feedback API - verified accounts receive messages from anonymous senders",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

install_exception_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint with storage validation.

    Returns 200 OK if application and storage are healthy, 500 otherwise.
    """
    try:
        await request.app.state.repository.ping()
    except Exception:
        logger.exception("Health check failed")
        return JSONResponse(status_code=500, content={"status": "unhealthy"})

    return {"status": "healthy"}
