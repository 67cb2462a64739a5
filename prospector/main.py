"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from prospector.core.config import settings
from prospector.errors import AppError, app_error_handler
from prospector.routers import companies, contacts, health, search_approaches
from prospector.services.contact_enrichment import build_providers
from prospector.services.contact_enrichment_service import ContactLockRegistry
from prospector.services.search_cache_service import InMemorySearchCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: one shared HTTP client, the provider registry, the search
      cache and the per-contact lock registry are put on app.state.
    - On shutdown: the HTTP client is closed.
    """
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info("Starting %s...", settings.APP_NAME)

    client = httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT_SECONDS)
    app.state.http_client = client
    app.state.providers = build_providers(client)
    app.state.search_cache = InMemorySearchCache()
    app.state.contact_locks = ContactLockRegistry()

    yield

    await client.aclose()
    logger.info("Shutting down %s...", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Company discovery and contact email enrichment API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

app.include_router(health.router, tags=["Health"])
app.include_router(companies.router)
app.include_router(contacts.router)
app.include_router(search_approaches.router)
