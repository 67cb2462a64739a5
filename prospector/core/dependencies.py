"""
FastAPI dependencies for the application.

Long-lived resources (HTTP client, providers, search cache, contact locks)
are created once in the app lifespan and read from ``app.state``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import UUID

import httpx
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.db.session import get_async_session_context, get_db
from prospector.repositories.contact_repository import ContactRepository
from prospector.services.company_search_service import CompanySearchService
from prospector.services.contact_enrichment.base import EmailProvider
from prospector.services.contact_enrichment_service import (
    BulkEnrichmentRunner,
    ContactEnrichmentService,
    ContactLockRegistry,
)
from prospector.services.llm_client import PerplexityClient
from prospector.services.search_cache_service import SearchCache

__all__ = [
    "get_db",
    "get_user_id",
    "get_http_client",
    "get_providers",
    "get_lock_registry",
    "get_search_cache",
    "get_llm_client",
    "get_enrichment_service",
    "get_bulk_runner",
    "get_company_search_service",
]


async def get_user_id(x_user_id: str = Header(None)) -> UUID:
    """
    Extract and validate the owning user id from the X-User-ID header.

    Raises 400 if the header is missing or not a UUID.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-ID header is required",
        )
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-ID header must be a UUID",
        )


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_providers(request: Request) -> dict[str, EmailProvider]:
    return request.app.state.providers


def get_lock_registry(request: Request) -> ContactLockRegistry:
    return request.app.state.contact_locks


def get_search_cache(request: Request) -> SearchCache:
    return request.app.state.search_cache


def get_llm_client(client: httpx.AsyncClient = Depends(get_http_client)) -> PerplexityClient:
    return PerplexityClient(client=client)


def get_enrichment_service(
    db: AsyncSession = Depends(get_db),
    providers: dict[str, EmailProvider] = Depends(get_providers),
    locks: ContactLockRegistry = Depends(get_lock_registry),
) -> ContactEnrichmentService:
    # Each provider step is committed before the next provider runs
    return ContactEnrichmentService(ContactRepository(db, autocommit=True), providers, locks=locks)


def get_bulk_runner(
    providers: dict[str, EmailProvider] = Depends(get_providers),
    locks: ContactLockRegistry = Depends(get_lock_registry),
) -> BulkEnrichmentRunner:
    @asynccontextmanager
    async def service_factory() -> AsyncGenerator[ContactEnrichmentService, None]:
        async with get_async_session_context() as session:
            yield ContactEnrichmentService(ContactRepository(session, autocommit=True), providers, locks=locks)

    return BulkEnrichmentRunner(service_factory)


def get_company_search_service(
    db: AsyncSession = Depends(get_db),
    llm: PerplexityClient = Depends(get_llm_client),
    cache: SearchCache = Depends(get_search_cache),
) -> CompanySearchService:
    return CompanySearchService(db, llm, cache)
