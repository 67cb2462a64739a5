"""
Contact enrichment orchestration service.

Wraps the tiered orchestrator with the application concerns around it:
per-contact serialisation, provider lookup errors surfaced as API errors,
feedback and confidence recomputation, and bounded bulk enrichment.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

from fastapi import status

from prospector.core.config import settings
from prospector.errors import ProviderUnavailable, raise_app_error
from prospector.services.confidence import feedback_points, fuse_contact
from prospector.services.contact_enrichment.base import EmailProvider
from prospector.services.contact_store import ContactStore
from prospector.services.enrichment_orchestrator import EnrichmentAttempt, RetryPolicy, TieredSearchOrchestrator

logger = logging.getLogger(__name__)


class ContactLockRegistry:
    """
    One asyncio.Lock per contact id, shared by every service in the process.

    Locks are held weakly and disappear once no coroutine references them.
    Serialisation is in-process only; separate processes stay last-write-wins.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, contact_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(contact_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[contact_id] = lock
        return lock


class ContactEnrichmentService:
    """Service to run contact enrichment across providers."""

    def __init__(
        self,
        store: ContactStore,
        providers: dict[str, EmailProvider],
        *,
        locks: Optional[ContactLockRegistry] = None,
        order: Optional[list[str]] = None,
        min_hit_confidence: Optional[int] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.store = store
        self.providers = providers
        self.locks = locks or ContactLockRegistry()
        self.orchestrator = TieredSearchOrchestrator(
            store,
            providers,
            order=order,
            min_hit_confidence=min_hit_confidence,
            retry_policy=retry_policy,
        )

    async def enrich_contact(
        self,
        user_id: UUID,
        contact_id: UUID,
        force_refresh: bool = False,
    ) -> Optional[EnrichmentAttempt]:
        async with self.locks.lock_for(contact_id):
            run = await self.orchestrator.enrich(user_id, contact_id, force_refresh=force_refresh)
        if run is not None:
            logger.info(
                "Enrichment of contact %s finished %s after %d provider(s)",
                contact_id,
                run.state.value,
                len(run.attempts),
            )
        return run

    async def search_with_provider(self, user_id: UUID, contact_id: UUID, provider: str) -> Optional[EnrichmentAttempt]:
        provider_key = provider.lower()
        if provider_key not in self.providers:
            raise_app_error(
                status.HTTP_400_BAD_REQUEST,
                "PROVIDER_NOT_FOUND",
                f"Provider {provider} is not registered",
                {"available": sorted(self.providers)},
            )

        try:
            async with self.locks.lock_for(contact_id):
                return await self.orchestrator.search_with_provider(user_id, contact_id, provider_key)
        except ProviderUnavailable as exc:
            raise_app_error(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "PROVIDER_UNAVAILABLE",
                str(exc),
                {"provider": exc.provider, **exc.details},
            )

    async def recompute_confidence(self, user_id: UUID, contact_id: UUID) -> Optional[int]:
        """Fuse and persist the contact's probability. Idempotent for unchanged inputs."""
        async with self.locks.lock_for(contact_id):
            contact = await self.store.get_contact(user_id, contact_id)
            if contact is None:
                return None
            probability = fuse_contact(contact)
            await self.store.update_contact(user_id, contact_id, {"probability": probability})
        return probability

    async def add_feedback(self, user_id: UUID, contact_id: UUID, feedback_type: str):
        try:
            feedback_points(feedback_type)
        except ValueError as exc:
            raise_app_error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "INVALID_FEEDBACK_TYPE",
                str(exc),
                {"allowed": ["excellent", "ok", "terrible"]},
            )
        async with self.locks.lock_for(contact_id):
            return await self.store.add_contact_feedback(user_id, contact_id, feedback_type)


ServiceFactory = Callable[[], AsyncContextManager[ContactEnrichmentService]]


@dataclass
class BulkEnrichOutcome:
    contact_id: UUID
    run: Optional[EnrichmentAttempt] = None
    error: Optional[str] = None


class BulkEnrichmentRunner:
    """
    Enriches every contact of a company concurrently.

    Each contact gets its own service (and so its own database session) from
    ``service_factory``; at most ``concurrency`` run at once. One contact
    failing does not stop the others.
    """

    def __init__(self, service_factory: ServiceFactory, concurrency: Optional[int] = None):
        self.service_factory = service_factory
        self.concurrency = max(1, concurrency if concurrency is not None else settings.BULK_ENRICH_CONCURRENCY)

    async def _contact_ids(self, user_id: UUID, company_id: UUID) -> Optional[list[UUID]]:
        async with self.service_factory() as service:
            company = await service.store.get_company(user_id, company_id)
            if company is None:
                return None
            contacts = await service.store.list_contacts_by_company(user_id, company_id)
            return [contact.id for contact in contacts]

    async def enrich_company_contacts(
        self,
        user_id: UUID,
        company_id: UUID,
        force_refresh: bool = False,
    ) -> Optional[list[BulkEnrichOutcome]]:
        contact_ids = await self._contact_ids(user_id, company_id)
        if contact_ids is None:
            return None

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run_one(contact_id: UUID) -> BulkEnrichOutcome:
            async with semaphore:
                try:
                    async with self.service_factory() as service:
                        run = await service.enrich_contact(user_id, contact_id, force_refresh=force_refresh)
                except Exception as exc:  # noqa: BLE001
                    logger.exception("Bulk enrichment failed for contact %s", contact_id)
                    return BulkEnrichOutcome(contact_id=contact_id, error=str(exc))
                return BulkEnrichOutcome(contact_id=contact_id, run=run)

        logger.info(
            "Bulk enriching %d contacts for company %s (concurrency %d)",
            len(contact_ids),
            company_id,
            self.concurrency,
        )
        return list(await asyncio.gather(*(run_one(contact_id) for contact_id in contact_ids)))
