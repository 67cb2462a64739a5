"""
Tiered email search for a single contact.

Providers are walked in priority order (free pattern matcher first, then
paid APIs by cost). Every step is persisted through the ContactStore
before the next provider is tried, so an interrupted walk resumes cleanly:
providers already tagged in ``completed_searches`` are skipped.

A hit below the confidence threshold is kept in the alternates and the
walk goes on. If no confident hit turns up and the primary is still empty,
the strongest weak hit is promoted to primary when the walk ends.

Each run is tracked as an ``EnrichmentAttempt`` moving through
PENDING -> TRIED -> FOUND | EXHAUSTED, with one ``ProviderAttempt`` per
provider considered.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from prospector.core.config import settings
from prospector.errors import ProviderError, ProviderNoMatch, ProviderRateLimited
from prospector.services.confidence import clamp_score, fuse_confidence
from prospector.services.contact_enrichment.base import (
    EmailProvider,
    KnownContact,
    ProviderLookup,
    ProviderResult,
)
from prospector.services.contact_store import ContactStore
from prospector.utils.domain import normalize_domain
from prospector.utils.email import merge_email_data
from prospector.utils.time import utc_now

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class EnrichmentState(str, Enum):
    PENDING = "pending"
    TRIED = "tried"
    FOUND = "found"
    EXHAUSTED = "exhausted"


class AttemptOutcome(str, Enum):
    HIT = "hit"
    MISS = "miss"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class ProviderAttempt:
    provider: str
    search_type: str
    outcome: AttemptOutcome
    email: Optional[str] = None
    confidence: Optional[int] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    retries: int = 0


@dataclass
class EnrichmentAttempt:
    """State of one enrichment run for one contact."""

    contact_id: UUID
    force_refresh: bool = False
    state: EnrichmentState = EnrichmentState.PENDING
    attempts: list[ProviderAttempt] = field(default_factory=list)
    contact: Any = None

    @property
    def finished(self) -> bool:
        return self.state in (EnrichmentState.FOUND, EnrichmentState.EXHAUSTED)

    def record(self, attempt: ProviderAttempt) -> None:
        if self.finished:
            raise RuntimeError(f"Enrichment attempt already {self.state.value}")
        self.attempts.append(attempt)
        if attempt.outcome != AttemptOutcome.SKIPPED:
            self.state = EnrichmentState.TRIED

    def mark_found(self) -> None:
        if self.state != EnrichmentState.TRIED:
            raise RuntimeError(f"Cannot mark {self.state.value} attempt as found")
        self.state = EnrichmentState.FOUND

    def mark_exhausted(self) -> None:
        if not self.finished:
            self.state = EnrichmentState.EXHAUSTED


@dataclass
class RetryPolicy:
    """
    Retries rate-limited and transient provider failures.

    Delay for retry n (0-based) is a full-jitter draw from
    [0, min(max_delay, base_delay * 2**n)]. A Retry-After hint from the
    provider replaces the draw, still capped at max_delay.
    """

    max_retries: int = 2
    base_delay: float = 1.0
    max_delay: float = 30.0
    sleeper: Sleeper = asyncio.sleep
    rand: Callable[[], float] = random.random

    @classmethod
    def from_settings(cls, **overrides: Any) -> "RetryPolicy":
        values = {
            "max_retries": settings.PROVIDER_MAX_RETRIES,
            "base_delay": settings.PROVIDER_RETRY_BASE_DELAY,
            "max_delay": settings.PROVIDER_RETRY_MAX_DELAY,
        }
        values.update(overrides)
        return cls(**values)

    def delay_for(self, retry_number: int, error: ProviderError) -> float:
        if isinstance(error, ProviderRateLimited) and error.retry_after is not None:
            return min(error.retry_after, self.max_delay)
        ceiling = min(self.max_delay, self.base_delay * (2 ** retry_number))
        return self.rand() * ceiling

    async def call(
        self,
        provider: EmailProvider,
        request: ProviderLookup,
    ) -> tuple[ProviderResult, int]:
        """Run ``provider.lookup`` and return (result, retries used)."""
        retries = 0
        while True:
            try:
                return await provider.lookup(request), retries
            except ProviderError as exc:
                if not exc.retryable or retries >= self.max_retries:
                    exc.retries = retries
                    raise
                delay = self.delay_for(retries, exc)
                retries += 1
                logger.info(
                    "Retrying %s after %s (retry %d/%d in %.2fs)",
                    provider.key,
                    exc.kind.value,
                    retries,
                    self.max_retries,
                    delay,
                )
                await self.sleeper(delay)


def apply_provider_result(
    contact: Any,
    result: ProviderResult,
    *,
    provider_key: str,
    search_type: str,
    now: datetime,
    hold_primary: bool = False,
) -> dict[str, Any]:
    """
    Build the contact updates for one provider answer.

    A hit merges the email (primary once, then alternates), raises the AI
    confidence only when higher, fills role/phone/linkedin only when empty
    and recomputes probability. Hit or miss, the search tag is recorded and
    last_validated is stamped.

    With ``hold_primary`` an empty primary slot is left empty and the email
    goes to the alternates instead.
    """
    updates: dict[str, Any] = {}

    if result.found:
        if hold_primary and not contact.email:
            alternates = list(contact.alternative_emails or [])
            if result.email.strip() not in alternates:
                updates["alternative_emails"] = alternates + [result.email.strip()]
        else:
            updates.update(merge_email_data(contact.email, contact.alternative_emails, result.email))
        if "email" in updates:
            updates["verification_source"] = provider_key

        confidence = clamp_score(result.confidence)
        ai_score = contact.name_confidence_score
        if ai_score is None or confidence > ai_score:
            updates["name_confidence_score"] = confidence
            ai_score = confidence

        if result.title and not contact.role:
            updates["role"] = result.title
        if result.phone and not contact.phone_number:
            updates["phone_number"] = result.phone
        if result.linkedin_url and not contact.linkedin_url:
            updates["linkedin_url"] = result.linkedin_url

        updates["probability"] = fuse_confidence(ai_score, contact.user_feedback_score, contact.feedback_count)

    tags = list(contact.completed_searches or [])
    if search_type not in tags:
        tags.append(search_type)
        updates["completed_searches"] = tags
    updates["last_validated"] = now
    return updates


class TieredSearchOrchestrator:
    """Walks email providers for a contact until a confident hit."""

    def __init__(
        self,
        store: ContactStore,
        providers: dict[str, EmailProvider],
        *,
        order: Optional[list[str]] = None,
        min_hit_confidence: Optional[int] = None,
        retry_policy: Optional[RetryPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.providers = providers
        self.order = list(order if order is not None else settings.ENRICHMENT_PROVIDER_ORDER)
        self.min_hit_confidence = (
            min_hit_confidence if min_hit_confidence is not None else settings.ENRICHMENT_MIN_HIT_CONFIDENCE
        )
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.clock = clock

    async def _build_lookup(self, user_id: UUID, contact: Any) -> ProviderLookup:
        company = await self.store.get_company(user_id, contact.company_id)
        company_name = company.name if company else ""
        domain = normalize_domain(company.website) if company else None

        known: list[KnownContact] = []
        if company is not None:
            for colleague in await self.store.list_contacts_by_company(user_id, company.id):
                if colleague.id == contact.id:
                    continue
                for address in [colleague.email, *(colleague.alternative_emails or [])]:
                    if address:
                        known.append(KnownContact(name=colleague.name, email=address))

        return ProviderLookup(
            contact_name=contact.name,
            company_name=company_name,
            domain=domain,
            known_contacts=known,
        )

    async def _try_provider(
        self,
        user_id: UUID,
        contact: Any,
        provider: EmailProvider,
        lookup: ProviderLookup,
        min_primary_confidence: Optional[int] = None,
    ) -> tuple[Any, ProviderAttempt]:
        """
        One provider call. Persists hits and misses, leaves errors untagged.

        Hits below ``min_primary_confidence`` never fill an empty primary slot.
        """
        try:
            result, retries = await self.retry_policy.call(provider, lookup)
        except ProviderNoMatch as exc:
            result, retries = ProviderResult(), exc.retries
        except ProviderError as exc:
            logger.warning(
                "Provider %s failed for contact %s: %s (%s)",
                provider.key,
                contact.id,
                exc,
                exc.kind.value,
            )
            return contact, ProviderAttempt(
                provider=provider.key,
                search_type=provider.search_type,
                outcome=AttemptOutcome.ERROR,
                error_kind=exc.kind.value,
                message=str(exc),
                retries=exc.retries,
            )

        updates = apply_provider_result(
            contact,
            result,
            provider_key=provider.key,
            search_type=provider.search_type,
            now=self.clock(),
            hold_primary=(
                min_primary_confidence is not None and clamp_score(result.confidence) < min_primary_confidence
            ),
        )
        contact = await self.store.update_contact(user_id, contact.id, updates)

        if result.found:
            logger.info("Provider %s found %s for contact %s", provider.key, result.email, contact.id)
            attempt = ProviderAttempt(
                provider=provider.key,
                search_type=provider.search_type,
                outcome=AttemptOutcome.HIT,
                email=result.email,
                confidence=clamp_score(result.confidence),
                retries=retries,
            )
        else:
            attempt = ProviderAttempt(
                provider=provider.key,
                search_type=provider.search_type,
                outcome=AttemptOutcome.MISS,
                retries=retries,
            )
        return contact, attempt

    async def enrich(self, user_id: UUID, contact_id: UUID, *, force_refresh: bool = False) -> Optional[EnrichmentAttempt]:
        """Run the tiered walk. Returns None when the contact does not exist."""
        contact = await self.store.get_contact(user_id, contact_id)
        if contact is None:
            return None

        run = EnrichmentAttempt(contact_id=contact_id, force_refresh=force_refresh, contact=contact)
        lookup: Optional[ProviderLookup] = None
        weak_hits: list[ProviderAttempt] = []

        for key in self.order:
            provider = self.providers.get(key)
            if provider is None:
                logger.warning("Provider %s is in the enrichment order but not registered", key)
                continue

            if not force_refresh and provider.search_type in (contact.completed_searches or []):
                run.record(
                    ProviderAttempt(
                        provider=key,
                        search_type=provider.search_type,
                        outcome=AttemptOutcome.SKIPPED,
                        message="already searched",
                    )
                )
                continue

            if lookup is None:
                lookup = await self._build_lookup(user_id, contact)

            contact, attempt = await self._try_provider(
                user_id, contact, provider, lookup, min_primary_confidence=self.min_hit_confidence
            )
            run.contact = contact
            run.record(attempt)

            if attempt.outcome == AttemptOutcome.HIT:
                if (attempt.confidence or 0) >= self.min_hit_confidence:
                    run.mark_found()
                    break
                weak_hits.append(attempt)

        if not run.finished and weak_hits and not contact.email:
            run.contact = await self._promote_weak_hit(user_id, contact, weak_hits)
            run.mark_found()

        run.mark_exhausted()
        return run

    async def _promote_weak_hit(self, user_id: UUID, contact: Any, weak_hits: list[ProviderAttempt]) -> Any:
        """Move the most confident weak hit (earliest on ties) from the alternates to the primary slot."""
        best = max(weak_hits, key=lambda attempt: attempt.confidence or 0)
        email = best.email.strip()
        logger.info("Promoting %s from %s to primary for contact %s", email, best.provider, contact.id)
        return await self.store.update_contact(
            user_id,
            contact.id,
            {
                "email": email,
                "alternative_emails": [e for e in contact.alternative_emails or [] if e != email],
                "verification_source": best.provider,
            },
        )

    async def search_with_provider(self, user_id: UUID, contact_id: UUID, provider_key: str) -> Optional[EnrichmentAttempt]:
        """
        Run a single named provider, ignoring completed_searches.

        ProviderUnavailable propagates so callers can report the missing
        configuration. Other provider errors are recorded on the attempt.
        """
        provider = self.providers[provider_key]
        contact = await self.store.get_contact(user_id, contact_id)
        if contact is None:
            return None

        validate = getattr(provider, "validate_config", None)
        if validate is not None:
            validate()

        run = EnrichmentAttempt(contact_id=contact_id, force_refresh=True, contact=contact)
        lookup = await self._build_lookup(user_id, contact)
        contact, attempt = await self._try_provider(user_id, contact, provider, lookup)
        run.contact = contact
        run.record(attempt)
        if attempt.outcome == AttemptOutcome.HIT:
            run.mark_found()
        run.mark_exhausted()
        return run
