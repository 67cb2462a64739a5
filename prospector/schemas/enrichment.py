"""
Schemas for contact email enrichment responses.
"""

from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from prospector.schemas.contact import ContactRead


class EnrichContactRequest(BaseModel):
    force_refresh: bool = False


class ProviderAttemptRead(BaseModel):
    provider: str
    search_type: str
    outcome: str
    email: Optional[str] = None
    confidence: Optional[int] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    retries: int = 0

    model_config = ConfigDict(from_attributes=True)


class EnrichmentResponse(BaseModel):
    """The contact after enrichment, returned even when nothing was found."""

    contact: ContactRead
    state: str
    attempts: List[ProviderAttemptRead]


class BulkEnrichRequest(BaseModel):
    force_refresh: bool = False


class BulkEnrichItem(BaseModel):
    contact_id: UUID
    state: Optional[str] = None
    email: Optional[str] = None
    error: Optional[str] = None


class BulkEnrichResponse(BaseModel):
    company_id: UUID
    results: List[BulkEnrichItem]


class ConfidenceResponse(BaseModel):
    contact_id: UUID
    probability: int


def attempt_to_read(attempt: Any) -> ProviderAttemptRead:
    return ProviderAttemptRead(
        provider=attempt.provider,
        search_type=attempt.search_type,
        outcome=attempt.outcome.value,
        email=attempt.email,
        confidence=attempt.confidence,
        error_kind=attempt.error_kind,
        message=attempt.message,
        retries=attempt.retries,
    )


def enrichment_response(run: Any) -> EnrichmentResponse:
    """Build the API response from an orchestrator EnrichmentAttempt."""
    return EnrichmentResponse(
        contact=ContactRead.model_validate(run.contact),
        state=run.state.value,
        attempts=[attempt_to_read(attempt) for attempt in run.attempts],
    )
