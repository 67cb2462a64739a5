"""
Contact router - contacts, email enrichment, feedback and confidence.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.core.dependencies import get_db, get_enrichment_service, get_user_id
from prospector.repositories.contact_repository import ContactRepository
from prospector.schemas.contact import ContactCreate, ContactRead, ContactUpdate
from prospector.schemas.contact_feedback import ContactFeedbackCreate, ContactFeedbackRead
from prospector.schemas.enrichment import (
    ConfidenceResponse,
    EnrichContactRequest,
    EnrichmentResponse,
    enrichment_response,
)
from prospector.services.contact_enrichment_service import ContactEnrichmentService

router = APIRouter(prefix="/contacts", tags=["Contacts"])


def _contact_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Contact not found",
    )


@router.post("", response_model=ContactRead, status_code=status.HTTP_201_CREATED)
async def create_contact(
    data: ContactCreate,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    repo = ContactRepository(db)
    if not await repo.get_company(user_id, data.company_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found",
        )
    return await repo.create(user_id, data)


@router.get("/{contact_id}", response_model=ContactRead)
async def get_contact(
    contact_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    contact = await ContactRepository(db).get_contact(user_id, contact_id)
    if not contact:
        raise _contact_not_found()
    return contact


@router.patch("/{contact_id}", response_model=ContactRead)
async def update_contact(
    contact_id: UUID,
    data: ContactUpdate,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    contact = await ContactRepository(db).update(user_id, contact_id, data)
    if not contact:
        raise _contact_not_found()
    return contact


@router.post("/{contact_id}/enrich", response_model=EnrichmentResponse)
async def enrich_contact(
    contact_id: UUID,
    data: EnrichContactRequest = EnrichContactRequest(),
    user_id: UUID = Depends(get_user_id),
    service: ContactEnrichmentService = Depends(get_enrichment_service),
):
    """
    Walk the email providers in priority order until a confident hit.

    Returns 200 with the contact even when nothing was found; the attempt
    log shows what each provider did.
    """
    run = await service.enrich_contact(user_id, contact_id, force_refresh=data.force_refresh)
    if run is None:
        raise _contact_not_found()
    return enrichment_response(run)


@router.post("/{contact_id}/providers/{provider}", response_model=EnrichmentResponse)
async def search_with_provider(
    contact_id: UUID,
    provider: str,
    user_id: UUID = Depends(get_user_id),
    service: ContactEnrichmentService = Depends(get_enrichment_service),
):
    """Run one named provider, even if it was already tried for this contact."""
    run = await service.search_with_provider(user_id, contact_id, provider)
    if run is None:
        raise _contact_not_found()
    return enrichment_response(run)


@router.post("/{contact_id}/feedback", response_model=ContactFeedbackRead, status_code=status.HTTP_201_CREATED)
async def add_feedback(
    contact_id: UUID,
    data: ContactFeedbackCreate,
    user_id: UUID = Depends(get_user_id),
    service: ContactEnrichmentService = Depends(get_enrichment_service),
):
    feedback = await service.add_feedback(user_id, contact_id, data.feedback_type)
    if feedback is None:
        raise _contact_not_found()
    return feedback


@router.post("/{contact_id}/confidence", response_model=ConfidenceResponse)
async def recompute_confidence(
    contact_id: UUID,
    user_id: UUID = Depends(get_user_id),
    service: ContactEnrichmentService = Depends(get_enrichment_service),
):
    probability = await service.recompute_confidence(user_id, contact_id)
    if probability is None:
        raise _contact_not_found()
    return ConfidenceResponse(contact_id=contact_id, probability=probability)
