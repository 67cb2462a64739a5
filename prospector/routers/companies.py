"""
Company router - companies, company search, decision makers and bulk enrichment.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.core.dependencies import (
    get_bulk_runner,
    get_company_search_service,
    get_db,
    get_user_id,
)
from prospector.repositories.company_repository import CompanyRepository
from prospector.repositories.contact_repository import ContactRepository
from prospector.schemas.company import CompanyCreate, CompanyRead, CompanySearchRequest, CompanySearchResponse
from prospector.schemas.contact import ContactDeleteResult, ContactRead
from prospector.schemas.decision_makers import DecisionMakerSearchRequest, DecisionMakerSearchResponse
from prospector.schemas.enrichment import BulkEnrichItem, BulkEnrichRequest, BulkEnrichResponse
from prospector.services.company_search_service import CompanySearchService
from prospector.services.contact_enrichment_service import BulkEnrichmentRunner

router = APIRouter(prefix="/companies", tags=["Companies"])


def _company_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Company not found",
    )


@router.get("", response_model=List[CompanyRead])
async def list_companies(
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    return await CompanyRepository(db).list(user_id, limit=limit, offset=offset)


@router.post("", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
async def create_company(
    data: CompanyCreate,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await CompanyRepository(db).create(user_id, data)


@router.post("/search", response_model=CompanySearchResponse)
async def search_companies(
    data: CompanySearchRequest,
    user_id: UUID = Depends(get_user_id),
    service: CompanySearchService = Depends(get_company_search_service),
):
    """
    Search companies through the LLM. Results are cached by query and saved
    to the user's companies.
    """
    companies, cached = await service.search_companies(user_id, data.query, force_refresh=data.force_refresh)
    return CompanySearchResponse(
        query=data.query,
        cached=cached,
        companies=[CompanyRead.model_validate(company) for company in companies],
    )


@router.get("/{company_id}", response_model=CompanyRead)
async def get_company(
    company_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    company = await CompanyRepository(db).get_by_id(user_id, company_id)
    if not company:
        raise _company_not_found()
    return company


@router.get("/{company_id}/contacts", response_model=List[ContactRead])
async def list_company_contacts(
    company_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    repo = ContactRepository(db)
    if not await repo.get_company(user_id, company_id):
        raise _company_not_found()
    return await repo.list_contacts_by_company(user_id, company_id)


@router.delete("/{company_id}/contacts", response_model=ContactDeleteResult)
async def delete_company_contacts(
    company_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    repo = ContactRepository(db)
    if not await repo.get_company(user_id, company_id):
        raise _company_not_found()
    deleted = await repo.delete_contacts_by_company(user_id, company_id)
    return ContactDeleteResult(company_id=company_id, deleted=deleted)


@router.post("/{company_id}/decision-makers", response_model=DecisionMakerSearchResponse)
async def find_decision_makers(
    company_id: UUID,
    data: DecisionMakerSearchRequest,
    user_id: UUID = Depends(get_user_id),
    service: CompanySearchService = Depends(get_company_search_service),
):
    """
    Run the tiered decision-maker search for a company and save the results.

    With replace_existing the company's current contacts are deleted first.
    """
    overrides = data.model_dump(exclude={"replace_existing"}, exclude_none=True)
    config = await service.decision_maker_config(**overrides)
    outcome = await service.find_contacts_for_company(user_id, company_id, config, replace=data.replace_existing)
    if outcome is None:
        raise _company_not_found()

    contacts, result = outcome
    return DecisionMakerSearchResponse(
        contacts=[ContactRead.model_validate(contact) for contact in contacts],
        failed_tiers=result.failed_tiers,
        skipped_tiers=result.skipped_tiers,
        fallback_tiers=result.fallback_tiers,
    )


@router.post("/{company_id}/enrich", response_model=BulkEnrichResponse)
async def enrich_company_contacts(
    company_id: UUID,
    data: BulkEnrichRequest = BulkEnrichRequest(),
    user_id: UUID = Depends(get_user_id),
    runner: BulkEnrichmentRunner = Depends(get_bulk_runner),
):
    """Enrich every contact of the company, a bounded number at a time."""
    outcomes = await runner.enrich_company_contacts(user_id, company_id, force_refresh=data.force_refresh)
    if outcomes is None:
        raise _company_not_found()

    return BulkEnrichResponse(
        company_id=company_id,
        results=[
            BulkEnrichItem(
                contact_id=outcome.contact_id,
                state=outcome.run.state.value if outcome.run else None,
                email=outcome.run.contact.email if outcome.run and outcome.run.contact else None,
                error=outcome.error,
            )
            for outcome in outcomes
        ],
    )
