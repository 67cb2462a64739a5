"""
Company search and decision-maker discovery.

Company searches go to the LLM and are cached by normalized query;
companies are persisted for the requesting user on every search, cached or
not. Decision-maker discovery runs the finder for one stored company and
persists the candidates as contacts.
"""

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.errors import ParseError, ProviderError, ProviderUnavailable, raise_app_error
from prospector.models.company import Company
from prospector.models.contact import Contact
from prospector.models.search_approach import SearchApproach
from prospector.repositories.company_repository import CompanyRepository
from prospector.repositories.contact_repository import ContactRepository
from prospector.repositories.search_approach_repository import SearchApproachRepository
from prospector.schemas.company import CompanyCreate
from prospector.schemas.contact import ContactCreate
from prospector.services.decision_maker_finder import (
    ChatClient,
    DecisionMakerConfig,
    DecisionMakerFinder,
    DecisionMakerSearchResult,
)
from prospector.services.decision_maker_parser import ContactResponseParser
from prospector.services.llm_client import extract_json_object
from prospector.services.search_cache_service import SearchCache, build_cache_key

logger = logging.getLogger(__name__)

DECISION_MAKER_MODULE = "decision_maker"
DECISION_MAKER_SEARCH_TAG = "decision_maker_search"
MAX_COMPANIES = 10

COMPANY_SYSTEM_PROMPT = (
    "You are a business research assistant. Return ONLY JSON. "
    "Only include real, currently operating companies."
)
COMPANY_RESPONSE_FORMAT = (
    '{"companies": [{"name": "Acme Plumbing", "website": "acmeplumbing.com", '
    '"description": "Residential plumbing services", "industry": "construction", '
    '"services": ["repairs", "installation"], "size": 25}]}'
)


def _coerce_size(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_company_results(response: str) -> list[CompanyCreate]:
    payload = extract_json_object(response)
    if payload is None:
        raise ParseError("company_search", "No JSON object found in response")

    entries = payload.get("companies") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        raise ParseError("company_search", "Response has no companies list")

    companies: list[CompanyCreate] = []
    for entry in entries[:MAX_COMPANIES]:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        if not name:
            continue
        services = entry.get("services") or []
        companies.append(
            CompanyCreate(
                name=name[:255],
                website=entry.get("website") or entry.get("website_url"),
                description=entry.get("description"),
                industry=entry.get("industry"),
                services=[str(s) for s in services] if isinstance(services, list) else [],
                size=_coerce_size(entry.get("size")),
            )
        )
    return companies


class CompanySearchService:
    def __init__(
        self,
        db: AsyncSession,
        llm: ChatClient,
        cache: SearchCache,
        parser: Optional[ContactResponseParser] = None,
    ):
        self.db = db
        self.llm = llm
        self.cache = cache
        self.company_repo = CompanyRepository(db)
        self.contact_repo = ContactRepository(db)
        self.approach_repo = SearchApproachRepository(db)
        self.finder = DecisionMakerFinder(llm, parser)

    def _provider_key(self) -> str:
        return getattr(self.llm, "key", "llm")

    def _build_prompt(self, query: str, approaches: list[SearchApproach]) -> str:
        guidance = [a.prompt.strip() for a in approaches if a.module_type != DECISION_MAKER_MODULE and a.prompt]
        prompt = f"Find up to {MAX_COMPANIES} companies matching: {query}."
        if guidance:
            prompt += "\n\nSearch guidance:\n" + "\n".join(f"- {line}" for line in guidance)
        return prompt

    async def search_companies(
        self,
        user_id: UUID,
        query: str,
        force_refresh: bool = False,
    ) -> tuple[list[Company], bool]:
        """Return (companies, served_from_cache)."""
        approaches = await self.approach_repo.list(active_only=True)
        canonical_params = {
            "query": " ".join(query.lower().split()),
            "model": getattr(self.llm, "model", None),
            "approaches": sorted(str(a.id) for a in approaches),
        }
        cache_key, _, _ = build_cache_key(self._provider_key(), canonical_params)

        cached = None if force_refresh else await self.cache.get(cache_key)
        if cached is not None:
            logger.info("Company search cache hit for %r", query)
            results = [CompanyCreate.model_validate(item) for item in cached]
        else:
            try:
                response = await self.llm.complete(
                    self._build_prompt(query, approaches),
                    COMPANY_SYSTEM_PROMPT,
                    COMPANY_RESPONSE_FORMAT,
                )
                results = parse_company_results(response)
            except ProviderUnavailable as exc:
                raise_app_error(
                    status.HTTP_503_SERVICE_UNAVAILABLE,
                    "PROVIDER_UNAVAILABLE",
                    str(exc),
                    {"provider": exc.provider, **exc.details},
                )
            except ProviderError as exc:
                raise_app_error(
                    status.HTTP_502_BAD_GATEWAY,
                    "SEARCH_PROVIDER_FAILED",
                    str(exc),
                    {"provider": exc.provider, "kind": exc.kind.value},
                )
            except ParseError as exc:
                raise_app_error(status.HTTP_502_BAD_GATEWAY, "SEARCH_PARSE_FAILED", str(exc))
            await self.cache.set(cache_key, [item.model_dump() for item in results])

        companies = [await self.company_repo.upsert_by_name(user_id, item) for item in results]
        return companies, cached is not None

    async def decision_maker_config(self, **overrides: Any) -> DecisionMakerConfig:
        """Config from the first active decision-maker approach, then request overrides."""
        approaches = await self.approach_repo.list(active_only=True)
        approach = next((a for a in approaches if a.module_type == DECISION_MAKER_MODULE), None)
        config = DecisionMakerConfig.from_approach(approach.config if approach else None)
        return config.with_overrides(**overrides)

    async def find_contacts_for_company(
        self,
        user_id: UUID,
        company_id: UUID,
        config: Optional[DecisionMakerConfig] = None,
        replace: bool = False,
    ) -> Optional[tuple[list[Contact], DecisionMakerSearchResult]]:
        company = await self.company_repo.get_by_id(user_id, company_id)
        if not company:
            return None

        config = config or await self.decision_maker_config()
        if not config.industry and company.industry:
            config = config.with_overrides(industry=company.industry)

        result = await self.finder.search(company.name, config)

        if replace:
            deleted = await self.contact_repo.delete_contacts_by_company(user_id, company_id)
            logger.info("Cleared %d contacts for company %s before re-search", deleted, company_id)
            existing_names: set[str] = set()
        else:
            existing = await self.contact_repo.list_contacts_by_company(user_id, company_id)
            existing_names = {contact.name.strip().lower() for contact in existing}

        contacts: list[Contact] = []
        for candidate in result.candidates:
            if candidate.name.strip().lower() in existing_names:
                continue
            contact = await self.contact_repo.create(
                user_id,
                ContactCreate(
                    company_id=company_id,
                    name=candidate.name,
                    role=candidate.role,
                    probability=candidate.probability,
                    name_confidence_score=candidate.name_confidence_score,
                    verification_source=f"ai_{candidate.tier}",
                ),
                completed_searches=[DECISION_MAKER_SEARCH_TAG],
            )
            contacts.append(contact)
        return contacts, result
