import asyncio
import json
import uuid
from types import SimpleNamespace

import pytest

from prospector.errors import AppError, ProviderUnavailable
from prospector.services.company_search_service import CompanySearchService
from prospector.services.decision_maker_finder import DecisionMakerConfig
from prospector.services.search_cache_service import InMemorySearchCache

COMPANIES = json.dumps({"companies": [{"name": "Acme Plumbing", "website": "acmeplumbing.com"}]})


class FakeLLM:
    key = "perplexity"
    model = "sonar"

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    async def complete(self, prompt, system_prompt, response_format=None):
        self.prompts.append(prompt)
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeApproachRepo:
    def __init__(self, approaches=()):
        self.approaches = list(approaches)

    async def list(self, active_only=False):
        return [a for a in self.approaches if a.active or not active_only]


class FakeCompanyRepo:
    def __init__(self):
        self.by_name = {}

    async def upsert_by_name(self, user_id, data):
        key = data.name.lower()
        if key not in self.by_name:
            self.by_name[key] = SimpleNamespace(id=uuid.uuid4(), user_id=user_id, **data.model_dump())
        return self.by_name[key]

    async def get_by_id(self, user_id, company_id):
        return next((c for c in self.by_name.values() if c.id == company_id and c.user_id == user_id), None)


class FakeContactRepo:
    def __init__(self):
        self.contacts = []
        self.deleted = 0

    async def list_contacts_by_company(self, user_id, company_id):
        return [c for c in self.contacts if c.company_id == company_id]

    async def delete_contacts_by_company(self, user_id, company_id):
        before = len(self.contacts)
        self.contacts = [c for c in self.contacts if c.company_id != company_id]
        self.deleted += before - len(self.contacts)
        return before - len(self.contacts)

    async def create(self, user_id, data, **extra):
        contact = SimpleNamespace(id=uuid.uuid4(), user_id=user_id, **data.model_dump(), **extra)
        self.contacts.append(contact)
        return contact


def make_service(llm, approaches=()):
    service = CompanySearchService(db=None, llm=llm, cache=InMemorySearchCache(default_ttl_seconds=600))
    service.approach_repo = FakeApproachRepo(approaches)
    service.company_repo = FakeCompanyRepo()
    service.contact_repo = FakeContactRepo()
    return service


@pytest.mark.unit
def test_company_search_is_cached_by_normalized_query(user_id):
    llm = FakeLLM(COMPANIES)
    service = make_service(llm)

    first, first_cached = asyncio.run(service.search_companies(user_id, "Plumbers in Austin"))
    second, second_cached = asyncio.run(service.search_companies(user_id, "  plumbers   in austin "))
    third, third_cached = asyncio.run(service.search_companies(user_id, "plumbers in austin", force_refresh=True))

    assert (first_cached, second_cached, third_cached) == (False, True, False)
    assert len(llm.prompts) == 2
    assert first[0] is second[0] is third[0]


@pytest.mark.unit
def test_active_approach_prompts_guide_the_search(user_id):
    approaches = [
        SimpleNamespace(id=uuid.uuid4(), active=True, module_type="company_overview", prompt="Prefer family-owned"),
        SimpleNamespace(id=uuid.uuid4(), active=False, module_type="company_overview", prompt="Ignore me"),
    ]
    llm = FakeLLM(COMPANIES)

    asyncio.run(make_service(llm, approaches).search_companies(user_id, "plumbers"))

    assert "- Prefer family-owned" in llm.prompts[0]
    assert "Ignore me" not in llm.prompts[0]


@pytest.mark.unit
@pytest.mark.parametrize(
    "answer,status_code,code",
    [
        (ProviderUnavailable("perplexity", "no key", details={"missing": ["PERPLEXITY_API_KEY"]}), 503,
         "PROVIDER_UNAVAILABLE"),
        ("sorry, nothing", 502, "SEARCH_PARSE_FAILED"),
    ],
)
def test_company_search_errors(user_id, answer, status_code, code):
    service = make_service(FakeLLM(answer))

    with pytest.raises(AppError) as exc_info:
        asyncio.run(service.search_companies(user_id, "plumbers"))

    assert exc_info.value.status_code == status_code
    assert exc_info.value.payload["error"]["code"] == code


@pytest.mark.unit
def test_decision_makers_are_persisted_as_contacts(user_id):
    leaders = json.dumps({"leaders": [{"name": "Sarah Johnson", "role": "Chief Executive Officer"}]})
    llm = FakeLLM(COMPANIES, leaders)
    service = make_service(llm)
    [company], _ = asyncio.run(service.search_companies(user_id, "plumbers"))
    config = DecisionMakerConfig(use_multiple_queries=False)

    contacts, result = asyncio.run(service.find_contacts_for_company(user_id, company.id, config))
    again, _ = asyncio.run(service.find_contacts_for_company(user_id, company.id, config))
    replaced, _ = asyncio.run(service.find_contacts_for_company(user_id, company.id, config, replace=True))

    [contact] = contacts
    assert contact.name == "Sarah Johnson"
    assert contact.verification_source == "ai_leadership"
    assert contact.completed_searches == ["decision_maker_search"]
    assert result.failed_tiers == []
    assert again == []
    assert len(replaced) == 1
    assert service.contact_repo.deleted == 1


@pytest.mark.unit
def test_decision_makers_for_unknown_company(user_id):
    service = make_service(FakeLLM(COMPANIES))
    assert asyncio.run(service.find_contacts_for_company(user_id, uuid.uuid4(), DecisionMakerConfig())) is None
