import uuid

import pytest
from fastapi.testclient import TestClient

from prospector.core.dependencies import get_enrichment_service, get_user_id
from prospector.main import app
from prospector.services.contact_enrichment import ApolloAdapter, ProviderResult
from prospector.services.contact_enrichment_service import ContactEnrichmentService
from prospector.services.enrichment_orchestrator import RetryPolicy


class StubProvider:
    def __init__(self, key, result):
        self.key = key
        self.search_type = f"{key}_search"
        self.result = result

    async def lookup(self, request):
        return self.result


async def no_sleep(_delay):
    return None


@pytest.fixture
def contact(store, user_id):
    company = store.add_company(user_id, "Teamshares", website="teamshares.com")
    return store.add_contact(user_id, company, "Alex Eu", name_confidence_score=70, probability=70)


@pytest.fixture
def client(store, user_id):
    providers = {
        "hunter": StubProvider("hunter", ProviderResult(email="aeu@teamshares.com", confidence=85)),
        "apollo": ApolloAdapter(api_key=None),
    }

    def service_override():
        return ContactEnrichmentService(
            store,
            providers,
            order=["hunter"],
            retry_policy=RetryPolicy(sleeper=no_sleep),
        )

    app.dependency_overrides[get_enrichment_service] = service_override
    app.dependency_overrides[get_user_id] = lambda: user_id
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.unit
def test_enrich_contact_returns_contact_and_attempts(client, contact):
    response = client.post(f"/contacts/{contact.id}/enrich", json={"force_refresh": False})

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "found"
    assert body["contact"]["email"] == "aeu@teamshares.com"
    assert body["contact"]["completed_searches"] == ["hunter_search"]
    assert body["attempts"][0]["provider"] == "hunter"
    assert body["attempts"][0]["outcome"] == "hit"


@pytest.mark.unit
def test_enrich_missing_contact_is_404(client):
    response = client.post(f"/contacts/{uuid.uuid4()}/enrich")
    assert response.status_code == 404


@pytest.mark.unit
def test_unknown_provider_error_payload(client, contact):
    response = client.post(f"/contacts/{contact.id}/providers/clearbit")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PROVIDER_NOT_FOUND"


@pytest.mark.unit
def test_unconfigured_provider_is_503(client, contact, monkeypatch):
    monkeypatch.setattr("prospector.core.config.settings.APOLLO_API_KEY", None)

    response = client.post(f"/contacts/{contact.id}/providers/apollo")

    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "PROVIDER_UNAVAILABLE"
    assert error["details"]["missing"] == ["APOLLO_API_KEY"]


@pytest.mark.unit
def test_feedback_and_confidence(client, contact):
    response = client.post(f"/contacts/{contact.id}/feedback", json={"feedback_type": "excellent"})
    assert response.status_code == 201
    assert response.json()["feedback_type"] == "excellent"

    response = client.post(f"/contacts/{contact.id}/confidence")
    assert response.status_code == 200
    # 70 * 0.8 + 100 * 0.2
    assert response.json() == {"contact_id": str(contact.id), "probability": 76}


@pytest.mark.unit
def test_feedback_type_is_validated(client, contact):
    response = client.post(f"/contacts/{contact.id}/feedback", json={"feedback_type": "amazing"})
    assert response.status_code == 422


@pytest.mark.unit
def test_user_header_is_required(store):
    app.dependency_overrides[get_enrichment_service] = lambda: ContactEnrichmentService(store, {})
    try:
        response = TestClient(app).post(f"/contacts/{uuid.uuid4()}/confidence")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 400
