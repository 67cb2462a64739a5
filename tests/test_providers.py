import asyncio

import pytest

from prospector.errors import (
    ProviderAuthError,
    ProviderErrorKind,
    ProviderNoMatch,
    ProviderRateLimited,
    ProviderTransient,
    ProviderUnavailable,
)
from prospector.services.contact_enrichment import (
    AeroLeadsAdapter,
    ApolloAdapter,
    HunterAdapter,
    ProviderLookup,
    build_providers,
)
from prospector.services.contact_enrichment.base import scale_confidence


def make_fetcher(status_code=200, payload=None, headers=None):
    calls = []

    async def fetcher(method, url, *, params=None, json_body=None, headers=None):
        calls.append({"method": method, "url": url, "params": params, "json_body": json_body, "headers": headers})
        return status_code, payload, response_headers

    response_headers = headers or {}
    fetcher.calls = calls
    return fetcher


LOOKUP = ProviderLookup(contact_name="Alex Eu", company_name="Teamshares", domain="teamshares.com")


@pytest.mark.unit
def test_hunter_hit_maps_fields():
    fetcher = make_fetcher(
        payload={"data": {"email": "aeu@teamshares.com", "score": 85, "position": "CEO", "linkedin_url": "in/aeu"}}
    )
    adapter = HunterAdapter(fetcher=fetcher, api_key="k")

    result = asyncio.run(adapter.lookup(LOOKUP))

    assert result.email == "aeu@teamshares.com"
    assert result.confidence == 85
    assert result.title == "CEO"
    params = fetcher.calls[0]["params"]
    assert params["domain"] == "teamshares.com"
    assert "company" not in params
    assert params["first_name"] == "Alex" and params["last_name"] == "Eu"


@pytest.mark.unit
def test_hunter_uses_company_name_without_domain():
    fetcher = make_fetcher(payload={"data": {}})
    adapter = HunterAdapter(fetcher=fetcher, api_key="k")

    result = asyncio.run(adapter.lookup(ProviderLookup(contact_name="Alex Eu", company_name="Teamshares")))

    assert not result.found
    assert fetcher.calls[0]["params"]["company"] == "Teamshares"


@pytest.mark.unit
def test_missing_api_key_fails_before_network(monkeypatch):
    fetcher = make_fetcher(payload={})
    adapter = ApolloAdapter(fetcher=fetcher)
    monkeypatch.setattr("prospector.core.config.settings.APOLLO_API_KEY", None)

    with pytest.raises(ProviderUnavailable) as exc_info:
        asyncio.run(adapter.lookup(LOOKUP))

    assert exc_info.value.kind == ProviderErrorKind.UNAVAILABLE
    assert exc_info.value.details == {"missing": ["APOLLO_API_KEY"]}
    assert fetcher.calls == []


@pytest.mark.unit
@pytest.mark.parametrize(
    "status_code,error_cls",
    [
        (401, ProviderAuthError),
        (403, ProviderAuthError),
        (429, ProviderRateLimited),
        (500, ProviderTransient),
        (503, ProviderTransient),
        (404, ProviderNoMatch),
    ],
)
def test_http_status_classification(status_code, error_cls):
    adapter = HunterAdapter(fetcher=make_fetcher(status_code=status_code, payload={"errors": []}), api_key="k")

    with pytest.raises(error_cls):
        asyncio.run(adapter.lookup(LOOKUP))


@pytest.mark.unit
def test_rate_limit_carries_retry_after():
    fetcher = make_fetcher(status_code=429, payload={}, headers={"Retry-After": "7"})
    adapter = AeroLeadsAdapter(fetcher=fetcher, api_key="k")

    with pytest.raises(ProviderRateLimited) as exc_info:
        asyncio.run(adapter.lookup(LOOKUP))

    assert exc_info.value.retry_after == 7.0
    assert exc_info.value.retryable


@pytest.mark.unit
def test_apollo_parses_string_encoded_body():
    payload = {"text": '{"person": {"email": "alex@teamshares.com", "title": "Founder", '
                       '"phone_numbers": [{"sanitized_number": "+15550100"}]}}'}
    fetcher = make_fetcher(payload=payload)
    adapter = ApolloAdapter(fetcher=fetcher, api_key="k")

    result = asyncio.run(adapter.lookup(LOOKUP))

    assert result.email == "alex@teamshares.com"
    assert result.confidence == 50
    assert result.phone == "+15550100"
    assert fetcher.calls[0]["headers"]["X-Api-Key"] == "k"
    assert fetcher.calls[0]["json_body"]["organization_name"] == "Teamshares"


@pytest.mark.unit
def test_apollo_without_person_is_a_miss():
    adapter = ApolloAdapter(fetcher=make_fetcher(payload={"person": None}), api_key="k")
    assert not asyncio.run(adapter.lookup(LOOKUP)).found


@pytest.mark.unit
def test_aeroleads_handles_both_response_shapes():
    nested = AeroLeadsAdapter(
        fetcher=make_fetcher(payload={"success": True, "data": {"email": "a@teamshares.com", "score": 0.9}}),
        api_key="k",
    )
    flat = AeroLeadsAdapter(fetcher=make_fetcher(payload={"email": "b@teamshares.com"}), api_key="k")

    nested_result = asyncio.run(nested.lookup(LOOKUP))
    flat_result = asyncio.run(flat.lookup(LOOKUP))

    assert (nested_result.email, nested_result.confidence) == ("a@teamshares.com", 90)
    assert (flat_result.email, flat_result.confidence) == ("b@teamshares.com", 75)


@pytest.mark.unit
def test_scale_confidence():
    assert scale_confidence(0.42, 50) == 42
    assert scale_confidence(88, 50) == 88
    assert scale_confidence(None, 50) == 50
    assert scale_confidence("n/a", 50) == 50
    assert scale_confidence(250, 50) == 100


@pytest.mark.unit
def test_build_providers_registers_every_adapter():
    providers = build_providers()
    assert list(providers) == ["pattern", "hunter", "apollo", "aeroleads"]
    assert {p.search_type for p in providers.values()} == {
        "pattern_search",
        "hunter_search",
        "apollo_search",
        "aeroleads_search",
    }


@pytest.mark.unit
def test_build_providers_shares_client_with_http_adapters():
    client = object()
    providers = build_providers(client)
    assert all(providers[key].client is client for key in ("hunter", "apollo", "aeroleads"))
    assert not hasattr(providers["pattern"], "client")
