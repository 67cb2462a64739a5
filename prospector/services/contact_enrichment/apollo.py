"""
Apollo.io people-match adapter.
"""

import json
from typing import Any, Optional

from prospector.services.contact_enrichment.base import (
    HttpEmailProvider,
    ProviderLookup,
    ProviderResult,
    scale_confidence,
)
from prospector.utils.domain import split_full_name


class ApolloAdapter(HttpEmailProvider):
    key = "apollo"
    search_type = "apollo_search"
    api_key_setting = "APOLLO_API_KEY"
    endpoint = "https://api.apollo.io/api/v1/people/match"
    default_confidence = 50

    def _build_body(self, request: ProviderLookup) -> dict[str, Any]:
        first_name, last_name = split_full_name(request.contact_name)
        body = {
            "first_name": first_name,
            "last_name": last_name,
            "organization_name": request.company_name,
            "domain": request.domain,
        }
        return {k: v for k, v in body.items() if v}

    @staticmethod
    def _coerce_payload(payload: Any) -> dict[str, Any]:
        # Apollo occasionally answers with a JSON document encoded as a string
        if isinstance(payload, dict) and set(payload) == {"text"}:
            payload = payload["text"]
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except ValueError:
                return {}
        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _first_phone(person: dict[str, Any]) -> Optional[str]:
        for entry in person.get("phone_numbers") or []:
            value = entry.get("sanitized_number") or entry.get("raw_number") or entry.get("value")
            if value:
                return value
        return None

    async def lookup(self, request: ProviderLookup) -> ProviderResult:
        api_key = self.validate_config()
        headers = {
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "X-Api-Key": api_key,
        }
        payload = await self.request("POST", self.endpoint, json_body=self._build_body(request), headers=headers)

        person = self._coerce_payload(payload).get("person") or {}
        if not person:
            return ProviderResult()

        email = person.get("email")
        return ProviderResult(
            email=email or None,
            confidence=scale_confidence(person.get("confidence_score"), self.default_confidence) if email else 0,
            title=person.get("title"),
            phone=self._first_phone(person),
            linkedin_url=person.get("linkedin_url"),
        )
