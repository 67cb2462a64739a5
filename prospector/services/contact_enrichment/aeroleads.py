"""
AeroLeads email details adapter.
"""

from prospector.services.contact_enrichment.base import (
    HttpEmailProvider,
    ProviderLookup,
    ProviderResult,
    scale_confidence,
)
from prospector.utils.domain import split_full_name


class AeroLeadsAdapter(HttpEmailProvider):
    key = "aeroleads"
    search_type = "aeroleads_search"
    api_key_setting = "AEROLEADS_API_KEY"
    endpoint = "https://aeroleads.com/api/get_email_details"
    default_confidence = 75

    async def lookup(self, request: ProviderLookup) -> ProviderResult:
        api_key = self.validate_config()
        first_name, last_name = split_full_name(request.contact_name)
        params = {
            "api_key": api_key,
            "first_name": first_name,
            "last_name": last_name,
            "company": request.domain or request.company_name,
        }
        payload = await self.request("GET", self.endpoint, params=params)
        if not isinstance(payload, dict):
            return ProviderResult()

        # AeroLeads answers in two shapes: {success, data: {email, score}} and {email}
        data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        if payload.get("success") and data.get("email"):
            return ProviderResult(
                email=data["email"],
                confidence=scale_confidence(data.get("score"), self.default_confidence),
                title=data.get("designation") or data.get("title"),
                linkedin_url=data.get("linkedin_url"),
            )
        if payload.get("email"):
            return ProviderResult(email=payload["email"], confidence=self.default_confidence)
        return ProviderResult()
