"""
Hunter.io email finder adapter.
"""

import logging
from typing import Any

from prospector.services.contact_enrichment.base import (
    HttpEmailProvider,
    ProviderLookup,
    ProviderResult,
    scale_confidence,
)
from prospector.utils.domain import split_full_name

logger = logging.getLogger(__name__)


class HunterAdapter(HttpEmailProvider):
    key = "hunter"
    search_type = "hunter_search"
    api_key_setting = "HUNTER_API_KEY"
    endpoint = "https://api.hunter.io/v2/email-finder"
    default_confidence = 50

    def _build_params(self, request: ProviderLookup, api_key: str) -> dict[str, Any]:
        first_name, last_name = split_full_name(request.contact_name)
        params: dict[str, Any] = {
            "api_key": api_key,
            "first_name": first_name,
            "last_name": last_name,
        }
        # Domain takes precedence over the company name
        if request.domain:
            params["domain"] = request.domain
        else:
            params["company"] = request.company_name
        return params

    async def lookup(self, request: ProviderLookup) -> ProviderResult:
        api_key = self.validate_config()
        params = self._build_params(request, api_key)
        payload = await self.request("GET", self.endpoint, params=params)

        if not isinstance(payload, dict) or payload.get("errors"):
            logger.info("Hunter returned errors for %s at %s", request.contact_name, request.company_name)
            return ProviderResult()

        data = payload.get("data") or {}
        email = data.get("email")
        if not email:
            return ProviderResult()

        return ProviderResult(
            email=email,
            confidence=scale_confidence(data.get("score"), self.default_confidence),
            title=data.get("position"),
            phone=data.get("phone_number"),
            linkedin_url=data.get("linkedin_url"),
        )
