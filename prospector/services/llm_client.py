"""
Perplexity chat-completions client used by the company and decision-maker searches.
"""

import json
import logging
import re
from typing import Any, Optional

import httpx

from prospector.core.config import settings
from prospector.errors import ProviderTransient, ProviderUnavailable
from prospector.services.contact_enrichment.base import Fetcher, raise_for_provider_status

logger = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class PerplexityClient:
    """Thin async wrapper over the chat completions endpoint."""

    key = "perplexity"

    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        fetcher: Optional[Fetcher] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.fetcher = fetcher or self._http_request
        self._api_key = api_key
        self.model = model or settings.PERPLEXITY_MODEL
        self.endpoint = settings.PERPLEXITY_ENDPOINT
        self.timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS

    def validate_config(self) -> str:
        api_key = self._api_key or settings.PERPLEXITY_API_KEY
        if not api_key:
            raise ProviderUnavailable(
                self.key,
                "Perplexity API key not configured",
                details={"missing": ["PERPLEXITY_API_KEY"]},
            )
        return api_key

    async def _http_request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> tuple[int, Any, dict[str, str]]:
        try:
            if self.client is not None:
                resp = await self.client.request(
                    method, url, params=params, json=json_body, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.request(method, url, params=params, json=json_body, headers=headers)
        except httpx.TimeoutException as exc:
            raise ProviderTransient(self.key, f"Request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ProviderTransient(self.key, f"Transport error: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = {"text": resp.text}
        return resp.status_code, payload, dict(resp.headers)

    def _build_request_body(self, prompt: str, system_prompt: str, response_format: Optional[str]) -> dict[str, Any]:
        system_content = system_prompt
        if response_format:
            system_content += f"\n\nFormat your response as JSON:\n{response_format}"
        return {
            "model": self.model,
            "temperature": 0.2,
            "max_tokens": 1000,
            "stream": False,
            "messages": [
                {"role": "system", "content": system_content},
                {"role": "user", "content": prompt},
            ],
        }

    async def complete(self, prompt: str, system_prompt: str, response_format: Optional[str] = None) -> str:
        """Return the assistant message text for one prompt."""
        api_key = self.validate_config()
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        body = self._build_request_body(prompt, system_prompt, response_format)
        status_code, payload, response_headers = await self.fetcher(
            "POST", self.endpoint, params=None, json_body=body, headers=headers
        )
        raise_for_provider_status(self.key, status_code, payload, response_headers)

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ProviderTransient(self.key, "Response had no choices", status_code=status_code)
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ProviderTransient(self.key, "Response message had no content", status_code=status_code)
        return content


def extract_json_object(text: str) -> Optional[Any]:
    """Parse the outermost {...} span in free text, or None."""
    match = JSON_OBJECT_RE.search(text or "")
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except ValueError:
        return None
