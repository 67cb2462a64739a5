"""Contact enrichment provider adapters."""

from typing import Optional

import httpx

from prospector.services.contact_enrichment.aeroleads import AeroLeadsAdapter
from prospector.services.contact_enrichment.apollo import ApolloAdapter
from prospector.services.contact_enrichment.base import (
    EmailProvider,
    HttpEmailProvider,
    KnownContact,
    ProviderLookup,
    ProviderResult,
)
from prospector.services.contact_enrichment.hunter import HunterAdapter
from prospector.services.contact_enrichment.pattern_matcher import PatternMatcherAdapter

PROVIDER_CLASSES = {
    PatternMatcherAdapter.key: PatternMatcherAdapter,
    HunterAdapter.key: HunterAdapter,
    ApolloAdapter.key: ApolloAdapter,
    AeroLeadsAdapter.key: AeroLeadsAdapter,
}


def build_providers(client: Optional[httpx.AsyncClient] = None) -> dict[str, EmailProvider]:
    """Instantiate every known adapter, sharing one HTTP client."""
    providers: dict[str, EmailProvider] = {}
    for key, cls in PROVIDER_CLASSES.items():
        # The pattern matcher is local and takes no HTTP client
        providers[key] = cls(client=client) if issubclass(cls, HttpEmailProvider) else cls()
    return providers


__all__ = [
    "AeroLeadsAdapter",
    "ApolloAdapter",
    "EmailProvider",
    "HunterAdapter",
    "KnownContact",
    "PROVIDER_CLASSES",
    "PatternMatcherAdapter",
    "ProviderLookup",
    "ProviderResult",
    "build_providers",
]
