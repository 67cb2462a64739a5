"""
Schemas package.

Import all schemas here for easy access.
"""

from prospector.schemas.company import CompanyCreate, CompanyRead, CompanySearchRequest, CompanySearchResponse
from prospector.schemas.contact import ContactCreate, ContactDeleteResult, ContactRead, ContactUpdate
from prospector.schemas.contact_feedback import ContactFeedbackCreate, ContactFeedbackRead
from prospector.schemas.decision_makers import DecisionMakerSearchRequest, DecisionMakerSearchResponse
from prospector.schemas.enrichment import (
    BulkEnrichItem,
    BulkEnrichRequest,
    BulkEnrichResponse,
    ConfidenceResponse,
    EnrichContactRequest,
    EnrichmentResponse,
    ProviderAttemptRead,
    enrichment_response,
)
from prospector.schemas.search_approach import SearchApproachRead, SearchApproachUpdate

__all__ = [
    "BulkEnrichItem",
    "BulkEnrichRequest",
    "BulkEnrichResponse",
    "CompanyCreate",
    "CompanyRead",
    "CompanySearchRequest",
    "CompanySearchResponse",
    "ConfidenceResponse",
    "ContactCreate",
    "ContactDeleteResult",
    "ContactFeedbackCreate",
    "ContactFeedbackRead",
    "ContactRead",
    "ContactUpdate",
    "DecisionMakerSearchRequest",
    "DecisionMakerSearchResponse",
    "EnrichContactRequest",
    "EnrichmentResponse",
    "ProviderAttemptRead",
    "SearchApproachRead",
    "SearchApproachUpdate",
    "enrichment_response",
]
