"""
Schemas for the decision-maker search.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from prospector.schemas.contact import ContactRead


class DecisionMakerSearchRequest(BaseModel):
    """Overrides on top of the active search approach configuration."""

    industry: Optional[str] = None
    max_contacts: Optional[int] = Field(None, ge=1, le=50)
    minimum_confidence: Optional[int] = Field(None, ge=0, le=100)
    enable_core_leadership: Optional[bool] = None
    enable_department_heads: Optional[bool] = None
    enable_middle_management: Optional[bool] = None
    enable_custom_search: Optional[bool] = None
    custom_search_target: Optional[str] = None
    use_multiple_queries: Optional[bool] = None
    enable_fallback: Optional[bool] = None
    replace_existing: bool = False


class DecisionMakerSearchResponse(BaseModel):
    contacts: List[ContactRead]
    failed_tiers: List[str] = Field(default_factory=list)
    skipped_tiers: List[str] = Field(default_factory=list)
    fallback_tiers: List[str] = Field(default_factory=list)
