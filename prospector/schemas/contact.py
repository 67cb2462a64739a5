"""
Pydantic schemas for Contact.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from prospector.schemas.base import UserScopedRead


class ContactCreate(BaseModel):
    company_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    role: Optional[str] = None
    email: Optional[str] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    name_confidence_score: Optional[int] = Field(None, ge=0, le=100)
    linkedin_url: Optional[str] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    verification_source: Optional[str] = None


class ContactUpdate(BaseModel):
    """Manual edits. Enrichment bookkeeping fields are not editable here."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[str] = None
    email: Optional[str] = None
    name_confidence_score: Optional[int] = Field(None, ge=0, le=100)
    linkedin_url: Optional[str] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None


class ContactRead(UserScopedRead):
    company_id: UUID
    name: str
    role: Optional[str] = None
    email: Optional[str] = None
    alternative_emails: List[str] = Field(default_factory=list)
    probability: Optional[int] = None
    name_confidence_score: Optional[int] = None
    user_feedback_score: Optional[int] = None
    feedback_count: int = 0
    completed_searches: List[str] = Field(default_factory=list)
    linkedin_url: Optional[str] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    verification_source: Optional[str] = None
    last_validated: Optional[datetime] = None
    last_enriched: Optional[datetime] = None


class ContactDeleteResult(BaseModel):
    company_id: UUID
    deleted: int
