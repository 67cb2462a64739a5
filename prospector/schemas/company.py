"""
Pydantic schemas for Company.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from prospector.schemas.base import UserScopedRead


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    website: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    size: Optional[int] = None
    default_contact_email: Optional[str] = None


class CompanyRead(UserScopedRead):
    name: str
    website: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    size: Optional[int] = None
    default_contact_email: Optional[str] = None


class CompanySearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    force_refresh: bool = False


class CompanySearchResponse(BaseModel):
    query: str
    cached: bool
    companies: List[CompanyRead]
