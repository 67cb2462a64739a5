"""
Pydantic schemas for SearchApproach.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SearchApproachUpdate(BaseModel):
    name: Optional[str] = None
    prompt: Optional[str] = None
    order: Optional[int] = None
    active: Optional[bool] = None
    config: Optional[Dict[str, Any]] = None
    technical_prompt: Optional[str] = None
    response_structure: Optional[str] = None
    module_type: Optional[str] = None
    validation_rules: Optional[Dict[str, Any]] = None


class SearchApproachRead(BaseModel):
    id: UUID
    name: str
    prompt: str
    order: int
    active: bool
    config: Dict[str, Any]
    technical_prompt: Optional[str] = None
    response_structure: Optional[str] = None
    module_type: str
    validation_rules: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
