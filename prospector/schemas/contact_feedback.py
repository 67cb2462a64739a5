"""
Pydantic schemas for ContactFeedback.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

FeedbackType = Literal["excellent", "ok", "terrible"]


class ContactFeedbackCreate(BaseModel):
    feedback_type: FeedbackType


class ContactFeedbackRead(BaseModel):
    id: UUID
    contact_id: UUID
    feedback_type: FeedbackType
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
