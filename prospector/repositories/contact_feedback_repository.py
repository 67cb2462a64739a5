"""
Repository for ContactFeedback. Feedback rows are append-only.
"""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.models.contact_feedback import ContactFeedback


class ContactFeedbackRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, contact_id: UUID, feedback_type: str) -> ContactFeedback:
        feedback = ContactFeedback(contact_id=contact_id, feedback_type=feedback_type)
        self.db.add(feedback)
        await self.db.flush()
        await self.db.refresh(feedback)
        return feedback

    async def list_types(self, contact_id: UUID) -> List[str]:
        """All feedback types recorded for a contact, oldest first."""
        result = await self.db.execute(
            select(ContactFeedback.feedback_type)
            .where(ContactFeedback.contact_id == contact_id)
            .order_by(ContactFeedback.created_at.asc())
        )
        return list(result.scalars().all())
