"""
Contact repository - database operations for Contact.

This is the SQLAlchemy ``ContactStore`` used by the enrichment core.
"""

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.models.company import Company
from prospector.models.contact import Contact
from prospector.models.contact_feedback import ContactFeedback
from prospector.repositories.contact_feedback_repository import ContactFeedbackRepository
from prospector.schemas.contact import ContactCreate, ContactUpdate
from prospector.services.confidence import average_feedback_score, clamp_score, feedback_points, fuse_confidence
from prospector.utils.email import replace_primary_email
from prospector.utils.time import utc_now

CONFIDENCE_FIELDS = ("probability", "name_confidence_score", "user_feedback_score")


class ContactRepository:
    """Repository for Contact database operations."""

    def __init__(self, db: AsyncSession, autocommit: bool = False):
        self.db = db
        self.autocommit = autocommit
        self.feedback_repo = ContactFeedbackRepository(db)

    async def get_contact(self, user_id: UUID, contact_id: UUID) -> Optional[Contact]:
        result = await self.db.execute(
            select(Contact).where(
                Contact.id == contact_id,
                Contact.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_company(self, user_id: UUID, company_id: UUID) -> Optional[Company]:
        result = await self.db.execute(
            select(Company).where(
                Company.id == company_id,
                Company.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_contacts_by_company(self, user_id: UUID, company_id: UUID) -> List[Contact]:
        """Contacts for a company, most probable first."""
        result = await self.db.execute(
            select(Contact)
            .where(
                Contact.user_id == user_id,
                Contact.company_id == company_id,
            )
            .order_by(Contact.probability.desc().nulls_last(), Contact.name.asc())
        )
        return list(result.scalars().all())

    async def create(self, user_id: UUID, data: ContactCreate, **extra: Any) -> Contact:
        values = data.model_dump()
        values.update(extra)
        for field_name in CONFIDENCE_FIELDS:
            if values.get(field_name) is not None:
                values[field_name] = clamp_score(values[field_name])
        if values.get("probability") is None and values.get("name_confidence_score") is not None:
            values["probability"] = values["name_confidence_score"]

        contact = Contact(user_id=user_id, **values)
        self.db.add(contact)
        await self.db.flush()
        await self.db.refresh(contact)
        return contact

    async def update_contact(self, user_id: UUID, contact_id: UUID, updates: dict[str, Any]) -> Optional[Contact]:
        """Apply partial updates. Confidence fields are clamped and last_enriched is stamped.

        With ``autocommit`` the update is committed before returning.
        """
        contact = await self.get_contact(user_id, contact_id)
        if not contact:
            return None

        for field_name, value in updates.items():
            if field_name in CONFIDENCE_FIELDS and value is not None:
                value = clamp_score(value)
            setattr(contact, field_name, value)
        contact.last_enriched = utc_now()

        await self.db.flush()
        if self.autocommit:
            await self.db.commit()
        await self.db.refresh(contact)
        return contact

    async def update(self, user_id: UUID, contact_id: UUID, data: ContactUpdate) -> Optional[Contact]:
        """Manual edit. Changing the AI score recomputes probability.

        A new primary email demotes the previous one to the alternates.
        """
        contact = await self.get_contact(user_id, contact_id)
        if not contact:
            return None

        updates = data.model_dump(exclude_unset=True)
        if updates.get("name") is None:
            updates.pop("name", None)
        if "email" in updates:
            updates.update(
                replace_primary_email(contact.email, contact.alternative_emails, updates.pop("email"))
            )
            if "email" in updates:
                updates["verification_source"] = "manual"
        if "name_confidence_score" in updates:
            updates["probability"] = fuse_confidence(
                updates["name_confidence_score"],
                contact.user_feedback_score,
                contact.feedback_count,
            )
        return await self.update_contact(user_id, contact_id, updates)

    async def delete_contacts_by_company(self, user_id: UUID, company_id: UUID) -> int:
        result = await self.db.execute(
            delete(Contact).where(
                Contact.user_id == user_id,
                Contact.company_id == company_id,
            )
        )
        await self.db.flush()
        return int(result.rowcount or 0)

    async def add_contact_feedback(self, user_id: UUID, contact_id: UUID, feedback_type: str) -> Optional[ContactFeedback]:
        """Append feedback, then recompute feedback score, count and probability."""
        feedback_points(feedback_type)

        contact = await self.get_contact(user_id, contact_id)
        if not contact:
            return None

        feedback = await self.feedback_repo.create(contact_id, feedback_type)
        feedback_types = await self.feedback_repo.list_types(contact_id)
        user_score = average_feedback_score(feedback_types)
        await self.update_contact(
            user_id,
            contact_id,
            {
                "user_feedback_score": user_score,
                "feedback_count": len(feedback_types),
                "probability": fuse_confidence(contact.name_confidence_score, user_score, len(feedback_types)),
            },
        )
        return feedback
