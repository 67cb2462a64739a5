"""
Contact model.

Represents a person at a prospect company, plus everything the enrichment
pipeline has learned about them.
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Integer, ForeignKey, Index, DateTime
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prospector.models.base_model import UserScopedModel

if TYPE_CHECKING:
    from prospector.models.company import Company


class Contact(UserScopedModel):
    """
    Contact table - a person at a prospect company.

    The primary email is written once; later, different addresses found by
    other providers go to alternative_emails. completed_searches records
    which provider searches have already been run for this person.
    """

    __tablename__ = "contact"

    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("company.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    alternative_emails: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )

    # Displayed confidence (0-100), fused from AI score and user feedback
    probability: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    name_confidence_score: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    user_feedback_score: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    feedback_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    completed_searches: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )

    linkedin_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    verification_source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    last_validated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    last_enriched: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    company: Mapped["Company"] = relationship(
        "Company",
        back_populates="contacts",
    )

    __table_args__ = (
        Index("ix_contact_user_company", "user_id", "company_id"),
        Index("ix_contact_email", "email"),
    )
