"""
Company model.

Represents a prospect company found by a search or added by hand.
"""

from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Text, Integer, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prospector.models.base_model import UserScopedModel

if TYPE_CHECKING:
    from prospector.models.contact import Contact


class Company(UserScopedModel):
    """
    Company table - a prospect company.

    Descriptive fields (industry, services, description) are only used as
    context for contact discovery and enrichment.
    """

    __tablename__ = "company"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Company website URL, normalized to a bare domain for provider lookups
    website: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    industry: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    services: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )

    size: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    default_contact_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    contacts: Mapped[List["Contact"]] = relationship(
        "Contact",
        back_populates="company",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_company_user_name", "user_id", "name"),
    )
