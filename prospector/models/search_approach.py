"""
SearchApproach model.

A configurable strategy descriptor that steers the LLM company and
decision-maker searches. Only the admin update endpoint mutates it.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Integer, Boolean, DateTime, func
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from prospector.db.base import Base


class SearchApproach(Base):
    """Global (not user-scoped) search strategy."""

    __tablename__ = "search_approach"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    prompt: Mapped[str] = mapped_column(Text, nullable=False)

    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Validation thresholds and enabled sub-searches, e.g.
    # {"minimum_confidence": 40, "sub_searches": {"middle_management": false}}
    config: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    technical_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response_structure: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    module_type: Mapped[str] = mapped_column(String(50), nullable=False, default="company_overview")
    validation_rules: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
