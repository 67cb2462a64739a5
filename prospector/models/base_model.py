"""
Base model with common fields.

All user-scoped tables inherit from this to get:
- id (UUID primary key)
- user_id (owner of the row)
- created_at (when the record was created)
- updated_at (when the record was last modified)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from prospector.db.base import Base


class UserScopedModel(Base):
    """
    Abstract base class for all user-scoped models.

    This is not a real table - it's a template that other models inherit from.
    Every table owned by a user gets these fields automatically.
    """

    __abstract__ = True  # This means: don't create a table for this class

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owner of the row, indexed for fast per-user lookups
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
    )

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
