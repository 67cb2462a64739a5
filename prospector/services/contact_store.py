"""
Storage contract consumed by the enrichment core.

The SQLAlchemy implementation is ``ContactRepository``; tests use an
in-memory fake. Every method is scoped to the owning user.
"""

from typing import Any, Optional, Protocol
from uuid import UUID


class ContactStore(Protocol):
    async def get_contact(self, user_id: UUID, contact_id: UUID) -> Optional[Any]:
        ...

    async def get_company(self, user_id: UUID, company_id: UUID) -> Optional[Any]:
        ...

    async def update_contact(self, user_id: UUID, contact_id: UUID, updates: dict[str, Any]) -> Any:
        """Apply partial updates, clamp confidence fields and stamp last_enriched."""
        ...

    async def list_contacts_by_company(self, user_id: UUID, company_id: UUID) -> list[Any]:
        ...

    async def delete_contacts_by_company(self, user_id: UUID, company_id: UUID) -> int:
        ...

    async def add_contact_feedback(self, user_id: UUID, contact_id: UUID, feedback_type: str) -> Any:
        """Append feedback and recompute the contact's feedback score, count and probability."""
        ...
