"""
Company repository - database operations for Company.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.models.company import Company
from prospector.schemas.company import CompanyCreate


class CompanyRepository:
    """Repository for Company database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, user_id: UUID, limit: int = 50, offset: int = 0) -> List[Company]:
        """List a user's companies, newest first."""
        result = await self.db.execute(
            select(Company)
            .where(Company.user_id == user_id)
            .order_by(Company.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def get_by_id(self, user_id: UUID, company_id: UUID) -> Optional[Company]:
        result = await self.db.execute(
            select(Company).where(
                Company.id == company_id,
                Company.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, user_id: UUID, name: str) -> Optional[Company]:
        """Case-insensitive name match within a user's companies."""
        result = await self.db.execute(
            select(Company)
            .where(
                Company.user_id == user_id,
                func.lower(Company.name) == name.strip().lower(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: UUID, data: CompanyCreate) -> Company:
        company = Company(user_id=user_id, **data.model_dump())
        self.db.add(company)
        await self.db.flush()
        await self.db.refresh(company)
        return company

    async def upsert_by_name(self, user_id: UUID, data: CompanyCreate) -> Company:
        """Return the existing company with this name, filling empty fields, or create it."""
        existing = await self.get_by_name(user_id, data.name)
        if existing is None:
            return await self.create(user_id, data)

        for field_name, value in data.model_dump(exclude={"name"}).items():
            if value and not getattr(existing, field_name):
                setattr(existing, field_name, value)
        await self.db.flush()
        await self.db.refresh(existing)
        return existing
