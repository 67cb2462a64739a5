"""
SearchApproach repository. Search approaches are global, not user-scoped.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.models.search_approach import SearchApproach
from prospector.schemas.search_approach import SearchApproachUpdate


class SearchApproachRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self, active_only: bool = False) -> List[SearchApproach]:
        query = select(SearchApproach)
        if active_only:
            query = query.where(SearchApproach.active.is_(True))
        result = await self.db.execute(query.order_by(SearchApproach.order.asc()))
        return list(result.scalars().all())

    async def get_by_id(self, approach_id: UUID) -> Optional[SearchApproach]:
        result = await self.db.execute(select(SearchApproach).where(SearchApproach.id == approach_id))
        return result.scalar_one_or_none()

    async def update(self, approach_id: UUID, data: SearchApproachUpdate) -> Optional[SearchApproach]:
        approach = await self.get_by_id(approach_id)
        if not approach:
            return None

        for field_name, value in data.model_dump(exclude_unset=True).items():
            setattr(approach, field_name, value)

        await self.db.flush()
        await self.db.refresh(approach)
        return approach
