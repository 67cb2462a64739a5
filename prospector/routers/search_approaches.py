"""
Search approach admin endpoints.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from prospector.core.dependencies import get_db
from prospector.repositories.search_approach_repository import SearchApproachRepository
from prospector.schemas.search_approach import SearchApproachRead, SearchApproachUpdate

router = APIRouter(prefix="/search-approaches", tags=["Search Approaches"])


@router.get("", response_model=List[SearchApproachRead])
async def list_search_approaches(
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    return await SearchApproachRepository(db).list(active_only=active_only)


@router.patch("/{approach_id}", response_model=SearchApproachRead)
async def update_search_approach(
    approach_id: UUID,
    data: SearchApproachUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Admin update of prompt, activation and config."""
    approach = await SearchApproachRepository(db).update(approach_id, data)
    if not approach:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Search approach not found",
        )
    return approach
