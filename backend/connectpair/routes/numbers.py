"""
ConnectPair Backend: Number Search Route
=========================================

What:  GET /api/numbers/search, browse available numbers by pattern and
       area code.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from connectpair.database import get_db_session
from connectpair.schemas.responses import ErrorResponse, NumberSearchResponse
from connectpair.services.number_service import number_service

router = APIRouter(prefix="/api/numbers", tags=["Numbers"])


@router.get(
    "/search",
    response_model=NumberSearchResponse,
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="Search available phone numbers",
)
async def search_numbers(
    pattern: Optional[str] = Query(
        default=None,
        description="Exact pattern type, e.g. 'sequential' or 'mirror'",
    ),
    area_code: Optional[str] = Query(
        default=None,
        description="Number prefix, e.g. '0207'",
    ),
    limit: int = Query(default=10, ge=1, le=100, description="Maximum rows returned"),
    db: AsyncSession = Depends(get_db_session),
) -> NumberSearchResponse:
    return await number_service.search_numbers(
        db=db,
        pattern=pattern,
        area_code=area_code,
        limit=limit,
    )
