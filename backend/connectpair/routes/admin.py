"""
ConnectPair Backend: Admin Route Handlers
==========================================

What:  GET /api/admin/consultations, the consultation inbox for the admin panel.

WARNING: UNAUTHENTICATED.
    This endpoint has no authentication or authorization of any kind. Anyone
    who can reach the API can read every consultation, including names,
    emails and phone numbers. This is a known, deliberately preserved gap:
    deployments must restrict /api/admin/* at the network or proxy level
    until an auth layer exists.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from connectpair.database import get_db_session
from connectpair.schemas.responses import ConsultationListResponse, ErrorResponse
from connectpair.services.consultation_service import consultation_service

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get(
    "/consultations",
    response_model=ConsultationListResponse,
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="List consultations (UNAUTHENTICATED)",
    description=(
        "Most recent first, optionally filtered by status. "
        "This endpoint performs no authentication; restrict it at the proxy."
    ),
)
async def list_consultations(
    status: Optional[str] = Query(default=None, description="e.g. 'pending'"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> ConsultationListResponse:
    return await consultation_service.list_consultations(
        db=db,
        status=status,
        limit=limit,
        offset=offset,
    )
