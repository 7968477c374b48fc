"""
ConnectPair Backend: Consultation Route Handler
================================================

What:  POST /api/consultation, the website's consultation request form.
How:   Hands the raw JSON body to ConsultationService, which validates,
       stores and schedules the confirmation and admin emails.

Request Flow:
    1. Body arrives as a JSON object (any shape; rules live in validation)
    2. ConsultationService: validate → INSERT + COMMIT
    3. 200 {success, message, consultationId}
    4. After the response: confirmation + admin alert (background tasks)
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from connectpair.database import get_db_session
from connectpair.schemas.responses import (
    ConsultationSubmitted,
    ErrorResponse,
    ValidationErrorResponse,
)
from connectpair.services.consultation_service import consultation_service
from connectpair.services.notification_service import Notifier, get_notifier

router = APIRouter(prefix="/api", tags=["Consultations"])


@router.post(
    "/consultation",
    response_model=ConsultationSubmitted,
    responses={
        200: {"description": "Consultation stored", "model": ConsultationSubmitted},
        400: {"description": "One or more fields are invalid", "model": ValidationErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Submit a consultation request",
)
async def submit_consultation(
    background_tasks: BackgroundTasks,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    notifier: Notifier = Depends(get_notifier),
) -> ConsultationSubmitted:
    """
    Body fields: relationshipType, names, email, phone, budget (required),
    anniversary, preferences (optional).

    Error responses (handled by global exception handlers):
        HTTP 400: every invalid field listed in `errors`
        HTTP 500: the row could not be stored; no email is sent
    """
    return await consultation_service.submit_consultation(
        db=db,
        fields=payload,
        notifier=notifier,
        background_tasks=background_tasks,
    )
