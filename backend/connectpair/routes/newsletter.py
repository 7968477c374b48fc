"""
ConnectPair Backend: Newsletter Route Handler
==============================================

What:  POST /api/newsletter, the footer signup form and lead magnets.
How:   Delegates to NewsletterService. Signing up twice is not an error.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from connectpair.database import get_db_session
from connectpair.schemas.responses import (
    ErrorResponse,
    NewsletterSubscribed,
    ValidationErrorResponse,
)
from connectpair.services.newsletter_service import newsletter_service
from connectpair.services.notification_service import Notifier, get_notifier

router = APIRouter(prefix="/api", tags=["Newsletter"])


@router.post(
    "/newsletter",
    response_model=NewsletterSubscribed,
    responses={
        400: {"description": "Invalid email", "model": ValidationErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Subscribe an email address to the newsletter",
)
async def subscribe(
    background_tasks: BackgroundTasks,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    notifier: Notifier = Depends(get_notifier),
) -> NewsletterSubscribed:
    """Body: {email, source?}; source defaults to "newsletter"."""
    return await newsletter_service.subscribe(
        db=db,
        fields=payload,
        notifier=notifier,
        background_tasks=background_tasks,
    )
