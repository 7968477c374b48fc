"""
ConnectPair Backend: Consultation Service (Request Pipeline)
=============================================================

What:  Orchestrates a consultation submission and serves the admin listing.
How:   Validation → one INSERT + COMMIT → success result → two background
       notifications scheduled after the commit.
Who:   Called by the consultation and admin route handlers.

Orchestration Flow (POST /api/consultation):
    ┌──────────┐    ┌────────────┐    ┌───────────┐    ┌──────────────────┐
    │ Validate │───▶│ INSERT and │───▶│ Response  │···▶│ confirmation +   │
    │ (fields) │    │ COMMIT     │    │ (200)     │    │ admin alert      │
    └──────────┘    └────────────┘    └───────────┘    │ (background)     │
                                                       └──────────────────┘
    Step 1 fails → ValidationError (400), nothing stored, nothing sent
    Step 2 fails → DatabaseError (500), nothing scheduled
    Notification fails → logged by the Notifier; the request already succeeded

The service is stateless: the session, the notifier and the background task
list are passed in for each call.
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTasks

from connectpair.exceptions import DatabaseError, ValidationError
from connectpair.models.consultation import Consultation
from connectpair.schemas.responses import (
    ConsultationListResponse,
    ConsultationOut,
    ConsultationSubmitted,
)
from connectpair.services.notification_service import Notifier
from connectpair.validation import validate_consultation

logger = logging.getLogger(__name__)


class ConsultationService:
    """
    Business logic for consultation requests.

    Responsibilities:
        - submit_consultation(): validate → persist → schedule notifications
        - list_consultations(): filtered, paginated read for the admin panel
    """

    async def submit_consultation(
        self,
        db: AsyncSession,
        fields: Optional[Mapping[str, Any]],
        notifier: Notifier,
        background_tasks: BackgroundTasks,
    ) -> ConsultationSubmitted:
        """
        Store a consultation request and queue its two emails.

        Args:
            db: Async database session (injected by FastAPI)
            fields: Raw JSON body as posted by the website
            notifier: Process-wide Notifier from app.state
            background_tasks: Tasks run by Starlette after the response is sent

        Raises:
            ValidationError: One or more fields broke their rule
            DatabaseError: The insert or commit failed
        """
        result = validate_consultation(fields)
        if not result.is_valid:
            raise ValidationError(errors=[v.to_dict() for v in result.errors])
        payload = result.payload

        consultation = Consultation(
            relationship_type=payload.relationship_type,
            names=payload.names,
            email=payload.email,
            phone=payload.phone,
            anniversary=payload.anniversary,
            preferences=payload.preferences or "",
            budget=payload.budget,
        )

        try:
            db.add(consultation)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error storing consultation: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        consultation_id = consultation.id
        logger.info("Consultation %s stored (budget=%s)", consultation_id, payload.budget)

        # Each task swallows its own failure, so one bad send never stops the other
        background_tasks.add_task(
            notifier.send_consultation_confirmation,
            payload.email,
            payload.names,
            consultation_id,
        )
        background_tasks.add_task(
            notifier.send_admin_alert,
            {
                "consultation_id": consultation_id,
                "relationship_type": payload.relationship_type,
                "names": payload.names,
                "email": payload.email,
                "phone": payload.phone,
                "budget": payload.budget,
                "anniversary": payload.anniversary,
                "preferences": payload.preferences or "",
            },
        )

        return ConsultationSubmitted(consultation_id=consultation_id)

    async def list_consultations(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> ConsultationListResponse:
        """
        Most recent consultations first, optionally filtered by status.

        Query plan:
            SELECT * FROM consultations [WHERE status = :status]
            ORDER BY created_at DESC, id DESC LIMIT :limit OFFSET :offset
            → idx_consultations_status_created_at serves the filtered form

        This read is not behind any authentication.
        """
        query = select(Consultation)
        if status:
            query = query.where(Consultation.status == status)
        query = (
            query.order_by(desc(Consultation.created_at), desc(Consultation.id))
            .limit(limit)
            .offset(offset)
        )

        try:
            rows: List[Consultation] = list((await db.execute(query)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing consultations: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return ConsultationListResponse(
            consultations=[ConsultationOut.model_validate(row) for row in rows],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
consultation_service = ConsultationService()
