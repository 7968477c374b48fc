"""
ConnectPair Backend: Newsletter Service (Request Pipeline)
===========================================================

What:  Newsletter signup: validate → insert-or-ignore → welcome email.
How:   The subscriber row is written with an explicit ON CONFLICT (email)
       DO NOTHING, so signing up twice is a success both times and leaves
       exactly one row.

A repeated signup still schedules a welcome email, matching what the site
has always done. A storage failure aborts before anything is scheduled.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTasks

from connectpair.database import insert_or_ignore
from connectpair.exceptions import DatabaseError, ValidationError
from connectpair.models.subscriber import EmailSubscriber
from connectpair.schemas.responses import NewsletterSubscribed
from connectpair.services.notification_service import Notifier
from connectpair.validation import validate_newsletter

logger = logging.getLogger(__name__)


class NewsletterService:

    async def subscribe(
        self,
        db: AsyncSession,
        fields: Optional[Mapping[str, Any]],
        notifier: Notifier,
        background_tasks: BackgroundTasks,
    ) -> NewsletterSubscribed:
        """
        Record a newsletter signup and queue the welcome email.

        Raises:
            ValidationError: email missing or malformed
            DatabaseError: the insert or commit failed
        """
        result = validate_newsletter(fields)
        if not result.is_valid:
            raise ValidationError(errors=[v.to_dict() for v in result.errors])
        payload = result.payload

        statement = insert_or_ignore(
            db,
            EmailSubscriber,
            conflict_columns=["email"],
            email=payload.email,
            source=payload.source,
        )

        try:
            outcome = await db.execute(statement)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Newsletter subscription error: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        if outcome.rowcount:
            logger.info("New subscriber (source=%s)", payload.source)
        else:
            logger.info("Subscriber already present, signup ignored (source=%s)", payload.source)

        background_tasks.add_task(notifier.send_welcome, payload.email)
        return NewsletterSubscribed()


# ── Singleton Instance ────────────────────────────────────────────────────
newsletter_service = NewsletterService()
