"""
ConnectPair Backend: Number Search Service
===========================================

What:  Read-only search over the phone-number inventory.
How:   Always restricted to status 'available'; optional exact match on the
       pattern type and prefix match on the number itself.

Query plan:
    SELECT * FROM phone_numbers
    WHERE status = 'available' [AND pattern_type = :pattern]
          [AND number LIKE :area_code || '%' ESCAPE '/']
    ORDER BY id LIMIT :limit

`%` and `_` typed into the area code are escaped, so "44_" matches the
literal prefix and not "44" followed by any digit.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from connectpair.exceptions import DatabaseError
from connectpair.models.phone_number import PhoneNumber
from connectpair.schemas.responses import NumberSearchResponse, PhoneNumberOut

logger = logging.getLogger(__name__)

AVAILABLE = "available"


class NumberService:

    async def search_numbers(
        self,
        db: AsyncSession,
        pattern: Optional[str] = None,
        area_code: Optional[str] = None,
        limit: int = 10,
    ) -> NumberSearchResponse:
        """
        Find available numbers. An empty result is a normal, successful answer.

        Raises:
            DatabaseError: the query failed
        """
        query = select(PhoneNumber).where(PhoneNumber.status == AVAILABLE)
        if pattern:
            query = query.where(PhoneNumber.pattern_type == pattern)
        if area_code:
            query = query.where(PhoneNumber.number.startswith(area_code, autoescape=True))
        query = query.order_by(PhoneNumber.id).limit(limit)

        try:
            rows: List[PhoneNumber] = list((await db.execute(query)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error searching numbers: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.debug(
            "Number search pattern=%s area_code=%s limit=%d → %d rows",
            pattern, area_code, limit, len(rows),
        )
        return NumberSearchResponse(numbers=[PhoneNumberOut.model_validate(r) for r in rows])


# ── Singleton Instance ────────────────────────────────────────────────────
number_service = NumberService()
