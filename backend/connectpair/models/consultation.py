"""
ConnectPair Backend: Consultation SQLAlchemy Model
===================================================

What:  ORM model for the `consultations` table.
Who:   Written by ConsultationService.submit_consultation, read by the
       unauthenticated admin listing.

Lifecycle:
    1. Created on form submission (status = 'pending')
    2. Status may later be changed by an admin workflow outside this service
    3. Never deleted here
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from connectpair.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Consultation(Base):
    """A customer's intake request for matched phone-number service."""

    __tablename__ = "consultations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    relationship_type: Mapped[str] = mapped_column(Text, nullable=False)
    # Free text, e.g. "Alice & Bob"
    names: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored as submitted (ISO date string from the form); NULL when omitted
    anniversary: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    # Empty string when omitted, never NULL
    preferences: Mapped[str] = mapped_column(Text, nullable=False, default="")
    budget: Mapped[str] = mapped_column(Text, nullable=False)

    # Free-form; no transition graph is enforced
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="pending",
        server_default=text("'pending'"),
    )

    # Python-side default keeps microseconds so "most recent first" is stable
    # for rows created within the same second
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_consultations_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Consultation(id={self.id}, status='{self.status}', "
            f"created_at='{self.created_at}')>"
        )
