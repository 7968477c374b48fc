"""
ConnectPair Backend: EmailSubscriber SQLAlchemy Model
======================================================

What:  ORM model for the `email_subscribers` table.
Who:   Written by NewsletterService.subscribe with insert-or-ignore on `email`.

The unique constraint on `email` is what makes repeated signups idempotent:
the second insert hits ON CONFLICT DO NOTHING and leaves the first row as is.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from connectpair.database import Base


class EmailSubscriber(Base):
    __tablename__ = "email_subscribers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    # "consultation", "newsletter" or "download"
    source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="active",
        server_default=text("'active'"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<EmailSubscriber(id={self.id}, email='{self.email}', source='{self.source}')>"
