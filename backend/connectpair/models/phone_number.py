"""
ConnectPair Backend: PhoneNumber SQLAlchemy Model
==================================================

What:  ORM model for the `phone_numbers` inventory table.
Who:   Read by NumberService.search_numbers; stocked outside this service.

Query Patterns:
    - Search: WHERE status = 'available' [AND pattern_type = ?]
              [AND number LIKE '<area_code>%'] LIMIT ?
      → idx_phone_numbers_status_pattern covers the first two predicates;
        the unique index on `number` serves the prefix match
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from connectpair.database import Base


class PhoneNumber(Base):
    __tablename__ = "phone_numbers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    # e.g. "sequential", "mirror", "repeating"
    pattern_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("customers.id"), nullable=True
    )
    # The matching number in a couple's pair, if one has been assigned
    partner_number_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="available",
        server_default=text("'available'"),
    )

    # asdecimal=False: prices come back as floats and serialize as JSON numbers
    purchase_price: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    monthly_fee: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_phone_numbers_status_pattern", "status", "pattern_type"),
    )

    def __repr__(self) -> str:
        return f"<PhoneNumber(id={self.id}, number='{self.number}', status='{self.status}')>"
