"""
ConnectPair Backend: Pydantic Response Schemas
===============================================

What:  The JSON envelopes returned by every endpoint.
How:   FastAPI serializes route return values through these models (by alias),
       which also documents the API contract in /docs.

Every envelope carries `success`. Rows are exposed with their column names
(snake_case) exactly as stored.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Row Models
# ══════════════════════════════════════════════════════════════════════════


class ConsultationOut(BaseModel):
    """A stored consultation as shown in the admin listing."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    relationship_type: str
    names: str
    email: str
    phone: str
    anniversary: Optional[str] = None
    preferences: str = ""
    budget: str
    status: str
    created_at: datetime
    updated_at: datetime


class PhoneNumberOut(BaseModel):
    """An available number returned by the search endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    number: str
    pattern_type: Optional[str] = None
    customer_id: Optional[int] = None
    partner_number_id: Optional[int] = None
    status: str
    purchase_price: Optional[float] = None
    monthly_fee: Optional[float] = None
    created_at: datetime


# ══════════════════════════════════════════════════════════════════════════
# Envelopes
# ══════════════════════════════════════════════════════════════════════════


class ConsultationSubmitted(BaseModel):
    """Returned by POST /api/consultation once the row is committed."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Consultation request submitted successfully"
    consultation_id: int = Field(alias="consultationId")


class NewsletterSubscribed(BaseModel):
    success: bool = True
    message: str = "Successfully subscribed to newsletter"


class NumberSearchResponse(BaseModel):
    success: bool = True
    numbers: List[PhoneNumberOut] = Field(default_factory=list)


class ConsultationListResponse(BaseModel):
    success: bool = True
    consultations: List[ConsultationOut] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """
    What:  Liveness answer for load balancers and uptime checks.
    Always 200; `timestamp` is the server's current UTC time.
    """

    status: str = Field(description="Always 'healthy' while the process serves requests")
    timestamp: datetime = Field(description="Current server time (UTC ISO 8601)")


# ══════════════════════════════════════════════════════════════════════════
# Error Models
# ══════════════════════════════════════════════════════════════════════════


class FieldErrorOut(BaseModel):
    field: str
    message: str
    value: Any = None
    location: str = "body"


class ValidationErrorResponse(BaseModel):
    success: bool = False
    errors: List[FieldErrorOut]


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
