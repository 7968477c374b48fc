"""
ConnectPair Backend: Form Submission Schemas
=============================================

What:  Pydantic models declaring the field rules of each public form.
How:   `connectpair.validation` runs these against the raw JSON body and turns
       any Pydantic errors into field-level violations. Field aliases match
       the camelCase names the website posts.

Rules are declarative: a required string has `min_length=1`, an email goes
through `check_email`. The human-readable message for each field lives next
to it in FIELD_MESSAGES so the form can show it verbatim.
"""

from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

# One message per field, whatever rule the field broke
FIELD_MESSAGES = {
    "relationshipType": "Relationship type is required",
    "names": "Names are required",
    "email": "Valid email is required",
    "phone": "Phone number is required",
    "budget": "Budget selection is required",
}


def check_email(v: str) -> str:
    """
    Accept a bare address and return it exactly as submitted.

    email-validator does the syntax check only (no DNS lookup). Its normalized
    form is discarded: the stored address is the one the customer typed.
    Display-name forms ("Name <a@example.com>") and surrounding whitespace
    are rejected.
    """
    if v != v.strip():
        raise ValueError("email has surrounding whitespace")
    try:
        validate_email(v, check_deliverability=False, allow_display_name=False)
    except EmailNotValidError as e:
        raise ValueError(str(e)) from e
    return v


class ConsultationRequest(BaseModel):
    """
    What:  Body of POST /api/consultation.
    Required: relationshipType, names, email, phone, budget.
    Optional: anniversary, preferences.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        str_strip_whitespace=False,
        extra="ignore",
    )

    relationship_type: str = Field(alias="relationshipType", min_length=1)
    names: str = Field(min_length=1)
    email: str
    phone: str = Field(min_length=1)
    anniversary: Optional[str] = Field(default=None)
    preferences: Optional[str] = Field(default=None)
    budget: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("anniversary")
    @classmethod
    def blank_anniversary_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty date input is stored as NULL, not as ''."""
        return v or None


class NewsletterRequest(BaseModel):
    """
    What:  Body of POST /api/newsletter.
    `source` tags where the signup came from and defaults to "newsletter".
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    email: str
    source: Optional[str] = Field(default="newsletter")

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("source")
    @classmethod
    def default_source(cls, v: Optional[str]) -> str:
        return v or "newsletter"
