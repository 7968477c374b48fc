"""
ConnectPair Backend: Validation Layer
======================================

What:  Checks a submitted field set against the rules of one operation.
How:   Runs the operation's Pydantic schema and converts every error into a
       FieldViolation. Nothing here raises for bad input or touches state;
       the caller decides what to do with the result.

    result = validate_consultation(body)
    if not result.is_valid:
        raise ValidationError([v.to_dict() for v in result.errors])
    payload = result.payload

Violations keep the schema's field order and there is at most one per field,
so a form with three bad inputs gets exactly three messages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from connectpair.schemas.forms import FIELD_MESSAGES, ConsultationRequest, NewsletterRequest

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_MISSING = object()
_LOCATIONS = ("body", "query", "path")


@dataclass
class FieldViolation:
    """One rule broken by one submitted field."""

    field: str
    message: str
    value: Any = None
    location: str = "body"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "value": self.value,
            "location": self.location,
        }


@dataclass
class ValidationResult(Generic[SchemaT]):
    """Either a parsed payload or the ordered list of violations."""

    payload: Optional[SchemaT] = None
    errors: List[FieldViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def violations_from_errors(
    errors: Iterable[Dict[str, Any]],
    submitted: Optional[Mapping[str, Any]] = None,
) -> List[FieldViolation]:
    """
    Convert Pydantic error dicts into FieldViolations.

    Used for form bodies here and for malformed query strings by the
    RequestValidationError handler in main.py. The first error reported for
    a field wins; later ones for the same field are dropped.
    """
    violations: List[FieldViolation] = []
    seen = set()
    for error in errors:
        raw_loc = tuple(error.get("loc", ()))
        location = raw_loc[0] if raw_loc and raw_loc[0] in _LOCATIONS else "body"
        if error.get("type") == "json_invalid":
            # loc carries the character offset of the parse failure, not a field
            loc = []
        else:
            loc = [str(part) for part in raw_loc if part not in _LOCATIONS]
        name = loc[0] if loc else "body"
        if name in seen:
            continue
        seen.add(name)

        if submitted is not None:
            value = submitted.get(name, _MISSING)
        else:
            value = error.get("input", _MISSING)
        violations.append(
            FieldViolation(
                field=name,
                message=FIELD_MESSAGES.get(name, error.get("msg", "Invalid value")),
                value=None if value is _MISSING or isinstance(value, Mapping) else value,
                location=location,
            )
        )
    return violations


def validate_submission(
    schema: Type[SchemaT], fields: Optional[Mapping[str, Any]]
) -> ValidationResult[SchemaT]:
    """Validate `fields` against `schema` without raising."""
    submitted: Mapping[str, Any] = fields if isinstance(fields, Mapping) else {}
    try:
        payload = schema.model_validate(dict(submitted))
    except PydanticValidationError as e:
        return ValidationResult(errors=violations_from_errors(e.errors(), submitted))
    return ValidationResult(payload=payload)


def validate_consultation(
    fields: Optional[Mapping[str, Any]],
) -> ValidationResult[ConsultationRequest]:
    """Rules for POST /api/consultation."""
    return validate_submission(ConsultationRequest, fields)


def validate_newsletter(
    fields: Optional[Mapping[str, Any]],
) -> ValidationResult[NewsletterRequest]:
    """Rules for POST /api/newsletter."""
    return validate_submission(NewsletterRequest, fields)
