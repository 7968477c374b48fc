"""
ConnectPair Backend: Validation Layer Tests
============================================

What we test:
    ✅ Complete consultation passes and is parsed (aliases, optional fields)
    ✅ Every missing required field is reported, in declaration order
    ✅ One violation per field with the field's fixed message
    ✅ Numbers posted for string fields are accepted
    ✅ Newsletter source defaulting
    ✅ Emails are stored as typed; display-name and padded forms are refused
    ✅ Pydantic error → FieldViolation conversion for query parameters and bad JSON
"""

import pytest

from connectpair.validation import (
    FieldViolation,
    validate_consultation,
    validate_newsletter,
    violations_from_errors,
)

VALID_CONSULTATION = {
    "relationshipType": "couple",
    "names": "Alice & Bob",
    "email": "a@example.com",
    "phone": "555-0100",
    "budget": "premium",
}


class TestConsultationRules:

    def test_valid_submission_is_parsed(self):
        result = validate_consultation(VALID_CONSULTATION)

        assert result.is_valid
        assert result.errors == []
        assert result.payload.relationship_type == "couple"
        assert result.payload.names == "Alice & Bob"
        assert result.payload.anniversary is None
        assert result.payload.preferences is None

    def test_optional_fields_are_kept(self):
        result = validate_consultation(
            {**VALID_CONSULTATION, "anniversary": "2019-06-14", "preferences": "ending in 14"}
        )

        assert result.payload.anniversary == "2019-06-14"
        assert result.payload.preferences == "ending in 14"

    def test_empty_anniversary_becomes_none(self):
        result = validate_consultation({**VALID_CONSULTATION, "anniversary": ""})

        assert result.is_valid
        assert result.payload.anniversary is None

    def test_every_missing_field_is_reported_in_order(self):
        result = validate_consultation({})

        assert not result.is_valid
        assert [v.field for v in result.errors] == [
            "relationshipType",
            "names",
            "email",
            "phone",
            "budget",
        ]
        assert [v.message for v in result.errors] == [
            "Relationship type is required",
            "Names are required",
            "Valid email is required",
            "Phone number is required",
            "Budget selection is required",
        ]
        assert all(v.value is None and v.location == "body" for v in result.errors)

    def test_none_body_is_treated_as_empty(self):
        result = validate_consultation(None)

        assert len(result.errors) == 5

    @pytest.mark.parametrize("field", ["relationshipType", "names", "phone", "budget"])
    def test_empty_string_is_rejected(self, field):
        result = validate_consultation({**VALID_CONSULTATION, field: ""})

        assert [v.field for v in result.errors] == [field]
        assert result.errors[0].value == ""

    def test_malformed_email_keeps_submitted_value(self):
        result = validate_consultation({**VALID_CONSULTATION, "email": "not-an-email"})

        assert result.errors == [
            FieldViolation(
                field="email",
                message="Valid email is required",
                value="not-an-email",
                location="body",
            )
        ]

    def test_email_is_kept_as_submitted(self):
        result = validate_consultation({**VALID_CONSULTATION, "email": "Alice@Example.COM"})

        assert result.is_valid
        assert result.payload.email == "Alice@Example.COM"

    @pytest.mark.parametrize(
        "email",
        ["Mallory <m@example.com>", "  a@example.com  ", "a@example.com "],
    )
    def test_decorated_email_is_rejected(self, email):
        result = validate_consultation({**VALID_CONSULTATION, "email": email})

        assert result.errors == [
            FieldViolation(
                field="email",
                message="Valid email is required",
                value=email,
                location="body",
            )
        ]

    def test_numeric_phone_is_coerced_to_string(self):
        result = validate_consultation({**VALID_CONSULTATION, "phone": 5550100})

        assert result.is_valid
        assert result.payload.phone == "5550100"

    def test_unknown_fields_are_ignored(self):
        result = validate_consultation({**VALID_CONSULTATION, "utm_source": "instagram"})

        assert result.is_valid


class TestNewsletterRules:

    def test_source_defaults_to_newsletter(self):
        result = validate_newsletter({"email": "reader@example.com"})

        assert result.is_valid
        assert result.payload.source == "newsletter"

    @pytest.mark.parametrize("source", [None, ""])
    def test_blank_source_defaults_to_newsletter(self, source):
        result = validate_newsletter({"email": "reader@example.com", "source": source})

        assert result.payload.source == "newsletter"

    def test_explicit_source_is_kept(self):
        result = validate_newsletter({"email": "reader@example.com", "source": "download"})

        assert result.payload.source == "download"

    def test_email_is_kept_as_submitted(self):
        result = validate_newsletter({"email": "Reader@Example.COM"})

        assert result.payload.email == "Reader@Example.COM"

    def test_display_name_email_is_rejected(self):
        result = validate_newsletter({"email": "Mallory <m@example.com>"})

        assert [v.field for v in result.errors] == ["email"]

    def test_missing_email_is_rejected(self):
        result = validate_newsletter({"source": "download"})

        assert [v.to_dict() for v in result.errors] == [
            {
                "field": "email",
                "message": "Valid email is required",
                "value": None,
                "location": "body",
            }
        ]


class TestViolationsFromErrors:

    def test_query_errors_keep_their_location(self):
        errors = [
            {
                "type": "less_than_equal",
                "loc": ("query", "limit"),
                "msg": "Input should be less than or equal to 100",
                "input": "500",
            }
        ]

        violations = violations_from_errors(errors)

        assert violations == [
            FieldViolation(
                field="limit",
                message="Input should be less than or equal to 100",
                value="500",
                location="query",
            )
        ]

    def test_first_error_per_field_wins(self):
        errors = [
            {"loc": ("body", "email"), "msg": "first", "input": "x"},
            {"loc": ("body", "email"), "msg": "second", "input": "x"},
        ]

        violations = violations_from_errors(errors)

        assert len(violations) == 1
        assert violations[0].message == "Valid email is required"

    def test_whole_body_error(self):
        errors = [{"loc": ("body",), "msg": "Input should be a valid dictionary", "input": [1, 2]}]

        violations = violations_from_errors(errors)

        assert violations[0].field == "body"
        assert violations[0].message == "Input should be a valid dictionary"

    def test_unparseable_json_is_a_body_error(self):
        # loc ends with the character offset where parsing stopped
        errors = [
            {
                "type": "json_invalid",
                "loc": ("body", 10),
                "msg": "JSON decode error",
                "input": {},
                "ctx": {"error": "Expecting value"},
            }
        ]

        violations = violations_from_errors(errors)

        assert violations == [
            FieldViolation(field="body", message="JSON decode error", value=None, location="body")
        ]
