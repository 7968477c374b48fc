"""
ConnectPair Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each failure class of a request.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers registered in main.py turn them into the JSON
       envelopes the website expects.

Exception Hierarchy:
    ConnectPairError (base)
    ├── ValidationError          → 400 Bad Request (all field violations)
    ├── DatabaseError            → 500 Internal Server Error (generic message)
    ├── NotificationError        → never reaches a client; logged and dropped
    └── RateLimitExceededError   → 429 Too Many Requests

Routing errors (404) come from Starlette's HTTPException; anything else is
caught by the catch-all handler and answered with a generic 500.
"""

from typing import Any, Dict, List, Optional


class ConnectPairError(Exception):
    """
    Base exception for all ConnectPair application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ConnectPairError):
    """
    Raised when a submission fails one or more field rules.

    HTTP:    400 Bad Request

    Unlike a single-field error, this carries every violation found so the
    form can highlight all of them at once.

    Example response:
        {
            "success": false,
            "errors": [
                {"field": "email", "message": "Valid email is required",
                 "value": "nope", "location": "body"}
            ]
        }
    """

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["fields"] = [error.get("field") for error in errors]
        super().__init__(message=message, context=ctx)
        self.errors = errors


class DatabaseError(ConnectPairError):
    """
    Raised when a database operation fails.

    HTTP:    500 Internal Server Error

    The response message is always generic. The engine's error detail is kept
    in `context` and only ever written to the server log.
    """

    def __init__(
        self,
        message: str = "Database error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotificationError(ConnectPairError):
    """
    Raised by a mail transport when a message cannot be handed over.

    Never propagates past the Notifier: the persisted record is what counts,
    email is a best-effort side channel.
    """

    def __init__(
        self,
        message: str = "Notification could not be delivered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ConnectPairError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "Too many requests from this IP, please try again later."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
