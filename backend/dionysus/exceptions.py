"""
Dionysus Backend — Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and messages that never leak internal details.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) turn the ones that
       escape a request into structured JSON error responses.

Exception Hierarchy:
    DionysusError (base)
    ├── NotificationError               (handled by the caller, never reaches HTTP)
    │   ├── NotificationConfigError     (recipient missing while delivery is enabled)
    │   └── NotificationDeliveryError   (non-2xx or transport failure of one attempt)
    └── DatabaseError                   → 500 Internal Server Error

Note on notifications:
    A missing RESEND_API_KEY is NOT an exception. The dispatcher treats it as
    a deliberate skip and only logs a warning.
"""

from typing import Any, Dict, Optional


class DionysusError(Exception):
    """
    Base exception for all Dionysus application errors.

    Attributes:
        message:  Human-readable error description
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


class NotificationError(DionysusError):
    """Base for failures of the authentication notification channel."""

    def __init__(
        self,
        message: str = "Authentication notification could not be delivered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotificationConfigError(NotificationError):
    """
    Raised when delivery is enabled but cannot be addressed.

    When:  RESEND_API_KEY is set and AUTH_NOTIFY_TO is not.
    Retry: Never. Raised before the first attempt.
    """

    def __init__(
        self,
        message: str = "Auth notification recipient is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotificationDeliveryError(NotificationError):
    """
    Raised when a single delivery attempt fails.

    What:    The email endpoint answered with a non-2xx status, or the request
             never completed (connection refused, timeout, protocol error).
    Retry:   Treated as transient by the retry orchestrator.

    Attributes:
        status_code: HTTP status from the endpoint; None for transport failures
        details:     Response body or transport error text, for operator logs
    """

    def __init__(
        self,
        status_code: Optional[int] = None,
        details: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        if status_code is None:
            message = f"[auth-notify] Failed to send email (transport error): {details}"
        else:
            message = f"[auth-notify] Failed to send email ({status_code}): {details}"
        ctx = context or {}
        ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code
        self.details = details


class DatabaseError(DionysusError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
