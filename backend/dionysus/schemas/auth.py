"""
Dionysus Backend — Auth Event & User Sync Schemas
===================================================

What:  Pydantic models for authentication events and the user sync endpoint.
Why:   One validated shape for the event that drives notifications, and an
       explicit API contract for the sync route.
Who:   AuthEvent is built by the sync route and consumed by the notification
       dispatcher. The request/response models are used by routes/auth.py.

Validation note:
    AuthEvent performs no format validation of name/email/user_id. Those
    values come from the identity provider and are rendered as-is (escaped
    in HTML). Rejecting an odd-looking email here would drop an alert.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class AuthEventType(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


class AuthEvent(BaseModel):
    """
    A single sign-in or sign-up, as handed to the notification dispatcher.

    Lifecycle:
        Built by the caller right before dispatch, consumed synchronously,
        then discarded. Frozen so the dispatcher cannot alter what the caller
        may also be logging.
    """

    event_type: AuthEventType = Field(description="Which authentication action occurred")
    name: str = Field(description="Display name of the user")
    email: str = Field(description="Primary email of the user")
    user_id: str = Field(description="Identity provider user ID")
    occurred_at: datetime = Field(description="When the event happened (naive = UTC)")
    ip_address: Optional[str] = Field(default=None, description="Client IP, if known")
    user_agent: Optional[str] = Field(default=None, description="Client user agent, if known")

    model_config = {"frozen": True}


class RenderedNotification(BaseModel):
    """Subject plus the plain-text and HTML bodies of one alert email."""

    subject: str
    text: str
    html: str

    model_config = {"frozen": True}


# ══════════════════════════════════════════════════════════════════════════
# User Sync API
# ══════════════════════════════════════════════════════════════════════════


class SyncUserRequest(BaseModel):
    """
    What:  Identity-provider profile of the user who just authenticated.
    Who:   Sent by the frontend right after the provider's sign-in/sign-up redirect.
    """

    user_id: str = Field(min_length=1, max_length=191, description="Identity provider user ID")
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    email_addresses: List[str] = Field(
        default_factory=list,
        description="Email addresses in provider order; the first is treated as primary",
    )


class SyncUserResponse(BaseModel):
    """
    Result of a user sync.

    notification:
        - sent:    the alert email was accepted by the provider
        - skipped: notifications are disabled (no RESEND_API_KEY)
        - failed:  every attempt failed; the sync itself still succeeded
    """

    user_id: str
    name: str
    event_type: AuthEventType
    notification: str = Field(description="sent, skipped, or failed")


class HealthResponse(BaseModel):
    """Returned by GET /health."""

    status: str = Field(description="healthy, degraded, or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    notifications: str = Field(description="enabled or disabled")
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Error body produced by the global exception handlers."""

    error: str
    message: str
    details: Optional[dict] = None
    request_id: Optional[str] = None
