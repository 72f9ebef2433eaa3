"""
Dionysus Backend — Authentication Notification Dispatcher
===========================================================

What:  Emails an alert to the operators whenever a user signs in or signs up.
Why:   A low-volume, high-signal channel for watching who is using the product.
How:   render → one delivery attempt per loop iteration → linear backoff between
       attempts → re-raise the last error once the attempt budget is spent.
Who:   Called by the user sync route with an AuthEvent it has already resolved.

Dispatch State Machine (one call):

    Attempting(1) ──ok──▶ Succeeded
         │fail
         ▼  wait base*1
    Attempting(2) ──ok──▶ Succeeded
         │fail
         ▼  wait base*2
        ...
    Attempting(N) ──fail──▶ Failed (last error re-raised)

    Defaults: N = 3, base = 500ms → waits of 500ms and 1000ms.

Skip vs failure:
    No RESEND_API_KEY → warning log and an immediate return of False.
    This is the "notifications off" switch and is never retried. Everything
    the email client raises is treated as transient and retried.

Cancellation:
    An outer asyncio timeout or task cancellation raises CancelledError at
    the HTTP call or the backoff sleep. CancelledError is not an Exception,
    so tenacity does not retry it and the dispatch stops right there.
"""

import asyncio
import html
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Tuple

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from dionysus.config import settings
from dionysus.exceptions import NotificationConfigError
from dionysus.schemas.auth import AuthEvent, AuthEventType, RenderedNotification
from dionysus.services.email_base import EmailClient, EmailMessage
from dionysus.services.resend_client import build_resend_client

logger = logging.getLogger(__name__)


SUBJECT = "[Dionysus] Authentication Event"
PLACEHOLDER = "Unavailable"

EVENT_LABELS = {
    AuthEventType.LOGIN: "User Login",
    AuthEventType.SIGNUP: "New Signup",
}


# ══════════════════════════════════════════════════════════════════════════
# Payload Rendering
# ══════════════════════════════════════════════════════════════════════════

_CELL_STYLE = "padding:8px;border:1px solid #e2e8f0;"

_HTML_TEMPLATE = """\
<div style="font-family:Arial,sans-serif;line-height:1.5;color:#0f172a;">
  <h2 style="margin-bottom:8px;">Dionysus Authentication Event</h2>
  <p style="margin-top:0;">A user has completed an authentication action.</p>
  <table style="border-collapse:collapse;width:100%;max-width:640px;">
    <tbody>
{rows}
    </tbody>
  </table>
</div>
"""

_HTML_ROW = (
    '      <tr><td style="{style}"><strong>{label}</strong></td>'
    '<td style="{style}">{value}</td></tr>'
)


def escape_html(value: str) -> str:
    """Escape &, <, >, " and ' for safe interpolation into HTML."""
    return html.escape(value, quote=True)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2024-01-15T12:00:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _event_fields(event: AuthEvent) -> List[Tuple[str, str]]:
    # Static row set: optional values fall back to the placeholder, never dropped
    return [
        ("Event", EVENT_LABELS[event.event_type]),
        ("Name", event.name),
        ("Email", event.email),
        ("User ID", event.user_id),
        ("Occurred At (UTC)", format_timestamp(event.occurred_at)),
        ("IP Address", event.ip_address or PLACEHOLDER),
        ("User Agent", event.user_agent or PLACEHOLDER),
    ]


def render_auth_notification(event: AuthEvent) -> RenderedNotification:
    """
    Render the subject, plain-text body, and HTML body for one event.

    Both bodies are built from the same field list. Each value is escaped on
    its own before it goes into the HTML; the text body carries the raw value.
    """
    fields = _event_fields(event)

    text_lines = [
        "Dionysus Authentication Event",
        "A user has completed an authentication action.",
        "",
    ]
    text_lines.extend(f"{label}: {value}" for label, value in fields)
    text = "\n".join(text_lines) + "\n"

    rows = "\n".join(
        _HTML_ROW.format(style=_CELL_STYLE, label=label, value=escape_html(value))
        for label, value in fields
    )
    rich = _HTML_TEMPLATE.format(rows=rows)

    return RenderedNotification(subject=SUBJECT, text=text, html=rich)


# ══════════════════════════════════════════════════════════════════════════
# Dispatcher
# ══════════════════════════════════════════════════════════════════════════

class AuthNotificationService:
    """
    Renders and delivers authentication alerts with bounded retry.

    Args:
        client:        Single-attempt email transport
        sender:        From address
        recipient:     To address (required once the client is configured)
        max_attempts:  Default attempt budget per dispatch
        base_delay_ms: Linear backoff unit; wait after attempt n is n * base
        sleep:         Awaitable sleep used between attempts (seconds)
    """

    def __init__(
        self,
        client: EmailClient,
        sender: str,
        recipient: Optional[str],
        max_attempts: int = 3,
        base_delay_ms: int = 500,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.sender = sender
        self.recipient = recipient
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    @property
    def is_enabled(self) -> bool:
        return self.client.is_configured

    def _prepare(self, event: AuthEvent) -> Optional[EmailMessage]:
        """Returns None when delivery is switched off."""
        if not self.client.is_configured:
            logger.warning(
                "[auth-notify] RESEND_API_KEY is missing. "
                "Auth notification email was skipped (event=%s, user=%s).",
                event.event_type.value,
                event.user_id,
            )
            return None

        if not self.recipient:
            raise NotificationConfigError(
                context={"event_type": event.event_type.value, "user_id": event.user_id}
            )

        rendered = render_auth_notification(event)
        return EmailMessage(
            sender=self.sender,
            to=[self.recipient],
            subject=rendered.subject,
            text=rendered.text,
            html=rendered.html,
        )

    async def send_auth_notification(self, event: AuthEvent) -> bool:
        """
        Single delivery attempt, no retry.

        Returns:
            True if the provider accepted the email, False if skipped.

        Raises:
            NotificationConfigError: enabled but no recipient configured
            NotificationDeliveryError: the attempt failed
        """
        message = self._prepare(event)
        if message is None:
            return False

        await self.client.send(message)
        return True

    async def send_auth_notification_with_retry(
        self,
        event: AuthEvent,
        max_attempts: Optional[int] = None,
    ) -> bool:
        """
        Deliver with up to `max_attempts` attempts and linear backoff.

        Args:
            event:        The authentication event to report
            max_attempts: Override of the configured attempt budget

        Returns:
            True once one attempt succeeds, False if delivery is switched off.

        Raises:
            NotificationConfigError: enabled but no recipient configured
            Exception: the last attempt's error, after all attempts failed
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {attempts}")

        message = self._prepare(event)
        if message is None:
            return False

        def log_failed_attempt(retry_state: RetryCallState) -> None:
            logger.error(
                "[auth-notify] Attempt %d/%d failed (event=%s, user=%s): %s",
                retry_state.attempt_number,
                attempts,
                event.event_type.value,
                event.user_id,
                retry_state.outcome.exception(),
            )

        base_delay = self.base_delay_ms / 1000
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(attempts),
            wait=wait_incrementing(start=base_delay, increment=base_delay),
            after=log_failed_attempt,
            reraise=True,
            sleep=self._sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    await self.client.send(message)
        except Exception:
            logger.error(
                "[auth-notify] Giving up after %d attempts (event=%s, user=%s)",
                attempts,
                event.event_type.value,
                event.user_id,
            )
            raise

        logger.info(
            "[auth-notify] %s notification delivered for user %s on attempt %d/%d",
            EVENT_LABELS[event.event_type],
            event.user_id,
            attempt.retry_state.attempt_number,
            attempts,
        )
        return True


def build_auth_notification_service() -> AuthNotificationService:
    """Dispatcher wired from application settings."""
    return AuthNotificationService(
        client=build_resend_client(),
        sender=settings.auth_notify_from,
        recipient=settings.auth_notify_to,
        max_attempts=settings.auth_notify_max_attempts,
        base_delay_ms=settings.auth_notify_base_delay_ms,
    )


auth_notification_service = build_auth_notification_service()
