"""
Dionysus Backend — Resend Email Client
========================================

What:  EmailClient implementation for the Resend HTTP API (POST /emails).
Why:   Resend is the delivery channel for authentication alerts.
How:   One httpx request per send() call. Any non-2xx status or transport
       error becomes a NotificationDeliveryError carrying the status code and
       response text, so the retry layer and operators can tell causes apart.

Request shape:
    POST {RESEND_API_URL}/emails
    Authorization: Bearer <RESEND_API_KEY>
    {"from": ..., "to": [...], "subject": ..., "text": ..., "html": ...}
"""

import logging
import time
from typing import Optional

import httpx

from dionysus.config import settings
from dionysus.exceptions import NotificationDeliveryError
from dionysus.services.email_base import EmailClient, EmailMessage

logger = logging.getLogger(__name__)


class ResendEmailClient(EmailClient):
    """
    Single-attempt Resend transport.

    A fresh httpx.AsyncClient is opened per send(). Alert volume is a few
    emails per sign-in, so pooling buys nothing and there is no client
    lifecycle to manage at shutdown.

    Args:
        api_key:   Resend credential; None disables sending
        base_url:  API root, overridable for a proxy or a test server
        timeout:   Seconds allowed for one request (connect + read)
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, message: EmailMessage) -> Optional[str]:
        if not self.is_configured:
            return None

        payload = {
            "from": message.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/emails", json=payload, headers=headers
                )
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(
                status_code=None,
                details=f"{type(e).__name__}: {e}",
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            raise NotificationDeliveryError(
                status_code=response.status_code,
                details=response.text,
            )

        message_id = None
        try:
            body = response.json()
        except ValueError:
            # 2xx with a non-JSON body still means accepted
            body = None
        if isinstance(body, dict):
            message_id = body.get("id")

        logger.info(
            "Resend accepted email in %.0fms (id=%s)",
            duration_ms,
            message_id or "n/a",
        )
        return message_id


def build_resend_client() -> ResendEmailClient:
    """Client wired from application settings."""
    return ResendEmailClient(
        api_key=settings.resend_api_key,
        base_url=settings.resend_api_url,
        timeout=settings.auth_notify_timeout,
    )
