"""
Dionysus Backend — Abstract Email Client Interface
====================================================

What:  Abstract base class for "send one email" transports.
Why:   The notification dispatcher owns retry and rendering; the transport
       only performs a single attempt. Keeping that seam abstract lets tests
       substitute a fake client and lets us swap Resend for another provider.
How:   Concrete implementations inherit from EmailClient and implement send().
Who:   Called by AuthNotificationService once per delivery attempt.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel


class EmailMessage(BaseModel):
    """Provider-neutral outbound email."""

    sender: str
    to: List[str]
    subject: str
    text: str
    html: str


class EmailClient(ABC):
    """
    Contract:
        - send() makes at most ONE outbound request
        - No retries inside the client (the caller decides)
        - Every failure is raised as NotificationDeliveryError
        - When the client has no credential, send() returns without any
          side effect; reporting that is the caller's job
    """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the client holds a credential and can deliver."""
        ...

    @abstractmethod
    async def send(self, message: EmailMessage) -> Optional[str]:
        """
        Deliver one email.

        Returns:
            Provider message ID when the provider returns one, else None.
            Also None when the client is not configured (nothing was sent).

        Raises:
            NotificationDeliveryError: non-2xx response or transport failure.
        """
        ...
