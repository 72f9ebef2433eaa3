"""
Dionysus Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    ├── sample_event: A login AuthEvent with every field populated
    ├── make_email_client: Factory for a scripted fake EmailClient
    ├── recorded_sleep: AsyncMock standing in for asyncio.sleep
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import os

# Must run before any dionysus import: Settings() is built at import time
os.environ["RESEND_API_KEY"] = ""
os.environ["AUTH_NOTIFY_TO"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dionysus.exceptions import NotificationDeliveryError
from dionysus.schemas.auth import AuthEvent, AuthEventType
from dionysus.services.email_base import EmailClient, EmailMessage


class FakeEmailClient(EmailClient):
    """
    Scripted EmailClient: the first `failures` sends raise, the rest succeed.

    Every raised error is kept in `errors` so tests can check which one
    reached the caller.
    """

    def __init__(self, failures: int = 0, configured: bool = True):
        self.failures = failures
        self.configured = configured
        self.sent: List[EmailMessage] = []
        self.errors: List[NotificationDeliveryError] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def send(self, message: EmailMessage) -> Optional[str]:
        if not self.configured:
            return None
        self.sent.append(message)
        attempt = len(self.sent)
        if attempt <= self.failures:
            error = NotificationDeliveryError(status_code=503, details=f"unavailable #{attempt}")
            self.errors.append(error)
            raise error
        return f"msg_{attempt}"


@pytest.fixture
def make_email_client():
    return FakeEmailClient


@pytest.fixture
def recorded_sleep():
    """Replaces the backoff sleep; waits are read from await_args_list."""
    return AsyncMock()


@pytest.fixture
def sample_event():
    return AuthEvent(
        event_type=AuthEventType.LOGIN,
        name="Ada Lovelace",
        email="ada@example.com",
        user_id="user_2abc",
        occurred_at=datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
        ip_address="203.0.113.5",
        user_agent="Mozilla/5.0 (X11; Linux x86_64)",
    )


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is overridden with mock_db_session, so no database is needed.
    """
    from dionysus.database import get_db_session
    from dionysus.main import app

    async def override_db_session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
