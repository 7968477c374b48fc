"""
ConnectPair Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for unit tests that never hit SQL
    ├── store: Store on a fresh SQLite file, schema created
    │   └── db_session: Real AsyncSession from that store
    ├── mail_transport: RecordingTransport keeping every sent EmailMessage
    │   └── notifier: Notifier wired to the recording transport
    ├── test_settings: Settings isolated from the developer's .env
    ├── app: create_app() with the store and notifier above injected
    │   └── test_client: HTTPX AsyncClient over ASGITransport
    └── seeded_numbers: A small phone-number inventory
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SMTP_HOST"] = ""
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from email.message import EmailMessage
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from connectpair.config import Settings
from connectpair.database import Store
from connectpair.exceptions import NotificationError
from connectpair.models.phone_number import PhoneNumber
from connectpair.services.mail_transport import MailTransport
from connectpair.services.notification_service import Notifier

FRONTEND_URL = "https://connectpair.example.com"
ADMIN_URL = "https://connectpair.example.com/admin"
ADMIN_EMAIL = "admin@example.com"
SENDER = "ConnectPair <hello@connectpair.co.uk>"


class RecordingTransport(MailTransport):
    """
    In-memory MailTransport.

    Keeps every message handed to it in `sent`. Set `fail = True` to make
    every send raise NotificationError, like an unreachable SMTP server.
    """

    def __init__(self):
        self.sent: List[EmailMessage] = []
        self.fail = False
        self.closed = False

    async def send(self, message: EmailMessage) -> None:
        if self.fail:
            raise NotificationError(message="SMTP delivery failed: connection refused")
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True

    def recipients(self) -> List[str]:
        return [m["To"] for m in self.sent]


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    A MagicMock that simulates AsyncSession behavior.
    Why:     Lets service tests force storage failures without a real database.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mail_transport():
    return RecordingTransport()


@pytest.fixture
def notifier(mail_transport):
    return Notifier(
        transport=mail_transport,
        sender=SENDER,
        admin_email=ADMIN_EMAIL,
        frontend_url=FRONTEND_URL,
        admin_url=ADMIN_URL,
    )


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def store(tmp_path):
    """
    Provides a Store on a throwaway SQLite file with every table created.

    Each test gets its own file, so identifiers always start at 1.
    """
    test_store = Store(f"sqlite+aiosqlite:///{tmp_path / 'connectpair.db'}")
    await test_store.create_schema()
    yield test_store
    await test_store.dispose()


@pytest_asyncio.fixture
async def db_session(store):
    async with store.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_numbers(store):
    """
    Twelve available numbers plus two that are already taken.

    Available numbers 1-6 start with 0771 and are "mirror" patterns,
    7-12 start with 0208 and are "sequential".
    """
    rows = []
    for i in range(1, 7):
        rows.append(PhoneNumber(number=f"077100000{i:02d}", pattern_type="mirror"))
    for i in range(1, 7):
        rows.append(PhoneNumber(number=f"020800000{i:02d}", pattern_type="sequential"))
    rows.append(PhoneNumber(number="07719999901", pattern_type="mirror", status="sold"))
    rows.append(PhoneNumber(number="02089999901", pattern_type="sequential", status="reserved"))

    async with store.session_factory() as session:
        session.add_all(rows)
        await session.commit()
    return rows


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///./unused.db",
        frontend_url=FRONTEND_URL,
        admin_url=ADMIN_URL,
        admin_email=ADMIN_EMAIL,
        smtp_host="",
        log_level="WARNING",
        rate_limit_requests=1000,
        rate_limit_window=900,
    )


@pytest.fixture
def app(test_settings, store, notifier):
    from connectpair.main import create_app

    return create_app(app_settings=test_settings, store=store, notifier=notifier)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport awaits the whole ASGI call, background tasks included, so
    by the time a response is returned its notifications have been attempted.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
