"""
Pytest configuration and fixtures for PassWatch tests.

Provides a throwaway SQLite database per test, a registered user, auth
headers, and an async API client whose process-wide components (session
factory, clocks, mailer, background runner) are replaced by test doubles.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

import passwatch.app.models  # noqa: F401  (registers tables on Base.metadata)
from passwatch.app.core.config import settings
from passwatch.app.core.errors import NotificationDeliveryFailure
from passwatch.app.db.base import Base, get_db
from passwatch.app.db.session import create_engine_for, create_session_factory
from passwatch.app.main import app
from passwatch.app.models.user import User
from passwatch.app.security.hashing import get_password_hash
from passwatch.app.security.jwt import create_access_token
from passwatch.app.services.background import BackgroundRunner
from passwatch.app.services.login_ip import LoginAlertNotifier
from passwatch.app.services.throttle import NotificationThrottle

TEST_PASSWORD = "TestPassword123"


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeMonotonic:
    """Stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeMailer:
    """Records every send call instead of talking to Resend."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[dict] = []
        # When set, send blocks until the event fires
        self.gate: Optional[asyncio.Event] = None

    async def send(self, to_email: str, subject: str, html_body: str) -> bool:
        if self.gate is not None:
            await self.gate.wait()
        self.sent.append({"to": to_email, "subject": subject, "html": html_body})
        if self.fail:
            raise NotificationDeliveryFailure(to_email, RuntimeError("smtp down"))
        return True


class RecordingLogger:
    """Captures error() calls from the background runner."""

    def __init__(self):
        self.errors: List[str] = []

    def error(self, msg, *args, **kwargs):
        self.errors.append(msg)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """A file-backed SQLite database; every new connection sees the same data."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'passwatch_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def throttle(monotonic) -> NotificationThrottle:
    return NotificationThrottle(window_seconds=10.0, clock=monotonic)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def notifier(throttle, mailer, clock) -> LoginAlertNotifier:
    return LoginAlertNotifier(throttle, mailer, clock)


async def create_user(
    db: AsyncSession,
    email: str = "alice@example.com",
    name: str = "Alice",
    password: str = TEST_PASSWORD,
) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for extra users in the test database."""

    async def _make(email: str, name: str = "Bob", password: str = TEST_PASSWORD) -> User:
        return await create_user(db_session, email=email, name=name, password=password)

    return _make


@pytest_asyncio.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    return await create_user(db_session)


@pytest_asyncio.fixture(scope="function")
async def auth_headers(test_user: User) -> dict:
    token = create_access_token(data={"sub": test_user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def async_client(
    db_session: AsyncSession,
    session_factory,
    notifier: LoginAlertNotifier,
    clock: FakeClock,
    monkeypatch,
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the database and app.state components overridden."""
    # The test transport connects from 127.0.0.1; treat it as the reverse
    # proxy so tests choose the client IP through X-Forwarded-For
    monkeypatch.setattr(settings, "TRUSTED_PROXIES", "127.0.0.1")

    async def override_get_db():
        yield db_session

    saved_state = {
        key: getattr(app.state, key)
        for key in ("clock", "session_factory", "login_notifier", "background")
    }
    app.dependency_overrides[get_db] = override_get_db
    app.state.clock = clock
    app.state.session_factory = session_factory
    app.state.login_notifier = notifier
    app.state.background = BackgroundRunner(RecordingLogger())

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    await app.state.background.drain()
    app.dependency_overrides.clear()
    for key, value in saved_state.items():
        setattr(app.state, key, value)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def account_password() -> str:
    """Plain-text password of `test_user`."""
    return TEST_PASSWORD
