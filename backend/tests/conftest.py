# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets its own in-memory SQLite database, so tests never share
rows. Outgoing e-mail is patched at the Resend client before any
application import, so nothing leaves the process.
"""

import os

# Settings are read at import time; these must be set first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["OTP_STORE_BACKEND"] = "memory"

import unittest.mock

global_resend_mock = unittest.mock.patch("resend.Emails.send")
mocked_send = global_resend_mock.start()
mocked_send.return_value = {"id": "test-email-id"}

from datetime import datetime, timedelta
from decimal import Decimal
from functools import lru_cache
from typing import Callable, Iterator, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from eventbook import models  # noqa: F401  (registers mappers)
from eventbook.api.dependencies.database import get_db
from eventbook.api.dependencies.services import get_otp_store
from eventbook.auth import create_token_for_user, get_password_hash
from eventbook.core.config import settings
from eventbook.core.enums import RoleName
from eventbook.core.timezone_utils import start_of_day, utc_now
from eventbook.database import Base
from eventbook.infrastructure.cache.ttl_store import InMemoryTTLStore
from eventbook.main import app
from eventbook.models.booking import Booking, BookingStatus
from eventbook.models.service import Service
from eventbook.models.user import User
from eventbook.services.availability_service import calculate_total_days

settings.is_testing = True

TEST_PASSWORD = "TestPassword123!"


@lru_cache(maxsize=1)
def _hashed_test_password() -> str:
    # bcrypt is slow on purpose; hash once per run
    return get_password_hash(TEST_PASSWORD)


# ============================================================================
# Database and client
# ============================================================================


@pytest.fixture(scope="function")
def db() -> Iterator[Session]:
    """Fresh schema on a private in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def otp_store() -> InMemoryTTLStore:
    return InMemoryTTLStore()


@pytest.fixture
def client(db: Session, otp_store: InMemoryTTLStore) -> Iterator[TestClient]:
    """Create a test client bound to the test database and OTP store."""

    def override_get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_store] = lambda: otp_store

    # Don't use context manager - startup would create tables on the real engine
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Time helpers
# ============================================================================


@pytest.fixture
def day() -> Callable[[int], datetime]:
    """``day(n)`` is midnight UTC ``n`` days from today."""

    def _day(offset: int) -> datetime:
        return start_of_day(utc_now()) + timedelta(days=offset)

    return _day


# ============================================================================
# Users
# ============================================================================


def _create_user(db: Session, name: str, email: str, role: RoleName, **overrides) -> User:
    values = dict(
        name=name,
        email=email,
        phone="+15550100",
        hashed_password=_hashed_test_password(),
        role=role.value,
        is_email_verified=True,
        is_active=True,
    )
    values.update(overrides)
    user = User(**values)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def test_password() -> str:
    """Standard test password for all test users."""
    return TEST_PASSWORD


@pytest.fixture
def user_factory(db: Session) -> Callable[..., User]:
    def _factory(name: str, email: str, role: RoleName = RoleName.USER, **overrides) -> User:
        return _create_user(db, name, email, role, **overrides)

    return _factory


@pytest.fixture
def test_user(db: Session) -> User:
    return _create_user(db, "Test User", "test.user@example.com", RoleName.USER)


@pytest.fixture
def test_user_2(db: Session) -> User:
    return _create_user(db, "Second User", "second.user@example.com", RoleName.USER)


@pytest.fixture
def test_provider(db: Session) -> User:
    return _create_user(db, "Test Provider", "test.provider@example.com", RoleName.PROVIDER)


@pytest.fixture
def test_provider_2(db: Session) -> User:
    return _create_user(db, "Other Provider", "other.provider@example.com", RoleName.PROVIDER)


@pytest.fixture
def test_admin(db: Session) -> User:
    return _create_user(db, "Test Admin", "test.admin@example.com", RoleName.ADMIN)


# ============================================================================
# Services and bookings
# ============================================================================


@pytest.fixture
def service_factory(db: Session) -> Callable[..., Service]:
    def _factory(provider: User, **overrides) -> Service:
        values = dict(
            title="Grand Hall",
            description="A large hall for weddings and receptions.",
            category="venue",
            price_per_day=Decimal("500.00"),
            location="Springfield",
            capacity=100,
            provider_id=provider.id,
            is_active=True,
        )
        values.update(overrides)
        service = Service(**values)
        db.add(service)
        db.commit()
        return service

    return _factory


@pytest.fixture
def test_service(service_factory: Callable[..., Service], test_provider: User) -> Service:
    return service_factory(test_provider)


@pytest.fixture
def other_service(service_factory: Callable[..., Service], test_provider_2: User) -> Service:
    return service_factory(
        test_provider_2,
        title="Studio Lens",
        description="Event photography, full day coverage.",
        category="photographer",
        price_per_day=Decimal("300.00"),
        capacity=None,
    )


@pytest.fixture
def booking_factory(db: Session) -> Callable[..., Booking]:
    """Insert a booking row directly, bypassing the booking service."""

    def _factory(
        user: User,
        service: Service,
        start: datetime,
        end: datetime,
        status: BookingStatus = BookingStatus.PENDING,
        created_at: Optional[datetime] = None,
        **overrides,
    ) -> Booking:
        total_days = calculate_total_days(start, end)
        values = dict(
            user_id=user.id,
            service_id=service.id,
            start_date=start,
            end_date=end,
            total_days=total_days,
            total_price=Decimal(str(service.price_per_day)) * total_days,
            guests_count=1,
            status=status.value,
            contact_name=user.name,
            contact_email=user.email,
            contact_phone=user.phone,
        )
        if created_at is not None:
            values["created_at"] = created_at
        values.update(overrides)
        booking = Booking(**values)
        db.add(booking)
        db.commit()
        return booking

    return _factory


# ============================================================================
# Auth headers
# ============================================================================


def _headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}


@pytest.fixture
def auth_headers_user(test_user: User) -> dict:
    return _headers(test_user)


@pytest.fixture
def auth_headers_user_2(test_user_2: User) -> dict:
    return _headers(test_user_2)


@pytest.fixture
def auth_headers_provider(test_provider: User) -> dict:
    return _headers(test_provider)


@pytest.fixture
def auth_headers_provider_2(test_provider_2: User) -> dict:
    return _headers(test_provider_2)


@pytest.fixture
def auth_headers_admin(test_admin: User) -> dict:
    return _headers(test_admin)
