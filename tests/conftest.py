"""
Pytest configuration.

Tests run against an in-memory SQLite database shared through a StaticPool,
so every session in a test sees the same data. Environment overrides are set
before any app import so the settings singleton picks them up.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["MAX_RETRIES"] = "2"

from datetime import date

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_caller
from app.core.database import Base, get_db
from app.main import app
from app.models import Booking, SlotBlock, Venue
from app.schemas.auth import CallerIdentity, CallerRole

BOOKING_DATE = date(2025, 6, 12)


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def admin():
    return CallerIdentity(user_id="admin-1", role=CallerRole.ADMIN)


@pytest.fixture
def owner():
    return CallerIdentity(user_id="owner-1", role=CallerRole.VENUE_OWNER)


@pytest.fixture
def other_owner():
    return CallerIdentity(user_id="owner-2", role=CallerRole.VENUE_OWNER)


@pytest.fixture
def player():
    return CallerIdentity(user_id="player-1", role=CallerRole.NONE)


@pytest.fixture
async def venue(db):
    """Venue open 09:00-11:00 with three courts: four 30-minute slots."""
    v = Venue(
        id="venue-1",
        owner_id="owner-1",
        name="Centre Court Padel",
        opening_time="09:00",
        closing_time="11:00",
        courts_count=3,
        is_active=True,
    )
    db.add(v)
    await db.commit()
    return v


@pytest.fixture
def add_booking(db):
    """Insert a booking in either time shape."""

    async def _add(venue_id="venue-1", slot_date=BOOKING_DATE, status="confirmed", **fields):
        booking = Booking(venue_id=venue_id, slot_date=slot_date, status=status, **fields)
        db.add(booking)
        await db.commit()
        return booking

    return _add


@pytest.fixture
def add_block(db):
    """Insert a block row directly, bypassing the service."""

    async def _add(slot_time, venue_id="venue-1", slot_date=BOOKING_DATE, reason="Maintenance"):
        block = SlotBlock(
            venue_id=venue_id,
            slot_date=slot_date,
            slot_time=slot_time,
            reason=reason,
            created_by="admin-1",
        )
        db.add(block)
        await db.commit()
        return block

    return _add


@pytest.fixture
def caller_holder(admin):
    """Mutable holder so API tests can switch callers mid-test."""
    return {"caller": admin}


@pytest.fixture
async def client(session_factory, caller_holder):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_caller():
        return caller_holder["caller"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_caller] = override_get_caller

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
