"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import itertools
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from partnerconnector.config.database import create_session_maker
from partnerconnector.models import Base, Deal, DealStage, User


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.delete = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    """Session factory bound to the test engine."""
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    """Database session for a single test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(session):
    """
    Factory creating committed users.

    Usage:
        root = await make_user()
        child = await make_user(parent=root)
    """
    counter = itertools.count(1)

    async def _make_user(
        parent: User | None = None,
        is_admin: bool = False,
        email: str | None = None,
    ) -> User:
        number = next(counter)
        user = User(
            email=email or f"partner{number}@example.com",
            first_name=f"Partner{number}",
            parent_partner_id=parent.id if parent else None,
            partner_level=min(parent.partner_level + 1, 3) if parent else 1,
            is_admin=is_admin,
        )
        session.add(user)
        await session.commit()
        return user

    return _make_user


@pytest.fixture
def make_deal(session):
    """Factory creating committed deals."""

    async def _make_deal(
        referrer: User,
        stage: DealStage = DealStage.LIVE_CONFIRM_LTR,
        actual_commission: Decimal | None = None,
        business_name: str = "Acme Coffee Ltd",
    ) -> Deal:
        deal = Deal(
            referrer_id=referrer.id,
            business_name=business_name,
            deal_stage=stage.value,
            actual_commission=actual_commission,
        )
        session.add(deal)
        await session.commit()
        return deal

    return _make_deal


@pytest_asyncio.fixture
async def admin(make_user):
    """Admin user."""
    return await make_user(is_admin=True, email="admin@example.com")


@pytest_asyncio.fixture
async def partner_chain(make_user):
    """
    Three-level partner chain.

    Returns:
        Tuple (u0, u1, u2): deal owner, parent, grandparent
    """
    u2 = await make_user()
    u1 = await make_user(parent=u2)
    u0 = await make_user(parent=u1)
    return u0, u1, u2
