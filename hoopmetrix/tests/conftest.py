"""
Shared fixtures for the HoopMetrix test suite.

API tests run against the ASGI app with the database, Stripe and Supabase
dependencies overridden, so no external service is contacted.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from hoopmetrix.core.database import get_db
from hoopmetrix.core.rate_limit import limiter
from hoopmetrix.core.stripe_client import get_stripe
from hoopmetrix.core.supabase_client import get_supabase
from hoopmetrix.main import app

limiter.enabled = False


def _make_result(items=None, scalar=None):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(items or [])
    result.scalar_one_or_none.return_value = scalar
    return result


@pytest.fixture
def make_result():
    """Factory for stand-ins of the Result returned by AsyncSession.execute."""
    return _make_result


@pytest.fixture
def db_session():
    session = MagicMock()
    session.execute = AsyncMock(return_value=_make_result())
    session.scalar = AsyncMock(return_value=0)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.merge = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture
def fake_stripe():
    """
    Object shaped like the stripe module, with every API resource mocked.
    """
    return SimpleNamespace(
        Price=MagicMock(),
        Customer=MagicMock(),
        SetupIntent=MagicMock(),
        Subscription=MagicMock(),
        billing_portal=SimpleNamespace(Session=MagicMock()),
    )


@pytest.fixture
def fake_supabase():
    return SimpleNamespace(auth=MagicMock())


@pytest.fixture
def override_dependencies(db_session, fake_stripe, fake_supabase):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_stripe] = lambda: fake_stripe
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_dependencies):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def rate_limiting():
    """Turn the limiter on with empty counters for one test."""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()
