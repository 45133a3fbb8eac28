"""Shared fixtures for API tests."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.infrastructure.database import get_session_factory
from storefront.main import app


def client_for(
    session_factory: async_sessionmaker[AsyncSession],
    raise_server_exceptions: bool = True,
) -> Generator[TestClient, None, None]:
    """Yield a test client whose database is ``session_factory``."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app, raise_server_exceptions=raise_server_exceptions)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(session_factory: async_sessionmaker[AsyncSession]) -> Generator[TestClient, None, None]:
    """Create test client backed by the test catalog."""
    yield from client_for(session_factory)


@pytest.fixture
def empty_client(
    empty_session_factory: async_sessionmaker[AsyncSession],
) -> Generator[TestClient, None, None]:
    """Create test client backed by an empty catalog."""
    yield from client_for(empty_session_factory, raise_server_exceptions=False)
