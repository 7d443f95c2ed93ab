"""Shared fixtures for web route tests.

Builds the app with its database dependency pointed at the in-memory
Database fixture. ``ASGITransport`` does not run the lifespan, so nothing
here ever opens the configured file path.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from Swing_Scout.config import Settings
from Swing_Scout.data.database import Database
from Swing_Scout.web.app import create_app
from Swing_Scout.web.deps import get_database


def _build_app(db: Database, settings: Settings) -> FastAPI:
    test_app = create_app(settings)

    async def override_get_database() -> AsyncGenerator[Database]:
        yield db

    test_app.dependency_overrides[get_database] = override_get_database
    return test_app


@pytest.fixture()
def app(db: Database) -> FastAPI:
    """App with a Polygon key configured."""
    return _build_app(db, Settings(polygon_api_key="test-key"))


@pytest.fixture()
def keyless_app(db: Database) -> FastAPI:
    """App with no Polygon key: provider-backed routes must answer 503."""
    return _build_app(db, Settings(polygon_api_key=None))


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def keyless_client(keyless_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=keyless_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
