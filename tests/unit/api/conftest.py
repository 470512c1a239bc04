"""
API test fixtures and configuration.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from svc_crud.api.fastapi import setup_service_api
from svc_crud.app.settings import AppSettings
from svc_crud.db.nosql.examples import RESOURCES


@pytest.fixture
def api_app(fake_connection, clock) -> FastAPI:
    """The example service wired to the in-memory store."""
    return setup_service_api(
        RESOURCES,
        connection=fake_connection,
        app_settings=AppSettings(name="API Test App", version="9.9.9"),
        configure_logging=False,
    )


@pytest_asyncio.fixture
async def api_client(api_app: FastAPI) -> AsyncClient:
    """Create an async test client for API tests."""
    transport = ASGITransport(app=api_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
