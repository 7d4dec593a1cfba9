"""Fixtures for API route tests."""

from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.main import app


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app without running its lifespan."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def override() -> Callable[[Callable, object], None]:
    """Replace a route dependency with a fixed instance."""

    def _override(dependency: Callable, instance: object) -> None:
        app.dependency_overrides[dependency] = lambda: instance

    return _override
