"""Tests for marketplace account connection endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.api.dependencies import get_channel_connection_use_case
from src.application.use_cases import ChannelConnectionUseCase
from src.core.exceptions import HardChannelError
from src.core.services.credential_manager import ConnectionStatus


@pytest.fixture
def credentials():
    manager = AsyncMock()
    manager.authorization_url = MagicMock(
        return_value="https://auth.example.com/authorization?client_id=app-1"
    )
    manager.connection_status.return_value = ConnectionStatus(
        identity="default",
        connected=True,
        expires_at=datetime(2026, 10, 18, 18, 0, tzinfo=timezone.utc),
        hours_until_expiry=6.0,
        user_id="123",
    )
    return manager


class TestChannelConnection:
    async def test_authorization_url(self, async_client, override, credentials):
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.get("/api/channel/auth-url", params={"state": "xyz"})

        assert response.status_code == 200
        assert response.json()["url"].startswith("https://auth.example.com/authorization")
        credentials.authorization_url.assert_called_once_with("xyz")

    async def test_callback_stores_credential(self, async_client, override, credentials):
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.get("/api/channel/callback", params={"code": " TG-abc "})

        assert response.status_code == 200
        data = response.json()
        assert data["connected"] is True
        assert data["user_id"] == "123"
        credentials.connect.assert_awaited_once_with("TG-abc")

    async def test_callback_without_code_is_400(self, async_client, override, credentials):
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.get("/api/channel/callback")

        assert response.status_code == 400
        credentials.connect.assert_not_awaited()

    async def test_rejected_code_is_502(self, async_client, override, credentials):
        credentials.connect.side_effect = HardChannelError(
            "authorization_code", "HTTP 400: invalid_grant", 400
        )
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.get("/api/channel/callback", params={"code": "TG-old"})

        assert response.status_code == 502
        assert "invalid_grant" in response.json()["message"]

    async def test_status_when_not_connected(self, async_client, override, credentials):
        credentials.connection_status.return_value = ConnectionStatus(
            identity="default", connected=False
        )
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.get("/api/channel/status")

        assert response.status_code == 200
        data = response.json()
        assert data["connected"] is False
        assert data["expires_at"] is None

    async def test_disconnect(self, async_client, override, credentials):
        credentials.disconnect.return_value = True
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.post("/api/channel/disconnect")

        assert response.json() == {"status": "success", "message": "Channel disconnected"}

    async def test_disconnect_when_not_connected(self, async_client, override, credentials):
        credentials.disconnect.return_value = False
        override(get_channel_connection_use_case, ChannelConnectionUseCase(credentials))

        response = await async_client.post("/api/channel/disconnect")

        assert response.json()["status"] == "warning"
