"""Tests for CredentialManager."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.config.settings import ChannelSettings
from src.core.entities.credential import Credential
from src.core.exceptions import HardChannelError, NoCredentialError
from src.core.interfaces.channel import TokenGrant
from src.core.services.credential_manager import CredentialManager
from src.infrastructure.channel.mercadolibre import MercadoLibreClient

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_credential(expires_in: timedelta, access: str = "old-access", refresh: str = "old-refresh"):
    return Credential(access_token=access, refresh_token=refresh, expires_at=NOW + expires_in)


@pytest.fixture
def store():
    store = AsyncMock()
    store.replace_if_current.return_value = True
    store.delete.return_value = True
    return store


@pytest.fixture
def client():
    client = AsyncMock()
    client.refresh.return_value = TokenGrant(
        access_token="new-access", refresh_token="new-refresh", expires_in=21600
    )
    client.authorization_url = MagicMock(return_value="https://auth.example/authorize")
    return client


@pytest.fixture
def manager(store, client):
    return CredentialManager(store=store, client=client, clock=lambda: NOW)


class TestGetValidToken:
    async def test_absent_returns_none(self, manager, store, client):
        store.get.return_value = None

        assert await manager.get_valid_token() is None
        client.refresh.assert_not_called()

    async def test_valid_token_returned_without_refresh(self, manager, store, client):
        store.get.return_value = make_credential(timedelta(hours=1))

        assert await manager.get_valid_token() == "old-access"
        client.refresh.assert_not_called()

    async def test_expired_token_refreshed(self, manager, store, client):
        store.get.return_value = make_credential(timedelta(seconds=-10))

        assert await manager.get_valid_token() == "new-access"

        client.refresh.assert_awaited_once_with("old-refresh")
        saved, previous = store.replace_if_current.call_args.args
        assert saved.access_token == "new-access"
        assert saved.expires_at == NOW + timedelta(seconds=21600)
        assert previous == "old-refresh"

    async def test_refresh_failure_deletes_credential(self, manager, store, client):
        store.get.return_value = make_credential(timedelta(seconds=-10))
        client.refresh.side_effect = HardChannelError("refresh", "invalid_grant", 400)

        assert await manager.get_valid_token() is None
        store.delete.assert_awaited_once_with("default", refresh_token="old-refresh")

    async def test_malformed_refresh_reply_deletes_credential(self, store):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"access_token": "a", "expires_in": 60})

        channel = MercadoLibreClient(
            settings=ChannelSettings(api_url="https://api.test", read_retry_delay=0),
            transport=httpx.MockTransport(handler),
        )
        manager = CredentialManager(store=store, client=channel, clock=lambda: NOW)
        store.get.return_value = make_credential(timedelta(seconds=-10))

        assert await manager.get_valid_token() is None
        store.delete.assert_awaited_once_with("default", refresh_token="old-refresh")
        store.replace_if_current.assert_not_called()

    async def test_superseded_refresh_uses_stored_pair(self, manager, store, client):
        expired = make_credential(timedelta(seconds=-10))
        rotated = make_credential(timedelta(hours=6), access="other-access", refresh="other")
        store.get.side_effect = [expired, expired, rotated]
        store.replace_if_current.return_value = False

        assert await manager.get_valid_token() == "other-access"

    async def test_margin_triggers_early_refresh(self, store, client):
        manager = CredentialManager(
            store=store, client=client, refresh_margin_seconds=600, clock=lambda: NOW
        )
        store.get.return_value = make_credential(timedelta(seconds=300))

        assert await manager.get_valid_token() == "new-access"

    async def test_concurrent_callers_refresh_once(self, manager, store, client):
        state = {"credential": make_credential(timedelta(seconds=-10))}

        async def get(identity):
            return state["credential"]

        async def replace(credential, previous):
            state["credential"] = credential
            return True

        async def slow_refresh(refresh_token):
            await asyncio.sleep(0.01)
            return TokenGrant(access_token="new-access", refresh_token="new-refresh", expires_in=3600)

        store.get.side_effect = get
        store.replace_if_current.side_effect = replace
        client.refresh.side_effect = slow_refresh

        tokens = await asyncio.gather(*(manager.get_valid_token() for _ in range(5)))

        assert tokens == ["new-access"] * 5
        assert client.refresh.await_count == 1


class TestRequireToken:
    async def test_raises_when_not_connected(self, manager, store):
        store.get.return_value = None

        with pytest.raises(NoCredentialError):
            await manager.require_token()


class TestConnection:
    async def test_connect_stores_grant(self, manager, store, client):
        client.exchange_auth_code.return_value = TokenGrant(
            access_token="a", refresh_token="r", expires_in=3600, user_id="42"
        )
        store.save.side_effect = lambda credential: credential

        credential = await manager.connect("CODE")

        client.exchange_auth_code.assert_awaited_once_with("CODE")
        assert credential.user_id == "42"
        assert credential.expires_at == NOW + timedelta(hours=1)

    async def test_disconnect(self, manager, store):
        assert await manager.disconnect() is True
        store.delete.assert_awaited_once_with("default")

    async def test_status_connected(self, manager, store):
        store.get.return_value = make_credential(timedelta(hours=2))

        status = await manager.connection_status()

        assert status.connected
        assert status.hours_until_expiry == 2.0

    async def test_status_not_connected(self, manager, store):
        store.get.return_value = None
        assert not (await manager.connection_status()).connected

    def test_authorization_url_delegates(self, manager, client):
        assert manager.authorization_url("xyz") == "https://auth.example/authorize"
        client.authorization_url.assert_called_once_with("xyz")
