"""Tests for MercadoLibreClient against a mocked transport."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from src.config.settings import ChannelSettings
from src.core.exceptions import (
    ChannelTimeoutError,
    HardChannelError,
    RecoverableChannelError,
)
from src.infrastructure.channel.mercadolibre import (
    STOCK_NOT_UPDATABLE_MESSAGE,
    MercadoLibreClient,
)


@pytest.fixture
def settings() -> ChannelSettings:
    return ChannelSettings(
        app_id="app-1",
        client_secret="secret",
        redirect_uri="https://example.com/callback",
        api_url="https://api.test",
        read_retries=3,
        read_retry_delay=0,
        timeout=2.0,
    )


def client_with(settings, handler) -> MercadoLibreClient:
    return MercadoLibreClient(settings=settings, transport=httpx.MockTransport(handler))


class TestUpdateListingStock:
    async def test_success(self, settings):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "MLA1", "available_quantity": 7})

        await client_with(settings, handler).update_listing_stock("tok", "MLA1", 7)

        request = seen[0]
        assert request.method == "PUT"
        assert request.url.path == "/items/MLA1"
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == {"available_quantity": 7}

    async def test_field_not_updatable_is_recoverable(self, settings):
        def handler(request):
            return httpx.Response(
                400,
                json={
                    "message": "Validation error",
                    "cause": [
                        {"code": "field_not_updatable", "references": ["item.available_quantity", "available_quantity"]}
                    ],
                },
            )

        with pytest.raises(RecoverableChannelError) as exc_info:
            await client_with(settings, handler).update_listing_stock("tok", "MLA1", 7)
        assert exc_info.value.message == STOCK_NOT_UPDATABLE_MESSAGE

    async def test_other_client_error_is_hard(self, settings):
        def handler(request):
            return httpx.Response(400, json={"message": "invalid quantity"})

        with pytest.raises(HardChannelError) as exc_info:
            await client_with(settings, handler).update_listing_stock("tok", "MLA1", 7)
        assert exc_info.value.status_code == 400
        assert "invalid quantity" in exc_info.value.message

    async def test_server_error_not_retried(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, text="boom")

        with pytest.raises(HardChannelError):
            await client_with(settings, handler).update_listing_stock("tok", "MLA1", 7)
        assert len(calls) == 1

    async def test_timeout(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ChannelTimeoutError) as exc_info:
            await client_with(settings, handler).update_listing_stock("tok", "MLA1", 7)
        assert exc_info.value.details["timeout"] == 2.0


class TestReads:
    async def test_fetch_listing(self, settings):
        def handler(request):
            assert request.url.path == "/items/MLA1"
            return httpx.Response(
                200,
                json={
                    "id": "MLA1",
                    "title": "Widget kit",
                    "category_id": "MLA100",
                    "price": 1500,
                    "currency_id": "ARS",
                    "status": "paused",
                    "available_quantity": 4,
                    "attributes": [{"id": "BRAND", "value_name": "Acme"}],
                },
            )

        snapshot = await client_with(settings, handler).fetch_listing("tok", "MLA1")

        assert snapshot.title == "Widget kit"
        assert snapshot.price == 1500.0
        assert snapshot.status == "paused"
        assert snapshot.attributes == {"BRAND": "Acme"}

    async def test_read_retried_on_server_error(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"id": "MLA1", "title": "Kit"})

        snapshot = await client_with(settings, handler).fetch_listing("tok", "MLA1")

        assert snapshot.channel_item_id == "MLA1"
        assert len(calls) == 3

    async def test_read_gives_up(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(HardChannelError):
            await client_with(settings, handler).fetch_listing("tok", "MLA1")
        assert len(calls) == 3

    async def test_read_timeout_not_retried(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ChannelTimeoutError):
            await client_with(settings, handler).fetch_listing("tok", "MLA1")
        assert len(calls) == 1

    async def test_non_json_body_is_hard_error(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(HardChannelError, match="malformed response"):
            await client_with(settings, handler).fetch_listing("tok", "MLA1")
        assert len(calls) == 1

    async def test_listing_without_id_is_hard_error(self, settings):
        def handler(request):
            return httpx.Response(200, json={"title": "Kit"})

        with pytest.raises(HardChannelError) as exc_info:
            await client_with(settings, handler).fetch_listing("tok", "MLA1")
        assert exc_info.value.details["operation"] == "fetch_listing"

    async def test_not_found_not_retried(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404, json={"message": "item not found"})

        with pytest.raises(HardChannelError) as exc_info:
            await client_with(settings, handler).fetch_listing("tok", "MLA404")
        assert exc_info.value.status_code == 404
        assert len(calls) == 1

    async def test_category_attributes_required_tags(self, settings):
        def handler(request):
            assert request.url.path == "/categories/MLA100/attributes"
            return httpx.Response(
                200,
                json=[
                    {"id": "BRAND", "name": "Marca", "tags": {"required": True}},
                    {"id": "GTIN", "name": "GTIN", "tags": {"catalog_required": True}},
                    {
                        "id": "COLOR",
                        "name": "Color",
                        "tags": {},
                        "value_type": "list",
                        "values": [{"name": "Rojo"}, {"name": "Azul"}],
                    },
                ],
            )

        attributes = await client_with(settings, handler).fetch_category_attributes("tok", "MLA100")

        assert [(a.id, a.required) for a in attributes] == [
            ("BRAND", True),
            ("GTIN", True),
            ("COLOR", False),
        ]
        assert attributes[2].allowed_values == ["Rojo", "Azul"]


class TestOAuth:
    def test_authorization_url(self, settings):
        url = MercadoLibreClient(settings=settings).authorization_url("xyz")

        assert url.startswith(settings.auth_url + "?")
        assert "client_id=app-1" in url
        assert "state=xyz" in url

    async def test_refresh_sends_form(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "access_token": "new-a",
                    "refresh_token": "new-r",
                    "expires_in": 21600,
                    "user_id": 42,
                },
            )

        grant = await client_with(settings, handler).refresh("old-r")

        form = parse_qs(seen[0].content.decode())
        assert seen[0].url.path == "/oauth/token"
        assert form["grant_type"] == ["refresh_token"]
        assert form["refresh_token"] == ["old-r"]
        assert form["client_secret"] == ["secret"]
        assert grant.access_token == "new-a"
        assert grant.user_id == "42"

    async def test_rejected_refresh(self, settings):
        def handler(request):
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(HardChannelError, match="invalid_grant"):
            await client_with(settings, handler).refresh("old-r")

    async def test_token_response_missing_refresh_token(self, settings):
        def handler(request):
            return httpx.Response(200, json={"access_token": "a", "expires_in": 60})

        with pytest.raises(HardChannelError, match="malformed response") as exc_info:
            await client_with(settings, handler).refresh("old-r")
        assert exc_info.value.details["operation"] == "refresh_token"

    async def test_token_response_not_json(self, settings):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(HardChannelError, match="malformed response"):
            await client_with(settings, handler).exchange_auth_code("CODE")

    async def test_exchange_code(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"access_token": "a", "refresh_token": "r"})

        grant = await client_with(settings, handler).exchange_auth_code("CODE")

        form = parse_qs(seen[0].content.decode())
        assert form["code"] == ["CODE"]
        assert form["redirect_uri"] == ["https://example.com/callback"]
        assert grant.expires_in == 21600


class TestPublishing:
    async def test_create_listing(self, settings):
        def handler(request):
            assert request.method == "POST"
            assert json.loads(request.content)["title"] == "Widget"
            return httpx.Response(
                201,
                json={"id": "MLA9", "title": "Widget", "price": 7800, "permalink": "https://x/MLA9"},
            )

        snapshot = await client_with(settings, handler).create_listing("tok", {"title": "Widget"})

        assert snapshot.channel_item_id == "MLA9"
        assert snapshot.permalink == "https://x/MLA9"
