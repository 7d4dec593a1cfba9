"""
MercadoLibre marketplace client.

Thin httpx wrapper over the MercadoLibre REST API. Every call is bounded
by ``CHANNEL_TIMEOUT``. Idempotent reads are retried on transport errors
other than timeouts; writes, including the stock push, are sent exactly
once. A success body that cannot be decoded is a hard channel error.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlencode

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger, get_settings
from src.config.settings import ChannelSettings
from src.core.entities.channel import CategoryAttribute
from src.core.exceptions import (
    ChannelTimeoutError,
    HardChannelError,
    RecoverableChannelError,
)
from src.core.interfaces.channel import IChannelClient, ListingSnapshot, TokenGrant

logger = get_logger(__name__)

STOCK_NOT_UPDATABLE_MESSAGE = (
    "Listing has active offers or sales in progress; the channel does not "
    "allow stock changes until they complete or the listing is paused"
)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "channel_read_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@contextmanager
def _malformed_payload(operation: str) -> Iterator[None]:
    """Turn a success body that cannot be decoded or mapped into a hard error."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error("channel_response_malformed", operation=operation, error=str(e))
        raise HardChannelError(operation, f"malformed response: {e}") from e


def _decode(operation: str, response: httpx.Response) -> Any:
    with _malformed_payload(operation):
        payload = response.json()
    return payload


def _is_stock_not_updatable(body: dict[str, Any]) -> bool:
    """Channel refuses stock changes while sales or offers are in flight."""
    for cause in body.get("cause") or []:
        if not isinstance(cause, dict):
            continue
        if cause.get("code") == "field_not_updatable" and "available_quantity" in (
            cause.get("references") or []
        ):
            return True
    return False


class MercadoLibreClient(IChannelClient):
    """IChannelClient implementation for the MercadoLibre API."""

    def __init__(
        self,
        settings: ChannelSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings().channel
        self.timeout = self.settings.timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        access_token: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request, translating timeouts and transport failures."""
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
        try:
            async with self._client() as client:
                return await client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("channel_request_timeout", operation=operation, path=path)
            raise ChannelTimeoutError(operation, self.timeout) from e
        except httpx.TransportError as e:
            logger.error("channel_request_failed", operation=operation, error=str(e))
            raise HardChannelError(operation, str(e)) from e

    async def _read(self, operation: str, path: str, access_token: str) -> Any:
        """GET with retries on transport errors and 5xx replies."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.settings.read_retries)),
            wait=wait_exponential(
                multiplier=self.settings.read_retry_delay,
                min=self.settings.read_retry_delay,
                max=self.settings.read_retry_delay * 8,
            ),
            # Timeouts are hard errors and are never retried
            retry=(
                retry_if_exception_type(HardChannelError)
                & retry_if_not_exception_type(ChannelTimeoutError)
            ),
            before_sleep=_log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._send(operation, "GET", path, access_token)
                if response.status_code >= 500:
                    raise HardChannelError(
                        operation, f"HTTP {response.status_code}", response.status_code
                    )
        self._raise_for_status(operation, response)
        return _decode(operation, response)

    @staticmethod
    def _raise_for_status(operation: str, response: httpx.Response) -> None:
        if response.is_success:
            return
        body = _error_body(response)
        message = body.get("message") or body.get("error") or response.reason_phrase
        raise HardChannelError(
            operation, f"HTTP {response.status_code}: {message}", response.status_code
        )

    def authorization_url(self, state: str | None = None) -> str:
        params = {
            "response_type": "code",
            "client_id": self.settings.app_id,
            "redirect_uri": self.settings.redirect_uri,
        }
        if state:
            params["state"] = state
        return f"{self.settings.auth_url}?{urlencode(params)}"

    async def _token_request(self, operation: str, form: dict[str, str]) -> TokenGrant:
        form = {
            "client_id": self.settings.app_id,
            "client_secret": self.settings.client_secret,
            **form,
        }
        response = await self._send(operation, "POST", "/oauth/token", data=form)
        self._raise_for_status(operation, response)

        payload = _decode(operation, response)
        with _malformed_payload(operation):
            user_id = payload.get("user_id")
            grant = TokenGrant(
                access_token=payload["access_token"],
                refresh_token=payload["refresh_token"],
                expires_in=int(payload.get("expires_in", 21600)),
                user_id=str(user_id) if user_id is not None else None,
            )
        return grant

    async def exchange_auth_code(self, code: str) -> TokenGrant:
        return await self._token_request(
            "exchange_auth_code",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.redirect_uri,
            },
        )

    async def refresh(self, refresh_token: str) -> TokenGrant:
        return await self._token_request(
            "refresh_token",
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
        )

    async def update_listing_stock(
        self, access_token: str, channel_item_id: str, quantity: int
    ) -> None:
        response = await self._send(
            "update_listing_stock",
            "PUT",
            f"/items/{channel_item_id}",
            access_token,
            json={"available_quantity": quantity},
        )
        if response.is_success:
            logger.debug(
                "channel_stock_updated",
                channel_item_id=channel_item_id,
                quantity=quantity,
            )
            return

        if _is_stock_not_updatable(_error_body(response)):
            raise RecoverableChannelError(channel_item_id, STOCK_NOT_UPDATABLE_MESSAGE)
        self._raise_for_status("update_listing_stock", response)

    async def fetch_listing(self, access_token: str, channel_item_id: str) -> ListingSnapshot:
        payload = await self._read("fetch_listing", f"/items/{channel_item_id}", access_token)
        return _to_snapshot("fetch_listing", payload)

    async def fetch_category_attributes(
        self, access_token: str, category_id: str
    ) -> list[CategoryAttribute]:
        payload = await self._read(
            "fetch_category_attributes", f"/categories/{category_id}/attributes", access_token
        )
        with _malformed_payload("fetch_category_attributes"):
            attributes = [_to_attribute(raw) for raw in payload or []]
        return attributes

    async def create_listing(
        self, access_token: str, payload: dict[str, Any]
    ) -> ListingSnapshot:
        response = await self._send("create_listing", "POST", "/items", access_token, json=payload)
        self._raise_for_status("create_listing", response)
        snapshot = _to_snapshot("create_listing", _decode("create_listing", response))
        logger.info("channel_listing_created", channel_item_id=snapshot.channel_item_id)
        return snapshot

    async def update_listing(
        self, access_token: str, channel_item_id: str, payload: dict[str, Any]
    ) -> ListingSnapshot:
        response = await self._send(
            "update_listing", "PUT", f"/items/{channel_item_id}", access_token, json=payload
        )
        self._raise_for_status("update_listing", response)
        return _to_snapshot("update_listing", _decode("update_listing", response))


def _to_attribute(raw: dict[str, Any]) -> CategoryAttribute:
    tags = raw.get("tags") or {}
    required = bool(
        raw.get("required")
        or (isinstance(tags, dict) and (tags.get("required") or tags.get("catalog_required")))
    )
    return CategoryAttribute(
        id=raw["id"],
        name=raw.get("name") or raw["id"],
        required=required,
        value_type=raw.get("value_type"),
        allowed_values=[v["name"] for v in raw.get("values") or [] if v.get("name")],
    )


def _to_snapshot(operation: str, payload: dict[str, Any]) -> ListingSnapshot:
    with _malformed_payload(operation):
        attributes = {
            attr["id"]: attr.get("value_name")
            for attr in payload.get("attributes") or []
            if attr.get("id")
        }
        snapshot = ListingSnapshot(
            channel_item_id=payload["id"],
            title=payload.get("title") or payload["id"],
            category_id=payload.get("category_id"),
            price=float(payload.get("price") or 0),
            currency=payload.get("currency_id") or "ARS",
            status=payload.get("status") or "active",
            permalink=payload.get("permalink"),
            thumbnail=payload.get("thumbnail"),
            available_quantity=int(payload.get("available_quantity") or 0),
            attributes=attributes,
        )
    return snapshot
