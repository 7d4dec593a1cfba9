"""
Channel credential lifecycle.

Hands out valid access tokens, refreshing expired ones. A failed refresh
deletes the stored credential so the operator has to authorize again.
Refresh is serialized per identity in-process by a lock and across
processes by a conditional update on the previous refresh token.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.credential import Credential
from src.core.exceptions import ChannelError, NoCredentialError
from src.core.interfaces.channel import IChannelClient, TokenGrant
from src.core.interfaces.credential_store import ICredentialStore

logger = get_logger(__name__)


@dataclass
class ConnectionStatus:
    """Whether an identity is connected and for how long its token is valid."""

    identity: str
    connected: bool
    expires_at: datetime | None = None
    hours_until_expiry: float | None = None
    user_id: str | None = None


class CredentialManager:
    """Single access point for channel credentials."""

    def __init__(
        self,
        store: ICredentialStore,
        client: IChannelClient,
        refresh_margin_seconds: int = 0,
        default_identity: str = "default",
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._client = client
        self._margin = refresh_margin_seconds
        self._default_identity = default_identity
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, identity: str) -> asyncio.Lock:
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        return lock

    def _is_usable(self, credential: Credential) -> bool:
        return not credential.is_expired(self._clock(), self._margin)

    def _from_grant(self, identity: str, grant: TokenGrant) -> Credential:
        now = self._clock()
        return Credential(
            identity=identity,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=now + timedelta(seconds=grant.expires_in),
            user_id=grant.user_id,
            updated_at=now,
        )

    async def get_valid_token(self, identity: str | None = None) -> str | None:
        """
        Return a valid access token, or None when not connected.

        absent -> None; valid -> token; expired -> refresh, and on refresh
        failure the credential is deleted and None is returned.
        """
        identity = identity or self._default_identity

        credential = await self._store.get(identity)
        if credential is None:
            return None
        if self._is_usable(credential):
            return credential.access_token

        async with self._lock_for(identity):
            # Another task may have refreshed while we waited
            credential = await self._store.get(identity)
            if credential is None:
                return None
            if self._is_usable(credential):
                return credential.access_token
            return await self._refresh(credential)

    async def _refresh(self, credential: Credential) -> str | None:
        identity = credential.identity
        logger.info("credential_refresh_started", identity=identity)

        try:
            grant = await self._client.refresh(credential.refresh_token)
        except ChannelError as e:
            logger.warning(
                "credential_refresh_failed",
                identity=identity,
                error=e.message,
            )
            await self._store.delete(identity, refresh_token=credential.refresh_token)
            return None

        refreshed = self._from_grant(identity, grant)
        if await self._store.replace_if_current(refreshed, credential.refresh_token):
            logger.info(
                "credential_refreshed",
                identity=identity,
                expires_at=refreshed.expires_at.isoformat(),
            )
            return refreshed.access_token

        # Another process rotated the pair first; use whatever it stored
        logger.info("credential_refresh_superseded", identity=identity)
        current = await self._store.get(identity)
        if current is not None and self._is_usable(current):
            return current.access_token
        return None

    async def require_token(self, identity: str | None = None) -> str:
        """Like get_valid_token but raises NoCredentialError when absent."""
        identity = identity or self._default_identity
        token = await self.get_valid_token(identity)
        if token is None:
            raise NoCredentialError(identity)
        return token

    def authorization_url(self, state: str | None = None) -> str:
        return self._client.authorization_url(state)

    async def connect(self, code: str, identity: str | None = None) -> Credential:
        """Exchange an authorization code and store the resulting pair."""
        identity = identity or self._default_identity
        grant = await self._client.exchange_auth_code(code)
        credential = await self._store.save(self._from_grant(identity, grant))
        logger.info(
            "channel_connected",
            identity=identity,
            user_id=credential.user_id,
            expires_at=credential.expires_at.isoformat(),
        )
        return credential

    async def disconnect(self, identity: str | None = None) -> bool:
        identity = identity or self._default_identity
        deleted = await self._store.delete(identity)
        logger.info("channel_disconnected", identity=identity, deleted=deleted)
        return deleted

    async def connection_status(self, identity: str | None = None) -> ConnectionStatus:
        """Report the stored credential without refreshing it."""
        identity = identity or self._default_identity
        credential = await self._store.get(identity)
        if credential is None:
            return ConnectionStatus(identity=identity, connected=False)

        now = self._clock()
        return ConnectionStatus(
            identity=identity,
            connected=True,
            expires_at=credential.expires_at,
            hours_until_expiry=round(credential.hours_until_expiry(now), 1),
            user_id=credential.user_id,
        )
