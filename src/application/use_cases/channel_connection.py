"""Channel connection use cases: OAuth authorization, callback and status."""

from src.application.dto.responses import (
    ActionResponse,
    AuthorizationUrlResponse,
    ConnectionStatusResponse,
)
from src.core.exceptions import ValidationError
from src.core.services.credential_manager import ConnectionStatus, CredentialManager


class ChannelConnectionUseCase:
    """Connect, disconnect and inspect the marketplace account."""

    def __init__(self, credentials: CredentialManager | None = None):
        self._credentials = credentials

    async def _get_credentials(self) -> CredentialManager:
        if self._credentials is None:
            from src.application.services import get_credential_manager

            self._credentials = await get_credential_manager()
        return self._credentials

    async def authorization_url(self, state: str | None = None) -> AuthorizationUrlResponse:
        credentials = await self._get_credentials()
        return AuthorizationUrlResponse(url=credentials.authorization_url(state))

    async def connect(self, code: str) -> ConnectionStatusResponse:
        """
        Complete the OAuth callback.

        Raises:
            ValidationError: Empty authorization code
            ChannelError: Code exchange rejected
        """
        if not code or not code.strip():
            raise ValidationError("code", "authorization code is required")
        credentials = await self._get_credentials()
        await credentials.connect(code.strip())
        return self._status_response(await credentials.connection_status())

    async def disconnect(self) -> ActionResponse:
        credentials = await self._get_credentials()
        if await credentials.disconnect():
            return ActionResponse(status="success", message="Channel disconnected")
        return ActionResponse(status="warning", message="Channel was not connected")

    async def status(self) -> ConnectionStatusResponse:
        credentials = await self._get_credentials()
        return self._status_response(await credentials.connection_status())

    @staticmethod
    def _status_response(status: ConnectionStatus) -> ConnectionStatusResponse:
        return ConnectionStatusResponse(
            identity=status.identity,
            connected=status.connected,
            expires_at=status.expires_at,
            hours_until_expiry=status.hours_until_expiry,
            user_id=status.user_id,
        )
