"""Abstract interface for channel credential storage."""

from abc import ABC, abstractmethod

from src.core.entities.credential import Credential


class ICredentialStore(ABC):
    """Interface for one credential row per integration identity."""

    @abstractmethod
    async def get(self, identity: str) -> Credential | None:
        """Get the stored credential for an identity."""
        pass

    @abstractmethod
    async def save(self, credential: Credential) -> Credential:
        """Insert or replace the credential for its identity."""
        pass

    @abstractmethod
    async def replace_if_current(
        self, credential: Credential, previous_refresh_token: str
    ) -> bool:
        """
        Store a refreshed pair only if the stored refresh token is unchanged.

        Returns:
            False if another writer refreshed or deleted the credential first.
        """
        pass

    @abstractmethod
    async def delete(self, identity: str, refresh_token: str | None = None) -> bool:
        """Delete the credential; with refresh_token, only if it still matches."""
        pass
