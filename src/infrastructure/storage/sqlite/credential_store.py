"""SQLite implementation of channel credential storage."""

import aiosqlite

from src.config import get_logger
from src.core.clock import utc_now
from src.core.entities.credential import Credential
from src.core.interfaces.credential_store import ICredentialStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.helpers import db_operation, parse_datetime, to_iso

logger = get_logger(__name__)


class SQLiteCredentialStore(ICredentialStore):
    """One row per integration identity in channel_credentials."""

    @db_operation("get_credential")
    async def get(self, identity: str) -> Credential | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM channel_credentials WHERE identity = ?", (identity,)
            )
            row = await cursor.fetchone()
        return self._row_to_credential(row) if row else None

    @db_operation("save_credential")
    async def save(self, credential: Credential) -> Credential:
        credential.updated_at = utc_now()
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO channel_credentials (
                    identity, access_token, refresh_token, expires_at, user_id, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(identity) DO UPDATE SET
                    access_token = excluded.access_token,
                    refresh_token = excluded.refresh_token,
                    expires_at = excluded.expires_at,
                    user_id = excluded.user_id,
                    updated_at = excluded.updated_at
                """,
                (
                    credential.identity,
                    credential.access_token,
                    credential.refresh_token,
                    to_iso(credential.expires_at),
                    credential.user_id,
                    to_iso(credential.updated_at),
                ),
            )
        logger.info("credential_saved", identity=credential.identity)
        return credential

    @db_operation("replace_credential")
    async def replace_if_current(
        self, credential: Credential, previous_refresh_token: str
    ) -> bool:
        credential.updated_at = utc_now()
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE channel_credentials SET
                    access_token = ?, refresh_token = ?, expires_at = ?,
                    user_id = COALESCE(?, user_id), updated_at = ?
                WHERE identity = ? AND refresh_token = ?
                """,
                (
                    credential.access_token,
                    credential.refresh_token,
                    to_iso(credential.expires_at),
                    credential.user_id,
                    to_iso(credential.updated_at),
                    credential.identity,
                    previous_refresh_token,
                ),
            )
            return cursor.rowcount == 1

    @db_operation("delete_credential")
    async def delete(self, identity: str, refresh_token: str | None = None) -> bool:
        async with get_transaction() as conn:
            if refresh_token is None:
                cursor = await conn.execute(
                    "DELETE FROM channel_credentials WHERE identity = ?", (identity,)
                )
            else:
                cursor = await conn.execute(
                    "DELETE FROM channel_credentials WHERE identity = ? AND refresh_token = ?",
                    (identity, refresh_token),
                )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("credential_deleted", identity=identity)
        return deleted

    @staticmethod
    def _row_to_credential(row: aiosqlite.Row) -> Credential:
        return Credential(
            identity=row["identity"],
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            expires_at=parse_datetime(row["expires_at"]) or utc_now(),
            user_id=row["user_id"],
            updated_at=parse_datetime(row["updated_at"]) or utc_now(),
        )
