"""Database migrations module."""

from src.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)

__all__ = [
    "REQUIRED_TABLES",
    "MigrationInfo",
    "MigrationResult",
    "create_backup",
    "discover_migrations",
    "get_migration_status",
    "initialize_database",
    "restore_backup",
    "verify_schema_integrity",
]
