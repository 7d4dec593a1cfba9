#!/usr/bin/env python3
"""
Landed stock management CLI.

Usage:
    python manage.py serve              Start the API server
    python manage.py migrate            Apply pending database migrations
    python manage.py db-status          Show applied and pending migrations
    python manage.py sync-all           Push stock of every syncable listing
    python manage.py finalize ORDER_ID  Move a received order into stock
"""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def _run(coro_factory: Callable[[], Awaitable[int]]) -> None:
    """Run an async command with logging configured and the pool closed after."""
    from src.config import configure_logging
    from src.infrastructure.storage.sqlite import close_pool

    configure_logging()

    async def runner() -> int:
        try:
            return await coro_factory()
        finally:
            await close_pool()

    sys.exit(asyncio.run(runner()))


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn serving the FastAPI app."""
    import uvicorn

    print(f"Starting server on {args.host}:{args.port}...")
    uvicorn.run(
        "src.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        app_dir=str(ROOT_DIR),
    )


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    async def migrate() -> int:
        results = await initialize_database(create_backup_before=not args.no_backup)
        if not results:
            print("Database is up to date.")
            return 0
        for result in results:
            state = "ok" if result.success else f"FAILED: {result.error}"
            print(f"  {result.version}_{result.name}: {state}")
        return 0 if all(r.success for r in results) else 1

    _run(migrate)


def cmd_db_status(args: argparse.Namespace) -> None:
    """Show migration status and schema checks."""
    from src.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        verify_schema_integrity,
    )

    async def status() -> int:
        info = await get_migration_status()
        if not info["exists"]:
            print("Database does not exist yet. Run 'migrate'.")
            return 1

        print(f"Current version: {info['current_version']}")
        print(f"Applied:         {', '.join(info['applied_migrations']) or '-'}")
        print(f"Pending:         {', '.join(info['pending_migrations']) or '-'}")

        checks = await verify_schema_integrity()
        for check in checks:
            print(f"  {check['check']}: {check['status']}")
        return 0 if all(c["status"] == "PASS" for c in checks) else 1

    _run(status)


def cmd_sync_all(args: argparse.Namespace) -> None:
    """Push stock of every active or paused listing (for a scheduled job)."""
    from src.application.use_cases import SyncAllListingsUseCase
    from src.core.exceptions import StockEngineError

    async def sync_all() -> int:
        use_case = SyncAllListingsUseCase()
        try:
            result = await use_case.execute()
        except StockEngineError as e:
            print(f"Error: {e.message}")
            return 1

        print(f"{result.successful} of {result.total} listings synced.")
        for item in result.results:
            if not item.success:
                print(f"  listing {item.listing_id}: {item.status.value} {item.message or ''}")
        return 0 if result.failed == 0 else 2

    _run(sync_all)


def cmd_finalize(args: argparse.Namespace) -> None:
    """Finalize a received order into stock."""
    from src.application.use_cases import FinalizeOrderUseCase
    from src.core.exceptions import StockEngineError

    async def finalize() -> int:
        use_case = FinalizeOrderUseCase()
        try:
            result = await use_case.execute(args.order_id)
        except StockEngineError as e:
            print(f"Error [{e.code}]: {e.message}")
            return 1

        response = use_case.to_response(result)
        print(response.message)
        for batch in response.batches:
            print(
                f"  {batch.batch_number}: {batch.quantity} @ {batch.unit_cost_usd:.4f} USD"
            )
        print(f"Total landed cost: {response.total_landed_cost_usd:.2f} USD")
        return 0

    _run(finalize)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Landed stock management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # db-status
    p_status = sub.add_parser("db-status", help="Show migration status")
    p_status.set_defaults(func=cmd_db_status)

    # sync-all
    p_sync = sub.add_parser("sync-all", help="Push stock of every syncable listing")
    p_sync.set_defaults(func=cmd_sync_all)

    # finalize
    p_finalize = sub.add_parser("finalize", help="Move a received order into stock")
    p_finalize.add_argument("order_id", type=int, help="Purchase order ID")
    p_finalize.set_defaults(func=cmd_finalize)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
