#!/usr/bin/env python3
"""
Inventory Manager -- operator command line.

Usage:
  python main.py init-db
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 10000
  python main.py serve --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY                 Token signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL               SQLAlchemy URL. Defaults to a SQLite file next to this script.
  BOOTSTRAP_ADMIN_EMAIL      Email of the admin account seeded on first start.
  BOOTSTRAP_ADMIN_PASSWORD   Its password. Leave unset to have one generated and printed once.
"""

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from auth.accounts import seed_bootstrap_admin
from auth.store import UserStore
from core.config import get_settings
from inventory.store import ProductStore


def init_db() -> int:
    """Create the tables and seed the bootstrap admin. Returns a process exit code."""
    settings = get_settings()
    print("\nInventory Manager -- database initialization")
    print("─" * 40)
    user_store = None
    product_store = None
    try:
        user_store = UserStore(settings.database_url)
        product_store = ProductStore(settings.database_url)
        result = seed_bootstrap_admin(
            user_store,
            email=settings.bootstrap_admin_email,
            name=settings.bootstrap_admin_name,
            password=settings.bootstrap_admin_password,
        )
    except SQLAlchemyError as e:
        print(f"  [!] Database initialization failed: {e}")
        return 1
    finally:
        if product_store is not None:
            product_store.close()
        if user_store is not None:
            user_store.close()

    print("  Tables ready.")
    if not result.created:
        print(f"  Bootstrap admin {result.email} already exists (id={result.user_id}).")
    elif result.generated_password:
        print(f"  Bootstrap admin {result.email} created (id={result.user_id}).")
        print(f"  Generated password: {result.generated_password}")
        print("  This password is shown once. Store it now.")
    else:
        print(f"  Bootstrap admin {result.email} created with the configured password.")
    print()
    return 0


def serve(host: str, port: int, reload: bool) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port, reload=reload)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="inventory-manager",
        description="Multi-user product inventory backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  DEBUG=true python main.py init-db
  SECRET_KEY=... python main.py serve --port 10000
        """,
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init-db", help="Create tables and seed the bootstrap admin account")

    serve_parser = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=10000, help="Port (default: 10000)")
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")

    args = parser.parse_args()

    if args.command == "init-db":
        sys.exit(init_db())
    elif args.command == "serve":
        sys.exit(serve(args.host, args.port, args.reload))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
