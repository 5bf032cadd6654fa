"""
main.py
-------
Entry point for the storefront core.

Responsibilities:
    - Initialize the database connection pool and schema for a host application.
    - Provide maintenance commands: schema creation, sample data, settings reset.

Usage:
    python main.py init-db
    python main.py seed
    python main.py reset-settings
"""

import argparse
import sys

from db.connection import close_pool, init_pool, pool_stats
from db.init_db import create_tables
from db.seed import seed
from exceptions import StorefrontError
from models.identity import Identity
from repositories.settings_repo import SettingsRepository
from services.settings_service import SettingsService
from utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

# Maintenance commands act with admin rights
_MAINTENANCE = Identity(id=0, role="admin")


def init_app(create_schema: bool = True) -> None:
    """Open the pool and make sure every table exists. Call once at startup."""
    logger.info("Initializing database...")
    init_pool()
    if create_schema:
        create_tables()
        SettingsRepository().ensure_table()
    logger.info(f"Storefront core ready: {pool_stats()}")


def shutdown_app() -> None:
    close_pool()
    logger.info("Storefront core stopped.")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Herbal storefront maintenance commands")
    parser.add_argument("command", choices=["init-db", "seed", "reset-settings"])
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    args = parser.parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)

    try:
        # ── 1. Database setup ─────────────────────────────
        init_app()

        # ── 2. Command ────────────────────────────────────
        if args.command == "seed":
            inserted = seed()
            print(f"Inserted {inserted['categories']} categories and {inserted['products']} products.")
        elif args.command == "reset-settings":
            SettingsService().reset_to_defaults(_MAINTENANCE)
            print("Settings reset to defaults.")
        else:
            print("Database schema created successfully.")
        return 0
    except StorefrontError as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        return 1
    finally:
        # ── 3. Cleanup ────────────────────────────────────
        shutdown_app()


if __name__ == "__main__":
    sys.exit(main())
