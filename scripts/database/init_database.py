#!/usr/bin/env python3
"""
Create the Openly tables and optionally purge expired admin sessions.

Usage:
    python init_database.py --db-path openly.db [--purge-sessions]
"""

import argparse
import asyncio
import sys
import os

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from openly.database import OpenlySQLiteDB
from openly.errors import StorageError
from openly.sessions import SessionService
from openly.common.logging_config import setup_logging


async def main():
    parser = argparse.ArgumentParser(description="Initialize the Openly database")
    parser.add_argument(
        "--db-path",
        default=os.getenv("DATABASE_PATH", "openly.db"),
        help="SQLite database file"
    )
    parser.add_argument(
        "--purge-sessions",
        action="store_true",
        help="Delete expired admin sessions"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args()

    logger = setup_logging(level="DEBUG" if args.verbose else "INFO")
    db = OpenlySQLiteDB(db_config=args.db_path, logger=logger)

    try:
        logger.info(f"Initializing {args.db_path}...")
        await db.open()

        if not await db.health_check():
            logger.error("Database health check failed")
            return 1

        if args.purge_sessions:
            purged = await SessionService(db=db, logger=logger).purge_expired()
            logger.info(f"Removed {purged} expired session(s)")

        links = await db.list_links()
        sessions = await db.count_sessions()
        logger.info(f"Database holds {len(links)} link(s) and {sessions} session(s)")

        logger.info("Done")
        return 0

    except StorageError as e:
        logger.error(f"Error initializing database: {e}")
        return 1
    finally:
        await db.close()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
