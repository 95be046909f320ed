"""Database reset script.

Run this script to drop all tables and reinitialize the database.
This deletes every stored template.

Usage:
    python -m scripts.reset_db
    or
    python scripts/reset_db.py (after pip install -e .)
"""

import asyncio

from promptforge.core.config import get_settings
from promptforge.db.session import close_db, drop_all_tables, init_db


async def main() -> None:
    """Reset the database by dropping all tables and reinitializing."""
    settings = get_settings()

    try:
        print("Dropping all database tables...")
        await drop_all_tables(settings)
        print("All tables dropped successfully!")

        print("Recreating tables...")
        await init_db(settings)
        print("Database reinitialized successfully!")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
