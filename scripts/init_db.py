"""Database initialization script.

Run this script to create the templates table and, when
SEED_SAMPLE_TEMPLATES is set, insert a sample template.

Usage:
    python -m scripts.init_db
    or
    python scripts/init_db.py (after pip install -e .)
"""

import asyncio

from promptforge.core.config import get_settings
from promptforge.db.session import close_db, init_db


async def main() -> None:
    """Initialize the database."""
    settings = get_settings()
    try:
        await init_db(settings)
        print("Database initialized successfully!")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
