#!/usr/bin/env python3
"""
Reset database script for local development.
This script will drop all tables, recreate them and reseed the exercise catalog.
"""

import asyncio
import os
import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Set default environment variables for local development
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./local_dev.db")

from sqlalchemy import inspect

from fitness_tracker.catalog import seed_catalog
from fitness_tracker.db import repo
from fitness_tracker.db.models import Base


async def reset_database():
    """Reset the database by dropping all tables and recreating them."""
    print("🔄 Resetting database...")

    await repo.init_db()
    engine = repo.get_engine()

    async with engine.begin() as conn:
        print("🗑️  Dropping all tables...")
        await conn.run_sync(Base.metadata.drop_all)

        print("🏗️  Creating tables from models...")
        await conn.run_sync(Base.metadata.create_all)

        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    written = await seed_catalog(force=True)
    await repo.close_db()

    print("✅ Database reset complete!")
    print("📊 Tables created:")
    for table in tables:
        print(f"   - {table}")
    print(f"🏋️  Seeded {written} exercises")


if __name__ == "__main__":
    asyncio.run(reset_database())
