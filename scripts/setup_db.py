"""
scripts/setup_db.py — Initialize the database schema.

Run once before starting the API for the first time:
    python scripts/setup_db.py

Creates the assessments and report_emails tables from the SQLAlchemy
metadata in exposure_engine/db/models.py.
"""

import sys
import os

# Ensure the project root is on the path so we can import `exposure_engine`
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import inspect, text

from exposure_engine.config import settings
from exposure_engine.db.models import Base
from exposure_engine.db.session import engine


def setup_db() -> list[str]:
    print("🔌 Connecting to database...")
    print(f"   URL: {settings.database_url[:40]}...")

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    print("✅ Connection successful.")

    print("\n📦 Creating tables if they don't exist...")
    Base.metadata.create_all(bind=engine)

    tables = inspect(engine).get_table_names()
    print(f"✅ Tables in database: {tables}")
    return tables


if __name__ == "__main__":
    setup_db()
