# scripts/setup/init_db.py
"""
Initialize database: creates all tables.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from fleet_records.database import RecordStore
from fleet_records.config import settings
from fleet_records.utils.logger import configure_logging
from sqlalchemy import text


def main():
    print("Fleet Records DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    store = RecordStore(settings.DATABASE_URL)

    configure_logging()

    # Test connection
    try:
        with store.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        sys.exit(1)

    # Create all tables
    print("\nCreating tables...")
    store.create_tables()
    print("All tables created")

    tables = store.table_names()
    print(f"\nTables in database ({len(tables)} total):")
    for t in tables:
        print(f"   - {t}")

    store.close()
    print("\nDatabase ready! You can now start the backend:")
    print(f"   uvicorn fleet_records.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
