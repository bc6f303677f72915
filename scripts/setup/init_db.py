# scripts/setup/init_db.py
"""
Initialize the local cache database — creates the cache table.
Optional: the backend also creates it on startup.
Usage: python scripts/setup/init_db.py [--network-id FLEET-XXXXX]
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse

from sqlalchemy import inspect, text

from app.config import settings
from app.database import create_tables, engine
from app.services.local_cache import LocalCache
from app.session import NETWORK_ID_KEY, resolve_session


def main():
    parser = argparse.ArgumentParser(description="Create the local cache and pin a network ID")
    parser.add_argument("--network-id", help="Office network ID to remember for the next start")
    args = parser.parse_args()

    print("🗄️  Fleet Cache Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot open database: {e}")
        print("\nCheck DATABASE_URL in .env and that the directory is writable.")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    cache = LocalCache()
    if args.network_id or cache.get_meta(NETWORK_ID_KEY) is None:
        session = resolve_session(cache, args.network_id)
        print(f"\n🏢 Network ID: {session.network_id}")
    else:
        print(f"\n🏢 Network ID (remembered): {cache.get_meta(NETWORK_ID_KEY)}")

    print("\n🎉 Cache ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_IP} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
