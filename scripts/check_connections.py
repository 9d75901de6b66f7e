#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the MongoDB connection and indexes.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from jobboard.db.mongodb import test_mongo_connection, init_mongo_indexes, get_mongo_db, COLLECTIONS
from jobboard.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("JOB BOARD - CONNECTION TEST")
    print("=" * 50)

    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if not test_mongo_connection():
        print("    ❌ MongoDB: FAILED")
        return 1
    print("    ✅ MongoDB: CONNECTED")

    print("\n[2] Creating indexes...")
    init_mongo_indexes()
    db = get_mongo_db()
    for name in COLLECTIONS.values():
        print(f"    {name}: {db[name].estimated_document_count()} document(s)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
