#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database, MongoDB and LLM endpoint are reachable.
Usage: python scripts/check_connections.py
"""

from hiring_api.db.postgres import check_postgres_connection
from hiring_api.db.mongodb import check_mongo_connection
from hiring_api.services.llm_client import get_llm_client
from hiring_api.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("HIRING PLATFORM - CONNECTION CHECK")
    print("=" * 50)

    # Relational database
    print("\n[1] Checking database...")
    print(f"    URL: {settings.sqlalchemy_url.replace(settings.postgres_password, '****')}")
    if check_postgres_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")

    # MongoDB
    print("\n[2] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db} (bucket: {settings.resume_bucket})")
    if check_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # LLM (only if API key is set)
    print("\n[3] Checking LLM endpoint...")
    if settings.llm_api_key:
        print(f"    Base URL: {settings.llm_base_url} (model: {settings.llm_model})")
        if get_llm_client().test_connection():
            print("    ✅ LLM: CONNECTED")
        else:
            print("    ❌ LLM: FAILED")
    else:
        print("    ⚠️  LLM: API key not configured (skipped)")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
