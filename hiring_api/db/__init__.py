"""
Database module - relational (PostgreSQL) and document (MongoDB) connections.
"""
from hiring_api.db.postgres import get_db_session, execute_raw_sql, check_postgres_connection
from hiring_api.db.mongodb import get_mongo_db, check_mongo_connection

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "check_postgres_connection",
    "get_mongo_db",
    "check_mongo_connection"
]
