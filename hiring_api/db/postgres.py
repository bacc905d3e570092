import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from hiring_api.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict:
    """Pool settings per backend. SQLite (tests, local dev) has no server pool."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    settings.sqlalchemy_url,
    echo=settings.debug,  # Log SQL queries in debug mode
    **_engine_options(settings.sqlalchemy_url)
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM jobs"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_postgres_connection() -> bool:
    """
    Test if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        return False


def execute_raw_sql(sql, params: dict = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    Accepts a SQL string or a prepared text() clause.
    """
    statement = text(sql) if isinstance(sql, str) else sql
    with get_db_session() as db:
        result = db.execute(statement, params or {})
        # Convert rows to dicts
        return [dict(row) for row in result.mappings().fetchall()]


def fetch_one(sql, params: dict = None):
    """First row of a query as a dict, or None."""
    rows = execute_raw_sql(sql, params)
    return rows[0] if rows else None
