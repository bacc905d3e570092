"""
Relational schema.

Tables:
- clients: recruiter accounts
- jobs: postings owned by a client, reachable by shareable_link
- applications: candidate submissions (raw form data + resume URL)
- structured_applications: AI (or manually overridden) scoring, 1:1 with applications

The DDL sticks to types both PostgreSQL and SQLite understand so the same
statements back production and the test suite. Ids are UUID strings made by
the app, JSON columns hold serialized text.
"""

import logging

from sqlalchemy import text

from hiring_api.db.postgres import get_db_session

logger = logging.getLogger(__name__)

TABLES = ["structured_applications", "applications", "jobs", "clients"]

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS clients (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR(200) NOT NULL,
        email VARCHAR(255) NOT NULL UNIQUE,
        password_hash VARCHAR(255) NOT NULL,
        created_at VARCHAR(40) NOT NULL,
        updated_at VARCHAR(40)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jobs (
        id VARCHAR(36) PRIMARY KEY,
        client_id VARCHAR(36) NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
        title VARCHAR(200) NOT NULL,
        company_name VARCHAR(200) NOT NULL,
        job_description TEXT NOT NULL,
        location VARCHAR(200),
        shareable_link VARCHAR(64) NOT NULL UNIQUE,
        status VARCHAR(16) NOT NULL DEFAULT 'open',
        total_applicants INTEGER NOT NULL DEFAULT 0,
        expires_at VARCHAR(40),
        created_at VARCHAR(40) NOT NULL,
        updated_at VARCHAR(40)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_jobs_client_id ON jobs (client_id)",
    """
    CREATE TABLE IF NOT EXISTS applications (
        id VARCHAR(36) PRIMARY KEY,
        job_id VARCHAR(36) NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
        raw_data TEXT NOT NULL,
        resume_file_url TEXT NOT NULL,
        submitted_at VARCHAR(40) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_applications_job_id ON applications (job_id)",
    """
    CREATE TABLE IF NOT EXISTS structured_applications (
        id VARCHAR(36) PRIMARY KEY,
        application_id VARCHAR(36) NOT NULL UNIQUE REFERENCES applications(id) ON DELETE CASCADE,
        full_name VARCHAR(200),
        email VARCHAR(255),
        skills TEXT NOT NULL DEFAULT '[]',
        resume_text TEXT,
        score REAL NOT NULL DEFAULT 0,
        verdict VARCHAR(16) NOT NULL DEFAULT 'needs_review',
        metrics TEXT NOT NULL DEFAULT '{}',
        justification TEXT,
        parsed_at VARCHAR(40) NOT NULL
    )
    """,
]


def init_schema():
    """Create all tables and indexes if missing. Safe to call on every startup."""
    with get_db_session() as db:
        for statement in SCHEMA_STATEMENTS:
            db.execute(text(statement))
    logger.info("Relational schema ready (%d tables)", len(TABLES))


def truncate_all():
    """Delete every row, children first. Used by tests and local resets."""
    with get_db_session() as db:
        for table in TABLES:
            db.execute(text(f"DELETE FROM {table}"))
