"""
MongoDB Connection Utility

MongoDB stores:
- Uploaded resume files (GridFS bucket, default "resumes")
- Raw LLM responses for every scored application

WHY MongoDB for these?
- GridFS handles binary files of any size without a separate object store
- Raw AI output has no fixed shape
- No joins needed: each document is self-contained
"""
import logging

from gridfs import GridFSBucket
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from hiring_api.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the hiring_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def get_resume_bucket() -> GridFSBucket:
    """GridFS bucket holding uploaded resume files."""
    return GridFSBucket(get_mongo_db(), bucket_name=settings.resume_bucket)


def check_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "ai_analyses": "ai_analyses",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Raw AI output is looked up per application and per job
    db[COLLECTIONS["ai_analyses"]].create_index("application_id")
    db[COLLECTIONS["ai_analyses"]].create_index([("job_id", 1), ("created_at", -1)])

    logger.info("MongoDB indexes created")
