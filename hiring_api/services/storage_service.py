"""
Resume Storage Service - resume files in a MongoDB GridFS bucket.

Candidates upload a resume first and get back a resume_file_url
("/api/resumes/<file_id>"). The application they submit carries that URL;
the scoring pipeline takes its last path segment as the file id and
downloads the bytes from here.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from gridfs.errors import NoFile

from hiring_api.db.mongodb import get_resume_bucket

logger = logging.getLogger(__name__)

RESUME_URL_PREFIX = "/api/resumes/"


class ResumeNotFoundError(Exception):
    """No stored resume for the given id or URL."""


@dataclass
class StoredResume:
    file_id: str
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"
    metadata: dict = field(default_factory=dict)


def resume_url_for(file_id: str) -> str:
    return f"{RESUME_URL_PREFIX}{file_id}"


def file_id_from_url(resume_file_url: str) -> str:
    """
    Last path segment of a resume URL, ignoring any query string.

    Raises:
        ResumeNotFoundError if the URL has no usable segment
    """
    path = (resume_file_url or "").split("?", 1)[0].rstrip("/")
    file_id = path.split("/")[-1]
    if not file_id:
        raise ResumeNotFoundError("Invalid resume file URL")
    return file_id


class ResumeStorage:
    """GridFS-backed resume store."""

    def __init__(self, bucket=None):
        self.bucket = bucket or get_resume_bucket()

    def upload(self, content: bytes, filename: str, content_type: str) -> str:
        """Store a resume and return its file id."""
        file_id = self.bucket.upload_from_stream(
            filename,
            content,
            metadata={
                "content_type": content_type,
                "uploaded_at": datetime.now(timezone.utc),
            },
        )
        logger.info("Stored resume %s (%s, %d bytes)", file_id, filename, len(content))
        return str(file_id)

    def download(self, file_id: str) -> StoredResume:
        """
        Fetch a resume by id.

        Raises:
            ResumeNotFoundError if the id is malformed or unknown
        """
        try:
            stream = self.bucket.open_download_stream(ObjectId(file_id))
        except (InvalidId, TypeError, NoFile) as e:
            raise ResumeNotFoundError(f"Resume {file_id} not found") from e

        metadata = stream.metadata or {}
        return StoredResume(
            file_id=file_id,
            filename=stream.filename,
            content=stream.read(),
            content_type=metadata.get("content_type", "application/octet-stream"),
            metadata=metadata,
        )

    def download_by_url(self, resume_file_url: str) -> StoredResume:
        return self.download(file_id_from_url(resume_file_url))


# Singleton instance
_resume_storage: Optional[ResumeStorage] = None


def get_resume_storage() -> ResumeStorage:
    """Get or create the resume storage (singleton pattern)"""
    global _resume_storage
    if _resume_storage is None:
        _resume_storage = ResumeStorage()
    return _resume_storage


def set_resume_storage(storage: Optional[ResumeStorage]) -> None:
    """Replace the storage singleton (None resets it)."""
    global _resume_storage
    _resume_storage = storage
