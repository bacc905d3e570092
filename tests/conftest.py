"""
pytest configuration.

- Points the app at a throwaway SQLite file so no PostgreSQL is needed.
- Swaps the resume bucket, LLM client and AI output log for in-memory fakes.
"""

import io
import json
import os
import tempfile

TEST_DB_DIR = tempfile.mkdtemp(prefix="hiring-api-tests-")

# Must be set before hiring_api is imported (settings + engine are module-level)
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(TEST_DB_DIR, 'test.db')}")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("LLM_API_KEY", "test-llm-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from gridfs.errors import NoFile

from hiring_api.db.schema import init_schema, truncate_all
from hiring_api.main import app
from hiring_api.services import llm_client, scoring_service, storage_service
from hiring_api.services.mongo_service import AnalysisLogService
from hiring_api.services.storage_service import ResumeStorage


GOOD_REPLY = """```json
{
  "full_name": "Ada Lovelace",
  "email": "ada@example.com",
  "skills": ["Python", "SQL"],
  "metrics": {"skill_match": 80, "experience_match": 70},
  "score": 82,
  "verdict": "accepted",
  "justification": "Strong match for the role."
}
```"""


# ============================================================
# FAKES
# ============================================================

class FakeGridOut:
    def __init__(self, filename, content, metadata):
        self.filename = filename
        self.metadata = metadata
        self._buffer = io.BytesIO(content)

    def read(self):
        return self._buffer.read()


class FakeBucket:
    """In-memory stand-in for gridfs.GridFSBucket (the two calls ResumeStorage makes)."""

    def __init__(self):
        self.files = {}

    def upload_from_stream(self, filename, source, metadata=None):
        file_id = ObjectId()
        self.files[file_id] = (filename, bytes(source), metadata or {})
        return file_id

    def open_download_stream(self, file_id):
        if file_id not in self.files:
            raise NoFile(f"no file {file_id}")
        filename, content, metadata = self.files[file_id]
        return FakeGridOut(filename, content, metadata)


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCollection:
    def __init__(self):
        self.docs = []

    def insert_one(self, doc):
        doc = dict(doc, _id=ObjectId())
        self.docs.append(doc)
        return FakeInsertResult(doc["_id"])


class FakeLLMClient:
    """Records every call and answers with a canned reply (or raises)."""

    def __init__(self, reply=GOOD_REPLY):
        self.reply = reply
        self.error = None
        self.calls = []

    def score_application(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.reply


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture(scope="session", autouse=True)
def schema():
    init_schema()


@pytest.fixture(autouse=True)
def clean_tables():
    truncate_all()
    yield


@pytest.fixture
def resume_bucket():
    return FakeBucket()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def analysis_collection():
    return FakeCollection()


@pytest.fixture(autouse=True)
def fake_services(resume_bucket, fake_llm, analysis_collection):
    storage_service.set_resume_storage(ResumeStorage(bucket=resume_bucket))
    llm_client.set_llm_client(fake_llm)
    scoring_service.set_analysis_log(AnalysisLogService(collection=analysis_collection))
    yield
    storage_service.set_resume_storage(None)
    llm_client.set_llm_client(None)
    scoring_service.set_analysis_log(None)


@pytest.fixture
def client():
    return TestClient(app)


def register(client, email="recruiter@example.com", name="Rita Recruiter", password="s3cret-pass"):
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def recruiter(client):
    return register(client)


@pytest.fixture
def auth_headers(recruiter):
    return {"Authorization": f"Bearer {recruiter['token']}"}


@pytest.fixture
def other_headers(client):
    body = register(client, email="other@example.com", name="Otto Other")
    return {"Authorization": f"Bearer {body['token']}"}


JOB_PAYLOAD = {
    "title": "Backend Engineer",
    "company_name": "Acme",
    "job_description": "Python, SQL and APIs. 3+ years.",
    "location": "Remote",
}


@pytest.fixture
def job(client, auth_headers):
    resp = client.post("/api/jobs", json=JOB_PAYLOAD, headers=auth_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def resume_url(client):
    resp = client.post(
        "/api/resumes",
        files={"file": ("ada.txt", b"Ada Lovelace\nada@example.com\nPython, SQL", "text/plain")},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["resume_file_url"]


def submit(client, job, resume_url, raw_data=None):
    payload = {
        "rawData": json.dumps(raw_data or {"name": "Ada Lovelace", "email": "ada@example.com"}),
        "resumeFileUrl": resume_url,
    }
    return client.post(f"/api/jobs/{job['shareable_link']}/applications", json=payload)
