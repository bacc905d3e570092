"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

import json
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class JobStatus(str, Enum):
    open = "open"
    closed = "closed"


class Verdict(str, Enum):
    accepted = "accepted"
    rejected = "rejected"
    needs_review = "needs_review"


def _json_field(value: Any, default: Any) -> Any:
    """JSON columns come back as text from the database."""
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value


# ============================================================
# CLIENT (RECRUITER) SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=1)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ClientResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None

class AuthResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    user: ClientResponse

class ProfileUpdate(BaseModel):
    # Unknown keys (id, email, password_hash, created_at, ...) are dropped
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1, max_length=200)

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=1)


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company_name: str = Field(..., min_length=1, max_length=200)
    job_description: str = Field(..., min_length=1)
    location: Optional[str] = None
    expires_at: Optional[datetime] = None

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    job_description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = None
    status: Optional[JobStatus] = None
    expires_at: Optional[datetime] = None

class JobMetrics(BaseModel):
    accepted: int = 0
    rejected: int = 0
    needs_review: int = 0
    avg_score: float = 0
    avg_skill_match: float = 0
    avg_experience_match: float = 0
    total: int = 0

class JobResponse(BaseModel):
    id: str
    client_id: str
    title: str
    company_name: str
    job_description: str
    location: Optional[str] = None
    shareable_link: str
    status: JobStatus
    total_applicants: int = 0
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

class JobWithMetrics(JobResponse):
    aiMetrics: JobMetrics = Field(default_factory=JobMetrics)

class JobListResponse(BaseModel):
    data: List[JobWithMetrics]
    page: int
    limit: int
    total: int
    totalPages: int


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationSubmit(BaseModel):
    rawData: Any = None
    resumeFileUrl: Optional[str] = None

class StructuredApplicationResponse(BaseModel):
    id: str
    application_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    skills: List[str] = []
    resume_text: Optional[str] = None
    score: float = 0
    verdict: Verdict
    metrics: Dict[str, Any] = {}
    justification: Optional[str] = None
    parsed_at: Optional[datetime] = None

    @field_validator("skills", mode="before")
    @classmethod
    def load_skills(cls, value):
        return _json_field(value, [])

    @field_validator("metrics", mode="before")
    @classmethod
    def load_metrics(cls, value):
        return _json_field(value, {})

class StructuredApplicationUpdate(BaseModel):
    # id, application_id and parsed_at are not settable
    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None
    email: Optional[str] = None
    skills: Optional[List[str]] = None
    score: Optional[float] = Field(None, ge=0, le=100)
    verdict: Optional[str] = None
    metrics: Optional[Dict[str, Any]] = None
    justification: Optional[str] = None

class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    raw_data: str
    resume_file_url: str
    submitted_at: datetime

class ApplicationDetail(ApplicationResponse):
    structured_applications: Optional[StructuredApplicationResponse] = None

class ApplicationSubmitResponse(BaseModel):
    application: ApplicationResponse

class ApplicationListResponse(BaseModel):
    data: List[ApplicationDetail]
    page: int
    limit: int
    total: int
    totalPages: int


# ============================================================
# RESUME SCHEMAS
# ============================================================

class ResumeUploadResponse(BaseModel):
    file_id: str
    filename: str
    resume_file_url: str


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
