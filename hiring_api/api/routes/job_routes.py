"""
Job Routes

POST /jobs - Create job posting (recruiter)
GET /jobs - List own jobs with AI metrics (recruiter)
GET /jobs/{shareable_link} - Get job by shareable link (public)
PUT /jobs/{job_id} - Update job (owner only)
DELETE /jobs/{job_id} - Delete job (owner only)
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query, Response
from sqlalchemy import text

from hiring_api.db.postgres import get_db_session, execute_raw_sql, fetch_one
from hiring_api.core.auth import get_current_client
from hiring_api.services.metrics_service import get_job_ai_metrics
from hiring_api.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobWithMetrics, JobListResponse, JobStatus, JobMetrics
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOB_COLUMNS = """id, client_id, title, company_name, job_description, location, shareable_link,
    status, total_applicants, expires_at, created_at, updated_at"""


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def shareable_link_for(job_id: str) -> str:
    return f"job-{job_id}"


def get_job_by_link(shareable_link: str) -> Optional[dict]:
    return fetch_one(f"SELECT {JOB_COLUMNS} FROM jobs WHERE shareable_link = :link", {"link": shareable_link})


def get_owned_job(job_id: str, client_id: str) -> dict:
    """Job row owned by client_id, else 404."""
    job = fetch_one(
        f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = :jid AND client_id = :cid",
        {"jid": job_id, "cid": client_id}
    )
    if not job:
        raise HTTPException(status_code=404, detail="Job not found or access denied")
    return job


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, client: dict = Depends(get_current_client)):
    """Create a new job posting owned by the current recruiter."""
    job_id = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()

    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO jobs (id, client_id, title, company_name, job_description, location,
                    shareable_link, status, total_applicants, expires_at, created_at, updated_at)
                VALUES (:id, :client_id, :title, :company_name, :job_description, :location,
                    :link, :status, 0, :expires_at, :created_at, :created_at)
            """),
            {
                "id": job_id, "client_id": client["id"], "title": job.title,
                "company_name": job.company_name, "job_description": job.job_description,
                "location": job.location, "link": shareable_link_for(job_id),
                "status": JobStatus.open.value, "expires_at": _iso(job.expires_at), "created_at": now
            }
        )

    logger.info("Client %s created job %s", client["id"], job_id)
    return JobResponse(**get_owned_job(job_id, client["id"]))


@router.get("", response_model=JobListResponse)
async def list_jobs(
    status: Optional[JobStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    client: dict = Depends(get_current_client)
):
    """List the recruiter's jobs, newest first, each with aggregated AI metrics."""
    where = " WHERE client_id = :cid"
    params = {"cid": client["id"]}
    if status:
        where += " AND status = :status"
        params["status"] = status.value

    total = fetch_one(f"SELECT COUNT(*) AS total FROM jobs{where}", params)["total"]

    offset = (page - 1) * limit
    jobs = execute_raw_sql(
        f"SELECT {JOB_COLUMNS} FROM jobs{where} ORDER BY created_at DESC LIMIT :limit OFFSET :offset",
        {**params, "limit": limit, "offset": offset}
    )

    metrics = get_job_ai_metrics([j["id"] for j in jobs])
    data = [JobWithMetrics(**j, aiMetrics=metrics.get(j["id"], JobMetrics())) for j in jobs]

    return JobListResponse(
        data=data, page=page, limit=limit, total=total,
        totalPages=math.ceil(total / limit) if total else 0
    )


@router.get("/{shareable_link}", response_model=JobResponse)
async def get_job(shareable_link: str):
    """Get a job posting by its shareable link. Public: candidates land here."""
    job = get_job_by_link(shareable_link)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse(**job)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: str, update: JobUpdate, client: dict = Depends(get_current_client)):
    """Update a job posting. Only the owning recruiter can update."""
    get_owned_job(job_id, client["id"])

    # exclude_unset: an explicit null clears location/expires_at, an omitted field is left alone
    fields = update.model_dump(exclude_unset=True)
    for required in ("title", "company_name", "job_description", "status"):
        if required in fields and fields[required] is None:
            raise HTTPException(status_code=400, detail=f"{required} cannot be null")
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    if "status" in fields:
        fields["status"] = fields["status"].value
    if fields.get("expires_at") is not None:
        fields["expires_at"] = _iso(fields["expires_at"])

    assignments = ", ".join(f"{name} = :{name}" for name in fields)
    with get_db_session() as db:
        db.execute(
            text(f"UPDATE jobs SET {assignments}, updated_at = :updated_at WHERE id = :jid"),
            {**fields, "jid": job_id, "updated_at": datetime.now(timezone.utc).isoformat()}
        )

    return JobResponse(**get_owned_job(job_id, client["id"]))


@router.delete("/{job_id}", status_code=204, response_class=Response)
async def delete_job(job_id: str, client: dict = Depends(get_current_client)):
    """Delete a job posting. Cascades to applications."""
    with get_db_session() as db:
        # Children first: SQLite only cascades with foreign_keys on
        db.execute(
            text("""
                DELETE FROM structured_applications WHERE application_id IN (
                    SELECT a.id FROM applications a JOIN jobs j ON a.job_id = j.id
                    WHERE j.id = :jid AND j.client_id = :cid)
            """),
            {"jid": job_id, "cid": client["id"]}
        )
        db.execute(
            text("""
                DELETE FROM applications WHERE job_id IN (
                    SELECT id FROM jobs WHERE id = :jid AND client_id = :cid)
            """),
            {"jid": job_id, "cid": client["id"]}
        )
        result = db.execute(
            text("DELETE FROM jobs WHERE id = :jid AND client_id = :cid"),
            {"jid": job_id, "cid": client["id"]}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Job not found or access denied")

    logger.info("Client %s deleted job %s", client["id"], job_id)
    return Response(status_code=204)
