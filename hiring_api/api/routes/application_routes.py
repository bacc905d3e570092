"""
Application Routes

POST /jobs/{shareable_link}/applications - Submit application (public)
GET /applications - List applications on own jobs (recruiter)
GET /applications/{application_id} - Get application with AI result (owner only)
PUT /applications/{application_id} - Manually override the AI result (owner only)
"""

import json
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Depends, Query
from sqlalchemy import bindparam, text

from hiring_api.db.postgres import get_db_session, execute_raw_sql, fetch_one
from hiring_api.core.auth import get_current_client
from hiring_api.api.routes.job_routes import get_job_by_link
from hiring_api.services.scoring_service import score_application_task
from hiring_api.schemas.schemas import (
    ApplicationSubmit, ApplicationResponse, ApplicationSubmitResponse, ApplicationDetail,
    ApplicationListResponse, StructuredApplicationResponse, StructuredApplicationUpdate,
    JobStatus, Verdict
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])

APPLICATION_COLUMNS = "a.id, a.job_id, a.raw_data, a.resume_file_url, a.submitted_at"
STRUCTURED_COLUMNS = """id, application_id, full_name, email, skills, resume_text, score,
    verdict, metrics, justification, parsed_at"""
VERDICTS = {v.value for v in Verdict}


def _is_expired(expires_at) -> bool:
    if not expires_at:
        return False
    if isinstance(expires_at, str):
        expires_at = datetime.fromisoformat(expires_at)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= datetime.now(timezone.utc)


def _structured_for(application_ids: list) -> dict:
    """application_id -> structured row"""
    if not application_ids:
        return {}
    statement = text(
        f"SELECT {STRUCTURED_COLUMNS} FROM structured_applications WHERE application_id IN :ids"
    ).bindparams(bindparam("ids", expanding=True))
    rows = execute_raw_sql(statement, {"ids": list(application_ids)})
    return {r["application_id"]: r for r in rows}


def _detail(application: dict, structured: Optional[dict]) -> ApplicationDetail:
    return ApplicationDetail(
        id=application["id"], job_id=application["job_id"], raw_data=application["raw_data"],
        resume_file_url=application["resume_file_url"], submitted_at=application["submitted_at"],
        structured_applications=StructuredApplicationResponse(**structured) if structured else None
    )


def get_owned_application(application_id: str, client_id: str) -> dict:
    """Application row (with its job's client_id); 404 if missing, 403 if not the caller's."""
    application = fetch_one(
        f"""
        SELECT {APPLICATION_COLUMNS}, j.client_id
        FROM applications a JOIN jobs j ON a.job_id = j.id
        WHERE a.id = :id
        """,
        {"id": application_id}
    )
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    if application["client_id"] != client_id:
        raise HTTPException(status_code=403, detail="Not authorized to view this application")
    return application


@router.post("/jobs/{shareable_link}/applications", response_model=ApplicationSubmitResponse, status_code=201)
async def submit_application(shareable_link: str, submission: ApplicationSubmit, background_tasks: BackgroundTasks):
    """
    Submit an application to a job. Public: no account needed.

    The application is stored right away; AI scoring runs after the response
    is sent and its failures never reach the candidate.
    """
    # Any JSON value counts as form data, even {} or []; only null and "" are missing
    if submission.rawData is None or submission.rawData == "" or not submission.resumeFileUrl:
        raise HTTPException(status_code=400, detail="Missing required fields")

    job = get_job_by_link(shareable_link)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job["status"] != JobStatus.open.value or _is_expired(job["expires_at"]):
        raise HTTPException(status_code=400, detail="Job is not accepting applications")

    raw_data = submission.rawData
    if not isinstance(raw_data, str):
        raw_data = json.dumps(raw_data)

    application = {
        "id": str(uuid.uuid4()),
        "job_id": job["id"],
        "raw_data": raw_data,
        "resume_file_url": submission.resumeFileUrl,
        "submitted_at": datetime.now(timezone.utc).isoformat(),
    }

    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO applications (id, job_id, raw_data, resume_file_url, submitted_at)
                VALUES (:id, :job_id, :raw_data, :resume_file_url, :submitted_at)
            """),
            application
        )
        # Single UPDATE keeps the counter correct under concurrent submissions
        db.execute(
            text("UPDATE jobs SET total_applicants = total_applicants + 1 WHERE id = :jid"),
            {"jid": job["id"]}
        )

    logger.info("Application %s submitted for job %s", application["id"], job["id"])

    background_tasks.add_task(
        score_application_task,
        application["id"],
        {k: job[k] for k in ("id", "title", "company_name", "job_description")},
        submission.resumeFileUrl,
        submission.rawData
    )

    return ApplicationSubmitResponse(application=ApplicationResponse(**application))


@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(
    jobId: Optional[str] = Query(None),
    verdict: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    client: dict = Depends(get_current_client)
):
    """List applications on the recruiter's jobs, newest first, with AI results."""
    if verdict and verdict not in VERDICTS:
        raise HTTPException(status_code=400, detail="Invalid verdict value")

    base = """
        FROM applications a
        JOIN jobs j ON a.job_id = j.id
        LEFT JOIN structured_applications sa ON sa.application_id = a.id
        WHERE j.client_id = :cid
    """
    params = {"cid": client["id"]}
    if jobId:
        base += " AND a.job_id = :job_id"
        params["job_id"] = jobId
    if verdict:
        base += " AND sa.verdict = :verdict"
        params["verdict"] = verdict

    total = fetch_one(f"SELECT COUNT(*) AS total {base}", params)["total"]

    offset = (page - 1) * limit
    applications = execute_raw_sql(
        f"SELECT {APPLICATION_COLUMNS} {base} ORDER BY a.submitted_at DESC LIMIT :limit OFFSET :offset",
        {**params, "limit": limit, "offset": offset}
    )

    structured = _structured_for([a["id"] for a in applications])
    data = [_detail(a, structured.get(a["id"])) for a in applications]

    return ApplicationListResponse(
        data=data, page=page, limit=limit, total=total,
        totalPages=math.ceil(total / limit) if total else 0
    )


@router.get("/applications/{application_id}", response_model=ApplicationDetail)
async def get_application(application_id: str, client: dict = Depends(get_current_client)):
    """Get one application with its AI result (null until scoring finishes)."""
    application = get_owned_application(application_id, client["id"])
    structured = _structured_for([application_id]).get(application_id)
    return _detail(application, structured)


@router.put("/applications/{application_id}", response_model=StructuredApplicationResponse)
async def update_structured_application(
    application_id: str,
    update: StructuredApplicationUpdate,
    client: dict = Depends(get_current_client)
):
    """
    Manually override the AI result for an application.

    id, application_id and parsed_at are ignored if sent.
    """
    get_owned_application(application_id, client["id"])

    fields = update.model_dump(exclude_unset=True, exclude_none=True)
    if "verdict" in fields and fields["verdict"] not in VERDICTS:
        raise HTTPException(status_code=400, detail="Invalid verdict value")
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    for json_field in ("skills", "metrics"):
        if json_field in fields:
            fields[json_field] = json.dumps(fields[json_field])

    assignments = ", ".join(f"{name} = :{name}" for name in fields)
    with get_db_session() as db:
        result = db.execute(
            text(f"UPDATE structured_applications SET {assignments} WHERE application_id = :application_id"),
            {**fields, "application_id": application_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Structured application not found")

    logger.info("Client %s overrode AI result for application %s", client["id"], application_id)
    structured = _structured_for([application_id])[application_id]
    return StructuredApplicationResponse(**structured)
