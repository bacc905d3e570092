"""
Application Scoring Service - resume -> text -> LLM -> structured_applications.

PIPELINE (runs after the submission response has been sent):
1. Download the resume from storage and extract its text
2. Parse the candidate's raw form data
3. Ask the LLM to score the resume against the job
4. Validate the JSON reply (fall back to a needs_review verdict if unusable)
5. Log the raw reply to MongoDB
6. Insert the structured_applications row

Each step degrades instead of failing: an unreadable resume becomes "",
bad form data becomes {}, an unusable reply becomes the fallback verdict.
Anything else is logged and swallowed; the application itself is already
stored and the recruiter can still score it by hand.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from sqlalchemy import text

from hiring_api.db.postgres import get_db_session
from hiring_api.schemas.schemas import Verdict
from hiring_api.services.llm_client import LLMClient, LLMResponseError, extract_json_object, get_llm_client
from hiring_api.services.mongo_service import AnalysisLogService
from hiring_api.services.storage_service import ResumeStorage, get_resume_storage
from hiring_api.utils.file_upload import extract_text

logger = logging.getLogger(__name__)

FALLBACK_JUSTIFICATION = "AI couldn't read the resume properly."


def _clamp_score(value: Any, low: float = 0.0, high: float = 100.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if number != number:  # NaN
        return low
    return max(low, min(high, number))


def fallback_result(partial: Optional[dict] = None) -> dict:
    """Result stored when the model reply can't be used."""
    extra = ""
    if isinstance(partial, dict) and partial.get("justification"):
        extra = str(partial["justification"])
    return {
        "full_name": "",
        "email": "",
        "skills": [],
        "metrics": {"skill_match": 0, "experience_match": 0},
        "score": 0.0,
        "verdict": Verdict.needs_review.value,
        "justification": f"{FALLBACK_JUSTIFICATION} {extra}".strip(),
    }


def validate_scored_application(data: dict) -> dict:
    """
    Validate and sanitize a parsed model reply.

    full_name, email and a skills list are required; anything missing
    raises LLMResponseError. Other fields are coerced: score clamped to
    0-100, unknown verdicts become needs_review, metrics default to zeros.
    """
    if not isinstance(data, dict):
        raise LLMResponseError("Invalid response structure")
    if not data.get("full_name") or not data.get("email") or not isinstance(data.get("skills"), list):
        raise LLMResponseError("Invalid response structure")

    metrics = data.get("metrics")
    if not isinstance(metrics, dict):
        metrics = {}
    metrics = dict(metrics)
    for key in ("skill_match", "experience_match"):
        metrics[key] = _clamp_score(metrics.get(key, 0))

    verdict = str(data.get("verdict", "")).strip().lower()
    if verdict not in {v.value for v in Verdict}:
        verdict = Verdict.needs_review.value

    return {
        "full_name": str(data["full_name"]).strip(),
        "email": str(data["email"]).strip(),
        "skills": [str(s).strip() for s in data["skills"] if s],
        "metrics": metrics,
        "score": _clamp_score(data.get("score", 0)),
        "verdict": verdict,
        "justification": str(data.get("justification") or "").strip(),
    }


def parse_model_reply(raw_response: str) -> Tuple[dict, bool]:
    """
    Model reply -> (structured result, used_fallback).
    """
    partial = None
    try:
        partial = extract_json_object(raw_response)
        return validate_scored_application(partial), False
    except LLMResponseError as e:
        logger.warning("Failed to parse AI output: %s", e)
        return fallback_result(partial), True


def parse_form_data(raw_data: Any) -> dict:
    """Raw form data arrives as a JSON string or an object."""
    if isinstance(raw_data, dict):
        return raw_data
    try:
        parsed = json.loads(raw_data) if isinstance(raw_data, (str, bytes)) else None
    except ValueError:
        parsed = None
    if not isinstance(parsed, dict):
        logger.warning("Invalid form data format, continuing with empty form")
        return {}
    return parsed


def save_structured_application(application_id: str, structured: dict, resume_text: str) -> dict:
    """Insert the structured_applications row and return it."""
    row = {
        "id": str(uuid.uuid4()),
        "application_id": application_id,
        "full_name": structured["full_name"],
        "email": structured["email"],
        "skills": json.dumps(structured["skills"]),
        "resume_text": resume_text,
        "score": structured["score"],
        "verdict": structured["verdict"],
        "metrics": json.dumps(structured["metrics"]),
        "justification": structured["justification"],
        "parsed_at": datetime.now(timezone.utc).isoformat(),
    }
    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO structured_applications (id, application_id, full_name, email, skills,
                    resume_text, score, verdict, metrics, justification, parsed_at)
                VALUES (:id, :application_id, :full_name, :email, :skills,
                    :resume_text, :score, :verdict, :metrics, :justification, :parsed_at)
            """),
            row
        )
    return row


class ApplicationScoringService:
    """
    Complete scoring workflow for one application.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        storage: Optional[ResumeStorage] = None,
        analysis_log: Optional[AnalysisLogService] = None
    ):
        self.llm_client = llm_client or get_llm_client()
        self.storage = storage or get_resume_storage()
        self.analysis_log = analysis_log if analysis_log is not None else get_analysis_log()

    def load_resume_text(self, resume_file_url: str) -> str:
        """Download + extract; any failure yields empty text."""
        try:
            stored = self.storage.download_by_url(resume_file_url)
            resume_text = extract_text(stored.content, stored.filename)
        except Exception:
            logger.exception("Error in resume processing for %s", resume_file_url)
            return ""

        if not resume_text:
            logger.warning("Extracted resume text is empty (%s)", resume_file_url)
        else:
            logger.info("Extracted resume text, length: %d", len(resume_text))
        return resume_text

    def process(self, application_id: str, job: dict, resume_file_url: str, raw_data: Any) -> Optional[dict]:
        """
        Full scoring pipeline for one application.

        Args:
            application_id: applications.id
            job: row with title, company_name, job_description (and id)
            resume_file_url: URL returned by the resume upload
            raw_data: candidate form data, JSON string or dict

        Returns:
            The saved structured_applications row, or None if the run failed.
        """
        try:
            resume_text = self.load_resume_text(resume_file_url)
            form_data = parse_form_data(raw_data)

            logger.info(
                "Sending application %s (job %s) to AI analysis: resume length %d, form keys %s",
                application_id, job.get("id"), len(resume_text), sorted(form_data.keys())
            )

            raw_response = self.llm_client.score_application(
                resume_text=resume_text,
                job_description=job["job_description"],
                title=job["title"],
                company_name=job["company_name"],
                form_data=form_data
            )
            structured, used_fallback = parse_model_reply(raw_response)
            self._log_analysis(application_id, job.get("id"), raw_response, used_fallback)

            saved = save_structured_application(application_id, structured, resume_text)
            logger.info(
                "Application %s scored: verdict=%s score=%.1f",
                application_id, saved["verdict"], saved["score"]
            )
            return saved
        except Exception:
            logger.exception("AI analysis failed for application %s", application_id)
            return None

    def _log_analysis(self, application_id: str, job_id: Optional[str], raw_response: str, used_fallback: bool):
        if self.analysis_log is None:
            return
        try:
            self.analysis_log.insert(
                application_id=application_id,
                job_id=job_id,
                raw_response=raw_response,
                used_fallback=used_fallback
            )
        except Exception as e:
            logger.warning("Could not record raw AI output for %s: %s", application_id, e)


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

_analysis_log: Optional[AnalysisLogService] = None


def get_analysis_log() -> AnalysisLogService:
    """Get or create the raw AI output log (singleton pattern)"""
    global _analysis_log
    if _analysis_log is None:
        _analysis_log = AnalysisLogService()
    return _analysis_log


def set_analysis_log(log: Optional[AnalysisLogService]) -> None:
    """Replace the log singleton (None resets it)."""
    global _analysis_log
    _analysis_log = log


def get_scoring_service() -> ApplicationScoringService:
    """Get scoring service instance."""
    return ApplicationScoringService()


def score_application_task(application_id: str, job: dict, resume_file_url: str, raw_data: Any) -> None:
    """Background task entry point; never raises."""
    try:
        get_scoring_service().process(application_id, job, resume_file_url, raw_data)
    except Exception:
        logger.exception("Could not start AI analysis for application %s", application_id)
