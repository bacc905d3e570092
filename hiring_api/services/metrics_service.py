"""
Job AI Metrics - per-job aggregates over structured_applications.

For every job: verdict counts, average score, average skill/experience
match and the number of scored applications. Jobs with nothing scored get
all zeros.
"""

import json
from collections import defaultdict
from typing import Dict, Iterable, List

from sqlalchemy import bindparam, text

from hiring_api.db.postgres import execute_raw_sql
from hiring_api.schemas.schemas import JobMetrics, Verdict


def _metric(metrics, key: str) -> float:
    if isinstance(metrics, str):
        try:
            metrics = json.loads(metrics)
        except ValueError:
            return 0.0
    if not isinstance(metrics, dict):
        return 0.0
    try:
        return float(metrics.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


def compute_job_metrics(rows: Iterable[dict]) -> JobMetrics:
    """
    Aggregate structured rows (verdict, score, metrics) for one job.
    """
    rows = list(rows)
    total = len(rows)
    if total == 0:
        return JobMetrics()

    counts = {v.value: 0 for v in Verdict}
    for row in rows:
        if row["verdict"] in counts:
            counts[row["verdict"]] += 1

    return JobMetrics(
        accepted=counts[Verdict.accepted.value],
        rejected=counts[Verdict.rejected.value],
        needs_review=counts[Verdict.needs_review.value],
        avg_score=round(sum(float(r["score"] or 0) for r in rows) / total, 2),
        avg_skill_match=round(sum(_metric(r["metrics"], "skill_match") for r in rows) / total, 2),
        avg_experience_match=round(sum(_metric(r["metrics"], "experience_match") for r in rows) / total, 2),
        total=total,
    )


def get_job_ai_metrics(job_ids: List[str]) -> Dict[str, JobMetrics]:
    """Metrics for each job id; every requested id is present in the result."""
    if not job_ids:
        return {}

    statement = text("""
        SELECT a.job_id, sa.verdict, sa.score, sa.metrics
        FROM structured_applications sa
        JOIN applications a ON sa.application_id = a.id
        WHERE a.job_id IN :job_ids
    """).bindparams(bindparam("job_ids", expanding=True))

    grouped = defaultdict(list)
    for row in execute_raw_sql(statement, {"job_ids": list(job_ids)}):
        grouped[row["job_id"]].append(row)

    return {job_id: compute_job_metrics(grouped.get(job_id, [])) for job_id in job_ids}
