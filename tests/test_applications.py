import json
from datetime import datetime, timedelta, timezone

from conftest import JOB_PAYLOAD, submit


def test_submit_application_scores_in_background(client, job, resume_url, auth_headers, fake_llm, analysis_collection):
    resp = submit(client, job, resume_url)
    assert resp.status_code == 201
    application = resp.json()["application"]
    assert application["job_id"] == job["id"]
    assert application["resume_file_url"] == resume_url

    # The LLM saw the resume text, the job and the form answers
    call = fake_llm.calls[0]
    assert "Ada Lovelace" in call["resume_text"]
    assert call["title"] == JOB_PAYLOAD["title"]
    assert call["company_name"] == JOB_PAYLOAD["company_name"]
    assert call["form_data"]["email"] == "ada@example.com"

    detail = client.get(f"/api/applications/{application['id']}", headers=auth_headers).json()
    structured = detail["structured_applications"]
    assert structured["verdict"] == "accepted"
    assert structured["score"] == 82
    assert structured["skills"] == ["Python", "SQL"]
    assert structured["metrics"]["skill_match"] == 80
    assert "Python, SQL" in structured["resume_text"]

    assert len(analysis_collection.docs) == 1
    assert analysis_collection.docs[0]["application_id"] == application["id"]
    assert analysis_collection.docs[0]["used_fallback"] is False


def test_submit_increments_applicant_count(client, job, resume_url):
    submit(client, job, resume_url)
    submit(client, job, resume_url)
    public = client.get(f"/api/jobs/{job['shareable_link']}").json()
    assert public["total_applicants"] == 2


def test_submit_missing_fields(client, job):
    resp = client.post(f"/api/jobs/{job['shareable_link']}/applications", json={"rawData": "{}"})
    assert resp.status_code == 400


def test_submit_empty_raw_data_values(client, job):
    url = f"/api/jobs/{job['shareable_link']}/applications"
    assert client.post(url, json={"rawData": "", "resumeFileUrl": "/api/resumes/x"}).status_code == 400
    assert client.post(url, json={"rawData": None, "resumeFileUrl": "/api/resumes/x"}).status_code == 400
    assert client.post(url, json={"rawData": {"a": 1}, "resumeFileUrl": ""}).status_code == 400


def test_submit_accepts_empty_object_raw_data(client, job, resume_url, fake_llm):
    resp = client.post(
        f"/api/jobs/{job['shareable_link']}/applications",
        json={"rawData": {}, "resumeFileUrl": resume_url},
    )
    assert resp.status_code == 201
    assert resp.json()["application"]["raw_data"] == "{}"
    assert fake_llm.calls[0]["form_data"] == {}


def test_submit_non_object_raw_data_scores_with_empty_form(client, job, resume_url, fake_llm):
    for raw_data in ([1, 2], 5):
        resp = client.post(
            f"/api/jobs/{job['shareable_link']}/applications",
            json={"rawData": raw_data, "resumeFileUrl": resume_url},
        )
        assert resp.status_code == 201
        assert json.loads(resp.json()["application"]["raw_data"]) == raw_data

    assert [call["form_data"] for call in fake_llm.calls] == [{}, {}]


def test_submit_unknown_job(client, resume_url):
    resp = client.post(
        "/api/jobs/job-missing/applications",
        json={"rawData": "{\"a\": 1}", "resumeFileUrl": resume_url},
    )
    assert resp.status_code == 404


def test_submit_to_closed_job(client, job, resume_url, auth_headers):
    client.put(f"/api/jobs/{job['id']}", json={"status": "closed"}, headers=auth_headers)
    resp = submit(client, job, resume_url)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Job is not accepting applications"


def test_submit_to_expired_job(client, auth_headers, resume_url):
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    job = client.post("/api/jobs", json=dict(JOB_PAYLOAD, expires_at=past), headers=auth_headers).json()
    assert submit(client, job, resume_url).status_code == 400


def test_ai_failure_still_returns_success(client, job, resume_url, auth_headers, fake_llm):
    fake_llm.error = RuntimeError("provider down")
    resp = submit(client, job, resume_url)
    assert resp.status_code == 201

    application_id = resp.json()["application"]["id"]
    detail = client.get(f"/api/applications/{application_id}", headers=auth_headers).json()
    assert detail["structured_applications"] is None


def test_unusable_ai_reply_falls_back_to_needs_review(client, job, resume_url, auth_headers, fake_llm, analysis_collection):
    fake_llm.reply = "Sorry, I can't help with that."
    application_id = submit(client, job, resume_url).json()["application"]["id"]

    structured = client.get(f"/api/applications/{application_id}", headers=auth_headers).json()["structured_applications"]
    assert structured["verdict"] == "needs_review"
    assert structured["score"] == 0
    assert structured["justification"].startswith("AI couldn't read the resume properly.")
    assert analysis_collection.docs[0]["used_fallback"] is True


def test_missing_resume_is_scored_with_empty_text(client, job, auth_headers, fake_llm):
    resp = submit(client, job, "/api/resumes/64b7f0c2a1b2c3d4e5f60718")
    assert resp.status_code == 201
    assert fake_llm.calls[0]["resume_text"] == ""


def test_get_application_ownership(client, job, resume_url, other_headers):
    application_id = submit(client, job, resume_url).json()["application"]["id"]
    assert client.get(f"/api/applications/{application_id}", headers=other_headers).status_code == 403


def test_get_unknown_application(client, auth_headers):
    assert client.get("/api/applications/nope", headers=auth_headers).status_code == 404


def test_list_applications_filters(client, auth_headers, job, resume_url, fake_llm):
    submit(client, job, resume_url)
    fake_llm.reply = json.dumps({
        "full_name": "Bob", "email": "bob@example.com", "skills": [],
        "metrics": {"skill_match": 10, "experience_match": 5},
        "score": 12, "verdict": "rejected", "justification": "No overlap.",
    })
    submit(client, job, resume_url)

    other_job = client.post("/api/jobs", json=JOB_PAYLOAD, headers=auth_headers).json()
    submit(client, other_job, resume_url)

    everything = client.get("/api/applications", headers=auth_headers).json()
    assert everything["total"] == 3

    by_job = client.get(f"/api/applications?jobId={job['id']}", headers=auth_headers).json()
    assert by_job["total"] == 2

    rejected = client.get("/api/applications?verdict=rejected", headers=auth_headers).json()
    assert rejected["total"] == 2
    assert all(a["structured_applications"]["verdict"] == "rejected" for a in rejected["data"])

    paged = client.get("/api/applications?page=2&limit=2", headers=auth_headers).json()
    assert paged["totalPages"] == 2
    assert len(paged["data"]) == 1

    assert client.get("/api/applications?verdict=maybe", headers=auth_headers).status_code == 400


def test_list_applications_only_own_jobs(client, job, resume_url, other_headers):
    submit(client, job, resume_url)
    listing = client.get("/api/applications", headers=other_headers).json()
    assert listing["total"] == 0


def test_manual_override(client, job, resume_url, auth_headers):
    application_id = submit(client, job, resume_url).json()["application"]["id"]

    resp = client.put(
        f"/api/applications/{application_id}",
        json={"verdict": "rejected", "score": 40, "id": "x", "application_id": "y", "parsed_at": "z"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["verdict"] == "rejected"
    assert body["score"] == 40
    assert body["application_id"] == application_id
    assert body["full_name"] == "Ada Lovelace"


def test_manual_override_validation(client, job, resume_url, auth_headers, other_headers):
    application_id = submit(client, job, resume_url).json()["application"]["id"]

    bad = client.put(f"/api/applications/{application_id}", json={"verdict": "hired"}, headers=auth_headers)
    assert bad.status_code == 400

    empty = client.put(f"/api/applications/{application_id}", json={"id": "x"}, headers=auth_headers)
    assert empty.status_code == 400

    foreign = client.put(f"/api/applications/{application_id}", json={"verdict": "accepted"}, headers=other_headers)
    assert foreign.status_code == 403


def test_manual_override_before_scoring(client, job, resume_url, auth_headers, fake_llm):
    fake_llm.error = RuntimeError("provider down")
    application_id = submit(client, job, resume_url).json()["application"]["id"]
    resp = client.put(f"/api/applications/{application_id}", json={"verdict": "accepted"}, headers=auth_headers)
    assert resp.status_code == 404
