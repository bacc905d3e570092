import pytest

from hiring_api.services.llm_client import LLMResponseError, build_scoring_prompt, extract_json_object
from hiring_api.services.scoring_service import (
    fallback_result,
    parse_form_data,
    parse_model_reply,
    validate_scored_application,
)

from conftest import GOOD_REPLY


VALID = {
    "full_name": "Ada Lovelace",
    "email": "ada@example.com",
    "skills": ["Python", "", "SQL"],
    "metrics": {"skill_match": 80, "experience_match": 70, "leadership": "high"},
    "score": 82,
    "verdict": "accepted",
    "justification": "Strong match.",
}


def test_extract_json_from_fenced_reply():
    data = extract_json_object(GOOD_REPLY)
    assert data["full_name"] == "Ada Lovelace"


def test_extract_json_from_prose():
    data = extract_json_object('Here you go: {"a": {"b": 1}} hope that helps')
    assert data == {"a": {"b": 1}}


@pytest.mark.parametrize("reply", ["", "no json here", "{not: valid}", None])
def test_extract_json_rejects_garbage(reply):
    with pytest.raises(LLMResponseError):
        extract_json_object(reply)


def test_validate_keeps_good_reply():
    result = validate_scored_application(VALID)
    assert result["skills"] == ["Python", "SQL"]
    assert result["score"] == 82.0
    assert result["verdict"] == "accepted"
    assert result["metrics"]["leadership"] == "high"


def test_validate_clamps_and_normalizes():
    result = validate_scored_application(dict(VALID, score=140, verdict="Maybe", metrics={"skill_match": -3}))
    assert result["score"] == 100.0
    assert result["verdict"] == "needs_review"
    assert result["metrics"] == {"skill_match": 0.0, "experience_match": 0.0}


def test_validate_uppercase_verdict():
    assert validate_scored_application(dict(VALID, verdict="REJECTED"))["verdict"] == "rejected"


@pytest.mark.parametrize("missing", ["full_name", "email", "skills"])
def test_validate_requires_candidate_fields(missing):
    data = dict(VALID)
    data.pop(missing)
    with pytest.raises(LLMResponseError):
        validate_scored_application(data)


def test_parse_model_reply_fallback_keeps_justification():
    result, used_fallback = parse_model_reply('{"justification": "Resume was blank."}')
    assert used_fallback is True
    assert result["verdict"] == "needs_review"
    assert result["score"] == 0
    assert result["justification"] == "AI couldn't read the resume properly. Resume was blank."


def test_fallback_shape():
    assert fallback_result() == {
        "full_name": "",
        "email": "",
        "skills": [],
        "metrics": {"skill_match": 0, "experience_match": 0},
        "score": 0.0,
        "verdict": "needs_review",
        "justification": "AI couldn't read the resume properly.",
    }


def test_parse_form_data():
    assert parse_form_data('{"name": "Ada"}') == {"name": "Ada"}
    assert parse_form_data({"name": "Ada"}) == {"name": "Ada"}
    assert parse_form_data("not json") == {}
    assert parse_form_data("[1, 2]") == {}
    assert parse_form_data(None) == {}


def test_prompt_mentions_job_and_resume():
    prompt = build_scoring_prompt("I write Python.", "Need Python devs", "Dev", "Acme", {"years": 4})
    assert 'titled "Dev"' in prompt
    assert "position at Acme" in prompt
    assert "Need Python devs" in prompt
    assert "I write Python." in prompt
    assert '"years": 4' in prompt
