"""
LLM API Client

Any OpenAI-compatible chat completion endpoint works (OpenAI, DeepSeek,
Gemini's OpenAI endpoint, a local vLLM...), so we use the openai library
and point base_url at the provider.

The model gets one job: read a resume against a job posting and answer
with a single JSON object (candidate fields, metrics, score, verdict,
justification). Temperature defaults to 0 for repeatable scoring.
"""
import json
import logging
import re
from typing import Optional

from openai import OpenAI
from hiring_api.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

SCORING_PROMPT = """You are an expert AI assistant for hiring.
Analyze the following resume text and extract structured information about the candidate.
Then you must provide a score from 0-100, a verdict, and justification for the verdict based on how well the candidate matches the job description.
The job is for a position at {company_name} titled "{title}". The job description is as follows: {job_description}
Your output MUST be valid JSON with these keys:
{{
  "full_name": string,
  "email": string,
  "skills": string[],
  "metrics": {{ "skill_match": number, "experience_match": number, "other_relevant_metrics": any }},
  "score": number,
  "verdict": "accepted" | "rejected" | "needs_review",
  "justification": string
}}
"score" is a 0-100 ranking; "skill_match" and "experience_match" are 0-100 as well.
Be concise, accurate, realistic, and consistent.
If the resume text is empty, reflect that in your analysis.

Application form answers: {form_data}

Resume Text: \"\"\"{resume_text}\"\"\"
"""


class LLMResponseError(ValueError):
    """Model reply did not contain a JSON object."""


def extract_json_object(text: str) -> dict:
    """
    Pull the first {...} block out of a model reply.
    Handles replies wrapped in markdown code fences or surrounded by prose.
    """
    match = JSON_OBJECT_RE.search(text or "")
    if not match:
        raise LLMResponseError("No JSON found in response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Malformed JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise LLMResponseError("Response JSON is not an object")
    return data


def build_scoring_prompt(
    resume_text: str,
    job_description: str,
    title: str,
    company_name: str,
    form_data: Optional[dict] = None
) -> str:
    return SCORING_PROMPT.format(
        company_name=company_name,
        title=title,
        job_description=job_description,
        form_data=json.dumps(form_data or {}, ensure_ascii=False, default=str),
        resume_text=resume_text,
    )


class LLMClient:
    """
    Wrapper for the chat completion API.
    """

    def __init__(self):
        self.client = OpenAI(
            api_key=settings.llm_api_key or "missing-key",
            base_url=settings.llm_base_url
        )
        self.model = settings.llm_model

    def _call_api(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        """
        Internal method to call the LLM.
        Returns raw text response.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens or settings.llm_max_tokens,
            temperature=settings.llm_temperature
        )
        return response.choices[0].message.content or ""

    def score_application(
        self,
        resume_text: str,
        job_description: str,
        title: str,
        company_name: str,
        form_data: Optional[dict] = None
    ) -> str:
        """
        Ask the model to score a resume against a job.
        Returns the raw reply; parsing and validation live in the scoring service.
        """
        prompt = build_scoring_prompt(resume_text, job_description, title, company_name, form_data)
        return self._call_api(prompt)

    def test_connection(self) -> bool:
        """Test if the LLM endpoint is reachable"""
        try:
            response = self._call_api("Reply with exactly: OK", max_tokens=10)
            return "OK" in response.upper()
        except Exception as e:
            logger.warning("LLM connection failed: %s", e)
            return False


# Singleton instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client (singleton pattern)"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def set_llm_client(client: Optional[LLMClient]) -> None:
    """Replace the client singleton (None resets it)."""
    global _llm_client
    _llm_client = client
