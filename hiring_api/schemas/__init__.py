"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in hiring_api.schemas.schemas:
- Enums (JobStatus, Verdict)
- Request schemas (what the API accepts)
- Response schemas (what the API returns)
"""
