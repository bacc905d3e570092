"""
Hiring Platform API
Recruiters post jobs, candidates apply through a shareable link, an LLM scores each application.

Architecture:
- PostgreSQL: Structured data (clients, jobs, applications, structured_applications)
- MongoDB: Resume files (GridFS) and raw AI output
- LLM (OpenAI-compatible): Resume scoring only
"""

__version__ = "1.0.0"
