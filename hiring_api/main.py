"""
Hiring Platform API - Main Application

FastAPI backend with:
- PostgreSQL for clients, jobs, applications and AI results
- MongoDB for resume files (GridFS) and raw AI output
- An OpenAI-compatible LLM for resume scoring
- JWT authentication for recruiters

Run: uvicorn hiring_api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hiring_api import __version__
from hiring_api.api.routes import api_router
from hiring_api.core.config import get_settings
from hiring_api.core.logging_setup import configure_logging
from hiring_api.db.mongodb import init_mongo_indexes
from hiring_api.db.schema import init_schema

settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and Mongo indexes on startup; failures are logged, not fatal."""
    try:
        init_schema()
    except Exception as e:
        logger.error("Database schema initialization failed: %s", e)

    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)

    logger.info("Hiring Platform API ready")
    yield
    logger.info("Hiring Platform API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Hiring Platform API",
    description="""
    Job postings, candidate applications and AI resume scoring.

    ## Features
    - **Authentication**: JWT-based auth for recruiters
    - **Jobs**: Create postings, share them by link, track AI metrics per job
    - **Applications**: Public submission by shareable link, recruiter review and override
    - **Resumes**: PDF/DOCX/TXT upload stored in MongoDB GridFS
    - **AI Scoring**: LLM score (0-100), verdict and justification per application
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware (frontend origins from settings)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: log and return a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = {"detail": "Internal server error"}
    if settings.debug:
        body["error"] = str(exc)
    return JSONResponse(status_code=500, content=body)


@app.get("/", tags=["Health"])
async def root():
    """Service banner."""
    return {"status": "healthy", "app": "Hiring Platform API", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    from hiring_api.db.postgres import check_postgres_connection
    from hiring_api.db.mongodb import check_mongo_connection

    postgres_ok = check_postgres_connection()
    mongo_ok = check_mongo_connection()
    return {
        "status": "healthy" if postgres_ok and mongo_ok else "degraded",
        "postgres": "connected" if postgres_ok else "disconnected",
        "mongodb": "connected" if mongo_ok else "disconnected"
    }
