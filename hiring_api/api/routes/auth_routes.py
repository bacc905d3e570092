"""
Authentication Routes

POST /auth/register - Register recruiter and get JWT token
POST /auth/login - Login and get JWT token
"""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from hiring_api.db.postgres import get_db_session
from hiring_api.core.auth import hash_password, verify_password, create_access_token
from hiring_api.schemas.schemas import RegisterRequest, LoginRequest, AuthResponse, ClientResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new recruiter account.

    Returns a token right away; no separate login needed.
    """
    email = request.email.lower()
    client_id = str(uuid.uuid4())
    created_at = datetime.now(timezone.utc).isoformat()

    try:
        with get_db_session() as db:
            # Check email exists
            result = db.execute(
                text("SELECT id FROM clients WHERE email = :email"),
                {"email": email}
            )
            if result.fetchone():
                raise HTTPException(status_code=409, detail="Email already exists")

            db.execute(
                text("""
                    INSERT INTO clients (id, name, email, password_hash, created_at)
                    VALUES (:id, :name, :email, :password_hash, :created_at)
                """),
                {
                    "id": client_id,
                    "name": request.name,
                    "email": email,
                    "password_hash": hash_password(request.password),
                    "created_at": created_at
                }
            )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise HTTPException(status_code=409, detail="Email already exists")

    logger.info("Registered client %s", client_id)
    user = ClientResponse(id=client_id, name=request.name, email=email, created_at=created_at)
    return AuthResponse(token=create_access_token(client_id, email), user=user)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, name, email, password_hash, created_at FROM clients WHERE email = :email"),
            {"email": request.email.lower()}
        )
        row = result.fetchone()

    if not row or not row[3] or not verify_password(request.password, row[3]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    client_id, name, email, _, created_at = row
    user = ClientResponse(id=client_id, name=name, email=email, created_at=created_at)
    return AuthResponse(token=create_access_token(client_id, email), user=user)
