"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependency for recruiter-only routes
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from hiring_api.core.config import get_settings
from hiring_api.db.postgres import get_db_session

logger = logging.getLogger(__name__)

settings = get_settings()

RECRUITER_ROLE = "recruiter"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; auto_error off so a missing header is a 401, not a 403
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(client_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token for a recruiter."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode = {
        "sub": client_id,
        "email": email.lower(),
        "role": RECRUITER_ROLE,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("JWT verification failed: %s", e)
        return None


async def get_current_client(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get the authenticated recruiter.

    Usage:
        @router.get("/protected")
        async def route(client: dict = Depends(get_current_client)):
            return client
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    client_id = payload.get("sub")
    if not client_id or not payload.get("email"):
        raise credentials_exception

    # Verify client still exists
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, name, email FROM clients WHERE id = :id"),
            {"id": client_id}
        )
        row = result.fetchone()

    if not row:
        raise credentials_exception

    return {"id": row[0], "name": row[1], "email": row[2]}
