"""
Profile Routes (recruiter)

GET /profile - Get own profile
PUT /profile - Update profile
PUT /profile/password - Change password
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from hiring_api.db.postgres import get_db_session
from hiring_api.core.auth import get_current_client, hash_password, verify_password
from hiring_api.schemas.schemas import ClientResponse, ProfileUpdate, PasswordChange, MessageResponse

router = APIRouter(prefix="/profile", tags=["Profile"])

PROFILE_QUERY = "SELECT id, name, email, created_at FROM clients WHERE id = :id"


def _load_profile(db, client_id: str) -> ClientResponse:
    row = db.execute(text(PROFILE_QUERY), {"id": client_id}).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Client not found")
    return ClientResponse(id=row[0], name=row[1], email=row[2], created_at=row[3])


@router.get("", response_model=ClientResponse)
async def get_profile(client: dict = Depends(get_current_client)):
    """Get current recruiter's profile."""
    with get_db_session() as db:
        return _load_profile(db, client["id"])


@router.put("", response_model=ClientResponse)
async def update_profile(data: ProfileUpdate, client: dict = Depends(get_current_client)):
    """Update profile. Only provided fields are updated; email and id never change here."""
    updates = []
    params = {"id": client["id"], "updated_at": datetime.now(timezone.utc).isoformat()}

    for field in ["name"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE clients SET {', '.join(updates)}, updated_at = :updated_at WHERE id = :id"),
            params
        )
        return _load_profile(db, client["id"])


@router.put("/password", response_model=MessageResponse)
async def change_password(data: PasswordChange, client: dict = Depends(get_current_client)):
    """Change password. The current password must match."""
    with get_db_session() as db:
        result = db.execute(
            text("SELECT password_hash FROM clients WHERE id = :id"),
            {"id": client["id"]}
        )
        row = result.fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Client not found")

        if not verify_password(data.current_password, row[0]):
            raise HTTPException(status_code=401, detail="Invalid current password")

        db.execute(
            text("UPDATE clients SET password_hash = :hash, updated_at = :updated_at WHERE id = :id"),
            {
                "hash": hash_password(data.new_password),
                "updated_at": datetime.now(timezone.utc).isoformat(),
                "id": client["id"]
            }
        )

    return MessageResponse(message="Password updated successfully")
