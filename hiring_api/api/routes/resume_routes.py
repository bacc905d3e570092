"""
Resume Routes

POST /resumes - Upload resume file (public, candidates)
GET /resumes/formats - Get supported formats
GET /resumes/{file_id} - Download a stored resume (recruiter)
"""

import re
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Response

from hiring_api.core.auth import get_current_client
from hiring_api.services.storage_service import get_resume_storage, resume_url_for, ResumeNotFoundError
from hiring_api.utils.file_upload import read_resume_upload, get_supported_formats
from hiring_api.schemas.schemas import ResumeUploadResponse

router = APIRouter(prefix="/resumes", tags=["Resumes"])


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name plus the UTF-8 name (RFC 5987)."""
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename).strip() or "resume"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.post("", response_model=ResumeUploadResponse, status_code=201)
async def upload_resume(file: UploadFile = File(...)):
    """
    Upload a resume (PDF, DOCX or TXT, max 5MB).

    Send the returned resume_file_url with the application.
    """
    content, filename, content_type = await read_resume_upload(file)
    file_id = get_resume_storage().upload(content, filename, content_type)
    return ResumeUploadResponse(file_id=file_id, filename=filename, resume_file_url=resume_url_for(file_id))


@router.get("/formats")
async def supported_formats():
    """Get supported resume file formats."""
    return get_supported_formats()


@router.get("/{file_id}")
async def download_resume(file_id: str, client: dict = Depends(get_current_client)):
    """Download a stored resume file."""
    try:
        stored = get_resume_storage().download(file_id)
    except ResumeNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")

    return Response(
        content=stored.content,
        media_type=stored.content_type,
        headers={"Content-Disposition": content_disposition(stored.filename)}
    )
