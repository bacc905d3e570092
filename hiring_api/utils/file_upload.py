"""
File Upload Utility - Validate resume uploads and extract their text.

Supported formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx
- Plain Text (.txt)

Upload validation raises HTTPException (it runs inside a request).
Text extraction raises ResumeExtractionError (it runs inside the scoring
pipeline, after the response has gone out).
"""

import io
from typing import Tuple

from docx import Document
from fastapi import UploadFile, HTTPException
from PyPDF2 import PdfReader

from hiring_api.core.config import get_settings

settings = get_settings()

MAX_FILE_SIZE_MB = settings.max_resume_size_mb
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_EXTENSIONS = {'.pdf', '.docx', '.txt'}

CONTENT_TYPES = {
    '.pdf': 'application/pdf',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    '.txt': 'text/plain',
}


class ResumeExtractionError(Exception):
    """Resume bytes could not be turned into text."""


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_resume_upload(file: UploadFile) -> Tuple[bytes, str, str]:
    """
    Read and validate an uploaded resume.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (content, filename, content_type)

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: PDF, DOCX, TXT"
        )

    # One byte past the limit is enough to tell the file is too large
    content = await file.read(MAX_FILE_SIZE_BYTES + 1)

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_FILE_SIZE_MB}MB"
        )
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")

    return content, file.filename, CONTENT_TYPES[ext]


def extract_text(content: bytes, filename: str) -> str:
    """
    Extract text from resume bytes based on the filename's extension.
    Files without a known extension are read as PDF, the default upload type.
    """
    ext = get_file_extension(filename or '')
    if ext == '.docx':
        text = extract_from_docx(content)
    elif ext == '.txt':
        text = extract_from_txt(content)
    else:
        text = extract_from_pdf(content)
    return text.strip()


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return '\n'.join(text_parts)
    except Exception as e:
        raise ResumeExtractionError(f"Error reading PDF: {e}") from e


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes."""
    try:
        doc = Document(io.BytesIO(content))
        text_parts = []

        # Extract paragraphs
        for para in doc.paragraphs:
            if para.text.strip():
                text_parts.append(para.text)

        # Extract tables
        for table in doc.tables:
            for row in table.rows:
                row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_text:
                    text_parts.append(' | '.join(row_text))

        return '\n'.join(text_parts)
    except Exception as e:
        raise ResumeExtractionError(f"Error reading DOCX: {e}") from e


def extract_from_txt(content: bytes) -> str:
    """Extract text from TXT bytes."""
    for encoding in ['utf-8', 'cp1252']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte, so this never fails
    return content.decode('latin-1')


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "supported_formats": [
            {"extension": ".pdf", "available": True, "name": "PDF"},
            {"extension": ".docx", "available": True, "name": "Word Document"},
            {"extension": ".txt", "available": True, "name": "Plain Text"}
        ],
        "max_size_mb": MAX_FILE_SIZE_MB
    }
