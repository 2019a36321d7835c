"""File upload endpoint for message attachments.

Handles file upload, validation, and text extraction.
"""

import logging

from fastapi import APIRouter, HTTPException, UploadFile, status

from playground.errors import FileParseError
from playground.models.chat import FileData
from playground.parsing.file_parser import MAX_FILE_SIZE, parse_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


def _validate_filename(filename: str | None) -> str:
    """Validate that an upload carries a filename.

    Raises:
        HTTPException: 400 if the filename is missing.
    """
    if not filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )
    return filename


async def _read_and_validate_size(file: UploadFile) -> bytes:
    """Read file content and validate size.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > MAX_FILE_SIZE:
        size_mb = len(content) / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)",
        )

    return content


@router.post("", response_model=FileData)
async def upload_file(file: UploadFile) -> FileData:
    """Upload an attachment and extract its text.

    Raises:
        400: Missing filename, empty, corrupt or unsupported file.
        413: File exceeds 10MB limit.
    """
    filename = _validate_filename(file.filename)
    content = await _read_and_validate_size(file)

    try:
        file_data = parse_upload(filename, content, file.content_type)
    except FileParseError as e:
        logger.warning(f"File parse error for {filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    logger.info(f"Ingested attachment: {filename} ({file_data.size} bytes)")
    return file_data
