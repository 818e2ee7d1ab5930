"""Attachment upload endpoints.

Files are kept in memory for the lifetime of the process; this service is
a local reference, not durable storage.
"""

import logging
import uuid

from fastapi import APIRouter, HTTPException, Request, Response, UploadFile, status

from chat_widget.models.schemas import UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])

# 10MB limit matches the widget's default per-file cap
MAX_UPLOAD_SIZE = 10 * 1024 * 1024

_stored: dict[str, tuple[str, str, bytes]] = {}


@router.post("", response_model=list[UploadedFile])
async def upload_files(request: Request, files: list[UploadFile]) -> list[UploadedFile]:
    """Store a multipart batch of files.

    Args:
        request: Incoming request, used to build download URLs.
        files: Uploaded files under the shared "files" field.

    Returns:
        One entry per stored file, in upload order.

    Raises:
        400: A file has no name.
        413: A file exceeds the size limit.
    """
    uploaded: list[UploadedFile] = []

    for file in files:
        if not file.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Filename is required",
            )

        content = await file.read()
        if len(content) > MAX_UPLOAD_SIZE:
            size_mb = len(content) / (1024 * 1024)
            raise HTTPException(
                status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                detail=f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)",
            )

        file_id = uuid.uuid4().hex
        mime = file.content_type or "application/octet-stream"
        _stored[file_id] = (file.filename, mime, content)
        uploaded.append(
            UploadedFile(
                name=file.filename,
                url=str(request.url_for("download_file", file_id=file_id)),
                mime=mime,
                size=len(content),
            )
        )

    logger.info(f"Stored {len(uploaded)} uploaded file(s)")
    return uploaded


@router.get("/{file_id}", name="download_file")
async def download_file(file_id: str) -> Response:
    """Return a previously uploaded file."""
    if file_id not in _stored:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    name, mime, content = _stored[file_id]
    return Response(
        content=content,
        media_type=mime,
        headers={"Content-Disposition": f'inline; filename="{name}"'},
    )
