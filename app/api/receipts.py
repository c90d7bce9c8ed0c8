"""Session endpoints: submit receipts and read the processing log."""

from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.api.dependencies import get_session, get_settings
from app.config.settings import Settings
from app.dashboard.session import ReceiptSession
from app.processor.models import UploadedFile

router = APIRouter(prefix="/receipts", tags=["receipts"])


async def _to_uploaded_file(upload: UploadFile, max_bytes: int) -> UploadedFile:
    # validation rejects these on size alone; the body is left unread
    if upload.size is not None and upload.size > max_bytes:
        content = b""
    else:
        content = await upload.read()
    return UploadedFile(
        name=upload.filename or "receipt",
        content=content,
        media_type=upload.content_type or "",
        size=upload.size if upload.size is not None else len(content),
    )


@router.post("", status_code=202)
async def submit_receipts(
    files: list[UploadFile] = File(...),
    session: ReceiptSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Queue receipt images for analysis. Invalid files are logged and skipped."""
    uploaded = [
        await _to_uploaded_file(upload, settings.max_upload_bytes) for upload in files
    ]
    submission = session.submit(uploaded)
    return {"accepted": submission.accepted, "rejected": submission.rejected}


@router.get("/logs")
async def list_logs(session: ReceiptSession = Depends(get_session)) -> dict[str, Any]:
    return {"logs": [entry.to_dict() for entry in session.log.entries()]}


@router.get("/status")
async def processing_status(session: ReceiptSession = Depends(get_session)) -> dict[str, Any]:
    return session.status()


@router.delete("/{index}")
async def remove_upload(
    index: int,
    session: ReceiptSession = Depends(get_session),
) -> dict[str, Any]:
    try:
        removed = session.remove(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"removed": removed, "uploads": list(session.uploads)}
