from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.config import MAX_FILE_SIZE
from app.core.exceptions import ClientInputError, NotFoundError, UploaderError, error_response
from app.core.registry import FileRegistry
from app.models import FileRecord
from app.services.cloudinary_storage import CloudinaryStorage

router = APIRouter(prefix="/api")

logger = logging.getLogger("media_uploader")

MAX_FILE_SIZE_MB = MAX_FILE_SIZE / (1024 * 1024)
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def get_registry(request: Request) -> FileRegistry:
    return request.app.state.registry


def get_storage(request: Request) -> CloudinaryStorage:
    return request.app.state.storage


@router.get("/files")
async def list_files(registry: FileRegistry = Depends(get_registry)):
    files, stats = registry.list()
    return {
        "success": True,
        "files": [record.to_dict() for record in files],
        "stats": stats.to_dict(),
    }


def _reject_oversized(filename: str, size_bytes: int) -> None:
    logger.warning(
        "event=upload_rejected reason=max_size filename=%s size_bytes=%s limit_bytes=%s",
        filename,
        size_bytes,
        MAX_FILE_SIZE,
    )
    raise ClientInputError(f"File too large. Maximum allowed size is {MAX_FILE_SIZE_MB:.1f} MB.")


@router.post("/upload")
async def upload(
    file: Optional[UploadFile] = File(None),
    registry: FileRegistry = Depends(get_registry),
    storage: CloudinaryStorage = Depends(get_storage),
):
    if file is None:
        raise ClientInputError("No file uploaded")

    filename = file.filename or "file"
    content_type = file.content_type or DEFAULT_CONTENT_TYPE
    try:
        # The multipart parser has already spooled the part and knows its size;
        # the bounded read covers parts whose size was not reported.
        reported_size = getattr(file, "size", None)
        if reported_size is not None and reported_size > MAX_FILE_SIZE:
            _reject_oversized(filename, reported_size)
        data = await file.read(MAX_FILE_SIZE + 1)
        size_bytes = len(data)
        if size_bytes > MAX_FILE_SIZE:
            _reject_oversized(filename, size_bytes)

        result = await run_in_threadpool(storage.upload, data, filename, content_type)
        record = FileRecord.from_upload(result, filename, content_type, size_bytes)
    except UploaderError:
        raise
    except Exception as exc:
        logger.exception("event=upload_error filename=%s", filename)
        return error_response(500, "Server error", str(exc))

    stats = registry.insert(record)
    logger.info(
        "event=upload_success file_id=%s size_bytes=%s content_type=%s resource_type=%s",
        record.id,
        record.size,
        record.type,
        record.resource_type,
    )
    return {
        "success": True,
        "message": "File uploaded successfully",
        "file": record.to_dict(),
        "stats": stats.to_dict(),
    }


# Provider ids carry their folder ("uploads/abc"), so the id may contain slashes.
@router.delete("/files/{file_id:path}")
async def delete_file(
    file_id: str,
    registry: FileRegistry = Depends(get_registry),
    storage: CloudinaryStorage = Depends(get_storage),
):
    record = registry.get(file_id)
    if record is None:
        raise NotFoundError("File not found")

    try:
        await run_in_threadpool(storage.destroy, file_id, record.resource_type or "image")
    except UploaderError:
        raise
    except Exception as exc:
        logger.exception("event=delete_failure file_id=%s", file_id)
        return error_response(500, "Delete failed", str(exc))

    stats = registry.remove(file_id)
    logger.info("event=delete_success file_id=%s", file_id)
    return {
        "success": True,
        "message": "File deleted successfully",
        "stats": stats.to_dict(),
    }


@router.get("/stats")
async def stats_snapshot(registry: FileRegistry = Depends(get_registry)):
    return {"success": True, "stats": registry.stats().to_dict()}


@router.get("/health")
async def health(storage: CloudinaryStorage = Depends(get_storage)):
    return {
        "success": True,
        "message": "Server is running",
        "cloudinaryConfigured": storage.configured,
    }
