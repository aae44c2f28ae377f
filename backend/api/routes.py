"""API routes for the shared board: image uploads and path lookups."""
import os
import random
import time
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from board_engine import find_path, hex_distance, parse_cell_id, path_to_dicts
from .logging_config import get_logger, activity_logger
from .monitoring import track_performance, uploads
from .security import get_client_ip, get_max_upload_bytes, limiter, validate_image_upload

logger = get_logger("routes")

router = APIRouter()

DEFAULT_UPLOAD_DIR = Path(__file__).resolve().parent.parent / "uploads"
UPLOAD_RATE_LIMIT = os.getenv("UPLOAD_RATE_LIMIT", "30/minute")
UPLOAD_CHUNK_BYTES = 1024 * 1024
MAX_PATH_DISTANCE = int(os.getenv("MAX_PATH_DISTANCE", "200"))


def get_upload_dir() -> Path:
    """Directory uploaded images are written to and served from."""
    return Path(os.getenv("UPLOAD_DIR", str(DEFAULT_UPLOAD_DIR)))


def generate_upload_name(kind: str, original_name: Optional[str]) -> str:
    """Unique file name that keeps the original extension."""
    suffix = Path(original_name or "").suffix.lower()
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{kind}-{unique}{suffix}"


class AvatarResponse(BaseModel):
    """Where an uploaded avatar can be fetched."""
    avatarUrl: str


class BackgroundResponse(BaseModel):
    """Where an uploaded background can be fetched."""
    backgroundUrl: str


class PathResponse(BaseModel):
    """Shortest route between two cells."""
    path: List[Dict[str, int]]
    length: int


async def copy_upload(upload: UploadFile, destination: Path, max_bytes: int) -> int:
    """
    Stream an upload to disk in chunks, stopping as soon as it passes max_bytes.

    Returns the number of bytes written. Raises 413 once the ceiling is
    crossed; the caller removes the partial file.
    """
    written = 0
    with destination.open("wb") as out:
        while True:
            chunk = await upload.read(UPLOAD_CHUNK_BYTES)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                logger.warning("upload_rejected", reason="too_large", size=written, max_bytes=max_bytes)
                raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
            out.write(chunk)
    return written


async def store_upload(request: Request, upload: Optional[UploadFile], kind: str) -> str:
    """Validate and save an uploaded image, returning its absolute URL."""
    if upload is None:
        uploads.labels(kind=kind, status="missing").inc()
        raise HTTPException(status_code=400, detail="No file uploaded")

    max_bytes = get_max_upload_bytes()
    upload_dir = get_upload_dir()
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = generate_upload_name(kind, upload.filename)
    destination = upload_dir / filename
    try:
        # The declared size rejects oversized files before any of it is read.
        validate_image_upload(upload.content_type, upload.size, max_bytes)
        size = await copy_upload(upload, destination, max_bytes)
        validate_image_upload(upload.content_type, size, max_bytes)
    except HTTPException:
        destination.unlink(missing_ok=True)
        uploads.labels(kind=kind, status="rejected").inc()
        raise

    uploads.labels(kind=kind, status="stored").inc()
    activity_logger.log_upload(kind, filename, size, get_client_ip(request))
    return str(request.url_for("uploads", path=filename))


@router.post("/avatar", response_model=AvatarResponse)
@limiter.limit(UPLOAD_RATE_LIMIT)
@track_performance
async def upload_avatar(request: Request, avatar: Optional[UploadFile] = File(None)):
    """Upload an avatar image for the join form."""
    url = await store_upload(request, avatar, "avatar")
    return AvatarResponse(avatarUrl=url)


@router.post("/background", response_model=BackgroundResponse)
@limiter.limit(UPLOAD_RATE_LIMIT)
@track_performance
async def upload_background(request: Request, background: Optional[UploadFile] = File(None)):
    """Upload a board background image. Setting it is a separate MJ event."""
    url = await store_upload(request, background, "background")
    return BackgroundResponse(backgroundUrl=url)


@router.get("/path", response_model=PathResponse)
def get_path(start: str, end: str):
    """Shortest route between two "q,r" cells, as the server computes it."""
    try:
        start_cell, end_cell = parse_cell_id(start), parse_cell_id(end)
    except ValueError as e:
        logger.warning("invalid_path_request", start=start, end=end, error=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    distance = hex_distance(start_cell, end_cell)
    if distance > MAX_PATH_DISTANCE:
        logger.warning("path_request_too_far", start=start, end=end, distance=distance)
        raise HTTPException(
            status_code=400,
            detail=f"Cells are {distance} steps apart (max {MAX_PATH_DISTANCE})"
        )

    path = find_path(start_cell, end_cell)
    return PathResponse(path=path_to_dicts(path), length=max(len(path) - 1, 0))
