"""
Security utilities: client identification, HTTPS enforcement and upload checks.
"""
import os
from typing import Optional
from fastapi import Request, HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from .logging_config import get_logger

logger = get_logger("security")

DEFAULT_MAX_UPLOAD_MB = 50

# Rate limiting - using in-memory storage, one board per process
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def get_max_upload_bytes() -> int:
    """Upload size ceiling in bytes, from MAX_UPLOAD_MB."""
    return int(float(os.getenv("MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB)) * 1024 * 1024)


def get_client_ip(request: Request) -> str:
    """Get client IP address from request."""
    # Check for forwarded IP (from proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Fallback to direct client IP
    if request.client:
        return request.client.host

    return "unknown"


def require_https(request: Request):
    """Check if request is over HTTPS (in production)."""
    # In development, allow HTTP
    environment = os.getenv("ENVIRONMENT", "development")

    if environment == "production":
        # Check if request is secure
        is_secure = (
            request.url.scheme == "https" or
            request.headers.get("X-Forwarded-Proto") == "https" or
            request.headers.get("X-Forwarded-Ssl") == "on"
        )

        if not is_secure:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="HTTPS is required in production"
            )


def validate_image_upload(content_type: Optional[str], size: Optional[int], max_bytes: Optional[int] = None):
    """
    Reject anything that is not a non-empty image under the size ceiling.

    A size of None means the size is not known yet and only the type is checked.
    """
    if max_bytes is None:
        max_bytes = get_max_upload_bytes()

    if not content_type or not content_type.startswith("image/"):
        logger.warning("upload_rejected", reason="not_an_image", content_type=content_type)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only images allowed"
        )
    if size is None:
        return
    if size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded"
        )
    if size > max_bytes:
        logger.warning("upload_rejected", reason="too_large", size=size, max_bytes=max_bytes)
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {max_bytes} bytes)"
        )
