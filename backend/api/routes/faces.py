"""
Face API routes.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request, Response

from domain.errors import FaceServiceError
from domain.models import EncodedImage
from services.face_service import FaceService
from services.rate_limit import RateLimiter
from settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()
rate_limiter = RateLimiter(settings.REQUESTS_PER_MINUTE)

MIN_SIZE = 8
MAX_SIZE = 256


def parse_scale(size: int) -> Optional[int]:
    """Map a pixel size to a scale exponent: 8 -> 0, 16 -> 1, ... 256 -> 5."""
    if size % 8 != 0 or not MIN_SIZE <= size <= MAX_SIZE:
        return None
    factor = size // 8
    if factor & (factor - 1):
        return None
    return factor.bit_length() - 1


def etag_candidates(header: Optional[str]) -> list:
    """Split an If-None-Match header into bare tags, dropping W/ and quotes."""
    if not header:
        return []
    tags = []
    for part in header.split(","):
        tag = part.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        tag = tag.strip('"')
        if tag:
            tags.append(tag)
    return tags


def not_modified(face: EncodedImage, if_none_match: Optional[str]) -> bool:
    tags = etag_candidates(if_none_match)
    return "*" in tags or any(face.matches(tag) for tag in tags)


def cache_headers(face: EncodedImage) -> dict:
    return {
        "ETag": f'"{face.fingerprint}"',
        "Cache-Control": f"public, max-age={settings.CACHE_MAX_AGE}, stale-while-revalidate",
    }


def _client_key(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.get("/{size}/{player_id}")
async def get_face(
    size: int,
    player_id: uuid.UUID,
    request: Request,
    if_none_match: Optional[str] = Header(default=None),
):
    """Serve a player's face as a size x size PNG."""
    client = _client_key(request)
    logger.debug("receiving face request for %s (%dx%d) from %s", player_id, size, size, client)

    if settings.RATE_LIMIT_ENABLED and not rate_limiter.check(client):
        raise HTTPException(status_code=429, detail="Too many requests")

    scale = parse_scale(size)
    if scale is None:
        raise HTTPException(
            status_code=400,
            detail=f"Size must be 8 times a power of two between {MIN_SIZE} and {MAX_SIZE}",
        )

    service: FaceService = request.app.state.face_service
    try:
        face = await service.get_face(player_id, scale)
    except FaceServiceError as exc:
        logger.error("internal server error for %s: %r", player_id, exc)
        raise HTTPException(status_code=500, detail="Failed to render face")

    headers = cache_headers(face)
    if not_modified(face, if_none_match):
        return Response(status_code=304, headers=headers)
    return Response(content=face.data, media_type=face.content_type, headers=headers)
