"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from typing import Optional, TextIO

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import faces
from services.face_service import FaceService
from settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Attach a root handler (unless one exists) and apply FACES_LOG_LEVEL to our loggers."""
    level = level or settings.LOG_LEVEL
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream)
    for name in ("api", "services", "domain"):
        logging.getLogger(name).setLevel(level)


configure_logging()

logger = logging.getLogger(__name__)


# Create app
app = FastAPI(
    title="Skin Faces API",
    description="Renders player faces from skin atlases",
    version="0.1.0",
)

# Faces are embedded from arbitrary sites
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

# Include routers
app.include_router(faces.router, prefix="/face", tags=["faces"])


@app.on_event("startup")
async def startup_event():
    """Load default skins and start the cache housekeeping task."""
    service = FaceService.create()
    service.start_housekeeping()
    app.state.face_service = service
    logger.info(
        "face service ready (raw cache %d, encoded cache %d, clear every %ss)",
        service.caches.raw_faces.capacity,
        service.caches.faces.capacity,
        service.clear_interval,
    )


@app.on_event("shutdown")
async def shutdown_event():
    service = getattr(app.state, "face_service", None)
    if service is not None:
        await service.stop_housekeeping()


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
