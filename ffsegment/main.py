"""FastAPI application entry point."""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ffsegment.api.body_limit import BodySizeLimitMiddleware
from ffsegment.api.routes import health, segments
from ffsegment.core.config.settings import settings
from ffsegment.core.logging import configure_logging
from ffsegment.features.segmentation.service.api import SegmentArchiveService, build_segment_archive_service

logger = logging.getLogger(__name__)


def create_app(service: Optional[SegmentArchiveService] = None) -> FastAPI:
    """Build the FastAPI instance with the segmentation pipeline attached."""
    configure_logging()
    settings.ensure_dirs()

    app = FastAPI(title="ffsegment")
    app.add_middleware(BodySizeLimitMiddleware)
    app.state.segment_service = service or build_segment_archive_service()
    app.include_router(segments.router)
    app.include_router(health.router)
    return app


app = create_app()


def run() -> None:
    """Serve the app on settings.HOST:settings.PORT."""
    logger.debug(f"listening on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
