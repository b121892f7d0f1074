"""HTTP route converting an upload into an archive of transcoded segments."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from ffsegment.core.config.settings import settings
from ffsegment.features.archive_packaging.domain.interfaces import PackError
from ffsegment.features.segmentation.domain.errors import SegmentationError, SegmentationTimeout
from ffsegment.features.segmentation.service.api import SegmentArchiveService

from ..uploads import PayloadTooLargeError, UploadError, parse_segmentation_form

router = APIRouter(tags=["ffmpeg"])
logger = logging.getLogger(__name__)

ARCHIVE_MEDIA_TYPE = "application/gzip"
ARCHIVE_FILENAME = "segments.tar.gz"


def get_segment_service(request: Request) -> SegmentArchiveService:
    """Fetch the pipeline facade from application state."""
    try:
        return request.app.state.segment_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - misconfiguration guard
        raise RuntimeError("SegmentArchiveService is not configured") from exc


@router.post("/ffmpeg")
async def post_ffmpeg(
    request: Request,
    service: SegmentArchiveService = Depends(get_segment_service),
) -> Response:
    """Segment and transcode the uploaded file, return the segments as tar.gz."""
    logger.info("Entering POST ffmpeg endpoint.")

    form = await request.form()
    try:
        segmentation_request = await parse_segmentation_form(
            form,
            max_bytes=settings.MAX_UPLOAD_BYTES,
            chunk_size=settings.UPLOAD_CHUNK_BYTES,
        )
    except PayloadTooLargeError as exc:
        logger.warning(f"Upload exceeds {settings.MAX_UPLOAD_BYTES} bytes")
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE) from exc
    except (UploadError, ValueError) as exc:
        logger.warning(f"Rejected upload: {exc}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST) from exc
    finally:
        # Release starlette's spooled copy of the upload
        await form.close()

    try:
        archive = await asyncio.to_thread(service.convert, segmentation_request)
    except SegmentationTimeout as exc:
        logger.error(f"Conversion timed out: {exc}")
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT) from exc
    except (SegmentationError, PackError, OSError) as exc:
        logger.exception(f"Conversion failed: {exc}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

    return Response(
        content=archive,
        media_type=ARCHIVE_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{ARCHIVE_FILENAME}"'},
    )
