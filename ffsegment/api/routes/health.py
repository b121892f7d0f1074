"""Liveness probe."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health")
async def get_health() -> Response:
    logger.debug("Entering GET health endpoint.")
    return Response(status_code=status.HTTP_200_OK)
