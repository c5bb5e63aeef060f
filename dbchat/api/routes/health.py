"""
Health Check Routes

FastAPI endpoint for service liveness.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status

from dbchat.models.api import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Returns 200 OK if the service is running.

    Returns:
        HealthResponse with status and version
    """
    return HealthResponse(
        status="healthy",
        version="0.1.0",
        timestamp=datetime.now(UTC).isoformat(),
    )
