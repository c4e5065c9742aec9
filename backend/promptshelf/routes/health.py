"""
PromptShelf Backend: Health Check Route
=========================================

What:  Liveness/readiness probe for Docker health checks and load balancers.
How:   Runs SELECT 1 against the database. GitHub is not probed: that would
       spend API rate limit on every probe.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)

Not protected by the API key.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from promptshelf import __version__
from promptshelf.database import Database
from promptshelf.dependencies import get_database
from promptshelf.schemas.prompt import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(database: Database = Depends(get_database)):
    """Reports database connectivity and process uptime."""
    connected = await database.ping()
    health = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not connected:
        logger.warning("Health check: database unreachable")
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
