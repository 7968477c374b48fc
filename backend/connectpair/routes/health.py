"""
ConnectPair Backend: Health Check Route
========================================

What:  Liveness endpoint for load balancers and uptime monitors.
How:   Answers 200 with the current server time as long as the process is
       serving requests. It is excluded from rate limiting and access logs.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from connectpair.schemas.responses import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))
