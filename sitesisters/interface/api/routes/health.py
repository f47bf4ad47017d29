"""Health check routes."""

import time
from datetime import datetime, timezone

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from sitesisters.config import Settings
from sitesisters.domain.service import JWTService
from sitesisters.interface.api.session import read_session_token

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    version: str
    git_sha: str


class AuthHealthResponse(BaseModel):
    """Session debugging information."""

    ok: bool
    has_session: bool
    user_id: str | None = None
    timestamp: datetime
    latency_ms: float


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: FromDishka[Settings]) -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        Health status indicating the service is running
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="0.1.0",
        git_sha=settings.git_sha,
    )


@router.get("/health/auth", response_model=AuthHealthResponse)
async def auth_health_check(
    request: Request,
    response: Response,
    jwt_service: FromDishka[JWTService],
    settings: FromDishka[Settings],
) -> AuthHealthResponse:
    """Report whether the request carries a valid session.

    Useful for checking that auth cookies reach the API.

    Returns:
        Session status for the caller
    """
    started = time.perf_counter()
    user_id = jwt_service.get_user_id_from_token(
        read_session_token(request, settings.auth)
    )
    response.headers["Cache-Control"] = "no-store, max-age=0"
    return AuthHealthResponse(
        ok=True,
        has_session=user_id is not None,
        user_id=str(user_id) if user_id else None,
        timestamp=datetime.now(timezone.utc),
        latency_ms=(time.perf_counter() - started) * 1000,
    )
