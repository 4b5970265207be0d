"""Operational liveness/readiness endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from useradmin.api.deps import ReadSessionDep, SettingsDep
from useradmin.common.problem_details import ApiError
from useradmin.common.schema import BaseSchema
from useradmin.common.time import utc_now

router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseSchema):
    status: str
    version: str
    timestamp: str


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service liveness probe",
)
def read_liveness(settings: SettingsDep) -> HealthCheckResponse:
    """Return liveness status without touching the database."""

    return HealthCheckResponse(
        status="ok",
        version=settings.app_version,
        timestamp=utc_now().isoformat(),
    )


@router.get(
    "/ready",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service readiness probe",
)
def read_readiness(settings: SettingsDep, db: ReadSessionDep) -> HealthCheckResponse:
    """Return readiness status after checking the database."""

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise ApiError(
            error_type="service_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc

    return HealthCheckResponse(
        status="ok",
        version=settings.app_version,
        timestamp=utc_now().isoformat(),
    )


__all__ = ["router"]
