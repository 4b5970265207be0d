"""Aggregate router for the v1 API."""

from __future__ import annotations

from fastapi import APIRouter

from useradmin.features.health.router import router as health_router
from useradmin.features.users.router import router as users_router


def create_api_router() -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(health_router)
    api_router.include_router(users_router)
    return api_router


__all__ = ["create_api_router"]
