"""API router modules."""

from fastapi import APIRouter

from pawscript.core.config import get_settings

from .deps import DEFAULT_RATE_LIMIT, rate_limit
from .v1 import router as api_v1_router

settings = get_settings()

api_router = APIRouter(dependencies=[rate_limit(DEFAULT_RATE_LIMIT)])
api_router.include_router(api_v1_router, prefix=settings.api_v1_prefix)

__all__ = ["api_router"]
