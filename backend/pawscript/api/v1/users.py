"""Vet user endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from pawscript.api import deps
from pawscript.models.user import User
from pawscript.schemas.user import UserRead

router = APIRouter()


@router.get("/me", response_model=UserRead, summary="Current vet user")
async def read_current_user(
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> UserRead:
    return UserRead.model_validate(current_user)
