"""Authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.api.deps import LOGIN_RATE_LIMIT, get_db_session, rate_limit
from pawscript.schemas.auth import Token
from pawscript.services import audit_service
from pawscript.services.auth_service import (
    authenticate_user,
    create_access_token_for_user,
)

router = APIRouter()

_LOGIN_RATE_DEP = rate_limit(LOGIN_RATE_LIMIT)


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[_LOGIN_RATE_DEP],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> Token:
    """Validate vet credentials and issue a bearer token."""
    user = await authenticate_user(
        session, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token_for_user(user)
    await audit_service.record_event(
        session,
        clinic_id=user.clinic_id,
        user_id=user.id,
        event_type="auth.login",
        description="Successful login",
        payload={"user_id": str(user.id), "email": user.email},
        ip_address=_client_ip(request),
    )
    return Token(access_token=access_token)
