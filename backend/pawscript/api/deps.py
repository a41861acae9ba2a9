"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pawscript.core.config import get_settings
from pawscript.core.security import decode_access_token
from pawscript.db.session import get_session
from pawscript.models.user import User, UserRole, UserStatus
from pawscript.repositories import SqlDischargeStore, SqlDoseRecordStore

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")

PRESCRIBER_ROLES = frozenset({UserRole.ADMIN, UserRole.VETERINARIAN})


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """Authenticate request via bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise credentials_exception from exc

    subject = payload.get("sub")
    if subject is None:
        raise credentials_exception

    try:
        user_id = uuid.UUID(subject)
    except (ValueError, TypeError) as exc:
        raise credentials_exception from exc

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or user.status != UserStatus.ACTIVE:
        raise credentials_exception
    if str(user.clinic_id) != payload.get("clinic"):
        raise credentials_exception
    return user


async def get_current_prescriber(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Only veterinarians and clinic admins may author discharges."""
    if current_user.role not in PRESCRIBER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )
    return current_user


async def get_dose_record_store(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> SqlDoseRecordStore:
    return SqlDoseRecordStore(
        session, fetch_limit=get_settings().dose_record_fetch_limit
    )


async def get_discharge_store(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> SqlDischargeStore:
    return SqlDischargeStore(session)


_SECONDS_PER_UNIT = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"10/minute"`` into ``(times, seconds)``."""
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    seconds = _SECONDS_PER_UNIT.get(window_str.strip().lower(), fallback[1])
    return count, seconds


def rate_limit(limit: tuple[int, int]):
    async def _dependency(request: Request, response: Response) -> None:
        # limiter is best effort; skipped when redis never came up
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


DEFAULT_RATE_LIMIT = parse_rate(settings.rate_limit_default, fallback=(100, 60))
LOGIN_RATE_LIMIT = parse_rate(settings.rate_limit_login, fallback=(10, 60))
