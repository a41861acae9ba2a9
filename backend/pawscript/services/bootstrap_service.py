"""Bootstrap helpers for a first clinic and admin login."""

from __future__ import annotations

import logging
import re

from sqlalchemy import select

from pawscript.core.config import get_settings
from pawscript.db.session import session_scope
from pawscript.models import Clinic, User, UserRole, UserStatus
from pawscript.schemas.user import UserCreate
from pawscript.services.user_service import create_user

logger = logging.getLogger(__name__)

DEFAULT_CLINIC_NAME = "PawScript Demo Clinic"
DEFAULT_ADMIN_FIRST = "Clinic"
DEFAULT_ADMIN_LAST = "Admin"


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "clinic"


async def ensure_default_admin() -> User | None:
    """Create the configured admin (and a clinic for it) when missing.

    Does nothing unless ``DEFAULT_ADMIN_EMAIL`` and ``DEFAULT_ADMIN_PASSWORD``
    are set.
    """
    settings = get_settings()
    if not settings.default_admin_email or not settings.default_admin_password:
        return None

    async with session_scope(settings.database_url) as session:
        existing = await session.execute(
            select(User).where(User.email == settings.default_admin_email.lower())
        )
        user = existing.scalar_one_or_none()
        if user is not None:
            return user

        clinic_result = await session.execute(
            select(Clinic).order_by(Clinic.created_at.asc()).limit(1)
        )
        clinic = clinic_result.scalar_one_or_none()
        if clinic is None:
            name = settings.default_clinic_name or DEFAULT_CLINIC_NAME
            clinic = Clinic(name=name, slug=slugify(name))
            session.add(clinic)
            await session.commit()
            await session.refresh(clinic)

        payload = UserCreate(
            clinic_id=clinic.id,
            email=settings.default_admin_email,
            password=settings.default_admin_password,
            first_name=DEFAULT_ADMIN_FIRST,
            last_name=DEFAULT_ADMIN_LAST,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
        )
        user = await create_user(session, payload)
        logger.info("Created default admin for clinic %s", clinic.slug)
        return user
