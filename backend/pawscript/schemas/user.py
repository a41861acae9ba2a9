"""Vet user schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pawscript.models.user import UserRole, UserStatus


class UserBase(BaseModel):
    """Shared user fields."""

    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole = Field(default=UserRole.VETERINARIAN)


class UserCreate(UserBase):
    """Payload for creating a user."""

    password: str = Field(min_length=8)
    clinic_id: uuid.UUID
    status: UserStatus = UserStatus.ACTIVE


class UserRead(UserBase):
    """Serialized user response."""

    id: uuid.UUID
    clinic_id: uuid.UUID
    status: UserStatus

    model_config = ConfigDict(from_attributes=True)
