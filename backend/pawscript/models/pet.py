"""Pet profile model."""

from __future__ import annotations

import enum
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pawscript.core.ids import generate_pet_id
from pawscript.db.base import Base
from pawscript.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from pawscript.models import Client, Discharge


class PetType(str, enum.Enum):
    """Supported species."""

    DOG = "dog"
    CAT = "cat"
    OTHER = "other"


class Pet(TimestampMixin, Base):
    """A patient; every discharge episode points at exactly one pet."""

    __tablename__ = "pets"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    clinic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    external_id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, default=generate_pet_id
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    species: Mapped[PetType] = mapped_column(Enum(PetType), nullable=False)
    breed: Mapped[str | None] = mapped_column(String(120))
    weight: Mapped[str | None] = mapped_column(String(32))
    date_of_birth: Mapped[date | None] = mapped_column(Date())
    microchip_number: Mapped[str | None] = mapped_column(String(64))
    notes: Mapped[str | None] = mapped_column(String(1024))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    client: Mapped["Client"] = relationship("Client", back_populates="pets")
    discharges: Mapped[list["Discharge"]] = relationship(
        "Discharge", back_populates="pet", order_by="Discharge.created_at.desc()"
    )
