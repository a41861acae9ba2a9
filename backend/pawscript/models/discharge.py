"""Discharge episode, prescribed medication and taper stage models."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pawscript.core.ids import generate_med_id
from pawscript.db.base import Base
from pawscript.models.mixins import TimestampMixin
from pawscript.models.pet import PetType

if TYPE_CHECKING:
    from pawscript.models import DoseRecord, Pet, User


class Discharge(TimestampMixin, Base):
    """One prescribing visit for one pet.

    The pet descriptor (name, species, weight) is snapshotted at discharge
    time; identity across visits comes from ``pet_id``.
    """

    __tablename__ = "discharges"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    clinic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vet_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    pet_name: Mapped[str] = mapped_column(String(120), nullable=False)
    pet_species: Mapped[PetType] = mapped_column(Enum(PetType), nullable=False)
    pet_weight: Mapped[str | None] = mapped_column(String(32))
    diagnosis: Mapped[str | None] = mapped_column(String(512))
    notes: Mapped[str | None] = mapped_column(String(4096))
    visit_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    pet: Mapped["Pet"] = relationship("Pet", back_populates="discharges")
    vet: Mapped["User | None"] = relationship("User")
    medications: Mapped[list["DischargeMedication"]] = relationship(
        "DischargeMedication",
        back_populates="discharge",
        cascade="all, delete-orphan",
        order_by="DischargeMedication.position",
    )
    dose_records: Mapped[list["DoseRecord"]] = relationship(
        "DoseRecord", back_populates="discharge", cascade="all, delete-orphan"
    )


class DischargeMedication(Base):
    """A drug prescribed within a discharge, on a simple or tapered schedule."""

    __tablename__ = "discharge_medications"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    discharge_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("discharges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    med_id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, default=generate_med_id
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_tapered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    dosage: Mapped[str | None] = mapped_column(String(120))
    frequency: Mapped[float | None] = mapped_column(Float)
    times: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    start_date: Mapped[date | None] = mapped_column(Date())
    end_date: Mapped[date | None] = mapped_column(Date())
    total_doses: Mapped[int | None] = mapped_column(Integer)
    is_every_other_day: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    instructions: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    allow_client_to_adjust_time: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    discharge: Mapped["Discharge"] = relationship(
        "Discharge", back_populates="medications"
    )
    taper_stages: Mapped[list["TaperStage"]] = relationship(
        "TaperStage",
        back_populates="medication",
        cascade="all, delete-orphan",
        order_by="TaperStage.position",
    )


class TaperStage(Base):
    """One step of a step-down dosing schedule."""

    __tablename__ = "taper_stages"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    medication_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("discharge_medications.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date: Mapped[date] = mapped_column(Date(), nullable=False)
    dosage: Mapped[str] = mapped_column(String(120), nullable=False)
    frequency: Mapped[float] = mapped_column(Float, nullable=False)
    times: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    total_doses: Mapped[int | None] = mapped_column(Integer)
    is_every_other_day: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    medication: Mapped["DischargeMedication"] = relationship(
        "DischargeMedication", back_populates="taper_stages"
    )
