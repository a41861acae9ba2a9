"""Dose record model written by the companion mobile app."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pawscript.db.base import Base
from pawscript.models.mixins import CreatedAtMixin

if TYPE_CHECKING:
    from pawscript.models import Discharge


class DoseStatus(str, enum.Enum):
    """Outcome of a scheduled administration."""

    GIVEN = "given"
    MISSED = "missed"
    SKIPPED = "skipped"


class DoseRecord(CreatedAtMixin, Base):
    """One scheduled administration event; append-only.

    The optional ``symptom_*`` columns hold the owner's symptom check-in that
    the app attaches to a dose log.
    """

    __tablename__ = "dose_records"

    __table_args__ = (
        Index("ix_dose_records_discharge_scheduled", "discharge_id", "scheduled_time"),
        CheckConstraint(
            "(status = 'GIVEN' AND given_at IS NOT NULL)"
            " OR (status != 'GIVEN' AND given_at IS NULL)",
            name="given_at_matches_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    discharge_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("discharges.id", ondelete="CASCADE"), nullable=False
    )
    medication_id: Mapped[str | None] = mapped_column(String(64))
    medication_name: Mapped[str] = mapped_column(String(255), nullable=False)
    scheduled_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    given_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[DoseStatus] = mapped_column(Enum(DoseStatus), nullable=False)
    dosage: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    frequency: Mapped[float] = mapped_column(Float, nullable=False, default=1)
    instructions: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    symptom_appetite: Mapped[int | None] = mapped_column(Integer)
    symptom_energy: Mapped[int | None] = mapped_column(Integer)
    symptom_is_panting: Mapped[bool | None] = mapped_column(Boolean)
    symptom_notes: Mapped[str | None] = mapped_column(String(1024))
    symptom_recorded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

    discharge: Mapped["Discharge"] = relationship(
        "Discharge", back_populates="dose_records"
    )
