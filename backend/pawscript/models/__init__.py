"""ORM models package export."""

from pawscript.models.audit_event import AuditEvent
from pawscript.models.client import Client
from pawscript.models.clinic import Clinic
from pawscript.models.discharge import Discharge, DischargeMedication, TaperStage
from pawscript.models.dose_record import DoseRecord, DoseStatus
from pawscript.models.pet import Pet, PetType
from pawscript.models.user import User, UserRole, UserStatus

__all__ = [
    "AuditEvent",
    "Client",
    "Clinic",
    "Discharge",
    "DischargeMedication",
    "DoseRecord",
    "DoseStatus",
    "Pet",
    "PetType",
    "TaperStage",
    "User",
    "UserRole",
    "UserStatus",
]
