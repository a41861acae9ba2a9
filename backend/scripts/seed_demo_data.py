from __future__ import annotations

import asyncio
import random
from datetime import UTC, datetime, time, timedelta

from sqlalchemy import select

from pawscript.core.config import get_settings
from pawscript.core.security import get_password_hash
from pawscript.db.session import session_scope
from pawscript.models import (
    Client,
    Clinic,
    DoseRecord,
    DoseStatus,
    Pet,
    PetType,
    User,
    UserRole,
    UserStatus,
)
from pawscript.schemas.discharge import DischargeCreate
from pawscript.services.discharge_service import create_discharge

EMAIL = "demo@pawscript.local"
PASSWORD = "demo1234"
CLINIC_SLUG = "pawscript-demo"
DAYS_OF_HISTORY = 14

# (owner first, owner last, pet, species, weight, diagnosis, medications, given ratio)
PATIENTS = [
    (
        "Sarah",
        "Johnson",
        "Bella",
        PetType.DOG,
        "65 lbs",
        "Seasonal allergic dermatitis",
        [{"name": "Apoquel", "dosage": "16mg", "frequency": 1, "times": ["08:00"]}],
        0.96,
    ),
    (
        "Mike",
        "Rodriguez",
        "Max",
        PetType.DOG,
        "85 lbs",
        "Mild congestive heart failure",
        [
            {"name": "Enalapril", "dosage": "10mg", "frequency": 2, "times": ["08:00", "20:00"]},
            {"name": "Gabapentin", "dosage": "100mg", "frequency": 1, "times": ["20:00"]},
        ],
        0.45,
    ),
    (
        "Jennifer",
        "Chen",
        "Luna",
        PetType.CAT,
        "12 lbs",
        "Inflammatory bowel disease flare-up",
        [
            {
                "name": "Prednisone",
                "dosage": "5mg",
                "frequency": 1,
                "times": ["08:00"],
                "is_every_other_day": True,
                "total_doses": 10,
            }
        ],
        0.78,
    ),
]


def _dose_records(discharge, given_ratio: float, rng: random.Random) -> list[DoseRecord]:
    today = datetime.now(UTC).date()
    records = []
    for medication in discharge.medications:
        start = medication.start_date or today
        for offset in range(DAYS_OF_HISTORY):
            day = start + timedelta(days=offset)
            if day >= today:
                break
            if medication.is_every_other_day and offset % 2:
                continue
            for slot in medication.times:
                scheduled = datetime.combine(day, time.fromisoformat(slot), UTC)
                given = rng.random() < given_ratio
                given_at = scheduled + timedelta(minutes=rng.randint(-20, 200)) if given else None
                baseline = 2 if offset > 9 and given_ratio < 0.8 else 4
                appetite = max(1, min(5, baseline + rng.randint(-1, 1)))
                records.append(
                    DoseRecord(
                        discharge_id=discharge.id,
                        medication_id=medication.med_id,
                        medication_name=medication.name,
                        scheduled_time=scheduled,
                        given_at=given_at,
                        status=DoseStatus.GIVEN if given else DoseStatus.MISSED,
                        dosage=medication.dosage or "",
                        frequency=medication.frequency or 1,
                        instructions=medication.instructions,
                        logged_at=given_at or scheduled + timedelta(hours=1),
                        symptom_appetite=appetite,
                        symptom_energy=max(1, appetite - rng.randint(0, 1)),
                        symptom_is_panting=rng.random() < 0.2,
                        symptom_recorded_at=given_at or scheduled,
                    )
                )
    return records


async def main() -> None:
    settings = get_settings()
    rng = random.Random(7)
    async with session_scope(settings.database_url) as session:
        existing = await session.execute(select(User).where(User.email == EMAIL))
        if existing.scalar_one_or_none() is not None:
            print(f"User {EMAIL} already exists")
            return

        clinic = Clinic(name="PawScript Demo Veterinary Clinic", slug=CLINIC_SLUG)
        session.add(clinic)
        await session.flush()
        vet = User(
            clinic_id=clinic.id,
            email=EMAIL,
            hashed_password=get_password_hash(PASSWORD),
            first_name="Demo",
            last_name="Veterinarian",
            role=UserRole.VETERINARIAN,
            status=UserStatus.ACTIVE,
        )
        session.add(vet)
        await session.commit()

        start = datetime.now(UTC).date() - timedelta(days=DAYS_OF_HISTORY)
        for first, last, pet_name, species, weight, diagnosis, meds, ratio in PATIENTS:
            owner = Client(
                clinic_id=clinic.id,
                first_name=first,
                last_name=last,
                email=f"{first.lower()}.{last.lower()}@example.com",
            )
            session.add(owner)
            await session.flush()
            pet = Pet(
                clinic_id=clinic.id,
                client_id=owner.id,
                name=pet_name,
                species=species,
                weight=weight,
            )
            session.add(pet)
            await session.commit()

            payload = DischargeCreate(
                pet_id=pet.id,
                diagnosis=diagnosis,
                medications=[{**med, "start_date": start} for med in meds],
            )
            discharge = await create_discharge(
                session, payload, clinic_id=clinic.id, vet_id=vet.id
            )
            session.add_all(_dose_records(discharge, ratio, rng))
            await session.commit()
            print(f"Seeded {pet_name} ({diagnosis})")

        print(f"Created clinic {CLINIC_SLUG} and veterinarian {EMAIL} / {PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
