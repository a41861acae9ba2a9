"""SQL-backed dose record and discharge stores."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from pawscript.db.session import get_sessionmaker
from pawscript.models import (
    Client,
    Clinic,
    Discharge,
    DischargeMedication,
    DoseRecord,
    DoseStatus,
    Pet,
    PetType,
)
from pawscript.repositories import SqlDischargeStore, SqlDoseRecordStore
from pawscript.services import adherence_service

pytestmark = pytest.mark.asyncio

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


async def _seed(session) -> tuple[Clinic, Pet, Discharge]:
    clinic = Clinic(name="Store Clinic", slug=f"store-{uuid.uuid4().hex[:6]}")
    session.add(clinic)
    await session.flush()

    client = Client(clinic_id=clinic.id, first_name="Jordan", last_name="Owner")
    session.add(client)
    await session.flush()

    pet = Pet(clinic_id=clinic.id, client_id=client.id, name="Luna", species=PetType.CAT)
    session.add(pet)
    await session.flush()

    discharge = Discharge(
        clinic_id=clinic.id,
        pet_id=pet.id,
        pet_name=pet.name,
        pet_species=pet.species,
        medications=[DischargeMedication(name="Onsior", dosage="6mg", frequency=1, times=["08:00"])],
    )
    session.add(discharge)
    await session.flush()
    return clinic, pet, discharge


async def test_dose_records_are_returned_most_recent_first(
    reset_database: None, db_url: str
) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        _, _, discharge = await _seed(session)
        for hours_ago in (30, 6, 54, 200):
            scheduled = NOW - timedelta(hours=hours_ago)
            session.add(
                DoseRecord(
                    discharge_id=discharge.id,
                    medication_name="Onsior",
                    scheduled_time=scheduled,
                    given_at=scheduled + timedelta(minutes=5),
                    status=DoseStatus.GIVEN,
                    logged_at=scheduled + timedelta(minutes=6),
                    symptom_appetite=4,
                    symptom_energy=3,
                    symptom_is_panting=False,
                    symptom_recorded_at=scheduled,
                )
            )
        await session.commit()

        store = SqlDoseRecordStore(session, fetch_limit=3)
        records = await store.list_for_discharge(
            discharge.id, since=NOW - timedelta(days=5), until=NOW
        )

    assert [r.scheduled_time for r in records] == [
        NOW - timedelta(hours=6),
        NOW - timedelta(hours=30),
        NOW - timedelta(hours=54),
    ]
    assert records[0].scheduled_time.tzinfo is not None
    assert records[0].symptoms is not None
    assert records[0].symptoms.appetite == 4


async def test_fetch_limit_caps_requested_limit(reset_database: None, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        _, _, discharge = await _seed(session)
        for hours_ago in range(5):
            session.add(
                DoseRecord(
                    discharge_id=discharge.id,
                    medication_name="Onsior",
                    scheduled_time=NOW - timedelta(hours=hours_ago),
                    status=DoseStatus.MISSED,
                    logged_at=NOW,
                )
            )
        await session.commit()

        store = SqlDoseRecordStore(session, fetch_limit=2)
        assert len(await store.list_for_discharge(discharge.id, limit=50)) == 2
        assert len(await store.list_for_discharge(discharge.id, limit=1)) == 1


async def test_discharge_store_is_scoped_to_clinic(reset_database: None, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        clinic, pet, discharge = await _seed(session)
        other_clinic, _, _ = await _seed(session)
        await session.commit()

        store = SqlDischargeStore(session)
        by_pet = await store.list_for_pet(pet.id, clinic_id=clinic.id)
        by_clinic = await store.list_for_clinic(clinic.id)
        foreign = await store.list_for_pet(pet.id, clinic_id=other_clinic.id)

    assert [d.id for d in by_pet] == [discharge.id]
    assert [d.id for d in by_clinic] == [discharge.id]
    assert by_clinic[0].pet.client.first_name == "Jordan"
    assert by_clinic[0].medications[0].med_id.startswith("med_")
    assert foreign == []


async def test_out_of_range_symptoms_are_dropped(reset_database: None, db_url: str) -> None:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        _, _, discharge = await _seed(session)
        scheduled = NOW - timedelta(hours=3)
        session.add(
            DoseRecord(
                discharge_id=discharge.id,
                medication_name="Onsior",
                scheduled_time=scheduled,
                given_at=scheduled,
                status=DoseStatus.GIVEN,
                logged_at=scheduled,
                symptom_appetite=0,
                symptom_energy=3,
                symptom_is_panting=False,
                symptom_recorded_at=scheduled,
            )
        )
        await session.commit()

        store = SqlDoseRecordStore(session)
        [record] = await store.list_for_discharge(discharge.id)
        metrics = await adherence_service.get_adherence_metrics(
            store, discharge.id, now=NOW
        )

    assert record.symptoms is None
    assert metrics.data_status == "ok"
    assert metrics.overall.given_doses == 1
