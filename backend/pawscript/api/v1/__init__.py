"""Versioned API router."""

from fastapi import APIRouter

from . import (
    auth,
    clients,
    discharges,
    health,
    medication_templates,
    patients,
    pets,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(clients.router, prefix="/clients", tags=["clients"])
router.include_router(pets.router, prefix="/pets", tags=["pets"])
router.include_router(discharges.router, prefix="/discharges", tags=["discharges"])
router.include_router(patients.router, prefix="/patients", tags=["patients"])
router.include_router(
    medication_templates.router,
    prefix="/medication-templates",
    tags=["medication-templates"],
)
