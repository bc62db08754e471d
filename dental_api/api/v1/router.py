"""API v1 router configuration."""

from fastapi import APIRouter

from dental_api.api.v1.endpoints import (
    appointments,
    auth,
    health,
    patients,
    public,
    schedule_config,
    users,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(appointments.router, prefix="/citas", tags=["Appointments"])
api_router.include_router(
    schedule_config.router, prefix="/scheduleconfig", tags=["Schedule Configuration"]
)
api_router.include_router(patients.router, prefix="/pacientes", tags=["Patients"])
api_router.include_router(users.router, prefix="/usuarios", tags=["Staff"])
api_router.include_router(public.router, prefix="/public", tags=["Public"])
