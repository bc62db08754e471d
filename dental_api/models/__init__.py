"""Database models."""

from dental_api.models.appointments import appointments
from dental_api.models.base import metadata
from dental_api.models.patients import patients
from dental_api.models.schedule_configs import schedule_configs
from dental_api.models.tenants import tenants
from dental_api.models.users import users

__all__ = [
    "appointments",
    "metadata",
    "patients",
    "schedule_configs",
    "tenants",
    "users",
]
