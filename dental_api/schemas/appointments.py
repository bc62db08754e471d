"""Appointment schemas for request/response validation."""

from datetime import date, datetime, time
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @classmethod
    def parse(cls, value: str) -> "AppointmentStatus":
        """
        Parse a status coming from an API client.

        Accepts the canonical value, the PascalCase member spelling used by
        older clients (``NoShow``) and the legacy Spanish names.

        Raises:
            ValueError: If the value is not a known status
        """
        key = value.strip().lower()
        if key in LEGACY_STATUS_NAMES:
            return LEGACY_STATUS_NAMES[key]

        normalized = key.replace(" ", "_")
        for member in cls:
            if normalized in (member.value, member.value.replace("_", "")):
                return member

        raise ValueError(f"Unknown appointment status: {value}")


# Boundary-only mapping for clients that still send the old Spanish states
LEGACY_STATUS_NAMES: dict[str, AppointmentStatus] = {
    "pendiente": AppointmentStatus.SCHEDULED,
    "confirmada": AppointmentStatus.CONFIRMED,
    "completada": AppointmentStatus.COMPLETED,
    "cancelada": AppointmentStatus.CANCELLED,
}


class AppointmentBase(BaseModel):
    """Fields shared by create and update requests."""

    model_config = ConfigDict(populate_by_name=True)

    patient_id: UUID = Field(..., alias="pacienteId")
    practitioner_id: UUID = Field(..., alias="usuarioId")
    appointment_date: date = Field(..., alias="appointmentDate")
    start_time: time = Field(..., alias="startTime")
    duration_minutes: int = Field(default=30, gt=0, le=480, alias="duracionMinutos")
    reason: str = Field(..., min_length=1, max_length=500, alias="motivo")
    notes: str | None = Field(None, max_length=1000, alias="observaciones")

    @model_validator(mode="before")
    @classmethod
    def split_fecha_hora(cls, data: Any) -> Any:
        """Accept the combined ``fechaHora`` datetime sent by older clients."""
        if isinstance(data, dict) and data.get("fechaHora"):
            fecha_hora = data["fechaHora"]
            if isinstance(fecha_hora, str):
                fecha_hora = datetime.fromisoformat(fecha_hora)
            elif not isinstance(fecha_hora, datetime):
                raise ValueError("fechaHora must be an ISO 8601 datetime")
            data = {**data}
            data.setdefault("appointmentDate", fecha_hora.date())
            data.setdefault("startTime", fecha_hora.time())
        return data

    @field_validator("start_time")
    @classmethod
    def drop_time_zone(cls, v: time) -> time:
        """Appointment times are clinic-local wall-clock times."""
        return v.replace(tzinfo=None)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        """Reject whitespace-only reasons."""
        v = v.strip()
        if not v:
            raise ValueError("Reason is required")
        return v


class AppointmentCreate(AppointmentBase):
    """Schema for booking a new appointment."""

    @field_validator("appointment_date")
    @classmethod
    def validate_not_in_past(cls, v: date) -> date:
        """Bookings are only accepted for today or a future date."""
        if v < date.today():
            raise ValueError("Appointment date must be today or later")
        return v


class AppointmentUpdate(AppointmentBase):
    """Schema for rescheduling or editing an appointment (full replacement)."""


class AppointmentCancel(BaseModel):
    """Optional body for cancelling an appointment."""

    model_config = ConfigDict(populate_by_name=True)

    reason: str | None = Field(None, max_length=500, alias="motivo")


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    patient_id: UUID = Field(..., alias="pacienteId")
    patient_name: str = Field(default="", alias="pacienteNombre")
    practitioner_id: UUID = Field(..., alias="usuarioId")
    practitioner_name: str = Field(default="", alias="usuarioNombre")
    appointment_date: date = Field(..., alias="appointmentDate")
    start_time: time = Field(..., alias="startTime")
    end_time: time = Field(..., alias="endTime")
    duration_minutes: int = Field(..., alias="duracionMinutos")
    status: AppointmentStatus = Field(..., alias="estado")
    reason: str = Field(..., alias="motivo")
    notes: str | None = Field(None, alias="observaciones")
    notification_sent: bool = Field(default=False, alias="notificationSent")
    reminder_sent: bool = Field(default=False, alias="reminderSent")
    cancellation_reason: str | None = Field(None, alias="cancellationReason")
    cancelled_at: datetime | None = Field(None, alias="cancelledAt")
    created_at: datetime = Field(..., alias="fechaCreacion")
    updated_at: datetime | None = Field(None, alias="updatedAt")

    @computed_field(alias="fechaHora")  # type: ignore[prop-decorator]
    @property
    def starts_at(self) -> datetime:
        """Start of the appointment as one local datetime."""
        return datetime.combine(self.appointment_date, self.start_time)


class StatusChangeResponse(BaseModel):
    """Acknowledgement for confirm / cancel / complete transitions."""

    message: str
    status: AppointmentStatus = Field(..., serialization_alias="estado")
