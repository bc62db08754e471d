"""Working-hours configuration schemas."""

from datetime import time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ScheduleConfigUpsertItem(BaseModel):
    """Working hours for one day of the week."""

    model_config = ConfigDict(populate_by_name=True)

    day_of_week: int = Field(..., ge=0, le=6, alias="dayOfWeek", description="0 = Sunday")
    is_working_day: bool = Field(..., alias="isWorkingDay")
    morning_start_time: time | None = Field(None, alias="morningStartTime")
    morning_end_time: time | None = Field(None, alias="morningEndTime")
    afternoon_start_time: time | None = Field(None, alias="afternoonStartTime")
    afternoon_end_time: time | None = Field(None, alias="afternoonEndTime")
    appointment_duration: int = Field(default=30, gt=0, le=480, alias="appointmentDuration")

    @field_validator(
        "morning_start_time",
        "morning_end_time",
        "afternoon_start_time",
        "afternoon_end_time",
    )
    @classmethod
    def drop_time_zone(cls, v: time | None) -> time | None:
        """Working hours are clinic-local wall-clock times."""
        return v.replace(tzinfo=None) if v is not None else None

    @model_validator(mode="after")
    def validate_windows(self) -> "ScheduleConfigUpsertItem":
        """Check window shape; non-working days carry no windows."""
        if not self.is_working_day:
            self.morning_start_time = None
            self.morning_end_time = None
            self.afternoon_start_time = None
            self.afternoon_end_time = None
            return self

        morning = (self.morning_start_time, self.morning_end_time)
        afternoon = (self.afternoon_start_time, self.afternoon_end_time)

        for label, (start, end) in (("morning", morning), ("afternoon", afternoon)):
            if (start is None) != (end is None):
                raise ValueError(f"The {label} window needs both a start and an end time")
            if start is not None and end is not None and start >= end:
                raise ValueError(f"The {label} window must start before it ends")

        if morning[0] is None and afternoon[0] is None:
            raise ValueError("A working day needs a morning or an afternoon window")

        if morning[1] is not None and afternoon[0] is not None and morning[1] > afternoon[0]:
            raise ValueError("The morning window must end before the afternoon window starts")

        return self


class UpsertScheduleConfigRequest(BaseModel):
    """Bulk replace-by-day request for one practitioner or the whole clinic."""

    model_config = ConfigDict(populate_by_name=True)

    practitioner_id: UUID | None = Field(
        None,
        alias="usuarioId",
        description="Null for the clinic-wide default schedule",
    )
    configurations: list[ScheduleConfigUpsertItem] = Field(..., min_length=1, max_length=7)

    @field_validator("configurations")
    @classmethod
    def validate_unique_days(
        cls, v: list[ScheduleConfigUpsertItem]
    ) -> list[ScheduleConfigUpsertItem]:
        """Each day may appear only once per request."""
        days = [item.day_of_week for item in v]
        if len(days) != len(set(days)):
            raise ValueError("Each dayOfWeek may appear only once")
        return v


class ScheduleConfigResponse(BaseModel):
    """Stored working-hours row."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    practitioner_id: UUID | None = Field(None, alias="usuarioId")
    day_of_week: int = Field(..., alias="dayOfWeek")
    is_working_day: bool = Field(..., alias="isWorkingDay")
    morning_start_time: time | None = Field(None, alias="morningStartTime")
    morning_end_time: time | None = Field(None, alias="morningEndTime")
    afternoon_start_time: time | None = Field(None, alias="afternoonStartTime")
    afternoon_end_time: time | None = Field(None, alias="afternoonEndTime")
    appointment_duration: int = Field(..., alias="appointmentDuration")
    is_active: bool = Field(..., alias="isActive")


class WorkHoursResponse(BaseModel):
    """Consolidated clinic opening window."""

    model_config = ConfigDict(populate_by_name=True)

    work_day_start: str = Field(..., alias="workDayStart", examples=["09:00"])
    work_day_end: str = Field(..., alias="workDayEnd", examples=["18:00"])


class ScheduleUpsertResponse(BaseModel):
    """Result of a bulk working-hours replacement."""

    message: str
    configurations: list[ScheduleConfigResponse]
