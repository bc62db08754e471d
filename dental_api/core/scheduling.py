"""Scheduling primitives shared by the appointment and working-hours services.

Everything here is pure: no database access, no clock reads. Intervals are
half-open ``[start, end)`` on a single calendar date in clinic-local time.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from dental_api.schemas.appointments import AppointmentStatus


@dataclass(frozen=True)
class TimeWindow:
    """Opening window within one day."""

    start: time
    end: time


@dataclass(frozen=True)
class DayPlan:
    """Bookable windows and slot length for one date."""

    windows: tuple[TimeWindow, ...]
    slot_minutes: int

    @property
    def is_closed(self) -> bool:
        """True when nothing can be booked that day."""
        return not self.windows


def intervals_overlap(start1: time, end1: time, start2: time, end2: time) -> bool:
    """Half-open overlap test; intervals that only touch do not overlap."""
    return start1 < end2 and start2 < end1


def add_minutes(start: time, minutes: int) -> time:
    """
    Add minutes to a wall-clock time.

    Raises:
        ValueError: If the result would cross midnight
    """
    if minutes <= 0:
        raise ValueError("Duration must be positive")

    anchor = datetime.combine(date.min, start)
    result = anchor + timedelta(minutes=minutes)
    if result.date() != anchor.date() or result.time() == time.min:
        raise ValueError("Appointment must end on the same day it starts")
    return result.time()


def day_of_week(day: date) -> int:
    """Day index used by working-hours rows: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def default_day_plan(day_start: time, day_end: time, slot_minutes: int) -> DayPlan:
    """Single-window plan used when no working hours are configured."""
    return DayPlan(windows=(TimeWindow(day_start, day_end),), slot_minutes=slot_minutes)


def day_plan_from_config(config: Mapping[str, Any]) -> DayPlan:
    """Build a day plan from one working-hours row."""
    slot_minutes = config["appointment_duration"]
    if not config["is_working_day"]:
        return DayPlan(windows=(), slot_minutes=slot_minutes)

    windows = []
    for prefix in ("morning", "afternoon"):
        start = config[f"{prefix}_start_time"]
        end = config[f"{prefix}_end_time"]
        if start is not None and end is not None and start < end:
            windows.append(TimeWindow(start, end))

    return DayPlan(windows=tuple(windows), slot_minutes=slot_minutes)


def generate_slots(
    day: date,
    plan: DayPlan,
    booked: Iterable[tuple[time, time]],
) -> list[datetime]:
    """
    Produce the free slot start times for one day.

    Slots stay on each window's grid (window start + n * slot length) and must
    fit entirely inside the window. A slot is dropped when any booked interval
    overlaps it, even partially, so an off-grid booking can block two slots.
    """
    busy = list(booked)
    step = timedelta(minutes=plan.slot_minutes)
    slots: list[datetime] = []

    for window in plan.windows:
        current = datetime.combine(day, window.start)
        window_end = datetime.combine(day, window.end)

        while current + step <= window_end:
            slot_end = current + step

            if not any(
                intervals_overlap(current.time(), slot_end.time(), start, end)
                for start, end in busy
            ):
                slots.append(current)

            current = slot_end

    return slots


def consolidate_work_hours(
    configs: Iterable[Mapping[str, Any]],
    default_start: time,
    default_end: time,
) -> tuple[time, time]:
    """
    Reduce practitioner working-hours rows to one clinic-wide window.

    The earliest morning start opens the day. Each row closes at its afternoon
    end when it has one, otherwise at its morning end; the latest of those
    closes the day. Missing values fall back to the defaults.
    """
    day_start: time | None = None
    day_end: time | None = None

    for config in configs:
        morning_start = config["morning_start_time"]
        if morning_start is not None and (day_start is None or morning_start < day_start):
            day_start = morning_start

        last_time = config["afternoon_end_time"] or config["morning_end_time"]
        if last_time is not None and (day_end is None or last_time > day_end):
            day_end = last_time

    return day_start or default_start, day_end or default_end


# Status changes a caller may request. NO_SHOW is reached only through the sweep.
ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {
            AppointmentStatus.SCHEDULED,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.IN_PROGRESS: frozenset({AppointmentStatus.COMPLETED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    """Whether ``current`` may move to ``target``; staying put is always allowed."""
    return current == target or target in ALLOWED_TRANSITIONS[current]
