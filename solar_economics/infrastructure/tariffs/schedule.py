"""
Tariff schedules and period resolution.

Maps (date, hour) to a named price period under a flat, regulated 2.0TD
(punta/llano/valle) or custom schedule. All resolution functions are pure.

Hours follow the distributor convention: hour N (1-24) covers [N-1, N).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Literal

FLAT_PERIOD = "flat"
UNKNOWN_PERIOD = "unknown"

SCHEDULE_FLAT = "flat"
SCHEDULE_REGULATED = "2.0TD"
SCHEDULE_CUSTOM = "custom"

# Fixed-date national holidays (MM-DD)
NATIONAL_HOLIDAYS = frozenset([
    (1, 1),    # Año Nuevo
    (1, 6),    # Epifanía
    (5, 1),    # Día del Trabajador
    (8, 15),   # Asunción
    (10, 12),  # Fiesta Nacional
    (11, 1),   # Todos los Santos
    (12, 6),   # Constitución
    (12, 8),   # Inmaculada
    (12, 25),  # Navidad
])


@dataclass
class TimeSlot:
    """
    Named slot within a day.

    Attributes:
        name: Period name
        start_hour: Start clock hour (0-23, inclusive)
        end_hour: End clock hour (1-24, exclusive). start >= end wraps midnight.
    """
    name: str
    start_hour: int
    end_hour: int

    def __post_init__(self):
        if not (0 <= self.start_hour <= 23):
            raise ValueError(f"Time slot '{self.name}' start_hour must be 0-23")
        if not (1 <= self.end_hour <= 24):
            raise ValueError(f"Time slot '{self.name}' end_hour must be 1-24")

    def contains(self, clock_hour: int) -> bool:
        if self.start_hour < self.end_hour:
            return self.start_hour <= clock_hour < self.end_hour
        return clock_hour >= self.start_hour or clock_hour < self.end_hour


@dataclass
class DateRange:
    """
    Part of the year with its own daily slots.

    Attributes:
        name: Display name
        start_month, start_day: First day (inclusive)
        end_month, end_day: Last day (inclusive). Start after end wraps the year.
        weekend_behavior: "same" (weekdays rules apply) or "specific"
        weekend_slot_name: Period used all day on weekends/holidays when specific
        time_slots: Slots tiling the 24-hour day
    """
    name: str
    start_month: int
    start_day: int
    end_month: int
    end_day: int
    weekend_behavior: Literal["same", "specific"] = "same"
    weekend_slot_name: Optional[str] = None
    time_slots: List[TimeSlot] = field(default_factory=list)

    def __post_init__(self):
        for month in (self.start_month, self.end_month):
            if not (1 <= month <= 12):
                raise ValueError(f"Date range '{self.name}' has invalid month {month}")
        for day in (self.start_day, self.end_day):
            if not (1 <= day <= 31):
                raise ValueError(f"Date range '{self.name}' has invalid day {day}")
        if self.weekend_behavior not in ("same", "specific"):
            raise ValueError(
                f"Date range '{self.name}' has invalid weekend_behavior '{self.weekend_behavior}'"
            )

    def contains(self, month: int, day: int) -> bool:
        d = month * 100 + day
        start = self.start_month * 100 + self.start_day
        end = self.end_month * 100 + self.end_day
        if start <= end:
            return start <= d <= end
        return d >= start or d <= end


@dataclass
class TariffSchedule:
    """
    Tariff schedule.

    Attributes:
        name: Schedule name, referenced by offers
        type: "flat", "2.0TD" (regulated 3-period) or "custom"
        date_ranges: Date ranges for custom schedules
    """
    name: str
    type: Literal["flat", "2.0TD", "custom"] = SCHEDULE_FLAT
    date_ranges: List[DateRange] = field(default_factory=list)

    def __post_init__(self):
        if self.type not in (SCHEDULE_FLAT, SCHEDULE_REGULATED, SCHEDULE_CUSTOM):
            raise ValueError(f"Invalid schedule type '{self.type}' for '{self.name}'")


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_national_holiday(day: date) -> bool:
    return (day.month, day.day) in NATIONAL_HOLIDAYS


def is_holiday_or_weekend(day: date) -> bool:
    return is_weekend(day) or is_national_holiday(day)


def regulated_energy_period(day: date, hour: int) -> str:
    """
    Energy period under the regulated 2.0TD schedule.

    Valle: hours 1-8 and all weekend/holiday hours.
    Punta: hours 11-14 and 19-22. Llano: the rest.
    """
    if is_holiday_or_weekend(day):
        return "valle"
    if 1 <= hour <= 8:
        return "valle"
    if 11 <= hour <= 14 or 19 <= hour <= 22:
        return "punta"
    return "llano"


def regulated_power_period(day: date, hour: int) -> str:
    """Power period under 2.0TD: punta for workday hours 9-24, valle otherwise."""
    if is_holiday_or_weekend(day):
        return "valle"
    if 1 <= hour <= 8:
        return "valle"
    return "punta"


def resolve_custom_period(day: date, hour: int, date_ranges: List[DateRange]) -> str:
    """
    Resolve the slot name for a custom schedule.

    Returns "unknown" when no date range or slot matches.
    """
    date_range = next((r for r in date_ranges if r.contains(day.month, day.day)), None)
    if date_range is None:
        return UNKNOWN_PERIOD

    if (is_holiday_or_weekend(day)
            and date_range.weekend_behavior == "specific"
            and date_range.weekend_slot_name):
        return date_range.weekend_slot_name

    clock_hour = hour - 1
    slot = next((s for s in date_range.time_slots if s.contains(clock_hour)), None)
    return slot.name if slot is not None else UNKNOWN_PERIOD


def resolve_tariff_period(schedule: Optional[TariffSchedule], day: date, hour: int) -> str:
    """Energy period name for any schedule (None means flat)."""
    if schedule is None or schedule.type == SCHEDULE_FLAT:
        return FLAT_PERIOD
    if schedule.type == SCHEDULE_REGULATED:
        return regulated_energy_period(day, hour)
    return resolve_custom_period(day, hour, schedule.date_ranges)


def resolve_power_tariff_period(schedule: Optional[TariffSchedule], day: date, hour: int) -> str:
    """Power period name for any schedule. 2.0TD only has punta/valle for power."""
    if schedule is None or schedule.type == SCHEDULE_FLAT:
        return FLAT_PERIOD
    if schedule.type == SCHEDULE_REGULATED:
        return regulated_power_period(day, hour)
    return resolve_custom_period(day, hour, schedule.date_ranges)


def schedule_slot_names(schedule: TariffSchedule) -> List[str]:
    """Energy period names a schedule can produce, in first-seen order."""
    if schedule.type == SCHEDULE_FLAT:
        return [FLAT_PERIOD]
    if schedule.type == SCHEDULE_REGULATED:
        return ["punta", "llano", "valle"]

    names: List[str] = []
    for date_range in schedule.date_ranges:
        for slot in date_range.time_slots:
            if slot.name not in names:
                names.append(slot.name)
        if (date_range.weekend_behavior == "specific"
                and date_range.weekend_slot_name
                and date_range.weekend_slot_name not in names):
            names.append(date_range.weekend_slot_name)
    return names


def power_schedule_slot_names(schedule: TariffSchedule) -> List[str]:
    """Power period names a schedule can produce."""
    if schedule.type == SCHEDULE_REGULATED:
        return ["punta", "valle"]
    return schedule_slot_names(schedule)
