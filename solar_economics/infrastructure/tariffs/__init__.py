"""
Infrastructure module for tariff schedules.

Provides schedule dataclasses, pure period resolution and coverage validation.
"""

from .schedule import (
    TimeSlot,
    DateRange,
    TariffSchedule,
    resolve_tariff_period,
    resolve_power_tariff_period,
    resolve_custom_period,
    is_holiday_or_weekend,
    schedule_slot_names,
    power_schedule_slot_names,
)
from .validation import (
    ScheduleValidationError,
    validate_schedule,
    validate_date_ranges,
    validate_time_slots,
    ensure_valid_schedule,
)

__all__ = [
    "TimeSlot",
    "DateRange",
    "TariffSchedule",
    "resolve_tariff_period",
    "resolve_power_tariff_period",
    "resolve_custom_period",
    "is_holiday_or_weekend",
    "schedule_slot_names",
    "power_schedule_slot_names",
    "ScheduleValidationError",
    "validate_schedule",
    "validate_date_ranges",
    "validate_time_slots",
    "ensure_valid_schedule",
]
