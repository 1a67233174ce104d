"""
Coverage validation for custom tariff schedules.

Date ranges must tile the 366-day year and each range's time slots must tile
the 24-hour day, with no gaps and no overlaps. Violations are user input
errors reported before simulation.
"""

from typing import List

from .schedule import DateRange, TimeSlot, TariffSchedule, SCHEDULE_CUSTOM

DAYS_IN_YEAR = 366
# February counted with 29 days so leap years are covered
DAYS_IN_MONTH = [31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
MONTH_START = [sum(DAYS_IN_MONTH[:m]) for m in range(12)]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class ScheduleValidationError(ValueError):
    """Raised when a tariff schedule does not tile the year or the day."""

    def __init__(self, schedule_name: str, errors: List[str]):
        self.schedule_name = schedule_name
        self.errors = errors
        super().__init__(
            f"Invalid tariff schedule '{schedule_name}': " + "; ".join(errors)
        )


def _day_of_year(month: int, day: int) -> int:
    return MONTH_START[month - 1] + min(day, DAYS_IN_MONTH[month - 1]) - 1


def _format_day(day_index: int) -> str:
    remaining = day_index
    for month, length in enumerate(DAYS_IN_MONTH):
        if remaining < length:
            return f"{remaining + 1} {MONTH_NAMES[month]}"
        remaining -= length
    return str(day_index)


def validate_date_ranges(date_ranges: List[DateRange]) -> List[str]:
    """
    Check that date ranges cover every day of the year exactly once.

    Returns:
        List of error messages (empty when valid)
    """
    coverage: List[List[int]] = [[] for _ in range(DAYS_IN_YEAR)]

    for idx, date_range in enumerate(date_ranges):
        start = _day_of_year(date_range.start_month, date_range.start_day)
        end = _day_of_year(date_range.end_month, date_range.end_day)
        if start <= end:
            days = range(start, end + 1)
        else:
            days = list(range(start, DAYS_IN_YEAR)) + list(range(0, end + 1))
        for d in days:
            coverage[d].append(idx)

    errors: List[str] = []

    gap_start = None
    for d in range(DAYS_IN_YEAR):
        if not coverage[d]:
            if gap_start is None:
                gap_start = d
        elif gap_start is not None:
            errors.append(f"Days not covered by any date range ({_format_day(gap_start)} - {_format_day(d - 1)})")
            gap_start = None
    if gap_start is not None:
        errors.append(
            f"Days not covered by any date range ({_format_day(gap_start)} - {_format_day(DAYS_IN_YEAR - 1)})"
        )

    reported = set()
    for d in range(DAYS_IN_YEAR):
        covering = coverage[d]
        for i in range(len(covering)):
            for j in range(i + 1, len(covering)):
                pair = (covering[i], covering[j])
                if pair in reported:
                    continue
                reported.add(pair)
                name_a = date_ranges[pair[0]].name or f"Range {pair[0] + 1}"
                name_b = date_ranges[pair[1]].name or f"Range {pair[1] + 1}"
                errors.append(f'Date ranges "{name_a}" and "{name_b}" overlap (e.g. {_format_day(d)})')

    return errors


def validate_time_slots(time_slots: List[TimeSlot]) -> List[str]:
    """
    Check that time slots cover every clock hour exactly once.

    Only the first uncovered and the first overlapping hour are reported.
    """
    coverage = [0] * 24
    for slot in time_slots:
        for h in range(24):
            if slot.contains(h):
                coverage[h] += 1

    errors: List[str] = []
    gap = next((h for h in range(24) if coverage[h] == 0), None)
    if gap is not None:
        errors.append(f"uncovered hours (e.g. {gap}:00-{gap + 1}:00)")
    overlap = next((h for h in range(24) if coverage[h] > 1), None)
    if overlap is not None:
        errors.append(f"overlapping time slots (e.g. hour {overlap})")
    return errors


def validate_schedule(schedule: TariffSchedule) -> List[str]:
    """Validate a schedule. Flat, regulated and empty custom schedules are always valid."""
    if schedule.type != SCHEDULE_CUSTOM or not schedule.date_ranges:
        return []

    errors = validate_date_ranges(schedule.date_ranges)
    for date_range in schedule.date_ranges:
        name = date_range.name or "Unnamed"
        for error in validate_time_slots(date_range.time_slots):
            errors.append(f'Date range "{name}" has {error}')
    return errors


def ensure_valid_schedule(schedule: TariffSchedule) -> None:
    """
    Raise if the schedule does not tile the year and the day.

    Raises:
        ScheduleValidationError: With every coverage error found
    """
    errors = validate_schedule(schedule)
    if errors:
        raise ScheduleValidationError(schedule.name, errors)
