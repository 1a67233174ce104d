"""
Approximate sun position.

Screening-level model: single-harmonic declination at mid-month and a fixed
half-hour solar offset (no equation-of-time correction).
"""

from dataclasses import dataclass
from typing import Optional
import math


@dataclass(frozen=True)
class SunPosition:
    """Sun elevation above horizon and azimuth clockwise from North (degrees)."""
    elevation: float
    azimuth: float


def _clamp(value: float) -> float:
    return max(-1.0, min(1.0, value))


def angle_difference(a: float, b: float) -> float:
    """Shortest angular distance between two azimuths, in [0, 180]."""
    return abs(((a - b + 540) % 360) - 180)


def declination(month: int) -> float:
    """Solar declination (degrees) at the middle of the month."""
    day_of_year = (month - 1) * 30.44 + 15
    return 23.45 * math.sin(math.radians(360 / 365 * (day_of_year - 81)))


def sun_position(hour: float, month: int, latitude: float) -> Optional[SunPosition]:
    """
    Sun position for an hour interval.

    Args:
        hour: Clock hour; the interval midpoint (hour - 0.5) is used
        month: Month (1-12)
        latitude: Site latitude (degrees)

    Returns:
        SunPosition, or None when the sun is at or below the horizon
    """
    hour_angle = (hour - 0.5 - 12) * 15
    lat = math.radians(latitude)
    dec = math.radians(declination(month))
    ha = math.radians(hour_angle)

    sin_elev = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec) * math.cos(ha)
    elevation = math.degrees(math.asin(_clamp(sin_elev)))
    if elevation <= 0:
        return None

    cos_az = (math.sin(dec) - math.sin(lat) * sin_elev) / (math.cos(lat) * math.cos(math.radians(elevation)))
    azimuth = math.degrees(math.acos(_clamp(cos_az)))
    if hour_angle > 0:
        azimuth = 360 - azimuth

    return SunPosition(elevation=elevation, azimuth=azimuth)
