"""
Obstacle shading.

Each obstacle attenuates production when the sun is inside its angular width
and its shadow line reaches above the panel's lower edge. Obstacles combine
multiplicatively, so the factor stays in [0, 1].
"""

from typing import List
import math

from solar_economics.domain.installation import Obstacle
from .solar_geometry import sun_position, angle_difference


def obstacle_attenuation(
    obstacle: Obstacle,
    sun_elevation: float,
    sun_azimuth: float,
    panel_height: float = 0.0,
    panel_tilt_height_m: float = 0.0,
    tilt: float = 30.0,
) -> float:
    """
    Fraction of production removed by one obstacle (0 = none, 1 = all).

    Args:
        obstacle: Obstacle geometry
        sun_elevation: Sun elevation (degrees)
        sun_azimuth: Sun azimuth (degrees from North)
        panel_height: Panel lower edge height above ground (m)
        panel_tilt_height_m: Panel length along the tilt axis (m), 0 if unknown
        tilt: Panel tilt (degrees)
    """
    if obstacle.distance <= 0:
        return 0.0

    half_width = math.degrees(math.atan(obstacle.width_m / 2 / obstacle.distance))
    if half_width <= 0:
        return 0.0

    az_diff = angle_difference(sun_azimuth, obstacle.azimuth_deg)
    if az_diff > half_width:
        return 0.0

    shadow_line = obstacle.height - obstacle.distance * math.tan(math.radians(sun_elevation))
    if shadow_line <= panel_height:
        return 0.0

    vertical_extent = panel_tilt_height_m * math.cos(math.radians(tilt))
    if vertical_extent > 0:
        shade_fraction = min(1.0, (shadow_line - panel_height) / vertical_extent)
    else:
        # Unknown panel size: binary shading
        shade_fraction = 1.0

    angular_factor = math.cos((az_diff / half_width) * (math.pi / 2))
    return shade_fraction * angular_factor * (1 - obstacle.transparency)


def shadow_factor(
    obstacles: List[Obstacle],
    hour: float,
    month: int,
    latitude: float,
    panel_height: float = 0.0,
    panel_tilt_height_m: float = 0.0,
    tilt: float = 30.0,
) -> float:
    """
    Production multiplier for one hour across all obstacles.

    Returns 1 when there are no obstacles or the sun is below the horizon.
    """
    if not obstacles:
        return 1.0

    sun = sun_position(hour, month, latitude)
    if sun is None:
        return 1.0

    factor = 1.0
    for obstacle in obstacles:
        factor *= 1 - obstacle_attenuation(
            obstacle, sun.elevation, sun.azimuth,
            panel_height, panel_tilt_height_m, tilt,
        )
    return factor
