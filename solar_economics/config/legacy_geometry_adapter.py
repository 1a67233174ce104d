"""
Legacy geometry adapter for backward compatibility.

Older scenario files describe obstacles by cardinal ``direction`` and an
``angular_width_deg`` instead of a center azimuth and a physical width, and
panel groups by ``panel_wp`` x ``num_panels`` instead of a total peak power.
These are normalized here, at load time, so the shading math only ever sees
azimuth/width geometry.
"""

from typing import Any, Dict
import logging
import math

from solar_economics.domain.installation import Obstacle

logger = logging.getLogger(__name__)

DIRECTION_AZIMUTH = {
    'north': 0.0,
    'east': 90.0,
    'south': 180.0,
    'west': 270.0,
}

DEFAULT_ANGULAR_WIDTH_DEG = 90.0


def width_from_angular_width(angular_width_deg: float, distance: float) -> float:
    """
    Physical width subtending an angular width at a distance.

    Example:
        >>> round(width_from_angular_width(90, 5), 6)
        10.0
    """
    return 2 * distance * math.tan(math.radians(angular_width_deg / 2))


def normalize_obstacle(raw: Dict[str, Any]) -> Obstacle:
    """
    Build an Obstacle from a config mapping, migrating legacy fields.

    Args:
        raw: Obstacle mapping; may carry ``direction`` and/or
            ``angular_width_deg`` instead of ``azimuth_deg``/``width_m``

    Returns:
        Obstacle with canonical azimuth/width geometry

    Raises:
        ValueError: If the legacy direction is not a cardinal direction
    """
    name = raw.get('name', 'obstacle')
    distance = float(raw.get('distance', 0.0))

    azimuth = raw.get('azimuth_deg')
    if azimuth is None:
        direction = str(raw.get('direction', 'south')).lower()
        if direction not in DIRECTION_AZIMUTH:
            raise ValueError(
                f"Obstacle '{name}': unknown direction '{direction}'. "
                f"Must be one of: {list(DIRECTION_AZIMUTH)}"
            )
        azimuth = DIRECTION_AZIMUTH[direction]
        logger.info(f"Obstacle '{name}': migrated direction '{direction}' to azimuth {azimuth:.0f}")

    width = raw.get('width_m')
    if width is None:
        angular_width = raw.get('angular_width_deg', DEFAULT_ANGULAR_WIDTH_DEG)
        width = width_from_angular_width(float(angular_width), distance)
        logger.info(
            f"Obstacle '{name}': migrated angular width {angular_width} deg to {width:.2f} m"
        )

    return Obstacle(
        name=name,
        type=raw.get('type', 'solid'),
        height=float(raw.get('height', 0.0)),
        azimuth_deg=float(azimuth),
        width_m=float(width),
        distance=distance,
        transparency_percent=raw.get('transparency_percent'),
    )


def normalize_peak_power_wp(raw: Dict[str, Any]) -> float:
    """
    Total group peak power (Wp).

    Uses ``peak_power_wp`` when present, else ``panel_wp`` x ``num_panels``.

    Raises:
        ValueError: If neither form is present
    """
    if raw.get('peak_power_wp') is not None:
        return float(raw['peak_power_wp'])
    if raw.get('panel_wp') is not None and raw.get('num_panels') is not None:
        return float(raw['panel_wp']) * int(raw['num_panels'])
    raise ValueError(
        f"Panel group '{raw.get('name')}': peak_power_wp or panel_wp and num_panels required"
    )
