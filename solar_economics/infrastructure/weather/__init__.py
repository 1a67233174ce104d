"""
Weather infrastructure: sun geometry, obstacle shading, expected production
index and the raw yield client.
"""

from .solar_geometry import SunPosition, sun_position, angle_difference
from .shadows import shadow_factor, obstacle_attenuation
from .solar_index import (
    SolarProductionIndex,
    build_solar_index,
    peak_power_scale,
    stale_parameters,
)
from .pvgis_client import PVGISClient
from .raw_yield_store import load_raw_yield_csv, save_raw_yield_csv

__all__ = [
    'SunPosition',
    'sun_position',
    'angle_difference',
    'shadow_factor',
    'obstacle_attenuation',
    'SolarProductionIndex',
    'build_solar_index',
    'peak_power_scale',
    'stale_parameters',
    'PVGISClient',
    'load_raw_yield_csv',
    'save_raw_yield_csv',
]
