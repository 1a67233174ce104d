"""
Configuration module for PV economics scenarios.

Provides dataclass-based configuration management with YAML support.

Usage:
    >>> from solar_economics.config import ScenarioConfig
    >>>
    >>> config = ScenarioConfig.from_yaml("configs/example_scenario.yaml")
    >>> config.validate()
    >>> print(config.installation.peak_power_kw)
"""

from .scenario_config import ScenarioConfig, DataSourceConfig, SimulationSettings
from .legacy_geometry_adapter import normalize_obstacle, normalize_peak_power_wp

__all__ = [
    "ScenarioConfig",
    "DataSourceConfig",
    "SimulationSettings",
    "normalize_obstacle",
    "normalize_peak_power_wp",
]
