"""
Solar Economics

Hour-by-hour economics of a home PV installation against electricity
contracts: expected production from cached raw yield with obstacle shading,
tariff period resolution, greedy battery dispatch and monthly billing with
virtual battery credit.

Main Components:
- Domain: Installation, contract, battery and consumption entities
- Infrastructure: Tariff schedules, solar production index, market prices
- Simulation: Battery dispatch, bill calculation, orchestration and comparison
- Configuration: YAML scenario files

Quick Start:
    >>> from solar_economics.config import ScenarioConfig
    >>> from solar_economics.domain import load_consumption_csv
    >>> from solar_economics.simulation import run_comparison
    >>>
    >>> config = ScenarioConfig.from_yaml("configs/example_scenario.yaml")
    >>> config.validate()
    >>> consumption = load_consumption_csv(config.data_sources.consumption_file)
    >>> results = run_comparison(
    ...     consumption, config.installation, config.offers,
    ...     config.batteries, config.tariff_schedules,
    ... )
    >>> print(results[0].summary())

Architecture Principles:
    1. Dependency Flow:
       Simulation -> Infrastructure -> Domain
       (Configuration builds domain objects and depends on infrastructure)

    2. The numeric core is pure and synchronous; price and raw yield
       acquisition happen once, before the hourly loop.

    3. Each (offer, battery) run owns its battery level and credit balance,
       so combinations run in parallel without shared mutable state.
"""

__version__ = "1.0.0"

from solar_economics.config.scenario_config import ScenarioConfig
from solar_economics.domain import (
    Battery,
    CompanyOffer,
    ConsumptionRecord,
    SolarInstallation,
    PanelGroup,
    Obstacle,
)
from solar_economics.infrastructure.tariffs import TariffSchedule, resolve_tariff_period
from solar_economics.infrastructure.weather import build_solar_index
from solar_economics.simulation import (
    SimulationOrchestrator,
    SimulationResult,
    SimulationError,
    run_comparison,
    payback_years,
)

__all__ = [
    "__version__",
    "ScenarioConfig",
    "Battery",
    "CompanyOffer",
    "ConsumptionRecord",
    "SolarInstallation",
    "PanelGroup",
    "Obstacle",
    "TariffSchedule",
    "resolve_tariff_period",
    "build_solar_index",
    "SimulationOrchestrator",
    "SimulationResult",
    "SimulationError",
    "run_comparison",
    "payback_years",
]
