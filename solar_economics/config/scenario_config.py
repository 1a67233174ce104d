"""
Scenario configuration for PV economics simulations.

A scenario bundles one installation, the tariff schedules, the offers and
battery options to compare, and the data files to simulate against.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging
import yaml

from solar_economics.domain.battery import Battery
from solar_economics.domain.contract import CompanyOffer
from solar_economics.domain.installation import PanelGroup, SolarInstallation
from solar_economics.infrastructure.tariffs.schedule import (
    FLAT_PERIOD,
    SCHEDULE_FLAT,
    DateRange,
    TariffSchedule,
    TimeSlot,
    power_schedule_slot_names,
    schedule_slot_names,
)
from solar_economics.infrastructure.tariffs.validation import ensure_valid_schedule
from .legacy_geometry_adapter import normalize_obstacle, normalize_peak_power_wp

logger = logging.getLogger(__name__)


@dataclass
class DataSourceConfig:
    """Configuration for input data files."""
    consumption_file: str = "data/consumption.csv"
    market_prices_file: Optional[str] = None
    market_prices_unit: str = "kWh"
    raw_yield_file: Optional[str] = None

    def resolve_paths(self, base_dir: Path) -> None:
        """
        Convert relative paths to absolute paths within base_dir.

        Args:
            base_dir: Base directory for resolving relative paths

        Raises:
            ValueError: If a path resolves outside the base directory
        """
        base_dir = Path(base_dir).resolve()

        for attr in ['consumption_file', 'market_prices_file', 'raw_yield_file']:
            rel_path = getattr(self, attr)
            if rel_path is None:
                continue

            if Path(rel_path).is_absolute():
                abs_path = Path(rel_path).resolve()
            else:
                abs_path = (base_dir / rel_path).resolve()

            try:
                abs_path.relative_to(base_dir)
            except ValueError:
                raise ValueError(
                    f"{attr} path '{rel_path}' resolves to '{abs_path}' "
                    f"which is outside base directory '{base_dir}'"
                )

            setattr(self, attr, str(abs_path))


@dataclass
class SimulationSettings:
    """Comparison run settings."""
    include_no_battery: bool = True
    max_workers: Optional[int] = None
    fetch_market_prices: bool = False
    fetch_raw_yield: bool = False
    price_cache_dir: str = "data/market_prices"


def _parse_schedule(raw: Dict[str, Any]) -> TariffSchedule:
    date_ranges = [
        DateRange(
            name=dr.get('name', ''),
            start_month=dr['start_month'],
            start_day=dr['start_day'],
            end_month=dr['end_month'],
            end_day=dr['end_day'],
            weekend_behavior=dr.get('weekend_behavior', 'same'),
            weekend_slot_name=dr.get('weekend_slot_name'),
            time_slots=[
                TimeSlot(name=ts['name'], start_hour=ts['start_hour'], end_hour=ts['end_hour'])
                for ts in dr.get('time_slots', [])
            ],
        )
        for dr in raw.get('date_ranges', [])
    ]
    return TariffSchedule(
        name=raw['name'],
        type=str(raw.get('type', SCHEDULE_FLAT)),
        date_ranges=date_ranges,
    )


def _parse_installation(raw: Dict[str, Any]) -> SolarInstallation:
    groups = [
        PanelGroup(
            name=g['name'],
            peak_power_wp=normalize_peak_power_wp(g),
            tilt=g.get('tilt', 30.0),
            azimuth=g.get('azimuth', 180.0),
            height_from_ground=g.get('height_from_ground', 0.0),
            panel_width_cm=g.get('panel_width_cm', 0.0),
            panel_height_cm=g.get('panel_height_cm', 0.0),
            panel_orientation=g.get('panel_orientation', 'portrait'),
            obstacles=[normalize_obstacle(o) for o in g.get('obstacles', [])],
        )
        for g in raw.get('panel_groups', [])
    ]
    return SolarInstallation(
        name=raw.get('name', 'installation'),
        latitude=raw['latitude'],
        longitude=raw['longitude'],
        system_loss=raw.get('system_loss', 14.0),
        timezone=raw.get('timezone', 'Europe/Madrid'),
        panel_groups=groups,
    )


def _installation_to_dict(installation: SolarInstallation) -> Dict[str, Any]:
    return {
        'name': installation.name,
        'latitude': installation.latitude,
        'longitude': installation.longitude,
        'system_loss': installation.system_loss,
        'timezone': installation.timezone,
        'panel_groups': [asdict(g) for g in installation.panel_groups],
    }


@dataclass
class ScenarioConfig:
    """
    Master configuration for a comparison scenario.

    Raw yield is not part of the YAML; it is loaded from
    data_sources.raw_yield_file (or fetched) and attached to the installation.
    """
    installation: SolarInstallation
    tariff_schedules: Dict[str, TariffSchedule] = field(default_factory=dict)
    offers: List[CompanyOffer] = field(default_factory=list)
    batteries: List[Battery] = field(default_factory=list)
    data_sources: DataSourceConfig = field(default_factory=DataSourceConfig)
    simulation: SimulationSettings = field(default_factory=SimulationSettings)
    output_dir: str = "results"

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ScenarioConfig":
        """
        Load scenario configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            ScenarioConfig instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML is invalid or has invalid entity values
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ValueError(f"Empty or invalid YAML file: {yaml_path}")
        if 'installation' not in config_dict:
            raise ValueError(f"Missing 'installation' section in {yaml_path}")

        try:
            schedules = [_parse_schedule(s) for s in config_dict.get('tariff_schedules', [])]
            config = cls(
                installation=_parse_installation(config_dict['installation']),
                tariff_schedules={s.name: s for s in schedules},
                offers=[CompanyOffer(**o) for o in config_dict.get('offers', [])],
                batteries=[Battery(**b) for b in config_dict.get('batteries', [])],
                output_dir=config_dict.get('output_dir', 'results'),
            )
            if 'data_sources' in config_dict:
                config.data_sources = DataSourceConfig(**config_dict['data_sources'])
            if 'simulation' in config_dict:
                config.simulation = SimulationSettings(**config_dict['simulation'])
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid scenario in {yaml_path}: {e!r}") from e

        if len(schedules) != len(config.tariff_schedules):
            raise ValueError(f"Duplicate tariff schedule names in {yaml_path}")

        config.data_sources.resolve_paths(yaml_path.parent)

        logger.info(
            f"Loaded scenario from {yaml_path}: {len(config.offers)} offers, "
            f"{len(config.batteries)} batteries, {len(config.tariff_schedules)} schedules"
        )
        return config

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML file
        """
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'installation': _installation_to_dict(self.installation),
            'tariff_schedules': [asdict(s) for s in self.tariff_schedules.values()],
            'offers': [asdict(o) for o in self.offers],
            'batteries': [asdict(b) for b in self.batteries],
            'data_sources': asdict(self.data_sources),
            'simulation': asdict(self.simulation),
            'output_dir': self.output_dir,
        }

        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If configuration is invalid
            ScheduleValidationError: If a custom schedule doesn't tile the year or day
        """
        if not self.offers:
            raise ValueError("At least one offer is required")
        if not self.batteries and not self.simulation.include_no_battery:
            raise ValueError("No battery options: add a battery or enable include_no_battery")

        for schedule in self.tariff_schedules.values():
            ensure_valid_schedule(schedule)

        names = [o.name for o in self.offers]
        if len(names) != len(set(names)):
            raise ValueError("Offer names must be unique")

        for offer in self.offers:
            for ref in (offer.tariff_schedule, offer.power_schedule_name):
                if ref is not None and ref not in self.tariff_schedules:
                    raise ValueError(f"Offer '{offer.name}' references unknown tariff schedule '{ref}'")
            if offer.use_market_prices and not (
                self.data_sources.market_prices_file or self.simulation.fetch_market_prices
            ):
                raise ValueError(
                    f"Offer '{offer.name}' uses market prices: set data_sources.market_prices_file "
                    f"or simulation.fetch_market_prices"
                )
            self._check_offer_periods(offer)

        if self.data_sources.market_prices_unit not in ("kWh", "MWh"):
            raise ValueError(
                f"Invalid market_prices_unit '{self.data_sources.market_prices_unit}'. "
                f"Must be 'kWh' or 'MWh'"
            )

        if self.simulation.max_workers is not None and self.simulation.max_workers < 1:
            raise ValueError("simulation.max_workers must be positive")

    def _check_offer_periods(self, offer: CompanyOffer) -> None:
        """Every period the offer's schedules can produce must have a price."""
        def require(names: List[str], prices: Dict[str, float], what: str) -> None:
            missing = [n for n in names if n not in prices]
            if missing:
                raise ValueError(f"Offer '{offer.name}': {what} missing for periods {missing}")

        if not offer.use_market_prices:
            schedule = self.tariff_schedules.get(offer.tariff_schedule) if offer.tariff_schedule else None
            energy_names = schedule_slot_names(schedule) if schedule is not None else [FLAT_PERIOD]
            require(energy_names, offer.energy_prices, "energy_prices")

        power_schedule = (
            self.tariff_schedules.get(offer.power_schedule_name) if offer.power_schedule_name else None
        )
        power_names = power_schedule_slot_names(power_schedule) if power_schedule is not None else [FLAT_PERIOD]
        if isinstance(offer.contracted_power_kw, dict):
            require(power_names, offer.contracted_power_kw, "contracted_power_kw")
        has_contracted_power = (
            any(offer.contracted_power_kw.values()) if isinstance(offer.contracted_power_kw, dict)
            else offer.contracted_power_kw > 0
        )
        if not offer.use_market_prices and (offer.power_prices or has_contracted_power):
            require(power_names, offer.power_prices, "power_prices")

    @property
    def uses_market_prices(self) -> bool:
        return any(o.use_market_prices for o in self.offers)
