"""
Offer x battery comparison.

Runs every (offer, battery option) combination against the same consumption
series and ranks them by annual cost. Combinations share the production
index and price table read-only; each run owns its own battery and credit
state, so they are evaluated in parallel.
"""

from itertools import product
from typing import Dict, List, Optional, Sequence
import logging
from joblib import Parallel, delayed
from tqdm import tqdm

from solar_economics.domain.battery import Battery
from solar_economics.domain.consumption import ConsumptionRecord
from solar_economics.domain.contract import CompanyOffer
from solar_economics.domain.installation import SolarInstallation
from solar_economics.infrastructure.pricing.energy_price_resolver import create_energy_price_resolver
from solar_economics.infrastructure.pricing.price_loader import MarketPriceTable
from solar_economics.infrastructure.tariffs.schedule import TariffSchedule
from solar_economics.infrastructure.weather.solar_index import SolarProductionIndex, build_solar_index
from .orchestrator import SimulationOrchestrator
from .simulation_results import NO_BATTERY, SimulationResult

logger = logging.getLogger(__name__)


class SimulationError(RuntimeError):
    """A simulation combination failed; no partial results are returned."""


def _lookup_schedule(
    name: Optional[str],
    schedules: Dict[str, TariffSchedule],
    offer_name: str,
) -> Optional[TariffSchedule]:
    if name is None:
        return None
    if name not in schedules:
        raise ValueError(f"Offer '{offer_name}' references unknown tariff schedule '{name}'")
    return schedules[name]


def _simulate_combination(
    consumption: List[ConsumptionRecord],
    installation: SolarInstallation,
    offer: CompanyOffer,
    battery: Optional[Battery],
    schedules: Dict[str, TariffSchedule],
    market_prices: Optional[MarketPriceTable],
    solar_index: SolarProductionIndex,
) -> SimulationResult:
    battery_name = battery.name if battery is not None else NO_BATTERY
    try:
        schedule = _lookup_schedule(offer.tariff_schedule, schedules, offer.name)
        power_schedule = _lookup_schedule(offer.power_schedule_name, schedules, offer.name)
        orchestrator = SimulationOrchestrator(
            installation=installation,
            offer=offer,
            battery=battery,
            schedule=schedule,
            power_schedule=power_schedule,
            price_resolver=create_energy_price_resolver(offer, schedule, market_prices),
            solar_index=solar_index,
        )
        return orchestrator.run(consumption)
    except Exception as e:
        raise SimulationError(f"Simulation failed for '{offer.name}' with {battery_name}: {e}") from e


def run_comparison(
    consumption: List[ConsumptionRecord],
    installation: SolarInstallation,
    offers: Sequence[CompanyOffer],
    batteries: Sequence[Battery],
    schedules: Dict[str, TariffSchedule],
    market_prices: Optional[MarketPriceTable] = None,
    include_no_battery: bool = True,
    max_workers: Optional[int] = None,
) -> List[SimulationResult]:
    """
    Simulate every offer against every battery option.

    Args:
        consumption: Hourly consumption records
        installation: PV installation with raw yield
        offers: Contracts to compare
        batteries: Battery options
        schedules: Tariff schedules by name
        market_prices: Hourly market prices for market-price offers
        include_no_battery: Also simulate each offer without a battery
        max_workers: Parallel workers (None = one per CPU)

    Returns:
        Results sorted by annual cost, cheapest first

    Raises:
        ValueError: If there is nothing to simulate
        SimulationError: If any combination fails
    """
    if not consumption:
        raise ValueError("No consumption records to simulate")
    if not offers:
        raise ValueError("No offers selected")

    battery_options: List[Optional[Battery]] = list(batteries)
    if include_no_battery:
        battery_options.insert(0, None)
    if not battery_options:
        raise ValueError("No battery options selected (enable include_no_battery or add a battery)")

    for offer in offers:
        _lookup_schedule(offer.tariff_schedule, schedules, offer.name)
        _lookup_schedule(offer.power_schedule_name, schedules, offer.name)

    solar_index = build_solar_index(installation)
    combinations = list(product(offers, battery_options))
    logger.info(
        f"Running {len(combinations)} simulations "
        f"({len(offers)} offers x {len(battery_options)} battery options)"
    )

    results = Parallel(n_jobs=max_workers or -1, prefer="threads")(
        delayed(_simulate_combination)(
            consumption, installation, offer, battery, schedules, market_prices, solar_index
        )
        for offer, battery in tqdm(combinations, desc="Simulating")
    )

    return sorted(results, key=lambda r: r.total_annual_cost)


def payback_years(result: SimulationResult, results: Sequence[SimulationResult]) -> Optional[float]:
    """
    Simple payback of the battery against the same offer without a battery.

    Returns:
        Years to recover the battery price, or None without a price, without a
        baseline, or when the battery saves nothing
    """
    if not result.has_battery or not result.battery_price_eur:
        return None

    baseline = next(
        (r for r in results if r.offer_name == result.offer_name and not r.has_battery),
        None,
    )
    if baseline is None:
        return None

    savings = baseline.total_annual_cost - result.total_annual_cost
    if savings <= 0:
        return None
    return result.battery_price_eur / savings
