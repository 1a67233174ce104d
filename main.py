#!/usr/bin/env python3
"""
Solar Economics - Entry Point
=============================

Compares electricity offers and battery options for a PV installation over a
year of metered consumption.

Usage:
    python main.py run --config configs/example_scenario.yaml
    python main.py validate --config configs/example_scenario.yaml
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from solar_economics.config import ScenarioConfig
from solar_economics.domain import load_consumption_csv, consumption_statistics
from solar_economics.infrastructure.pricing import MarketPriceTable, PriceLoader, REEPriceClient
from solar_economics.infrastructure.tariffs import ScheduleValidationError, validate_schedule
from solar_economics.infrastructure.weather import PVGISClient, load_raw_yield_csv, save_raw_yield_csv
from solar_economics.simulation import SimulationError, run_comparison, payback_years

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_raw_yield(config: ScenarioConfig) -> None:
    """Attach raw yield to the installation, fetching it from PVGIS if configured."""
    raw_yield_file = config.data_sources.raw_yield_file
    if raw_yield_file and Path(raw_yield_file).exists():
        config.installation.raw_yield = load_raw_yield_csv(raw_yield_file)
        return

    if not config.simulation.fetch_raw_yield:
        logger.warning("No raw yield available: production will be zero")
        return

    installation = config.installation
    client = PVGISClient()
    config.installation.raw_yield = [
        client.fetch_group(installation.latitude, installation.longitude, group, installation.system_loss)
        for group in installation.panel_groups
    ]
    if raw_yield_file:
        save_raw_yield_csv(config.installation.raw_yield, raw_yield_file)


def load_market_prices(config: ScenarioConfig, dates) -> Optional[MarketPriceTable]:
    """Market prices for the simulated dates, or None when no offer needs them."""
    if not config.uses_market_prices:
        return None

    if config.data_sources.market_prices_file:
        return PriceLoader().from_csv(
            config.data_sources.market_prices_file,
            unit=config.data_sources.market_prices_unit,
        )

    client = REEPriceClient(cache_dir=config.simulation.price_cache_dir)
    return client.get_prices(dates)


def run_from_config(config_path: Path) -> None:
    """
    Run offer comparison from YAML configuration file.

    Args:
        config_path: Path to YAML configuration file
    """
    logger.info(f"Loading configuration from: {config_path}")

    try:
        config = ScenarioConfig.from_yaml(config_path)
        config.validate()
        consumption = load_consumption_csv(config.data_sources.consumption_file)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    if not consumption:
        print("Error: consumption file has no records")
        sys.exit(1)

    stats = consumption_statistics(consumption)
    logger.info(
        f"Consumption {stats['date_from']} to {stats['date_to']}: "
        f"{stats['total_kwh']:.0f} kWh over {stats['days']} days"
    )

    try:
        load_raw_yield(config)
        market_prices = load_market_prices(config, sorted({r.date for r in consumption}))
        results = run_comparison(
            consumption,
            config.installation,
            config.offers,
            config.batteries,
            config.tariff_schedules,
            market_prices=market_prices,
            include_no_battery=config.simulation.include_no_battery,
            max_workers=config.simulation.max_workers,
        )
    except (SimulationError, ValueError, OSError) as e:
        print(f"\nSimulation failed: {e}")
        sys.exit(1)

    ranking = pd.DataFrame([
        {**r.summary(), 'payback_years': payback_years(r, results)}
        for r in results
    ])

    print("\n" + "=" * 70)
    print("Offer Comparison (cheapest first)")
    print("=" * 70)
    print(ranking[['offer', 'battery', 'annual_cost_eur', 'self_consumption_ratio', 'payback_years']]
          .to_string(index=False, float_format=lambda v: f"{v:,.2f}"))

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    ranking.to_csv(output_dir / 'ranking.csv', index=False)
    for i, result in enumerate(results, start=1):
        result.to_csv(output_dir / f"{i:02d}_{result.offer_name}_{result.battery_name}".replace(' ', '_'))
    print(f"\nResults saved to: {output_dir}")


def validate_config(config_path: Path) -> None:
    """Print tariff schedule coverage errors for a configuration."""
    try:
        config = ScenarioConfig.from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    failed = False
    for name, schedule in config.tariff_schedules.items():
        errors = validate_schedule(schedule)
        if errors:
            failed = True
            print(f"Schedule '{name}':")
            for error in errors:
                print(f"  - {error}")
        else:
            print(f"Schedule '{name}': OK")

    try:
        config.validate()
    except ScheduleValidationError:
        # already reported per schedule above
        pass
    except ValueError as e:
        failed = True
        print(f"Configuration: {e}")

    if failed:
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Solar Economics - PV, battery and tariff comparison",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py run --config configs/example_scenario.yaml
  python main.py validate --config configs/example_scenario.yaml
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run offer comparison from YAML config")
    run_parser.add_argument("--config", type=str, required=True,
                            help="Path to YAML configuration file")

    validate_parser = subparsers.add_parser("validate", help="Validate a YAML config")
    validate_parser.add_argument("--config", type=str, required=True,
                                 help="Path to YAML configuration file")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "run":
        run_from_config(Path(args.config))
    elif args.command == "validate":
        validate_config(Path(args.config))


if __name__ == "__main__":
    main()
