"""
Tests for offer x battery comparison
"""
from datetime import date

import pytest

from solar_economics.domain.battery import Battery
from solar_economics.domain.consumption import ConsumptionRecord
from solar_economics.domain.contract import CompanyOffer
from solar_economics.domain.installation import (
    FetchParameters,
    GroupRawYield,
    PanelGroup,
    RawYieldSample,
    SolarInstallation,
)
from solar_economics.infrastructure.tariffs import TariffSchedule
from solar_economics.simulation.comparison import SimulationError, payback_years, run_comparison
from solar_economics.simulation.simulation_results import NO_BATTERY, SimulationResult

DAYS = [date(2024, 1, d) for d in range(15, 22)]


@pytest.fixture
def installation():
    """3 kWp producing 3 kWh at local noon (11:00 UTC) every day of the week"""
    samples = [RawYieldSample(f"{d:%Y%m%d}:1110", 3000.0) for d in DAYS]
    return SolarInstallation(
        name="test", latitude=37.4, longitude=-5.9,
        panel_groups=[PanelGroup(name="south", peak_power_wp=3000)],
        raw_yield=[GroupRawYield("south", samples, FetchParameters(3.0, 30, 180, 14, 37.4, -5.9))],
    )


@pytest.fixture
def consumption():
    """Nothing at noon, 2 kWh in the evening"""
    records = []
    for d in DAYS:
        records.append(ConsumptionRecord(d, 13, 0.0))
        records.append(ConsumptionRecord(d, 21, 2.0))
    return records


@pytest.fixture
def schedules():
    return {
        "flat": TariffSchedule(name="flat", type="flat"),
        "2.0TD": TariffSchedule(name="2.0TD", type="2.0TD"),
    }


@pytest.fixture
def offers():
    return [
        CompanyOffer(name="expensive", tariff_schedule="flat", energy_prices={"flat": 0.30},
                     surplus_compensation_per_kwh=0.05),
        CompanyOffer(name="cheap", tariff_schedule="2.0TD",
                     energy_prices={"punta": 0.20, "llano": 0.12, "valle": 0.08},
                     surplus_compensation_per_kwh=0.05),
    ]


@pytest.fixture
def battery():
    return Battery(name="5kWh", capacity_kwh=5, max_power_w=3000, round_trip_efficiency=90, price_eur=3000)


def make_result(offer_name, battery_name, cost, price=None, has_battery=None):
    if has_battery is None:
        has_battery = battery_name != NO_BATTERY
    return SimulationResult(
        offer_name=offer_name, company_name="", battery_name=battery_name, has_battery=has_battery,
        battery_price_eur=price, total_annual_cost=cost,
        total_consumption=0, total_solar_production=0, total_grid_purchase=0,
        total_grid_surplus=0, total_surplus_compensation=0,
        self_consumption_ratio=0, virtual_battery_balance=0,
    )


class TestRunComparison:
    """Test the combination grid"""

    def test_all_combinations_sorted_by_cost(self, consumption, installation, offers, battery, schedules):
        results = run_comparison(consumption, installation, offers, [battery], schedules, max_workers=2)

        assert len(results) == 4
        costs = [r.total_annual_cost for r in results]
        assert costs == sorted(costs)
        assert {(r.offer_name, r.battery_name) for r in results} == {
            ("expensive", NO_BATTERY), ("expensive", "5kWh"),
            ("cheap", NO_BATTERY), ("cheap", "5kWh"),
        }

    def test_battery_reduces_cost(self, consumption, installation, offers, battery, schedules):
        results = run_comparison(consumption, installation, offers[:1], [battery], schedules, max_workers=1)

        by_battery = {r.battery_name: r for r in results}
        assert by_battery["5kWh"].total_annual_cost < by_battery[NO_BATTERY].total_annual_cost
        assert by_battery["5kWh"].total_grid_purchase < by_battery[NO_BATTERY].total_grid_purchase

    def test_without_no_battery_option(self, consumption, installation, offers, battery, schedules):
        results = run_comparison(
            consumption, installation, offers, [battery], schedules, include_no_battery=False, max_workers=1,
        )
        assert all(r.has_battery for r in results)

    def test_empty_consumption(self, installation, offers, battery, schedules):
        with pytest.raises(ValueError):
            run_comparison([], installation, offers, [battery], schedules)

    def test_no_offers(self, consumption, installation, battery, schedules):
        with pytest.raises(ValueError):
            run_comparison(consumption, installation, [], [battery], schedules)

    def test_no_battery_options(self, consumption, installation, offers, schedules):
        with pytest.raises(ValueError):
            run_comparison(consumption, installation, offers, [], schedules, include_no_battery=False)

    def test_unknown_schedule(self, consumption, installation, battery, schedules):
        offer = CompanyOffer(name="bad", tariff_schedule="missing")
        with pytest.raises(ValueError, match="missing"):
            run_comparison(consumption, installation, [offer], [battery], schedules)

    def test_failed_combination_raises(self, consumption, installation, battery, schedules):
        """A market-price offer without prices fails the whole comparison"""
        offer = CompanyOffer(name="pvpc", tariff_schedule="2.0TD", use_market_prices=True)
        with pytest.raises(SimulationError, match="pvpc"):
            run_comparison(consumption, installation, [offer], [battery], schedules, max_workers=1)

    def test_failed_combination_without_battery_label(self, consumption, installation, schedules):
        offer = CompanyOffer(name="pvpc", tariff_schedule="2.0TD", use_market_prices=True)
        with pytest.raises(SimulationError, match=f"'pvpc' with {NO_BATTERY}"):
            run_comparison(consumption, installation, [offer], [], schedules, max_workers=1)

    def test_battery_named_like_no_battery(self, consumption, installation, offers, schedules):
        """A battery is recognised by the run, not by its name"""
        named = Battery(name=NO_BATTERY, capacity_kwh=5, max_power_w=3000, price_eur=3000)
        results = run_comparison(
            consumption, installation, offers[:1], [named], schedules, include_no_battery=False, max_workers=1,
        )
        assert results[0].has_battery is True


class TestPaybackYears:
    """Test battery payback"""

    def test_payback(self):
        results = [make_result("a", NO_BATTERY, 1000.0), make_result("a", "b", 700.0, price=3000.0)]
        assert payback_years(results[1], results) == pytest.approx(10.0)

    def test_no_battery(self):
        result = make_result("a", NO_BATTERY, 1000.0)
        assert payback_years(result, [result]) is None

    def test_no_price(self):
        results = [make_result("a", NO_BATTERY, 1000.0), make_result("a", "b", 700.0)]
        assert payback_years(results[1], results) is None

    def test_no_baseline(self):
        """The baseline must be the same offer without a battery"""
        results = [make_result("other", NO_BATTERY, 1000.0), make_result("a", "b", 700.0, price=3000.0)]
        assert payback_years(results[1], results) is None

    def test_no_savings(self):
        results = [make_result("a", NO_BATTERY, 600.0), make_result("a", "b", 700.0, price=3000.0)]
        assert payback_years(results[1], results) is None

    def test_battery_named_like_baseline(self):
        """Payback works for a battery whose name matches the no-battery label"""
        baseline = make_result("a", NO_BATTERY, 1000.0, has_battery=False)
        named = make_result("a", NO_BATTERY, 700.0, price=3000.0, has_battery=True)
        assert payback_years(named, [named, baseline]) == pytest.approx(10.0)
