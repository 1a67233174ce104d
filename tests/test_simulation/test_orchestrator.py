"""
Tests for the simulation orchestrator
"""
import logging
from datetime import date, timedelta

import pandas as pd
import pytest

from solar_economics.domain.battery import Battery
from solar_economics.domain.consumption import ConsumptionRecord
from solar_economics.domain.contract import CompanyOffer
from solar_economics.domain.installation import SolarInstallation
from solar_economics.infrastructure.pricing import (
    MarketPriceTable,
    create_energy_price_resolver,
    regulated_power_prices,
)
from solar_economics.infrastructure.tariffs import TariffSchedule
from solar_economics.infrastructure.weather.solar_index import SolarProductionIndex
from solar_economics.simulation.orchestrator import (
    HOURLY_COLUMNS,
    MAX_EXTRA_BILLING_PASSES,
    SimulationOrchestrator,
)

WEDNESDAY = date(2024, 1, 17)


@pytest.fixture
def installation():
    return SolarInstallation(name="test", latitude=37.4, longitude=-5.9)


def flat_offer(**overrides):
    terms = dict(
        name="flat",
        tariff_schedule="flat",
        energy_prices={"flat": 0.15},
        surplus_compensation_per_kwh=0.10,
    )
    terms.update(overrides)
    return CompanyOffer(**terms)


def year_of_hours(year, kwh_per_hour):
    records = []
    day = date(year, 1, 1)
    while day.year == year:
        records.extend(ConsumptionRecord(day, hour, kwh_per_hour) for hour in range(1, 25))
        day += timedelta(days=1)
    return records


class TestSimulateHours:
    """Test the hourly trajectory"""

    def test_columns_and_sorting(self, installation):
        """Rows come out chronologically regardless of input order"""
        records = [
            ConsumptionRecord(date(2024, 1, 2), 1, 0.5),
            ConsumptionRecord(date(2024, 1, 1), 2, 0.5),
            ConsumptionRecord(date(2024, 1, 1), 1, 0.5),
        ]
        orchestrator = SimulationOrchestrator(installation, flat_offer(), solar_index=SolarProductionIndex())

        hourly = orchestrator.simulate_hours(records)

        assert list(hourly.columns) == HOURLY_COLUMNS
        assert list(zip(hourly['date'], hourly['hour'])) == [
            (date(2024, 1, 1), 1), (date(2024, 1, 1), 2), (date(2024, 1, 2), 1),
        ]
        assert hourly['energy_cost'].sum() == pytest.approx(1.5 * 0.15)

    def test_battery_shifts_surplus_to_evening(self, installation):
        """Noon surplus stored in the battery covers evening consumption"""
        index = SolarProductionIndex(values={(1, 17, 12): 5.0})
        records = [ConsumptionRecord(WEDNESDAY, 12, 0.0), ConsumptionRecord(WEDNESDAY, 20, 3.0)]
        battery = Battery(name="b", capacity_kwh=10, max_power_w=5000, round_trip_efficiency=90)

        without = SimulationOrchestrator(installation, flat_offer(), solar_index=index).simulate_hours(records)
        with_battery = SimulationOrchestrator(
            installation, flat_offer(), battery=battery, solar_index=index,
        ).simulate_hours(records)

        assert without['grid_purchase'].sum() == pytest.approx(3.0)
        assert without['grid_surplus'].sum() == pytest.approx(5.0)
        assert with_battery['grid_purchase'].sum() == pytest.approx(0.0)
        assert with_battery['grid_surplus'].sum() == pytest.approx(0.0)
        assert with_battery['battery_level'].iloc[-1] == pytest.approx(1.5)

    def test_market_offer_power_term(self, installation):
        """Market-price offers pay regulated power prices for the year"""
        offer = CompanyOffer(
            name="pvpc", tariff_schedule="2.0TD", use_market_prices=True, contracted_power_kw=4.6,
        )
        schedule = TariffSchedule(name="2.0TD", type="2.0TD")
        table = MarketPriceTable(prices={WEDNESDAY: [0.2] * 24})
        orchestrator = SimulationOrchestrator(
            installation, offer, schedule=schedule,
            price_resolver=create_energy_price_resolver(offer, schedule, table),
            solar_index=SolarProductionIndex(),
        )

        hourly = orchestrator.simulate_hours([ConsumptionRecord(WEDNESDAY, 12, 1.0)])

        row = hourly.iloc[0]
        punta = regulated_power_prices(2024)['punta']
        assert row['power_period'] == "punta"
        assert row['tariff_period'] == "punta"
        assert row['energy_price'] == pytest.approx(0.2)
        assert row['power_term_price'] == pytest.approx(punta)
        assert row['power_term_cost'] == pytest.approx(punta * 4.6 / 24)

    def test_separate_power_schedule(self, installation):
        offer = flat_offer(
            power_tariff_schedule="2.0TD",
            contracted_power_kw={"punta": 4.6, "valle": 6.0},
            power_prices={"punta": 0.09, "valle": 0.01},
        )
        orchestrator = SimulationOrchestrator(
            installation, offer,
            schedule=TariffSchedule(name="flat", type="flat"),
            power_schedule=TariffSchedule(name="2.0TD", type="2.0TD"),
            solar_index=SolarProductionIndex(),
        )

        hourly = orchestrator.simulate_hours([
            ConsumptionRecord(WEDNESDAY, 3, 1.0),
            ConsumptionRecord(WEDNESDAY, 12, 1.0),
        ])

        assert list(hourly['tariff_period']) == ["flat", "flat"]
        assert list(hourly['power_period']) == ["valle", "punta"]
        assert hourly['power_term_cost'].tolist() == pytest.approx([0.01 * 6.0 / 24, 0.09 * 4.6 / 24])


class TestRun:
    """Test monthly billing and virtual battery passes"""

    def test_full_offset_year(self, installation):
        """Production matching consumption every hour leaves nothing to pay"""
        kwh = 1000 / 8760
        records = year_of_hours(2023, kwh)
        index = SolarProductionIndex(values={(r.date.month, r.date.day, r.hour): kwh for r in records})

        result = SimulationOrchestrator(installation, flat_offer(), solar_index=index).run(records)

        assert result.total_consumption == pytest.approx(1000.0)
        assert result.total_solar_production == pytest.approx(1000.0)
        assert result.total_annual_cost == pytest.approx(0.0, abs=1e-6)
        assert result.self_consumption_ratio == pytest.approx(1.0)
        assert len(result.monthly_breakdown) == 12
        assert result.monthly_breakdown[0].month == "2023-01"

    def test_single_pass_without_virtual_battery(self, installation):
        index = SolarProductionIndex(values={(1, 15, 12): 10.0})
        records = [ConsumptionRecord(date(2024, 1, 15), 12, 0.0), ConsumptionRecord(date(2024, 2, 15), 12, 2.0)]

        result = SimulationOrchestrator(installation, flat_offer(), solar_index=index).run(records)

        assert result.billing_passes == 1
        assert result.converged is True
        assert result.virtual_battery_balance == 0.0
        assert result.total_annual_cost == pytest.approx(0.3)
        assert result.has_battery is False

    def test_virtual_battery_converges(self, installation):
        """January credit pays February and the year-end balance settles at zero"""
        index = SolarProductionIndex(values={(1, 15, 12): 2.0})
        records = [ConsumptionRecord(date(2024, 1, 15), 12, 0.0), ConsumptionRecord(date(2024, 2, 15), 12, 2.0)]
        offer = flat_offer(has_virtual_battery=True)

        result = SimulationOrchestrator(installation, offer, solar_index=index).run(records)

        assert result.converged is True
        assert result.billing_passes == 2
        assert result.virtual_battery_balance == pytest.approx(0.0)
        assert result.total_annual_cost == pytest.approx(0.1)
        assert result.monthly_breakdown[1].virtual_battery_used == pytest.approx(0.2)

    def test_virtual_battery_pass_cap(self, installation, caplog):
        """A balance that keeps growing stops at the pass cap with a warning"""
        index = SolarProductionIndex(values={(1, 15, 12): 10.0})
        records = [ConsumptionRecord(date(2024, 1, 15), 12, 0.0), ConsumptionRecord(date(2024, 2, 15), 12, 2.0)]
        offer = flat_offer(has_virtual_battery=True)

        with caplog.at_level(logging.WARNING):
            result = SimulationOrchestrator(installation, offer, solar_index=index).run(records)

        assert result.converged is False
        assert result.billing_passes == 1 + MAX_EXTRA_BILLING_PASSES
        assert result.virtual_battery_balance == pytest.approx(0.7 * result.billing_passes)
        assert result.total_annual_cost == pytest.approx(0.0)
        assert "did not settle" in caplog.text

    def test_results_export(self, installation, tmp_path):
        records = [ConsumptionRecord(date(2024, 1, 15), h, 0.5) for h in range(1, 25)]
        result = SimulationOrchestrator(installation, flat_offer(), solar_index=SolarProductionIndex()).run(records)

        result.to_csv(tmp_path / "out")

        monthly = pd.read_csv(tmp_path / "out" / "monthly_summary.csv", index_col="month")
        assert monthly.loc["2024-01", "energy_cost"] == pytest.approx(12 * 0.15)
        assert len(pd.read_csv(tmp_path / "out" / "hourly.csv")) == 24
        assert result.summary()['annual_cost_eur'] == pytest.approx(result.total_annual_cost)
