"""
Simulation orchestrator.

Drives one (offer, battery) simulation over a year of consumption: hourly
production lookup, battery dispatch, tariff classification and cost fields,
then the monthly billing pass. When the offer has a virtual battery the
billing pass is repeated until the year-end credit balance settles, since
January's bill depends on December's leftover credit.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import List, Optional, Tuple
import logging
import pandas as pd

from solar_economics.domain.battery import Battery
from solar_economics.domain.consumption import ConsumptionRecord
from solar_economics.domain.contract import CompanyOffer
from solar_economics.domain.installation import SolarInstallation
from solar_economics.infrastructure.pricing.energy_price_resolver import (
    EnergyPriceResolver,
    create_energy_price_resolver,
)
from solar_economics.infrastructure.pricing.regulated_power_prices import regulated_power_prices
from solar_economics.infrastructure.tariffs.schedule import (
    TariffSchedule,
    resolve_power_tariff_period,
    resolve_tariff_period,
)
from solar_economics.infrastructure.weather.solar_index import SolarProductionIndex, build_solar_index
from .battery_dispatch import BatteryDispatcher
from .bill_calculator import calculate_bill
from .simulation_results import MonthlyBreakdown, SimulationResult, NO_BATTERY

logger = logging.getLogger(__name__)

MAX_EXTRA_BILLING_PASSES = 10
BALANCE_TOLERANCE_EUR = 0.01


@dataclass(frozen=True)
class HourlyResult:
    """One simulated hour (energy in kWh, money in EUR)."""
    date: date
    hour: int
    consumption: float
    solar_production: float
    battery_charge: float
    battery_loss: float
    battery_level: float
    grid_purchase: float
    grid_surplus: float
    tariff_period: str
    power_period: str
    energy_price: float
    power_term_price: float
    power_term_cost: float
    energy_cost: float
    surplus_value: float


HOURLY_COLUMNS = list(HourlyResult.__dataclass_fields__)


class SimulationOrchestrator:
    """
    Runs one offer against one battery option.

    Each orchestrator owns its dispatcher and balance state, so independent
    instances can run concurrently over a shared production index.
    """

    def __init__(
        self,
        installation: SolarInstallation,
        offer: CompanyOffer,
        battery: Optional[Battery] = None,
        schedule: Optional[TariffSchedule] = None,
        power_schedule: Optional[TariffSchedule] = None,
        price_resolver: Optional[EnergyPriceResolver] = None,
        solar_index: Optional[SolarProductionIndex] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            installation: PV installation (used to build the index if none given)
            offer: Contract to bill against
            battery: Battery option (None = no battery)
            schedule: Energy tariff schedule (None = flat)
            power_schedule: Power tariff schedule (defaults to schedule)
            price_resolver: Batched energy price resolver (defaults to schedule prices)
            solar_index: Prebuilt production index
        """
        self.installation = installation
        self.offer = offer
        self.battery = battery
        self.schedule = schedule
        self.power_schedule = power_schedule if power_schedule is not None else schedule
        self.price_resolver = price_resolver or create_energy_price_resolver(offer, schedule)
        self.solar_index = solar_index
        self.dispatcher = BatteryDispatcher(battery)

    def _power_term(self, day: date, power_period: str) -> Tuple[float, float]:
        """(price per kW-day, contracted kW) for an hour."""
        if self.offer.use_market_prices:
            regulated = regulated_power_prices(day.year)
            price = regulated.get(power_period, regulated['punta'])
        else:
            price = self.offer.power_price_for(power_period)
        return price, self.offer.contracted_power_for(power_period)

    def simulate_hours(self, consumption: List[ConsumptionRecord]) -> pd.DataFrame:
        """
        Hourly trajectory for the consumption series.

        Returns:
            DataFrame with one row per record, chronologically sorted
        """
        if self.solar_index is None:
            self.solar_index = build_solar_index(self.installation)

        records = sorted(consumption, key=lambda r: (r.date, r.hour))
        energy_prices = self.price_resolver([(r.date, r.hour) for r in records])

        self.dispatcher.reset()
        rows = []
        for record, energy_price in zip(records, energy_prices):
            production = self.solar_index.get(record.date.month, record.date.day, record.hour)
            outcome = self.dispatcher.dispatch(record.kwh, production)

            tariff_period = resolve_tariff_period(self.schedule, record.date, record.hour)
            power_period = resolve_power_tariff_period(self.power_schedule, record.date, record.hour)
            power_price, contracted_kw = self._power_term(record.date, power_period)

            rows.append(HourlyResult(
                date=record.date,
                hour=record.hour,
                consumption=record.kwh,
                solar_production=production,
                battery_charge=outcome.battery_charge,
                battery_loss=outcome.battery_loss,
                battery_level=outcome.battery_level,
                grid_purchase=outcome.grid_purchase,
                grid_surplus=outcome.grid_surplus,
                tariff_period=tariff_period,
                power_period=power_period,
                energy_price=float(energy_price),
                power_term_price=power_price,
                power_term_cost=power_price * contracted_kw / 24,
                energy_cost=outcome.grid_purchase * float(energy_price),
                surplus_value=outcome.grid_surplus * self.offer.surplus_compensation_per_kwh,
            ))

        return pd.DataFrame([asdict(r) for r in rows], columns=HOURLY_COLUMNS)

    def _billing_pass(
        self,
        months: List[Tuple[str, pd.DataFrame]],
        start_balance: float,
    ) -> Tuple[List[MonthlyBreakdown], float]:
        balance = start_balance
        breakdown = []
        for month, hours in months:
            bill = calculate_bill(hours, self.offer, balance)
            balance = bill.new_virtual_battery_balance

            consumption_kwh = float(hours['consumption'].sum())
            solar_kwh = float(hours['solar_production'].sum())
            surplus_kwh = float(hours['grid_surplus'].sum())
            self_consumed = solar_kwh - surplus_kwh

            breakdown.append(MonthlyBreakdown(
                month=month,
                energy_cost=bill.energy_cost,
                surplus_compensation=bill.surplus_compensation,
                virtual_battery_deposited=bill.virtual_battery_deposited,
                virtual_battery_used=bill.virtual_battery_used,
                virtual_battery_balance=balance,
                virtual_battery_fee=bill.virtual_battery_fee,
                power_term=bill.power_term,
                meter_rental=bill.meter_rental,
                electricity_tax=bill.electricity_tax,
                vat=bill.vat,
                total=bill.total,
                self_consumption_ratio=self_consumed / consumption_kwh if consumption_kwh > 0 else 0.0,
                grid_purchase_kwh=float(hours['grid_purchase'].sum()),
                grid_surplus_kwh=surplus_kwh,
                consumption_kwh=consumption_kwh,
                solar_production_kwh=solar_kwh,
            ))
        return breakdown, balance

    def run(self, consumption: List[ConsumptionRecord]) -> SimulationResult:
        """
        Simulate the consumption series and bill it month by month.

        Returns:
            SimulationResult for this offer and battery
        """
        hourly = self.simulate_hours(consumption)

        if hourly.empty:
            months = []
        else:
            month_keys = hourly['date'].map(lambda d: f"{d.year:04d}-{d.month:02d}")
            months = [(m, group) for m, group in hourly.groupby(month_keys, sort=True)]

        breakdown, balance = self._billing_pass(months, 0.0)
        passes = 1
        converged = True

        if self.offer.has_virtual_battery:
            converged = False
            for _ in range(MAX_EXTRA_BILLING_PASSES):
                previous = balance
                breakdown, balance = self._billing_pass(months, balance)
                passes += 1
                if abs(balance - previous) < BALANCE_TOLERANCE_EUR:
                    converged = True
                    break
            if not converged:
                logger.warning(
                    f"Virtual battery balance for '{self.offer.name}' did not settle after "
                    f"{passes} billing passes (last balance {balance:.2f} EUR)"
                )

        total_consumption = float(hourly['consumption'].sum())
        total_production = float(hourly['solar_production'].sum())
        total_surplus = float(hourly['grid_surplus'].sum())
        self_consumed = total_production - total_surplus

        result = SimulationResult(
            offer_name=self.offer.name,
            company_name=self.offer.company_name,
            battery_name=self.battery.name if self.battery is not None else NO_BATTERY,
            has_battery=self.battery is not None,
            battery_price_eur=self.battery.price_eur if self.battery is not None else None,
            total_annual_cost=sum(m.total for m in breakdown),
            total_consumption=total_consumption,
            total_solar_production=total_production,
            total_grid_purchase=float(hourly['grid_purchase'].sum()),
            total_grid_surplus=total_surplus,
            total_surplus_compensation=sum(m.surplus_compensation for m in breakdown),
            self_consumption_ratio=self_consumed / total_consumption if total_consumption > 0 else 0.0,
            virtual_battery_balance=balance,
            billing_passes=passes,
            converged=converged,
            monthly_breakdown=breakdown,
            hourly=hourly,
        )

        logger.info(
            f"Simulated '{result.offer_name}' with {result.battery_name}: "
            f"{result.total_annual_cost:.2f} EUR/year, "
            f"self-consumption {result.self_consumption_ratio:.1%}"
        )
        return result
