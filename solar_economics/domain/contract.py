"""
Electricity contract (company offer) model.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union


@dataclass
class CompanyOffer:
    """
    Electricity supply contract offered by a retailer.

    Attributes:
        name: Offer name
        company_name: Retailer name
        tariff_schedule: Name of the energy tariff schedule
        energy_prices: Energy price per period (EUR/kWh)
        use_market_prices: Bill energy at the hourly market price instead of energy_prices
        surplus_compensation_per_kwh: Compensation for exported energy (EUR/kWh)
        surplus_compensation_capped: Cap monthly compensation at the energy cost
        has_virtual_battery: Carry leftover surplus value forward as credit
        virtual_battery_monthly_fee: Monthly fee for the virtual battery (EUR)
        contracted_power_kw: Contracted power, scalar or per power period (kW)
        power_tariff_schedule: Name of the power schedule (defaults to tariff_schedule)
        power_prices: Power term price per period (EUR/kW/day)
        meter_rental_per_day: Meter rental (EUR/day)
        electricity_tax_percent: Electricity tax (%)
        vat_percent: VAT (%)
    """
    name: str
    company_name: str = ""
    tariff_schedule: Optional[str] = None
    energy_prices: Dict[str, float] = field(default_factory=dict)
    use_market_prices: bool = False
    surplus_compensation_per_kwh: float = 0.0
    surplus_compensation_capped: bool = True
    has_virtual_battery: bool = False
    virtual_battery_monthly_fee: float = 0.0
    contracted_power_kw: Union[float, Dict[str, float]] = 0.0
    power_tariff_schedule: Optional[str] = None
    power_prices: Dict[str, float] = field(default_factory=dict)
    meter_rental_per_day: float = 0.0
    electricity_tax_percent: float = 0.0
    vat_percent: float = 0.0

    def __post_init__(self):
        for attr in ("surplus_compensation_per_kwh", "virtual_battery_monthly_fee",
                     "meter_rental_per_day", "electricity_tax_percent", "vat_percent"):
            if getattr(self, attr) < 0:
                raise ValueError(f"Offer '{self.name}': {attr} must be non-negative")

    @property
    def power_schedule_name(self) -> Optional[str]:
        """Schedule used for the power term (falls back to the energy schedule)."""
        return self.power_tariff_schedule or self.tariff_schedule

    def energy_price_for(self, period: str) -> float:
        return self.energy_prices.get(period, 0.0)

    def power_price_for(self, period: str) -> float:
        return self.power_prices.get(period, 0.0)

    def contracted_power_for(self, period: str) -> float:
        if isinstance(self.contracted_power_kw, dict):
            return self.contracted_power_kw.get(period, 0.0)
        return float(self.contracted_power_kw)
