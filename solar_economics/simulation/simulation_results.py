"""
Simulation result structures.

One SimulationResult per (offer, battery) combination, holding the hourly
trajectory, the monthly bill breakdown and annual totals.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional
import pandas as pd

NO_BATTERY = "No battery"


@dataclass(frozen=True)
class MonthlyBreakdown:
    """Bill and energy totals for one calendar month ("YYYY-MM")."""
    month: str
    energy_cost: float
    surplus_compensation: float
    virtual_battery_deposited: float
    virtual_battery_used: float
    virtual_battery_balance: float
    virtual_battery_fee: float
    power_term: float
    meter_rental: float
    electricity_tax: float
    vat: float
    total: float
    self_consumption_ratio: float
    grid_purchase_kwh: float
    grid_surplus_kwh: float
    consumption_kwh: float
    solar_production_kwh: float


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of one simulation run.

    Attributes:
        offer_name: Contract simulated
        company_name: Retailer of the contract
        battery_name: Battery simulated ("No battery" when none)
        has_battery: Whether a battery was simulated
        battery_price_eur: Battery price, used for payback
        total_annual_cost: Sum of monthly bill totals (EUR)
        total_consumption: kWh
        total_solar_production: kWh
        total_grid_purchase: kWh
        total_grid_surplus: kWh
        total_surplus_compensation: EUR
        self_consumption_ratio: (production - exported) / consumption
        virtual_battery_balance: Credit left at year end (EUR)
        billing_passes: Billing passes run (1 without virtual battery)
        converged: Whether the virtual battery balance settled within the pass cap
        monthly_breakdown: One entry per month, chronological
        hourly: Hourly trajectory
    """
    offer_name: str
    company_name: str
    battery_name: str
    has_battery: bool
    battery_price_eur: Optional[float]
    total_annual_cost: float
    total_consumption: float
    total_solar_production: float
    total_grid_purchase: float
    total_grid_surplus: float
    total_surplus_compensation: float
    self_consumption_ratio: float
    virtual_battery_balance: float
    billing_passes: int = 1
    converged: bool = True
    monthly_breakdown: List[MonthlyBreakdown] = field(default_factory=list)
    hourly: pd.DataFrame = field(default_factory=pd.DataFrame, repr=False, compare=False)

    def monthly_summary(self) -> pd.DataFrame:
        """Monthly breakdown as a DataFrame indexed by month."""
        if not self.monthly_breakdown:
            return pd.DataFrame()
        return pd.DataFrame([asdict(m) for m in self.monthly_breakdown]).set_index('month')

    def to_csv(self, output_dir: Path) -> None:
        """
        Export hourly trajectory and monthly summary to CSV files.

        Args:
            output_dir: Directory to save CSV files
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        self.hourly.to_csv(output_dir / 'hourly.csv', index=False)
        self.monthly_summary().to_csv(output_dir / 'monthly_summary.csv')
        pd.DataFrame([self.summary()]).to_csv(output_dir / 'summary.csv', index=False)

    def summary(self) -> Dict[str, Any]:
        return {
            'offer': self.offer_name,
            'company': self.company_name,
            'battery': self.battery_name,
            'annual_cost_eur': self.total_annual_cost,
            'consumption_kwh': self.total_consumption,
            'solar_production_kwh': self.total_solar_production,
            'grid_purchase_kwh': self.total_grid_purchase,
            'grid_surplus_kwh': self.total_grid_surplus,
            'surplus_compensation_eur': self.total_surplus_compensation,
            'self_consumption_ratio': self.self_consumption_ratio,
            'virtual_battery_balance_eur': self.virtual_battery_balance,
            'billing_passes': self.billing_passes,
            'converged': self.converged,
        }

