"""
Greedy battery dispatch.

Charges from surplus production and discharges into deficits, hour by hour.
This is a fixed self-consumption policy, not an optimizer: the battery never
charges from the grid and never holds energy back for a pricier hour.
"""

from dataclasses import dataclass
from typing import Optional

from solar_economics.domain.battery import Battery


@dataclass(frozen=True)
class DispatchOutcome:
    """
    Energy flows for one hour (kWh).

    Attributes:
        battery_charge: Energy into the battery (>0) or delivered from it (<0)
        battery_loss: Conversion loss booked at charge time
        battery_level: Stored energy after this hour
        grid_purchase: Energy imported from the grid
        grid_surplus: Energy exported to the grid
    """
    battery_charge: float
    battery_loss: float
    battery_level: float
    grid_purchase: float
    grid_surplus: float


class BatteryDispatcher:
    """
    Battery state machine for one simulation run.

    The full round-trip loss is applied when charging; discharge is lossless.
    Without a battery every hour passes straight through to the grid.
    """

    def __init__(self, battery: Optional[Battery] = None):
        self.battery = battery
        self.level_kwh = 0.0

    def dispatch(self, consumption_kwh: float, production_kwh: float) -> DispatchOutcome:
        """
        Dispatch one hour.

        Args:
            consumption_kwh: Household consumption
            production_kwh: Solar production

        Returns:
            DispatchOutcome with the level after this hour
        """
        net = consumption_kwh - production_kwh
        charge = 0.0
        loss = 0.0

        if self.battery is not None and self.battery.capacity_kwh > 0:
            efficiency = self.battery.efficiency
            max_power = self.battery.max_power_kw

            if net > 0:
                discharge = min(self.level_kwh, max_power, net)
                self.level_kwh -= discharge
                net -= discharge
                charge = -discharge
            elif net < 0:
                headroom = (self.battery.capacity_kwh - self.level_kwh) / efficiency
                charge = max(0.0, min(headroom, max_power, -net))
                self.level_kwh = min(self.battery.capacity_kwh, self.level_kwh + charge * efficiency)
                loss = charge * (1 - efficiency)
                net += charge

        return DispatchOutcome(
            battery_charge=charge,
            battery_loss=loss,
            battery_level=self.level_kwh,
            grid_purchase=max(net, 0.0),
            grid_surplus=max(-net, 0.0),
        )

    def reset(self):
        self.level_kwh = 0.0

    def get_soc_fraction(self) -> float:
        """State of charge as fraction of capacity (0 without a battery)."""
        if self.battery is None or self.battery.capacity_kwh == 0:
            return 0.0
        return self.level_kwh / self.battery.capacity_kwh

    def __repr__(self):
        name = self.battery.name if self.battery is not None else "none"
        return f"BatteryDispatcher(battery={name}, level={self.level_kwh:.2f}kWh)"
