"""
Physical battery definition.

Stateless: the charge level is transient simulation state owned by
BatteryDispatcher.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Battery:
    """
    Home battery.

    Attributes:
        name: Model name
        capacity_kwh: Usable capacity (kWh)
        max_power_w: Maximum charge/discharge power (W)
        round_trip_efficiency: Round-trip efficiency (%)
        price_eur: Installed price, used for payback (optional)
    """
    name: str
    capacity_kwh: float
    max_power_w: float
    round_trip_efficiency: float = 90.0
    price_eur: Optional[float] = None

    def __post_init__(self):
        if self.capacity_kwh < 0:
            raise ValueError(f"Battery '{self.name}' capacity_kwh must be non-negative")
        if self.max_power_w < 0:
            raise ValueError(f"Battery '{self.name}' max_power_w must be non-negative")
        if not (0 < self.round_trip_efficiency <= 100):
            raise ValueError(
                f"Battery '{self.name}' round_trip_efficiency must be between 0 and 100"
            )

    @property
    def max_power_kw(self) -> float:
        return self.max_power_w / 1000.0

    @property
    def efficiency(self) -> float:
        """Round-trip efficiency as fraction (0-1)."""
        return self.round_trip_efficiency / 100.0

    def __repr__(self):
        return (f"Battery({self.name!r}, capacity={self.capacity_kwh:.1f}kWh, "
                f"power={self.max_power_kw:.1f}kW, "
                f"efficiency={self.round_trip_efficiency:.0f}%)")
