"""
Solar installation domain model.

Describes panel groups, the obstacles that shade them, and the cached raw
yield series each group was fetched with.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Literal
import logging

logger = logging.getLogger(__name__)


@dataclass
class Obstacle:
    """
    Obstacle casting shade on a panel group.

    Attributes:
        name: Display name
        type: "solid" or "transparent" (trees, fences, nets)
        height: Obstacle height above ground (m)
        azimuth_deg: Center azimuth, clockwise from North (0-359)
        width_m: Physical width of the obstacle (m)
        distance: Horizontal distance from the panel group (m)
        transparency_percent: Light passing through a transparent obstacle (0-100)
    """
    name: str
    type: Literal["solid", "transparent"] = "solid"
    height: float = 0.0
    azimuth_deg: float = 180.0
    width_m: float = 0.0
    distance: float = 0.0
    transparency_percent: Optional[float] = None

    def __post_init__(self):
        if self.type not in ("solid", "transparent"):
            raise ValueError(f"Invalid obstacle type '{self.type}' for '{self.name}'")
        if self.transparency_percent is not None and not (0 <= self.transparency_percent <= 100):
            raise ValueError(
                f"Obstacle '{self.name}' transparency_percent must be between 0 and 100"
            )

    @property
    def transparency(self) -> float:
        """Fraction of light let through (0 for solid obstacles)."""
        if self.type == "solid":
            return 0.0
        percent = 50.0 if self.transparency_percent is None else self.transparency_percent
        return percent / 100.0


@dataclass
class PanelGroup:
    """
    Group of panels sharing orientation and mounting.

    Attributes:
        name: Unique name within the installation
        peak_power_wp: Total group peak power (Wp)
        tilt: Panel tilt (degrees from horizontal)
        azimuth: Panel azimuth (0=N, 90=E, 180=S, 270=W)
        height_from_ground: Height of the lower panel edge (m)
        panel_width_cm: Physical panel width (short side in portrait), 0 if unknown
        panel_height_cm: Physical panel height (long side in portrait), 0 if unknown
        panel_orientation: "portrait" or "landscape"
        obstacles: Obstacles shading this group
    """
    name: str
    peak_power_wp: float
    tilt: float = 30.0
    azimuth: float = 180.0
    height_from_ground: float = 0.0
    panel_width_cm: float = 0.0
    panel_height_cm: float = 0.0
    panel_orientation: Literal["portrait", "landscape"] = "portrait"
    obstacles: List[Obstacle] = field(default_factory=list)

    def __post_init__(self):
        if self.peak_power_wp < 0:
            raise ValueError(f"Panel group '{self.name}' peak_power_wp must be non-negative")
        if self.panel_orientation not in ("portrait", "landscape"):
            raise ValueError(
                f"Invalid panel_orientation '{self.panel_orientation}' for '{self.name}'"
            )

    @property
    def peak_power_kw(self) -> float:
        return self.peak_power_wp / 1000.0

    @property
    def panel_tilt_height_m(self) -> float:
        """Panel length along the tilt axis in metres (0 when dimensions are unknown)."""
        if self.panel_orientation == "landscape":
            return self.panel_width_cm / 100.0
        return self.panel_height_cm / 100.0


@dataclass(frozen=True)
class FetchParameters:
    """Parameters a raw yield series was computed with."""
    peak_power_kw: float
    tilt: float
    azimuth: float
    system_loss: float
    lat: float
    lon: float


@dataclass(frozen=True)
class RawYieldSample:
    """
    One raw yield sample.

    Attributes:
        time: UTC timestamp in "YYYYMMDD:HHMM" format
        power_w: Expected generation for the group (W)
    """
    time: str
    power_w: float


@dataclass
class GroupRawYield:
    """Multi-year raw yield samples for one panel group."""
    group_name: str
    samples: List[RawYieldSample] = field(default_factory=list)
    fetch_params: Optional[FetchParameters] = None

    def __len__(self) -> int:
        return len(self.samples)


@dataclass
class SolarInstallation:
    """
    Complete PV installation at one location.

    Attributes:
        name: Installation name
        latitude: Site latitude (degrees)
        longitude: Site longitude (degrees)
        system_loss: System loss used for yield acquisition (%)
        timezone: Local timezone used to key production by local clock hour
        panel_groups: Panel groups
        raw_yield: Cached raw yield per panel group
    """
    name: str
    latitude: float
    longitude: float
    system_loss: float = 14.0
    timezone: str = "Europe/Madrid"
    panel_groups: List[PanelGroup] = field(default_factory=list)
    raw_yield: List[GroupRawYield] = field(default_factory=list)

    def __post_init__(self):
        if not (-90 <= self.latitude <= 90):
            raise ValueError(f"Invalid latitude: {self.latitude}")
        if not (-180 <= self.longitude <= 180):
            raise ValueError(f"Invalid longitude: {self.longitude}")
        names = [g.name for g in self.panel_groups]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate panel group names in installation '{self.name}'")

    def get_group(self, name: str) -> Optional[PanelGroup]:
        for group in self.panel_groups:
            if group.name == name:
                return group
        return None

    @property
    def peak_power_kw(self) -> float:
        return sum(g.peak_power_kw for g in self.panel_groups)
