"""
Expected production index.

Turns multi-year raw yield samples into one "typical year" lookup keyed by
local (month, day, hour 1-24), applying obstacle shading and linear
peak-power rescaling. Calendar year is ignored on lookup.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import pandas as pd
import pytz

from solar_economics.domain.installation import (
    FetchParameters,
    GroupRawYield,
    PanelGroup,
    SolarInstallation,
)
from .shadows import shadow_factor

logger = logging.getLogger(__name__)

IndexKey = Tuple[int, int, int]


def peak_power_scale(fetch_params: Optional[FetchParameters], current_peak_kw: float) -> float:
    """
    Linear rescale factor for a peak power change since acquisition.

    Returns 1 when the fetch parameters are unknown or record no peak power.
    """
    if fetch_params is None or fetch_params.peak_power_kw <= 0:
        return 1.0
    return current_peak_kw / fetch_params.peak_power_kw


def stale_parameters(
    fetch_params: Optional[FetchParameters],
    group: PanelGroup,
    system_loss: float,
) -> List[str]:
    """
    Geometry/loss differences that make cached raw yield stale.

    These cannot be rescaled; the raw yield must be re-acquired.

    Returns:
        Human readable differences, e.g. ["tilt: 30->35"]
    """
    if fetch_params is None:
        return []

    stale = []
    if fetch_params.tilt != group.tilt:
        stale.append(f"tilt: {fetch_params.tilt}->{group.tilt}")
    if fetch_params.azimuth != group.azimuth:
        stale.append(f"azimuth: {fetch_params.azimuth}->{group.azimuth}")
    if fetch_params.system_loss != system_loss:
        stale.append(f"loss: {fetch_params.system_loss}->{system_loss}")
    return stale


def parse_yield_times(times: pd.Series, timezone: str) -> pd.DataFrame:
    """
    Convert "YYYYMMDD:HHMM" UTC timestamps to local keys.

    Minutes >= 30 round up to the next hour. Local hour follows the 1-24
    convention (hour 1 = 00:00-01:00 local).

    Returns:
        DataFrame with month, day, hour (local) and utc_hour columns
    """
    utc = pd.to_datetime(times, format="%Y%m%d:%H%M", utc=True)
    rounded = utc.dt.floor("h") + pd.to_timedelta((utc.dt.minute >= 30).astype(int), unit="h")
    local = rounded.dt.tz_convert(pytz.timezone(timezone))

    return pd.DataFrame({
        'month': local.dt.month.values,
        'day': local.dt.day.values,
        'hour': local.dt.hour.values + 1,
        'utc_hour': rounded.dt.hour.values,
    })


@dataclass
class SolarProductionIndex:
    """
    Installation-wide expected production lookup.

    Attributes:
        values: (month, day, hour 1-24) -> expected kWh
    """
    values: Dict[IndexKey, float] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, month: int, day: int, hour: int) -> float:
        return self.values.get((month, day, hour), 0.0)

    def annual_total(self) -> float:
        return float(sum(self.values.values()))

    def to_series(self) -> pd.Series:
        """Index as a Series with a (month, day, hour) MultiIndex."""
        if not self.values:
            return pd.Series(dtype=float, name='production_kwh')
        index = pd.MultiIndex.from_tuples(sorted(self.values), names=['month', 'day', 'hour'])
        return pd.Series([self.values[k] for k in index], index=index, name='production_kwh')


def build_group_profile(
    group_yield: GroupRawYield,
    group: PanelGroup,
    installation: SolarInstallation,
) -> pd.Series:
    """
    Average shaded production for one panel group.

    Returns:
        Series of kWh indexed by (month, day, hour)
    """
    scale = peak_power_scale(group_yield.fetch_params, group.peak_power_kw)
    if scale != 1:
        stored = group_yield.fetch_params.peak_power_kw
        logger.info(
            f"Scaling raw yield of '{group.name}': {stored} kWp -> "
            f"{group.peak_power_kw} kWp (x{scale:.3f})"
        )

    stale = stale_parameters(group_yield.fetch_params, group, installation.system_loss)
    if stale:
        logger.warning(
            f"Raw yield for '{group.name}' is stale ({', '.join(stale)}). "
            f"Re-fetch recommended."
        )

    keys = parse_yield_times(
        pd.Series([s.time for s in group_yield.samples]),
        installation.timezone,
    )
    power_w = pd.Series([s.power_w for s in group_yield.samples], dtype=float)

    # Shading depends only on (utc_hour, month); sun position approximates solar time by UTC
    pairs = keys[['utc_hour', 'month']].drop_duplicates()
    factors = {
        (h, m): shadow_factor(
            group.obstacles, h, m, installation.latitude,
            group.height_from_ground, group.panel_tilt_height_m, group.tilt,
        )
        for h, m in pairs.itertuples(index=False)
    }
    shade = [factors[(h, m)] for h, m in zip(keys['utc_hour'], keys['month'])]

    keys['kwh'] = (power_w.values / 1000.0 * scale * pd.Series(shade).values).clip(min=0)
    return keys.groupby(['month', 'day', 'hour'])['kwh'].mean()


def build_solar_index(installation: SolarInstallation) -> SolarProductionIndex:
    """
    Build the installation-wide production index.

    Each group is averaged across however many years of samples it has,
    then group averages are summed per key.
    """
    profiles = []
    for group_yield in installation.raw_yield:
        group = installation.get_group(group_yield.group_name)
        if group is None:
            logger.warning(
                f"Raw yield for unknown panel group '{group_yield.group_name}' ignored"
            )
            continue
        if len(group_yield) == 0:
            continue
        profiles.append(build_group_profile(group_yield, group, installation))

    if not profiles:
        logger.warning(f"No raw yield available for installation '{installation.name}'")
        return SolarProductionIndex()

    combined = pd.concat(profiles).groupby(level=['month', 'day', 'hour']).sum()
    values = {
        (int(m), int(d), int(h)): float(v)
        for (m, d, h), v in combined.items()
    }

    index = SolarProductionIndex(values=values)
    logger.info(
        f"Built production index for '{installation.name}': {len(index)} hours, "
        f"{index.annual_total():.0f} kWh/year"
    )
    return index
