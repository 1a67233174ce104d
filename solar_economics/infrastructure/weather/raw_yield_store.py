"""
CSV storage for cached raw yield.

One row per sample with the group name, the PVGIS timestamp and power, plus
the fetch parameters the series was computed with (repeated per row).
"""

from pathlib import Path
from typing import List
import logging
import pandas as pd

from solar_economics.domain.installation import FetchParameters, GroupRawYield, RawYieldSample

logger = logging.getLogger(__name__)

FETCH_COLUMNS = ['peak_power_kw', 'tilt', 'azimuth', 'system_loss', 'lat', 'lon']


def save_raw_yield_csv(raw_yield: List[GroupRawYield], file_path: str | Path) -> None:
    """Write raw yield for all groups to one CSV file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    frames = []
    for group_yield in raw_yield:
        df = pd.DataFrame({
            'group': group_yield.group_name,
            'time': [s.time for s in group_yield.samples],
            'power_w': [s.power_w for s in group_yield.samples],
        })
        for col in FETCH_COLUMNS:
            df[col] = getattr(group_yield.fetch_params, col) if group_yield.fetch_params else None
        frames.append(df)

    columns = ['group', 'time', 'power_w'] + FETCH_COLUMNS
    combined = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame(columns=columns)
    combined.to_csv(file_path, index=False)
    logger.info(f"Saved {len(combined)} raw yield samples to {file_path}")


def load_raw_yield_csv(file_path: str | Path) -> List[GroupRawYield]:
    """
    Load raw yield written by save_raw_yield_csv.

    Fetch parameter columns are optional; without them the series cannot be
    rescaled or checked for staleness.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If required columns are missing
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Raw yield file not found: {file_path}")

    df = pd.read_csv(file_path, dtype={'group': str, 'time': str})
    missing = {'group', 'time', 'power_w'} - set(df.columns)
    if missing:
        raise ValueError(f"Raw yield file {file_path} is missing columns: {sorted(missing)}")

    has_fetch_params = all(col in df.columns for col in FETCH_COLUMNS)
    raw_yield = []
    for group_name, group_df in df.groupby('group', sort=False):
        fetch_params = None
        if has_fetch_params and group_df[FETCH_COLUMNS].notna().values.all():
            first = group_df.iloc[0]
            fetch_params = FetchParameters(**{col: float(first[col]) for col in FETCH_COLUMNS})

        samples = [
            RawYieldSample(time=t, power_w=float(p))
            for t, p in zip(group_df['time'], group_df['power_w'])
        ]
        raw_yield.append(GroupRawYield(group_name=group_name, samples=samples, fetch_params=fetch_params))

    logger.info(f"Loaded raw yield for {len(raw_yield)} panel groups from {file_path}")
    return raw_yield
