"""
Metered consumption records and helpers.

Records use the hour convention of Spanish distributor exports:
hour N covers the interval [N-1, N) local time, N in 1-24.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, List, Dict, Any
import pandas as pd
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsumptionRecord:
    """One metered hour of consumption."""
    date: date
    hour: int
    kwh: float

    def __post_init__(self):
        if not (1 <= self.hour <= 24):
            raise ValueError(f"Invalid hour {self.hour} for {self.date}: must be 1-24")
        if self.kwh < 0:
            raise ValueError(f"Negative consumption {self.kwh} kWh on {self.date} hour {self.hour}")


def merge_consumption(*record_sets: Iterable[ConsumptionRecord]) -> List[ConsumptionRecord]:
    """
    Merge several consumption sets, deduplicating by (date, hour).

    Later sets win when the same hour appears more than once.
    """
    merged: Dict[tuple, ConsumptionRecord] = {}
    for records in record_sets:
        for record in records:
            merged[(record.date, record.hour)] = record
    return list(merged.values())


def consumption_statistics(records: List[ConsumptionRecord]) -> Dict[str, Any]:
    """
    Summary statistics of a consumption set.

    Returns:
        Dictionary with total, days, average daily and max hourly kWh,
        covered date range and record count
    """
    if not records:
        return {
            'total_kwh': 0.0,
            'days': 0,
            'avg_daily_kwh': 0.0,
            'max_hour_kwh': 0.0,
            'date_from': None,
            'date_to': None,
            'record_count': 0,
        }

    total_kwh = sum(r.kwh for r in records)
    dates = sorted({r.date for r in records})
    return {
        'total_kwh': total_kwh,
        'days': len(dates),
        'avg_daily_kwh': total_kwh / len(dates),
        'max_hour_kwh': max(r.kwh for r in records),
        'date_from': dates[0],
        'date_to': dates[-1],
        'record_count': len(records),
    }


def load_consumption_csv(file_path: str | Path) -> List[ConsumptionRecord]:
    """
    Load consumption already normalized to ``date,hour,kwh`` columns.

    Args:
        file_path: Path to CSV file

    Returns:
        List of ConsumptionRecord, deduplicated by (date, hour)

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If columns are missing or the file has no rows
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Consumption data file not found: {file_path}")

    df = pd.read_csv(file_path)
    missing = {'date', 'hour', 'kwh'} - set(df.columns)
    if missing:
        raise ValueError(f"Consumption file {file_path} is missing columns: {sorted(missing)}")
    if df.empty:
        raise ValueError(f"Consumption data file is empty: {file_path}")

    dates = pd.to_datetime(df['date']).dt.date
    records = [
        ConsumptionRecord(date=d, hour=int(h), kwh=float(k))
        for d, h, k in zip(dates, df['hour'], df['kwh'])
    ]
    merged = merge_consumption(records)
    if len(merged) != len(records):
        logger.warning(
            f"Dropped {len(records) - len(merged)} duplicate hours from {file_path}"
        )

    logger.info(f"Loaded {len(merged)} consumption records from {file_path}")
    return merged
