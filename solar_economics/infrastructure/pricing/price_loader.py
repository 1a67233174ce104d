"""
Market price table with loaders.

Hourly market prices are kept per local date as 24 values (EUR/kWh,
index = clock hour 0-23). Handles EUR/MWh conversion and timezone
normalization of CSV timestamps.
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional
import logging
import numpy as np
import pandas as pd
import pytz

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


@dataclass
class MarketPriceTable:
    """
    Hourly market prices keyed by local date.

    Attributes:
        prices: date -> 24 prices in EUR/kWh (None where unknown)
        source: Data source identifier ("file", "ree_api", "cache", "memory")
    """
    prices: Dict[date, List[Optional[float]]] = field(default_factory=dict)
    source: str = "memory"

    def __post_init__(self):
        for day, values in self.prices.items():
            if len(values) != HOURS_PER_DAY:
                raise ValueError(f"Expected {HOURS_PER_DAY} prices for {day}, got {len(values)}")

    def __len__(self) -> int:
        return len(self.prices)

    def __contains__(self, day: date) -> bool:
        return day in self.prices

    def get(self, day: date, clock_hour: int) -> Optional[float]:
        """Price for a clock hour (0-23), or None when not available."""
        values = self.prices.get(day)
        if values is None:
            return None
        return values[clock_hour]

    def missing_dates(self, dates: Iterable[date]) -> List[date]:
        return sorted({d for d in dates if d not in self.prices})

    def to_series(self) -> pd.Series:
        """Prices as a Series indexed by local hourly timestamp."""
        timestamps = []
        values = []
        for day in sorted(self.prices):
            for hour, price in enumerate(self.prices[day]):
                timestamps.append(pd.Timestamp(day) + pd.Timedelta(hours=hour))
                values.append(np.nan if price is None else price)
        return pd.Series(values, index=pd.DatetimeIndex(timestamps), name='price_eur_kwh')

    def get_statistics(self) -> dict:
        series = self.to_series().dropna()
        if series.empty:
            return {'count': 0}
        return {
            'min': float(series.min()),
            'max': float(series.max()),
            'mean': float(series.mean()),
            'count': int(series.count()),
        }

    @classmethod
    def from_series(cls, series: pd.Series, source: str = "memory") -> "MarketPriceTable":
        """
        Build from a Series indexed by timezone-naive local timestamps.

        Duplicate timestamps (DST fall-back hour) keep the first value.
        """
        series = series[~series.index.duplicated(keep='first')]
        prices: Dict[date, List[Optional[float]]] = {}
        for timestamp, value in series.items():
            day = timestamp.date()
            if day not in prices:
                prices[day] = [None] * HOURS_PER_DAY
            prices[day][timestamp.hour] = None if pd.isna(value) else float(value)
        return cls(prices=prices, source=source)


class PriceLoader:
    """Loader for hourly market prices."""

    def __init__(self, timezone: str = "Europe/Madrid"):
        self.timezone = timezone

    @staticmethod
    def convert_eur_mwh_to_eur_kwh(prices_eur_mwh: np.ndarray) -> np.ndarray:
        """
        Convert prices from EUR/MWh to EUR/kWh.

        Example:
            >>> PriceLoader.convert_eur_mwh_to_eur_kwh(np.array([150.0]))
            array([0.15])
        """
        return np.asarray(prices_eur_mwh, dtype=float) / 1000.0

    def from_csv(
        self,
        file_path: str | Path,
        timestamp_col: str = "timestamp",
        price_col: str = "price",
        unit: str = "kWh",
        timestamps_utc: bool = False,
    ) -> MarketPriceTable:
        """
        Load hourly market prices from CSV.

        Args:
            file_path: Path to CSV file
            timestamp_col: Name of timestamp column
            price_col: Name of price column (first data column if absent)
            unit: "kWh" or "MWh"
            timestamps_utc: Parse timestamps as UTC/offset-aware and convert to local time

        Returns:
            MarketPriceTable in EUR/kWh

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file is empty or the unit is unknown
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Price data file not found: {file_path}")
        if unit not in ("kWh", "MWh"):
            raise ValueError(f"Unknown price unit '{unit}'. Must be 'kWh' or 'MWh'")

        df = pd.read_csv(file_path)
        if df.empty:
            raise ValueError(f"Price data file is empty: {file_path}")

        ts_col = timestamp_col if timestamp_col in df.columns else df.columns[0]
        timestamps = pd.to_datetime(df[ts_col], utc=timestamps_utc)
        if timestamps.dt.tz is not None:
            timestamps = timestamps.dt.tz_convert(pytz.timezone(self.timezone)).dt.tz_localize(None)

        value_col = price_col if price_col in df.columns else [c for c in df.columns if c != ts_col][0]
        prices = df[value_col].astype(float).values
        if unit == "MWh":
            prices = self.convert_eur_mwh_to_eur_kwh(prices)

        table = MarketPriceTable.from_series(
            pd.Series(prices, index=pd.DatetimeIndex(timestamps)),
            source="file",
        )
        logger.info(f"Loaded market prices for {len(table)} days from {file_path}")
        return table
