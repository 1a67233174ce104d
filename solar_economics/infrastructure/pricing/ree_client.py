"""
REE market price client.

Fetches hourly real-time market prices (PVPC series) from the Red Eléctrica
open data API, with an on-disk per-date cache so each date is downloaded once.
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import pickle
import pandas as pd
import pytz
import requests

from .price_loader import MarketPriceTable, HOURS_PER_DAY

logger = logging.getLogger(__name__)

REE_URL = "https://apidatos.ree.es/es/datos/mercados/precios-mercados-tiempo-real"
PVPC_SERIES_ID = "1001"


def contiguous_ranges(dates: Iterable[date]) -> List[Tuple[date, date]]:
    """Group dates into (start, end) runs of consecutive days."""
    ordered = sorted(set(dates))
    if not ordered:
        return []

    ranges = []
    start = prev = ordered[0]
    for current in ordered[1:]:
        if current - prev > timedelta(days=1):
            ranges.append((start, prev))
            start = current
        prev = current
    ranges.append((start, prev))
    return ranges


class REEPriceClient:
    """
    Client for hourly PVPC market prices.

    Prices are returned in EUR/kWh keyed by Europe/Madrid local date and hour.
    """

    def __init__(
        self,
        cache_dir: Optional[str | Path] = None,
        base_url: str = REE_URL,
        timeout: float = 30,
    ):
        """
        Initialize REE client.

        Args:
            cache_dir: Directory for the price cache (default: data/market_prices)
            base_url: API endpoint
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout
        self.tz = pytz.timezone('Europe/Madrid')

        if cache_dir is None:
            cache_dir = Path('data/market_prices')
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_file = self.cache_dir / "pvpc_prices.pkl"

    def _load_cache(self) -> Dict[date, List[Optional[float]]]:
        if not self.cache_file.exists():
            return {}
        with open(self.cache_file, 'rb') as f:
            return pickle.load(f)

    def _save_cache(self, cache: Dict[date, List[Optional[float]]]) -> None:
        with open(self.cache_file, 'wb') as f:
            pickle.dump(cache, f)

    def parse_response(self, data: dict) -> Dict[date, List[Optional[float]]]:
        """
        Extract the PVPC series from an API response.

        Raises:
            ValueError: If the PVPC series is missing
        """
        series = next(
            (s for s in data.get('included', []) if s.get('id') == PVPC_SERIES_ID),
            None,
        )
        if series is None:
            raise ValueError(f"PVPC series (id {PVPC_SERIES_ID}) not found in API response")

        by_date: Dict[date, List[Optional[float]]] = {}
        for value in series['attributes']['values']:
            local = pd.Timestamp(value['datetime']).tz_convert(self.tz)
            day = local.date()
            if day not in by_date:
                by_date[day] = [None] * HOURS_PER_DAY
            # EUR/MWh -> EUR/kWh
            by_date[day][local.hour] = value['value'] / 1000.0
        return by_date

    def fetch_range(self, start: date, end: date) -> Dict[date, List[Optional[float]]]:
        """
        Fetch prices for an inclusive date range.

        Raises:
            requests.HTTPError: If the API returns an error status
            ValueError: If the response has no PVPC series
        """
        params = {
            'start_date': f"{start.isoformat()}T00:00",
            'end_date': f"{end.isoformat()}T23:59",
            'time_trunc': 'hour',
        }
        logger.info(f"Fetching market prices {start} to {end}")
        response = requests.get(self.base_url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return self.parse_response(response.json())

    def get_prices(self, dates: Iterable[date], use_cache: bool = True) -> MarketPriceTable:
        """
        Price table for the given dates, fetching only uncached dates.

        Missing dates are grouped into contiguous ranges to minimize requests.
        With use_cache=False every wanted date is re-fetched; fetched prices are
        merged into the existing cache.
        """
        wanted = sorted(set(dates))
        cache = self._load_cache()
        missing = [d for d in wanted if d not in cache] if use_cache else wanted

        if missing:
            for start, end in contiguous_ranges(missing):
                cache.update(self.fetch_range(start, end))
            self._save_cache(cache)
        else:
            logger.info(f"Using cached market prices for {len(wanted)} days")

        prices = {d: cache[d] for d in wanted if d in cache}
        return MarketPriceTable(prices=prices, source="ree_api" if missing else "cache")
