"""
Batched energy price resolution.

Resolves the energy price for every simulated hour in one call, either from
the hourly market price table or from the offer's per-period prices.
"""

from datetime import date
from typing import Callable, List, Optional, Tuple
import logging
import numpy as np

from solar_economics.domain.contract import CompanyOffer
from solar_economics.infrastructure.tariffs.schedule import TariffSchedule, resolve_tariff_period
from .price_loader import MarketPriceTable

logger = logging.getLogger(__name__)

HourQuery = Tuple[date, int]
EnergyPriceResolver = Callable[[List[HourQuery]], np.ndarray]


def create_energy_price_resolver(
    offer: CompanyOffer,
    schedule: Optional[TariffSchedule],
    market_prices: Optional[MarketPriceTable] = None,
) -> EnergyPriceResolver:
    """
    Build a resolver mapping (date, hour 1-24) queries to EUR/kWh prices.

    Args:
        offer: Contract with per-period prices or the market price flag
        schedule: Energy tariff schedule (None = flat)
        market_prices: Hourly market prices, required for market-price offers

    Returns:
        Callable returning one price per query

    Raises:
        ValueError: If the offer uses market prices and no table is given
    """
    if offer.use_market_prices:
        if market_prices is None:
            raise ValueError(f"Offer '{offer.name}' uses market prices but no market price table was provided")

        def resolve_market(queries: List[HourQuery]) -> np.ndarray:
            prices = np.zeros(len(queries))
            missing = 0
            for i, (day, hour) in enumerate(queries):
                price = market_prices.get(day, hour - 1)
                if price is None:
                    missing += 1
                    logger.debug(f"No market price for {day} hour {hour}, using 0")
                    continue
                prices[i] = price
            if missing:
                logger.warning(
                    f"Offer '{offer.name}': {missing} of {len(queries)} hours have no market price, priced at 0"
                )
            return prices

        return resolve_market

    def resolve_schedule(queries: List[HourQuery]) -> np.ndarray:
        return np.array(
            [offer.energy_price_for(resolve_tariff_period(schedule, day, hour)) for day, hour in queries],
            dtype=float,
        )

    return resolve_schedule
