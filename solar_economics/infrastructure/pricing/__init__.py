"""
Pricing infrastructure: market price table, REE client, energy price
resolution and regulated power term prices.
"""

from .price_loader import MarketPriceTable, PriceLoader
from .ree_client import REEPriceClient, contiguous_ranges
from .energy_price_resolver import create_energy_price_resolver
from .regulated_power_prices import regulated_power_prices, ANNUAL_POWER_PRICES

__all__ = [
    'MarketPriceTable',
    'PriceLoader',
    'REEPriceClient',
    'contiguous_ranges',
    'create_energy_price_resolver',
    'regulated_power_prices',
    'ANNUAL_POWER_PRICES',
]
