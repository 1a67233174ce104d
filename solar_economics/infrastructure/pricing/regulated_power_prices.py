"""
Regulated power term prices for market-price (PVPC) contracts.

Annual values (EUR/kW/year) combine network tolls, charges and the fixed
retail margin (punta only). 2021 starts with the 2.0TD tariff on June 1.
"""

from typing import Dict

ANNUAL_POWER_PRICES: Dict[int, Dict[str, float]] = {
    2021: {'punta': 35.532942, 'valle': 5.440093},
    2022: {'punta': 32.277555, 'valle': 4.029736},
    2023: {'punta': 29.221357, 'valle': 3.009656},
    2024: {'punta': 29.229963, 'valle': 2.635795},
    2025: {'punta': 31.006996, 'valle': 2.911852},
    2026: {'punta': 31.879795, 'valle': 3.167068},
}


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def regulated_power_prices(year: int) -> Dict[str, float]:
    """
    Regulated power prices for a year in EUR/kW/day.

    Years outside the table use the nearest known year.
    """
    known = sorted(ANNUAL_POWER_PRICES)
    table_year = min(max(year, known[0]), known[-1])
    annual = ANNUAL_POWER_PRICES[table_year]
    days = 366 if is_leap_year(year) else 365
    return {period: price / days for period, price in annual.items()}
