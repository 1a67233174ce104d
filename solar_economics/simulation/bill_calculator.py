"""
Monthly electricity bill.

Composes the bill for one month of hourly results: energy and power terms,
surplus compensation (optionally capped at the energy cost), meter rental,
electricity tax, VAT and the virtual battery credit.
"""

from dataclasses import dataclass, asdict
import pandas as pd

from solar_economics.domain.contract import CompanyOffer


@dataclass(frozen=True)
class BillResult:
    """Monetary breakdown of one monthly bill (EUR)."""
    energy_cost: float = 0.0
    surplus_generated: float = 0.0
    surplus_compensation: float = 0.0
    virtual_battery_deposited: float = 0.0
    virtual_battery_used: float = 0.0
    virtual_battery_fee: float = 0.0
    power_term: float = 0.0
    meter_rental: float = 0.0
    electricity_tax: float = 0.0
    vat: float = 0.0
    total: float = 0.0
    new_virtual_battery_balance: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_bill(
    hours: pd.DataFrame,
    offer: CompanyOffer,
    virtual_battery_balance: float = 0.0,
) -> BillResult:
    """
    Calculate the bill for one month.

    Args:
        hours: Hourly results for the month (columns date, energy_cost,
            power_term_cost, surplus_value)
        offer: Contract terms
        virtual_battery_balance: Credit carried over from the previous month

    Returns:
        BillResult; an empty month yields a zero bill with the balance unchanged
    """
    if hours.empty:
        return BillResult(new_virtual_battery_balance=virtual_battery_balance)

    energy_cost = float(hours['energy_cost'].sum())
    power_term = float(hours['power_term_cost'].sum())
    surplus_generated = float(hours['surplus_value'].sum())

    if offer.surplus_compensation_capped:
        surplus_compensation = min(surplus_generated, energy_cost)
    else:
        surplus_compensation = surplus_generated

    net_energy_cost = energy_cost - surplus_compensation
    leftover_surplus = surplus_generated - surplus_compensation

    days = hours['date'].nunique()
    meter_rental = offer.meter_rental_per_day * days
    electricity_tax = (power_term + net_energy_cost) * offer.electricity_tax_percent / 100
    vb_fee = offer.virtual_battery_monthly_fee if offer.has_virtual_battery else 0.0

    subtotal = net_energy_cost + power_term + meter_rental + electricity_tax + vb_fee
    vat = subtotal * offer.vat_percent / 100
    total_before_credit = subtotal + vat

    if offer.has_virtual_battery:
        used = min(virtual_battery_balance, total_before_credit)
        deposited = leftover_surplus
        new_balance = virtual_battery_balance - used + leftover_surplus
        total = total_before_credit - used
    else:
        used = 0.0
        deposited = 0.0
        new_balance = virtual_battery_balance
        total = total_before_credit

    return BillResult(
        energy_cost=energy_cost,
        surplus_generated=surplus_generated,
        surplus_compensation=surplus_compensation,
        virtual_battery_deposited=deposited,
        virtual_battery_used=used,
        virtual_battery_fee=vb_fee,
        power_term=power_term,
        meter_rental=meter_rental,
        electricity_tax=electricity_tax,
        vat=vat,
        total=total,
        new_virtual_battery_balance=new_balance,
    )
