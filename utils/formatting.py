"""
Number formatting helpers shared by exports, reports and the dashboard.
"""
from decimal import Decimal, ROUND_HALF_UP


def round1(value):
    """Round half-up to one decimal place, returning a float."""
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def fixed1(value):
    """One-decimal string, e.g. ``40.5``."""
    return f"{round1(value):.1f}"


def format_currency(amount):
    return f"¥{round(amount):,}"


def format_price(price):
    return f"¥{fixed1(price)}/L"


def format_distance(distance):
    return f"{fixed1(distance)}km"


def format_fuel_efficiency(efficiency):
    return f"{fixed1(efficiency)}km/L"
