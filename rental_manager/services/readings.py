# rental_manager/services/readings.py
"""Meter-reading arithmetic shared by the API, the receipt and the entry workflow."""

ELECTRIC_UNIT = 'kWh'
WATER_UNIT = 'm³'


def previous_period(month, year):
    """Return the (month, year) billing period right before the given one."""
    if month == 1:
        return 12, year - 1
    return month - 1, year


def consumption(current, previous):
    """
    Usage between two readings.

    Only defined when a previous reading exists and is above zero; a zero
    previous reading means "no baseline" rather than a meter starting at 0.
    """
    if current is None or previous is None or previous <= 0:
        return None
    return round(current - previous, 2)


def total_cost(electric_cost, water_cost):
    return round((electric_cost or 0) + (water_cost or 0), 2)


def display_total_cost(electric_cost, water_cost):
    """Total cost, or None when there is nothing worth showing."""
    total = total_cost(electric_cost, water_cost)
    return total if total > 0 else None


def format_number(value):
    return f"{value:.2f}"


def format_reading(value, unit):
    if value is None:
        return None
    return f"{format_number(value)} {unit}"


def format_currency(value):
    if value is None:
        return None
    return f"${format_number(value)}"
