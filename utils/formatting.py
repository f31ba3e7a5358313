"""
Formatting utilities.
"""

from datetime import datetime


CURRENCY_SYMBOLS = {
    "CAD": "$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def format_currency(amount: float, currency: str = "CAD") -> str:
    """
    Format an amount as currency with cents.

    Args:
        amount: The amount in whole units (dollars, not cents).
        currency: Currency code (default CAD).

    Returns:
        Formatted currency string, e.g. "$1,234.50".
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_percent(value: float, decimals: int = 0) -> str:
    """Format a number (already in percent) as a percentage string."""
    return f"{value:.{decimals}f}%"


def format_timestamp(value: datetime) -> str:
    return value.strftime("%b %d, %Y %H:%M")
