"""Display formatting for amounts shown to users."""

from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOL = "₪"


def format_currency(amount: float) -> str:
    """Format a shekel amount without decimals, e.g. ₪1,235 or -₪50. Halves round away from zero."""
    rounded = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(rounded):,}"


def format_percent(value: float) -> str:
    """Format a percentage with one decimal, e.g. 12.5%."""
    return f"{value:.1f}%"


def format_kwh(value: float) -> str:
    """Format energy without decimals, e.g. 4210 kWh."""
    return f"{value:.0f} kWh"
