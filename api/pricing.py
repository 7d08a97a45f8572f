"""
Display formatting for book prices.
"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union

CENT = Decimal("0.01")


def format_price(price: Union[int, float, Decimal], currency_symbol: str = "$") -> str:
    """
    Format a numeric price as a currency string.

    The sign is placed before the currency symbol and cents are rounded
    half-up, e.g. ``25 -> "$25.00"``, ``1234.5 -> "$1,234.50"``,
    ``-5 -> "-$5.00"``.

    Args:
        price: Numeric price, any finite magnitude
        currency_symbol: Symbol placed before the amount

    Returns:
        Formatted price string
    """
    # str() first so floats like 2.675 round on their printed value
    value = Decimal(str(price))
    with localcontext() as ctx:
        # Room for every integer digit plus the two cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        amount = value.quantize(CENT, rounding=ROUND_HALF_UP)
        sign = "-" if amount < 0 else ""
        return f"{sign}{currency_symbol}{abs(amount):,.2f}"
