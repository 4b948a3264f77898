"""
Conversions between decimal display amounts and integer base units.
"""
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Union


def amount_to_string(value: Union[int, str], decimals: int) -> str:
    """
    Format base units as a decimal string, e.g. ``150000000, 8 -> "1.5"``.
    """
    value = int(value)
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** decimals)
    if decimals == 0 or fraction == 0:
        return f"{sign}{whole}"
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction_str}"


def string_to_amount(amount: str, decimals: int) -> int:
    """
    Parse a decimal string into base units, e.g. ``"1.5", 8 -> 150000000``.

    Raises ValueError for non numeric input or more fractional digits than
    the currency has.
    """
    text = str(amount).strip()
    if not text.isascii():
        raise ValueError(f"Invalid amount: {amount!r}")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 200
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
    return int(scaled)


def format_amount(amount: Dict[str, Any]) -> str:
    """Render a Rosetta Amount dict as ``"1.5 BTC"``."""
    currency = amount["currency"]
    return f"{amount_to_string(amount['value'], currency['decimals'])} {currency['symbol']}"
