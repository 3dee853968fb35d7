"""
Token amount conversion.

Storage keeps integer amounts in token base units; providers report
either base units or human decimal strings.
"""

from decimal import Decimal, InvalidOperation


def scale_amount(value: str | int | float | Decimal, decimals: int) -> int:
    """
    Convert a human decimal amount into integer base units.

    Args:
        value: Decimal amount as reported by the provider (e.g. "12.345678")
        decimals: Token decimals

    Returns:
        round(value * 10**decimals)

    Raises:
        ValueError: If value is not numeric
    """
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    if not parsed.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return int(round(parsed.scaleb(decimals)))


def unscale_amount(amount: int, decimals: int) -> Decimal:
    """Convert integer base units back to a decimal token amount."""
    return Decimal(amount).scaleb(-decimals)
