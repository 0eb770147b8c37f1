"""Conversions between human-readable token amounts and base units."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation


def to_base_units(amount: int | str | Decimal, decimals: int) -> int:
    """Scale *amount* to the token's smallest unit.

    A Python ``int`` is taken to already be in base units and is returned
    unchanged, so converting twice never scales twice. Strings and
    ``Decimal`` values are human-readable amounts. Raises ``ValueError`` for
    negative amounts, unparseable input, or more fractional digits than the
    token supports.
    """
    if isinstance(amount, bool):
        raise ValueError("Amount must be a number, not a boolean")
    if isinstance(amount, int):
        if amount < 0:
            raise ValueError("Amount must not be negative")
        return amount

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {amount!r}")

    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
    return int(scaled)


def from_base_units(amount: int, decimals: int) -> str:
    """Format a base-unit integer as a plain decimal string."""
    value = Decimal(amount).scaleb(-decimals).normalize()
    text = format(value, "f")
    return text


def is_zero(formatted: str) -> bool:
    return Decimal(formatted) == 0
