"""Conversion between integer base units and decimal strings.

Thin layer over eth-utils' decimals-parameterized converters that adds
string formatting and strict parsing.
"""

from decimal import Decimal, InvalidOperation

from eth_utils import from_wei_decimals, to_wei_decimals

ETH_DECIMALS = 18


def format_units(value: int, decimals: int) -> str:
    """Format an integer amount of base units as a decimal string.

    Trailing zeros are trimmed but at least one fractional digit is kept,
    so 10**18 wei formats as "1.0" and 1 wei as "0.000000000000000001".

    Raises:
        ValueError: If value is outside the uint256 range.
    """
    if int(decimals) < 0:
        raise ValueError(f"decimals must be non-negative (got {decimals})")
    text = format(Decimal(from_wei_decimals(int(value), int(decimals))), "f")
    if "." not in text:
        return f"{text}.0"
    text = text.rstrip("0")
    return f"{text}0" if text.endswith(".") else text


def parse_units(amount: str, decimals: int) -> int:
    """Parse a decimal string into an integer amount of base units.

    Args:
        amount: Decimal string such as "1.5" or "0.000001".
        decimals: Number of decimal places of the unit.

    Returns:
        Amount in the smallest unit.

    Raises:
        ValueError: If amount is not a finite decimal number, has more
            fractional digits than the unit supports, or falls outside
            the uint256 range.
    """
    decimals = int(decimals)
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative (got {decimals})")
    try:
        parsed = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal amount: {amount!r}") from e

    if not parsed.is_finite():
        raise ValueError(f"Invalid decimal amount: {amount!r}")

    # eth-utils truncates sub-unit digits instead of rejecting them
    exponent = parsed.normalize().as_tuple().exponent
    if isinstance(exponent, int) and -exponent > decimals:
        raise ValueError(f"Too many decimals for unit with {decimals} decimals: {amount!r}")

    return to_wei_decimals(parsed.normalize(), decimals)


def format_ether(wei: int) -> str:
    """Format a wei amount as an ETH decimal string."""
    return format_units(wei, ETH_DECIMALS)


def parse_ether(amount: str) -> int:
    """Parse an ETH decimal string into wei."""
    return parse_units(amount, ETH_DECIMALS)
