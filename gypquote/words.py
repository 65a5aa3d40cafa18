"""
Amount in words, Indian numbering grouping.

    1,23,45,678 -> One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight

Groups are crore (10^7), lakh (10^5), thousand (10^3) and the last three
digits. A group with nothing in it is skipped ("One Crore", never "One Crore
Zero Lakh"). The converter only takes whole amounts; rounding the total is the
caller's job (see round_amount).
"""

import math
from decimal import ROUND_HALF_UP, Decimal

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]

TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety",
]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _group_words(n: int) -> str:
    """Words for 0-999."""
    parts = []
    if n > 99:
        parts.append(ONES[n // 100])
        parts.append("Hundred")
        n %= 100
    if n > 19:
        parts.append(TENS[n // 10])
        n %= 10
    if n > 0:
        parts.append(ONES[n])
    return " ".join(parts)


def to_words(amount: int) -> str:
    """Spell out a non-negative whole amount."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"to_words expects an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"to_words expects a non-negative amount, got {amount}")
    if amount == 0:
        return "Zero"

    crores, rest = divmod(amount, CRORE)
    lakhs, rest = divmod(rest, LAKH)
    thousands, hundreds = divmod(rest, THOUSAND)

    parts = []
    if crores:
        parts.append(_crore_words(crores) + " Crore")
    if lakhs:
        parts.append(_group_words(lakhs) + " Lakh")
    if thousands:
        parts.append(_group_words(thousands) + " Thousand")
    if hundreds:
        parts.append(_group_words(hundreds))
    return " ".join(parts)


def _crore_words(crores: int) -> str:
    # Amounts of 1000 crore and up are spelled by grouping the crore count itself
    if crores > 999:
        return to_words(crores)
    return _group_words(crores)


def round_amount(total: float) -> int:
    """
    Round a money total to a whole amount, half up (2.5 -> 3) on the decimal
    value as written, so 0.49999999999999994 stays 0. Infinity and NaN raise
    ValueError.
    """
    if not math.isfinite(total):
        raise ValueError(f"round_amount expects a finite amount, got {total}")
    return int(Decimal(str(total)).to_integral_value(rounding=ROUND_HALF_UP))


def amount_in_words(total: float, currency_symbol: str = "") -> str:
    """Document line for a total: "<symbol> <words> Only". A non-finite total reads as Zero."""
    if not math.isfinite(total):
        total = 0.0
    words = to_words(max(round_amount(total), 0))
    return f"{currency_symbol} {words} Only".strip()
