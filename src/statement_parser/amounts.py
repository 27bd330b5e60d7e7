from __future__ import annotations

import math
import re
from typing import Optional, Union

from .errors import AmountError
from .models import TransactionKind


CURRENCY_GLYPHS_RE = re.compile(r"[$€£¥₹₴₽₩]")
# \s covers NBSP and narrow NBSP, used by some banks as thousands separators
WHITESPACE_RE = re.compile(r"\s+")
NUMBER_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)$")


def parse_amount(value: Union[str, int, float]) -> float:
    """
    Converts a free-form amount into a signed float.
    Handles: $1,234.56, (1234.56), -1234.56, 1.234,56 (EU), 1 234,56 (UA)
    """
    if isinstance(value, bool):
        raise AmountError(str(value))
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise AmountError(str(value))
        return float(value)
    if not isinstance(value, str):
        raise AmountError(None, reason="empty")

    cleaned = value.strip()
    if cleaned in ("", "-"):
        raise AmountError(value, reason="empty")

    # accounting negative
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = "-" + cleaned[1:-1]

    cleaned = CURRENCY_GLYPHS_RE.sub("", cleaned)
    cleaned = WHITESPACE_RE.sub("", cleaned)

    has_comma = "," in cleaned
    has_period = "." in cleaned

    if has_comma and has_period:
        # whichever comes last is the decimal mark
        if cleaned.rfind(".") > cleaned.rfind(","):
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(".", "").replace(",", ".")
    elif has_comma:
        parts = cleaned.split(",")
        if len(parts) == 2 and 1 <= len(parts[1]) <= 2:
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")

    if not NUMBER_RE.match(cleaned):
        raise AmountError(value)

    amount = float(cleaned)
    if not math.isfinite(amount):
        raise AmountError(value)
    return amount


def try_parse_amount(value: Union[str, int, float, None]) -> Optional[float]:
    """Same as parse_amount, but None instead of AmountError."""
    if value is None:
        return None
    try:
        return parse_amount(value)
    except AmountError:
        return None


def is_valid_amount(value: Union[str, int, float, None]) -> bool:
    return try_parse_amount(value) is not None


def determine_kind(amount: float, invert_sign: bool = False) -> TransactionKind:
    """
    Some institutions print deposits as negative numbers; invert_sign flips
    the amount before the >= 0 test.
    """
    effective = -amount if invert_sign else amount
    return TransactionKind.INCOME if effective >= 0 else TransactionKind.EXPENSE


def absolute_amount(amount: float) -> float:
    return abs(amount)


def format_amount(amount: float, currency: str = "USD") -> str:
    return f"{amount:,.2f} {currency}"
