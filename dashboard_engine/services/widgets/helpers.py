"""
Shared helpers for widget renderers.

Single Responsibility: reusable formatting and coercion functions
consumed by multiple widget types.  No widget-specific logic here.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Dict, List, Optional, Tuple

# ── Number coercion ──────────────────────────────────────────────

def to_number(value: Any) -> Optional[float]:
    """
    Return *value* as a float when it is numeric (or a numeric string).

    Booleans, NaN and anything unparsable give ``None``.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def is_numeric(value: Any) -> bool:
    """True for real numbers only (strings do not count)."""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not (isinstance(value, float) and math.isnan(value))
    )


# ── Formatting (en-US locale) ────────────────────────────────────

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

# Enough digits to quantize any finite float
_WIDE = Context(prec=400)

# Minor units per ISO 4217; anything not listed uses 2
CURRENCY_DECIMALS = {
    "JPY": 0,
    "KRW": 0,
}


def round_half_up(value: float, decimals: int = 0) -> Decimal:
    """
    Round the magnitude of *value* half away from zero, sign kept.

    Works on the exact binary value, so ``4.25`` → ``4.3`` and
    ``-3.25`` → ``-3.3`` while ``1.005`` (stored as 1.00499…) → ``1.00``.
    """
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(abs(value)).quantize(quantum, rounding=ROUND_HALF_UP, context=_WIDE)
    return rounded.copy_negate() if value < 0 else rounded


def to_fixed(value: float, decimals: int, grouping: bool = False) -> str:
    """Fixed-point text with half-up rounding; ``-0`` collapses to ``0``."""
    fmt = f",.{decimals}f" if grouping else f".{decimals}f"
    if not math.isfinite(value):
        return format(value, fmt)
    rounded = round_half_up(value, decimals)
    if rounded == 0:
        rounded = rounded.copy_abs()
    return format(rounded, fmt)


def format_number(value: float, max_decimals: int = 3) -> str:
    """``1234.5`` → ``"1,234.5"``; ``1000`` → ``"1,000"``."""
    text = to_fixed(value, max_decimals, grouping=True)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_currency(value: float, currency: str = "USD", decimals: Optional[int] = None) -> str:
    """``1234.5, "USD"`` → ``"$1,234.50"``; unknown codes are prefixed by the code."""
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    if decimals is None:
        decimals = CURRENCY_DECIMALS.get(code, 2)
    text = to_fixed(value, decimals, grouping=True)
    if text.startswith("-"):
        return f"-{symbol}{text[1:]}"
    return f"{symbol}{text}"


def format_percent(value: float) -> str:
    """One decimal, percent sign: ``4.567`` → ``"4.6%"``, ``4.25`` → ``"4.3%"``."""
    return f"{to_fixed(value, 1)}%"


def signed_percent(value: float) -> str:
    """``12`` → ``"+12.0%"``, ``-3.25`` → ``"-3.3%"``, ``0`` → ``"0.0%"``."""
    if value > 0:
        return f"+{to_fixed(value, 1)}%"
    return f"{to_fixed(value, 1)}%"


def trend_direction(value: float) -> str:
    if value > 0:
        return "up"
    if value < 0:
        return "down"
    return "flat"


# ── Labels ───────────────────────────────────────────────────────

def humanize_column(key: str) -> str:
    """``"created_at"`` → ``"Created At"``."""
    return " ".join(word[:1].upper() + word[1:] for word in str(key).replace("_", " ").split())


# ── Chart series ─────────────────────────────────────────────────

def xy_series(
    rows: List[Dict[str, Any]],
    x_key: str,
    y_key: str,
) -> Tuple[List[Any], List[float]]:
    """
    Split row dicts into parallel label / value lists.

    Rows that are not dicts are skipped; missing or non-numeric y values
    plot as 0.
    """
    labels: List[Any] = []
    values: List[float] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        labels.append(row.get(x_key))
        values.append(to_number(row.get(y_key)) or 0)
    return labels, values
