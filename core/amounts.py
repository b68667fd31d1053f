from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from core.errors import AmountError


def parse_amount(raw: object) -> float:
    """Strictly parse a user- or backend-supplied amount.

    Accepts numbers and plain numeric strings (surrounding whitespace is
    ignored; "1,000" is not a number). Raises ``AmountError`` for anything else,
    including NaN and infinities.
    """
    if raw is None or isinstance(raw, bool):
        raise AmountError(f"Not a number: {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            raise AmountError("Amount is empty")
        # float() accepts digit separators like "1_000"; plain numbers only
        if "_" in text:
            raise AmountError(f"Not a number: {raw!r}")
        try:
            value = float(text)
        except ValueError:
            raise AmountError(f"Not a number: {raw!r}") from None
    if math.isnan(value) or math.isinf(value):
        raise AmountError(f"Not a finite number: {raw!r}")
    return value


def coerce_amount(raw: object) -> float:
    """Lenient variant used for totals: anything unparseable counts as 0."""
    try:
        return parse_amount(raw)
    except AmountError:
        return 0.0


def round_half_up(value: object, ndigits: int = 2) -> Optional[float]:
    if value is None:
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_amount(value: object) -> str:
    rounded = round_half_up(coerce_amount(value), 2)
    return f"{rounded:,.2f}"
