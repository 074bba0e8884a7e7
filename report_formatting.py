import math

import pandas as pd

NA_TEXT = "—"


def _is_missing(val) -> bool:
    if val is None:
        return True
    try:
        return math.isnan(float(val))
    except (TypeError, ValueError):
        return True


def fmt_pct_clean(val, decimals: int = 1) -> str:
    """Decimal return -> '7.6%'. Missing values render as an em dash."""
    if _is_missing(val):
        return NA_TEXT
    pct = float(val) * 100.0
    # Avoid '-0.0%'
    if round(pct, decimals) == 0:
        pct = 0.0
    return f"{pct:.{decimals}f}%"


def fmt_index_clean(val, decimals: int = 2) -> str:
    if _is_missing(val):
        return NA_TEXT
    return f"{float(val):,.{decimals}f}"


def fmt_date_clean(val, fmt: str = "%Y-%m-%d") -> str:
    if val is None:
        return NA_TEXT
    ts = pd.Timestamp(val)
    if pd.isna(ts):
        return NA_TEXT
    return ts.strftime(fmt)
