import pandas as pd

from financial_math import (
    EQUITY_BASE,
    compute_equity_and_drawdown,
    compute_monthly_returns,
    compute_trailing,
    normalize_series,
    parse_nav_date,
)


def run_engine(records, reference_date=None, end_date=None):
    """
    Normalize one raw NAV series and run every analytic over it.

    - end_date: optional "analysis end date"; observations after it are
      ignored, as if the data had been loaded on that day
    - reference_date: anchor for trailing returns (defaults to the last
      remaining observation)

    Returns:
        tuple: (nav, equity, drawdown, monthly, trailing)
    """
    nav = normalize_series(records)

    n_raw = len(records) if hasattr(records, "__len__") else None
    if n_raw is not None and n_raw > len(nav):
        print(f"[WARNING] Dropped {n_raw - len(nav)} of {n_raw} NAV rows (unparseable date/value or duplicate date).")

    if end_date is not None:
        end_ts = parse_nav_date(end_date)
        if end_ts is None:
            raise ValueError(f"Unresolvable end date: {end_date!r}")
        nav = nav[nav.index <= end_ts]

    equity, drawdown = compute_equity_and_drawdown(nav)
    monthly = compute_monthly_returns(nav)
    trailing = compute_trailing(nav, reference_date=reference_date)

    return nav, equity, drawdown, monthly, trailing


def compute_drawdown_stats(drawdown: pd.Series) -> dict:
    """
    Depth and duration of the worst drawdown.

    Returns:
        dict: max_drawdown (decimal), peak_date, trough_date,
              recovery_date (None while underwater), recovery_days,
              underwater (bool, currently below the high water mark)
    """
    stats = {
        "max_drawdown": 0.0,
        "peak_date": None,
        "trough_date": None,
        "recovery_date": None,
        "recovery_days": 0,
        "underwater": False,
    }
    if drawdown.empty:
        return stats

    max_dd = float(drawdown.min())
    stats["max_drawdown"] = max_dd
    stats["underwater"] = bool(drawdown.iloc[-1] < 0)
    if max_dd == 0.0:
        return stats

    trough_date = drawdown.idxmin()
    stats["trough_date"] = trough_date

    # Last time at the high water mark before the trough
    before = drawdown[(drawdown.index <= trough_date) & (drawdown >= 0)]
    stats["peak_date"] = before.index[-1] if not before.empty else drawdown.index[0]

    # First return to the high water mark after the trough
    future = drawdown[drawdown.index > trough_date]
    recovered = future[future >= 0]

    if not recovered.empty:
        stats["recovery_date"] = recovered.index[0]
        stats["recovery_days"] = (recovered.index[0] - trough_date).days
    else:
        # Still underwater
        stats["recovery_days"] = (drawdown.index.max() - trough_date).days

    return stats


def rebase_to_index(series, start=None, base: float = EQUITY_BASE) -> pd.Series:
    """
    Rebase a raw price/NAV series onto the equity index scale.

    The anchor is the first observation on or after `start` (or the first
    observation overall); returns an empty Series if nothing is left or the
    anchor value is zero.
    """
    s = normalize_series(series)
    if start is not None:
        start_ts = parse_nav_date(start)
        if start_ts is not None:
            s = s[s.index >= start_ts]
    if s.empty or s.iloc[0] == 0:
        return pd.Series([], index=pd.DatetimeIndex([], name="date"), dtype=float, name="benchmark")

    return (s / s.iloc[0] * base).round(6).rename("benchmark")
