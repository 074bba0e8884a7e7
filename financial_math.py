import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timedelta

import numpy as np
import pandas as pd

# ============================================================
# CONFIG / CONSTANTS
# ============================================================
ROUND_DECIMALS = 6
EQUITY_BASE = 100.0

# Lookback windows expressed in calendar months
MONTH_WINDOWS = {
    "1M": 1,
    "3M": 3,
    "6M": 6,
    "1Y": 12,
    "3Y": 36,
}

# Lookback windows expressed in calendar days (not trading days)
DAY_WINDOWS = {
    "1D": 1,
    "1W": 7,
}

TRAILING_LABELS = ["1D", "1W", "1M", "3M", "6M", "1Y", "3Y", "YTD", "SI", "DD", "MAXDD"]

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Field resolution priority for loosely-keyed records
DATE_KEYS = ("date", "Date", "DATE", "dt", "NAV Date")
VALUE_KEYS = ("nav", "Nav", "NAV", "NAV (Rs)", "value", "close", "price")
_DATE_KEY_PATTERN = re.compile(r"date", re.IGNORECASE)
_VALUE_KEY_PATTERN = re.compile(r"nav|close|value|price", re.IGNORECASE)

# Spreadsheet serial dates (1900 date system)
EXCEL_SERIAL_BASE = pd.Timestamp("1899-12-31")
EXCEL_LEAP_BUG_SERIAL = 61

_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
_DAY_FIRST_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})$")
# Serial numbers exported as text, e.g. "44927" or "44927.5"
_SERIAL_STRING = re.compile(r"^\d{1,5}(\.\d+)?$")


# ------------------------------------------------------------
# Date / value parsing
# ------------------------------------------------------------

def _calendar_date(year: int, month: int, day: int):
    try:
        return pd.Timestamp(year=year, month=month, day=day)
    except ValueError:
        return None


def excel_serial_to_date(serial: float):
    """
    Convert a spreadsheet serial number (1900 date system) to a date.

    Serial 1 is 1900-01-01. The 1900 system counts a nonexistent
    1900-02-29, so every serial from 61 onward is shifted back one day.
    """
    days = math.floor(serial)
    if days >= EXCEL_LEAP_BUG_SERIAL:
        days -= 1
    try:
        return EXCEL_SERIAL_BASE + pd.Timedelta(days=days)
    except (OverflowError, ValueError):
        return None


def _parse_date_string(text: str):
    s = text.strip()
    if not s:
        return None

    # ISO: YYYY-MM-DD or YYYY/MM/DD
    m = _ISO_DATE.match(s)
    if m:
        return _calendar_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    # Day-first: DD-MM-YYYY, DD/MM/YYYY, D-M-YY ...
    m = _DAY_FIRST_DATE.match(s)
    if m:
        day, month, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year < 100:
            year += 2000 if year < 51 else 1900
        return _calendar_date(year, month, day)

    if _SERIAL_STRING.match(s):
        return excel_serial_to_date(float(s))

    # Last resort: generic parser
    parsed = pd.to_datetime(s, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed


def parse_nav_date(value):
    """
    Resolve a loosely-typed date field to a midnight pd.Timestamp.

    Accepts native dates/datetimes, spreadsheet serial numbers and strings
    (ISO, day-first, then a generic parse). Returns None when the value
    cannot be resolved to a calendar date.
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None

    if isinstance(value, str):
        ts = _parse_date_string(value)
    elif isinstance(value, (pd.Timestamp, datetime, date, np.datetime64)):
        ts = pd.Timestamp(value)
    elif isinstance(value, (int, float, np.integer, np.floating)):
        if not np.isfinite(value):
            return None
        ts = excel_serial_to_date(float(value))
    else:
        return None

    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def parse_nav_value(value):
    """Return value as a finite float, or None."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def resolve_record_fields(record: Mapping):
    """
    Pick the raw date and value out of a record with arbitrary key names.

    Priority:
      - date:  DATE_KEYS in order, then the first key containing 'date'
      - value: VALUE_KEYS in order, then the first other key matching
               nav/close/value/price
    Missing fields come back as None.
    """
    date_key = next((k for k in DATE_KEYS if k in record), None)
    if date_key is None:
        date_key = next(
            (k for k in record if isinstance(k, str) and _DATE_KEY_PATTERN.search(k)),
            None,
        )

    value_key = next((k for k in VALUE_KEYS if k in record and k != date_key), None)
    if value_key is None:
        value_key = next(
            (
                k for k in record
                if k != date_key and isinstance(k, str) and _VALUE_KEY_PATTERN.search(k)
            ),
            None,
        )

    raw_date = record.get(date_key) if date_key is not None else None
    raw_value = record.get(value_key) if value_key is not None else None
    return raw_date, raw_value


# ------------------------------------------------------------
# SeriesNormalizer
# ------------------------------------------------------------

def _empty_nav_series() -> pd.Series:
    return pd.Series(
        [], index=pd.DatetimeIndex([], name="date"), dtype=float, name="nav"
    )


def _iter_raw_points(raw):
    if isinstance(raw, pd.DataFrame):
        for record in raw.to_dict("records"):
            yield resolve_record_fields(record)
    elif isinstance(raw, pd.Series):
        yield from raw.items()
    elif isinstance(raw, (str, bytes, Mapping)):
        raise ValueError(f"Expected a sequence of records, got {type(raw).__name__}")
    else:
        try:
            items = iter(raw)
        except TypeError:
            raise ValueError(
                f"Expected a sequence of records, got {type(raw).__name__}"
            ) from None
        for record in items:
            if not isinstance(record, Mapping):
                continue
            yield resolve_record_fields(record)


def normalize_series(raw=None) -> pd.Series:
    """
    Parse, validate and sort raw date/value records into a NAV series.

    - raw: list of dicts, a DataFrame, or a date-indexed Series.
    - Records with an unparseable date or a non-finite value are dropped.
    - Sorted ascending; when several records share a date the last one
      in input order wins, so the result is strictly ascending.

    Returns a float Series named 'nav' on a DatetimeIndex named 'date'.
    """
    if raw is None:
        return _empty_nav_series()

    dates = []
    values = []
    for raw_date, raw_value in _iter_raw_points(raw):
        ts = parse_nav_date(raw_date)
        nav = parse_nav_value(raw_value)
        if ts is None or nav is None:
            continue
        dates.append(ts)
        values.append(nav)

    if not dates:
        return _empty_nav_series()

    s = pd.Series(values, index=pd.DatetimeIndex(dates, name="date"), dtype=float, name="nav")
    s = s.sort_index(kind="mergesort")
    s = s[~s.index.duplicated(keep="last")]
    return s


def _as_nav_series(series) -> pd.Series:
    # Accept an already-normalized series as-is, anything else goes through the normalizer
    if (
        isinstance(series, pd.Series)
        and isinstance(series.index, pd.DatetimeIndex)
        and series.index.is_monotonic_increasing
        and series.index.is_unique
        and pd.api.types.is_float_dtype(series.dtype)
        and np.isfinite(series.to_numpy()).all()
    ):
        return series.rename("nav")
    return normalize_series(series)


def _round_or_none(value):
    if value is None or pd.isna(value):
        return None
    return round(float(value), ROUND_DECIMALS)


# ------------------------------------------------------------
# EquityDrawdownEngine
# ------------------------------------------------------------

def compute_equity_and_drawdown(series) -> tuple:
    """
    Chain NAV returns into an equity index (base 100) and its drawdown.

    - r[i] = nav[i] / nav[i-1] - 1, defined as 0 when nav[i-1] == 0
    - equity[i] = equity[i-1] * (1 + r[i]), equity[0] = 100
    - drawdown = equity / running peak - 1 (peak inclusive of today)

    Full precision internally; both outputs rounded at the end.
    Returns (equity, drawdown) as Series on the NAV dates.
    """
    nav = _as_nav_series(series)
    if nav.empty:
        empty = pd.Series([], index=nav.index.copy(), dtype=float)
        return empty.rename("equity"), empty.copy().rename("drawdown")

    prev = nav.shift(1)
    growth = (nav / prev).where(prev != 0, 1.0)
    growth.iloc[0] = EQUITY_BASE

    equity = growth.cumprod()
    peak = equity.cummax()
    drawdown = equity / peak - 1.0

    equity = equity.round(ROUND_DECIMALS).rename("equity")
    drawdown = drawdown.round(ROUND_DECIMALS).rename("drawdown")
    return equity, drawdown


# ------------------------------------------------------------
# MonthlyReturnAggregator
# ------------------------------------------------------------

def compute_monthly_returns(series) -> dict:
    """
    Month-end snapshots and month-over-month returns.

    The month-end snapshot is the LAST observation inside each calendar
    month (not the calendar month end). The first month has no return.

    Returns:
      {
        "monthly_series":  Series of month-end NAVs,
        "monthly_returns": DataFrame [date, year, month, return],
        "monthly_by_year": { "2020": { "Feb": 0.1, ... }, ... }
      }
    """
    nav = _as_nav_series(series)
    columns = ["date", "year", "month", "return"]
    if nav.empty:
        return {
            "monthly_series": nav.copy(),
            "monthly_returns": pd.DataFrame(columns=columns),
            "monthly_by_year": {},
        }

    month_key = nav.index.to_period("M")
    monthly_series = nav.groupby(month_key).tail(1).rename("nav")

    prev = monthly_series.shift(1)
    rets = (monthly_series / prev - 1.0).where(prev != 0, 0.0).iloc[1:]

    monthly_returns = pd.DataFrame({
        "date": rets.index,
        "year": rets.index.year.astype(int),
        "month": [MONTH_LABELS[m - 1] for m in rets.index.month],
        "return": rets.round(ROUND_DECIMALS).values,
    }, columns=columns)

    monthly_by_year = {}
    for row in monthly_returns.itertuples(index=False):
        monthly_by_year.setdefault(str(row.year), {})[row.month] = float(row[3])

    return {
        "monthly_series": monthly_series,
        "monthly_returns": monthly_returns,
        "monthly_by_year": monthly_by_year,
    }


# ------------------------------------------------------------
# TrailingReturnCalculator
# ------------------------------------------------------------

def date_minus_months(dt: pd.Timestamp, months: int) -> pd.Timestamp:
    """Step back whole calendar months; day-of-month is clamped to 28."""
    total = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(total, 12)
    return pd.Timestamp(year=year, month=month + 1, day=min(dt.day, 28))


def nav_on_or_before(series: pd.Series, when: pd.Timestamp):
    """Most recent observation dated on or before `when`, else None."""
    if series.empty or when < series.index[0]:
        return None
    value = series.asof(when)
    if pd.isna(value):
        return None
    return float(value)


def pct_between(series: pd.Series, start: pd.Timestamp, end: pd.Timestamp):
    from_nav = nav_on_or_before(series, start)
    to_nav = nav_on_or_before(series, end)
    if from_nav is None or to_nav is None or from_nav == 0:
        return None
    return to_nav / from_nav - 1.0


def get_trailing_window_start(series: pd.Series, as_of: pd.Timestamp, label: str):
    """
    Anchor ("from") date for a trailing label relative to as_of.
    Returns None for labels with no window (DD / MAXDD) or an empty series.
    """
    if label in DAY_WINDOWS:
        return as_of - timedelta(days=DAY_WINDOWS[label])
    if label in MONTH_WINDOWS:
        return date_minus_months(as_of, MONTH_WINDOWS[label])
    if label == "YTD":
        return pd.Timestamp(year=as_of.year, month=1, day=1)
    if label == "SI":
        return series.index[0] if not series.empty else None
    if label in ("DD", "MAXDD"):
        return None
    raise ValueError(f"Unsupported trailing label: {label}")


def compute_trailing(series, reference_date=None) -> dict:
    """
    Trailing-window returns relative to a reference date.

    Conventions:
      - reference_date defaults to the last series date
      - 1D/1W step back calendar days, 1M..3Y calendar months (day <= 28)
      - YTD anchors at Jan 1 of the reference year, SI at the first date
      - both endpoints resolve on-or-before; a missing endpoint or a zero
        starting NAV yields None
      - DD is the drawdown at the reference date, MAXDD the worst drawdown
        up to it
    """
    nav = _as_nav_series(series)

    if reference_date is not None:
        as_of = parse_nav_date(reference_date)
        if as_of is None:
            raise ValueError(f"Unresolvable reference date: {reference_date!r}")
    elif not nav.empty:
        as_of = nav.index[-1]
    else:
        as_of = None

    trailing = {label: None for label in TRAILING_LABELS}
    trailing["asOf"] = as_of.strftime("%Y-%m-%d") if as_of is not None else None
    if nav.empty:
        return trailing

    for label in TRAILING_LABELS:
        start = get_trailing_window_start(nav, as_of, label)
        if start is None:
            continue
        trailing[label] = _round_or_none(pct_between(nav, start, as_of))

    # DD / MAXDD come straight off the drawdown series
    _, drawdown = compute_equity_and_drawdown(nav)
    history = drawdown[drawdown.index <= as_of]
    if not history.empty:
        trailing["DD"] = _round_or_none(history.iloc[-1])
        trailing["MAXDD"] = _round_or_none(history.min())

    return trailing
