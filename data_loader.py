import io
import json
import os
import time

import pandas as pd
import requests

import config

# ============================================================
# CONFIG
# ============================================================
EXCEL_EXTENSIONS = (".xlsx", ".xlsm", ".xls")
CSV_EXTENSIONS = (".csv", ".txt")

NAV_MOCK_FILE = "navSeries.json"
BENCHMARK_MOCK_FILE = "benchmarkSeries.json"
BLOGS_MOCK_FILE = "blogs.json"

SUPPORTED_SOURCES = ("excel", "mock")


# ------------------------------------------------------------
# Spreadsheet loading (local path or URL)
# ------------------------------------------------------------

def _is_url(path: str) -> bool:
    return str(path).lower().startswith(("http://", "https://"))


def _read_table(handle, name: str, sheet=0) -> pd.DataFrame:
    ext = os.path.splitext(name.split("?", 1)[0])[1].lower()
    if ext in CSV_EXTENSIONS:
        return pd.read_csv(handle)
    if ext in EXCEL_EXTENSIONS:
        return pd.read_excel(handle, sheet_name=sheet)
    raise ValueError(f"Unsupported NAV file type '{ext or name}'. Use one of {EXCEL_EXTENSIONS + CSV_EXTENSIONS}")


def load_nav_workbook(path: str = None, sheet=0) -> list:
    """
    Read the first sheet of a NAV workbook (or a CSV) into raw records.

    - path may be local or an http(s) URL
    - returns a list of dicts keyed by column name, untouched: dates and
      values are resolved later by the normalizer
    """
    path = path or config.NAV_FILE

    if _is_url(path):
        response = requests.get(path, timeout=config.HTTP_TIMEOUT)
        response.raise_for_status()
        df = _read_table(io.BytesIO(response.content), path, sheet)
    else:
        if not os.path.exists(path):
            raise FileNotFoundError(f"NAV file not found: {path}")
        df = _read_table(path, path, sheet)

    # Keep spreadsheet blanks as None rather than NaN
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict("records")


# ------------------------------------------------------------
# Mock API (JSON fixtures with simulated latency)
# ------------------------------------------------------------

def _wait(ms: float = None):
    ms = config.MOCK_LATENCY_MS if ms is None else ms
    if ms and ms > 0:
        time.sleep(ms / 1000.0)


def _read_mock(filename: str):
    path = os.path.join(config.MOCK_DIR, filename)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def fetch_nav_series() -> dict:
    """Mock endpoint: { success, data: { navSeries, benchmarkSeries } }."""
    _wait()
    try:
        nav_series = _read_mock(NAV_MOCK_FILE)
    except (OSError, json.JSONDecodeError) as e:
        return {"success": False, "error": f"navSeries unavailable: {e}"}

    try:
        benchmark_series = _read_mock(BENCHMARK_MOCK_FILE)
    except FileNotFoundError:
        benchmark_series = []

    return {
        "success": True,
        "data": {
            "navSeries": nav_series,
            "benchmarkSeries": benchmark_series,
        },
    }


def fetch_blogs() -> dict:
    """Mock endpoint: { success, data: [ {id, title, date, excerpt, url}, ... ] }."""
    _wait()
    try:
        blogs = _read_mock(BLOGS_MOCK_FILE)
    except (OSError, json.JSONDecodeError) as e:
        return {"success": False, "error": f"blogs unavailable: {e}"}
    return {"success": True, "data": blogs}


# ------------------------------------------------------------
# Series source selection
# ------------------------------------------------------------

def load_series(source: str = None) -> tuple:
    """
    Load raw NAV and benchmark records from the configured source.

    Returns:
        tuple: (nav_records, benchmark_records)
    """
    source = (source or config.NAV_SOURCE).lower()
    if source not in SUPPORTED_SOURCES:
        raise ValueError(f"Unsupported NAV source '{source}'. Expected one of {SUPPORTED_SOURCES}")

    if source == "mock":
        resp = fetch_nav_series()
        if not resp["success"]:
            raise RuntimeError(resp["error"])
        return resp["data"]["navSeries"], resp["data"]["benchmarkSeries"]

    nav_records = load_nav_workbook(config.NAV_FILE)

    benchmark_records = []
    if config.BENCHMARK_FILE:
        try:
            benchmark_records = load_nav_workbook(config.BENCHMARK_FILE)
        except (OSError, ValueError, requests.RequestException) as e:
            print(f"[WARNING] Benchmark load failed ({config.BENCHMARK_FILE}): {e}")

    print(f"[INFO] Loaded {len(nav_records)} NAV rows from {config.NAV_FILE}")
    return nav_records, benchmark_records
