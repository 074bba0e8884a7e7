import os

from dotenv import load_dotenv

# ============================================================
# ENVIRONMENT
# ============================================================

# Load the .env file before reading any setting
load_dotenv()


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        print(f"⚠️ WARNING: {name}={raw!r} is not a number. Using {default}.")
        return default


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# DATA SOURCES
# ============================================================

# "excel" reads NAV_FILE (xlsx/xls/csv, local path or http URL),
# "mock" reads the JSON fixtures in MOCK_DIR
NAV_SOURCE = os.environ.get("NAV_SOURCE", "excel").strip().lower()

NAV_FILE = os.environ.get("NAV_FILE", "data/nav_new.csv")

# Optional benchmark series plotted next to the equity curve
BENCHMARK_FILE = os.environ.get("BENCHMARK_FILE", "")

MOCK_DIR = os.environ.get("MOCK_DIR", "data/mocks")

# Simulated network latency for the mock API
MOCK_LATENCY_MS = _env_float("MOCK_LATENCY_MS", 0.0)

HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 10.0)

# ============================================================
# SERVER
# ============================================================
DASH_DEBUG = _env_bool("DASH_DEBUG", False)
PORT = int(_env_float("PORT", 8050))

APP_TITLE = "CapitalMind · Demo"
PORTFOLIO_NAME = os.environ.get("PORTFOLIO_NAME", "Focused Portfolio")

# ============================================================
# CHART EXPORT (Plotly modebar PNG download)
# ============================================================
EXPORT_FILENAME = os.environ.get("EXPORT_FILENAME", "equity-chart")
EXPORT_SCALE = _env_float("EXPORT_SCALE", 2.0)

# ============================================================
# GLOBAL COLOR PALETTE
# ============================================================
GLOBAL_PALETTE = [
    "#0F5132",  # equity green
    "#A50F2B",  # drawdown red
    "#4C6A92",  # steel blue (benchmark)
    "#8C9CB1",  # soft gray-blue
    "#9BBB59",  # olive green
    "#F2C200",  # muted gold (accent)
]

POSITIVE_COLOR = "#0f5132"
NEGATIVE_COLOR = "#a50f2b"
