import json

import pandas as pd
import pytest

import config


@pytest.fixture
def example_records():
    """Three month-end NAVs: +10% then -10%."""
    return [
        {"date": "2020-01-31", "nav": 100},
        {"date": "2020-02-29", "nav": 110},
        {"date": "2020-03-31", "nav": 99},
    ]


@pytest.fixture
def trailing_series():
    """Sparse NAV history with one observation per trailing anchor, ending 2024-06-14."""
    points = {
        "2021-06-10": 50.0,
        "2023-06-14": 80.0,
        "2023-12-29": 90.0,
        "2024-03-14": 100.0,
        "2024-05-14": 120.0,
        "2024-06-07": 110.0,
        "2024-06-13": 125.0,
        "2024-06-14": 132.0,
    }
    return pd.Series(
        list(points.values()),
        index=pd.DatetimeIndex(pd.to_datetime(list(points.keys())), name="date"),
        dtype=float,
        name="nav",
    )


@pytest.fixture
def mock_dir(tmp_path, monkeypatch):
    """JSON fixtures for the mock API, with no simulated latency."""
    nav = [
        {"date": "2020-01-31", "nav": 100},
        {"date": "2020-02-29", "nav": 110},
        {"date": "2020-03-31", "nav": 99},
    ]
    benchmark = [
        {"date": "2020-01-15", "close": 40},
        {"date": "2020-01-31", "close": 50},
        {"date": "2020-03-31", "close": 55},
        {"date": "2020-04-30", "close": 60},
    ]
    blogs = [{"id": 1, "title": "Hello", "date": "2024-01-01", "excerpt": "x", "url": "#"}]

    (tmp_path / "navSeries.json").write_text(json.dumps(nav))
    (tmp_path / "benchmarkSeries.json").write_text(json.dumps(benchmark))
    (tmp_path / "blogs.json").write_text(json.dumps(blogs))

    monkeypatch.setattr(config, "MOCK_DIR", str(tmp_path))
    monkeypatch.setattr(config, "MOCK_LATENCY_MS", 0.0)
    return tmp_path
