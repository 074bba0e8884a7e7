import pandas as pd
import pytest
import requests

import config
import data_loader
from data_loader import fetch_blogs, fetch_nav_series, load_nav_workbook, load_series
from financial_math import normalize_series


@pytest.fixture
def nav_csv(tmp_path):
    path = tmp_path / "nav.csv"
    path.write_text("NAV Date,NAV (Rs)\n01-02-2023,10.5\n02-02-2023,\n03-02-2023,11.0\n")
    return path


# ---------------------------------------------------------------------------
# Spreadsheet loading
# ---------------------------------------------------------------------------


def test_load_csv_records(nav_csv):
    records = load_nav_workbook(str(nav_csv))

    assert records[0] == {"NAV Date": "01-02-2023", "NAV (Rs)": 10.5}
    assert records[1]["NAV (Rs)"] is None
    assert len(records) == 3


def test_loaded_records_normalize(nav_csv):
    s = normalize_series(load_nav_workbook(str(nav_csv)))
    assert list(s.index) == [pd.Timestamp("2023-02-01"), pd.Timestamp("2023-02-03")]
    assert list(s.values) == [10.5, 11.0]


def test_load_excel_workbook(tmp_path):
    path = tmp_path / "nav.xlsx"
    pd.DataFrame({
        "NAV Date": [pd.Timestamp("2023-01-02"), pd.Timestamp("2023-01-03")],
        "NAV (Rs)": [10.0, 10.2],
    }).to_excel(path, index=False)

    s = normalize_series(load_nav_workbook(str(path)))
    assert list(s.index) == [pd.Timestamp("2023-01-02"), pd.Timestamp("2023-01-03")]
    assert list(s.values) == pytest.approx([10.0, 10.2])


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_nav_workbook(str(tmp_path / "missing.xlsx"))


def test_unsupported_extension(tmp_path):
    path = tmp_path / "nav.json"
    path.write_text("[]")
    with pytest.raises(ValueError):
        load_nav_workbook(str(path))


def test_default_path_comes_from_config(nav_csv, monkeypatch):
    monkeypatch.setattr(config, "NAV_FILE", str(nav_csv))
    assert len(load_nav_workbook()) == 3


class _FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_load_from_url(monkeypatch):
    calls = {}

    def fake_get(url, timeout):
        calls["url"] = url
        calls["timeout"] = timeout
        return _FakeResponse(b"date,nav\n2023-01-02,10\n2023-01-03,11\n")

    monkeypatch.setattr(data_loader.requests, "get", fake_get)
    monkeypatch.setattr(config, "HTTP_TIMEOUT", 3.0)

    records = load_nav_workbook("https://example.com/data/nav.csv?v=1")
    assert records == [{"date": "2023-01-02", "nav": 10}, {"date": "2023-01-03", "nav": 11}]
    assert calls["timeout"] == 3.0


def test_url_http_error_propagates(monkeypatch):
    monkeypatch.setattr(data_loader.requests, "get", lambda url, timeout: _FakeResponse(b"", status=404))
    with pytest.raises(requests.HTTPError):
        load_nav_workbook("https://example.com/nav.xlsx")


# ---------------------------------------------------------------------------
# Mock API
# ---------------------------------------------------------------------------


def test_fetch_nav_series(mock_dir):
    resp = fetch_nav_series()
    assert resp["success"] is True
    assert len(resp["data"]["navSeries"]) == 3
    assert len(resp["data"]["benchmarkSeries"]) == 4


def test_fetch_nav_series_without_benchmark(mock_dir):
    (mock_dir / "benchmarkSeries.json").unlink()
    resp = fetch_nav_series()
    assert resp["success"] is True
    assert resp["data"]["benchmarkSeries"] == []


def test_fetch_blogs(mock_dir):
    resp = fetch_blogs()
    assert resp["success"] is True
    assert resp["data"][0]["title"] == "Hello"


def test_fetch_blogs_missing_fixture(mock_dir):
    (mock_dir / "blogs.json").unlink()
    resp = fetch_blogs()
    assert resp["success"] is False
    assert "blogs unavailable" in resp["error"]


def test_mock_latency_is_simulated(mock_dir, monkeypatch):
    slept = []
    monkeypatch.setattr(config, "MOCK_LATENCY_MS", 250.0)
    monkeypatch.setattr(data_loader.time, "sleep", slept.append)
    fetch_blogs()
    assert slept == [0.25]


# ---------------------------------------------------------------------------
# Source selection
# ---------------------------------------------------------------------------


def test_load_series_mock(mock_dir):
    nav_records, benchmark_records = load_series("mock")
    assert len(nav_records) == 3
    assert len(benchmark_records) == 4


def test_load_series_mock_failure(mock_dir):
    (mock_dir / "navSeries.json").unlink()
    with pytest.raises(RuntimeError):
        load_series("mock")


def test_load_series_excel_with_benchmark(nav_csv, tmp_path, monkeypatch):
    bench = tmp_path / "bench.csv"
    bench.write_text("date,close\n2023-02-01,100\n")
    monkeypatch.setattr(config, "NAV_FILE", str(nav_csv))
    monkeypatch.setattr(config, "BENCHMARK_FILE", str(bench))

    nav_records, benchmark_records = load_series("excel")
    assert len(nav_records) == 3
    assert benchmark_records == [{"date": "2023-02-01", "close": 100}]


def test_load_series_bad_benchmark_is_not_fatal(nav_csv, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(config, "NAV_FILE", str(nav_csv))
    monkeypatch.setattr(config, "BENCHMARK_FILE", str(tmp_path / "nope.csv"))

    nav_records, benchmark_records = load_series("excel")
    assert len(nav_records) == 3
    assert benchmark_records == []
    assert "[WARNING] Benchmark load failed" in capsys.readouterr().out


def test_load_series_unknown_source():
    with pytest.raises(ValueError):
        load_series("ftp")
