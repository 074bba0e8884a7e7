"""
Startup tests for the Dash app: importing `app` loads the data cache, and a
failed load leaves the server importable with an empty state.
"""
import importlib
import sys

import pytest

import config
import dash_wrappers as dw


def _import_app(monkeypatch):
    monkeypatch.delitem(sys.modules, "app", raising=False)
    return importlib.import_module("app")


@pytest.fixture(autouse=True)
def fresh_cache(monkeypatch):
    monkeypatch.setattr(dw, "_DATA_CACHE", None)


def test_app_import_loads_mock_data(mock_dir, monkeypatch, capsys):
    monkeypatch.setattr(config, "NAV_SOURCE", "mock")

    app_module = _import_app(monkeypatch)

    assert app_module.server is not None
    assert "Initial data load complete." in capsys.readouterr().out
    data = dw.get_data()
    assert data["trailing"]["asOf"] == "2020-03-31"
    assert data["trailing"]["SI"] == pytest.approx(-0.01)


def test_app_import_survives_failed_load(monkeypatch, capsys):
    def broken_refresh(end_date=None):
        raise KeyError("nav")

    monkeypatch.setattr(dw, "refresh_data", broken_refresh)

    app_module = _import_app(monkeypatch)

    assert app_module.app.layout is not None
    assert "Initial data load failed" in capsys.readouterr().out


def test_router_renders_404(mock_dir, monkeypatch):
    monkeypatch.setattr(config, "NAV_SOURCE", "mock")
    app_module = _import_app(monkeypatch)

    page = app_module.render_page_content("/nowhere")
    assert "404" in page.children[0].children
