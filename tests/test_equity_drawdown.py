import numpy as np
import pandas as pd
import pytest

from financial_math import compute_equity_and_drawdown, normalize_series


def _series(navs, start="2021-01-01"):
    idx = pd.DatetimeIndex(pd.date_range(start, periods=len(navs), freq="D"), name="date")
    return pd.Series(navs, index=idx, dtype=float, name="nav")


def test_empty_series_gives_empty_outputs():
    equity, drawdown = compute_equity_and_drawdown([])
    assert equity.empty and drawdown.empty
    assert equity.name == "equity"
    assert drawdown.name == "drawdown"


def test_single_point():
    equity, drawdown = compute_equity_and_drawdown([{"date": "2024-06-15", "nav": 100}])
    assert list(equity.values) == [100.0]
    assert list(drawdown.values) == [0.0]


def test_example_scenario(example_records):
    equity, drawdown = compute_equity_and_drawdown(example_records)

    assert list(equity.values) == pytest.approx([100.0, 110.0, 99.0])
    assert list(drawdown.values) == pytest.approx([0.0, 0.0, -0.1])
    assert list(equity.index) == [pd.Timestamp("2020-01-31"), pd.Timestamp("2020-02-29"), pd.Timestamp("2020-03-31")]


def test_equity_is_rebased_independent_of_nav_scale():
    equity_small, _ = compute_equity_and_drawdown(_series([1.0, 1.5, 1.2]))
    equity_large, _ = compute_equity_and_drawdown(_series([1000.0, 1500.0, 1200.0]))
    assert list(equity_small.values) == pytest.approx([100.0, 150.0, 120.0])
    assert list(equity_small.values) == pytest.approx(list(equity_large.values))


def test_zero_previous_nav_counts_as_flat_period():
    equity, drawdown = compute_equity_and_drawdown(_series([0.0, 10.0, 20.0]))
    assert list(equity.values) == pytest.approx([100.0, 100.0, 200.0])
    assert list(drawdown.values) == pytest.approx([0.0, 0.0, 0.0])


def test_nav_dropping_to_zero():
    equity, drawdown = compute_equity_and_drawdown(_series([100.0, 0.0, 50.0]))
    assert list(equity.values) == pytest.approx([100.0, 0.0, 0.0])
    assert list(drawdown.values) == pytest.approx([0.0, -1.0, -1.0])


def test_drawdown_invariants():
    navs = [10, 11, 10.5, 9, 12, 12, 11.9, 13, 8, 8.5, 14]
    equity, drawdown = compute_equity_and_drawdown(_series(navs))

    assert (drawdown <= 0).all()
    assert drawdown.iloc[0] == 0
    at_peak = equity >= equity.cummax()
    assert (drawdown[at_peak] == 0).all()
    assert (drawdown[~at_peak] < 0).all()


def test_outputs_rounded_to_six_decimals():
    equity, drawdown = compute_equity_and_drawdown(_series([3.0, 7.0, 5.0]))
    for value in list(equity.values) + list(drawdown.values):
        assert round(value, 6) == value
    assert drawdown.iloc[-1] == pytest.approx(5.0 / 7.0 - 1, abs=1e-6)


def test_repeated_runs_are_identical(example_records):
    first = compute_equity_and_drawdown(example_records)
    second = compute_equity_and_drawdown(example_records)
    assert first[0].equals(second[0])
    assert first[1].equals(second[1])


def test_input_series_is_not_mutated():
    nav = _series([100.0, 90.0, 95.0])
    before = nav.copy()
    compute_equity_and_drawdown(nav)
    assert nav.equals(before)


def test_rerunning_on_equity_rebases_again(example_records):
    equity, _ = compute_equity_and_drawdown(example_records)
    equity_again, _ = compute_equity_and_drawdown(equity.rename("nav"))
    assert equity_again.iloc[0] == 100.0
    assert list(equity_again.values) == pytest.approx(list(equity.values))


def test_raw_and_normalized_inputs_agree(example_records):
    from_raw = compute_equity_and_drawdown(example_records)
    from_normalized = compute_equity_and_drawdown(normalize_series(example_records))
    assert from_raw[0].equals(from_normalized[0])
    assert np.array_equal(from_raw[1].values, from_normalized[1].values)
