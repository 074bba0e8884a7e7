from types import MappingProxyType

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

# Import existing modules
from portfolio_engine import run_engine, compute_drawdown_stats, rebase_to_index
from data_loader import load_series, fetch_blogs
from financial_math import MONTH_LABELS, parse_nav_date
from report_formatting import fmt_pct_clean, fmt_date_clean
import config
from config import GLOBAL_PALETTE, POSITIVE_COLOR, NEGATIVE_COLOR

# ============================================================
# GLOBAL DATA CACHE (Server-Side)
# ============================================================
_DATA_CACHE = None

# Display order of the trailing returns panel
TRAILING_DISPLAY_ORDER = ["YTD", "1D", "1W", "1M", "3M", "6M", "1Y", "3Y", "SI", "DD", "MAXDD"]


def get_data():
    """Retrieve cached data, initializing if necessary."""
    global _DATA_CACHE
    if _DATA_CACHE is None:
        _DATA_CACHE = run_analytics_engine()
    return _DATA_CACHE


def refresh_data(end_date=None):
    """Force refresh of the data cache."""
    global _DATA_CACHE
    _DATA_CACHE = run_analytics_engine(end_date=end_date)
    return _DATA_CACHE


# ============================================================
# CORE: Run Engine Wrapper
# ============================================================
def run_analytics_engine(end_date=None, source=None):
    """
    Loads the NAV series once and runs the analytics core over it.
    This should be called on app startup and whenever the end date changes.

    Returns a read-only snapshot; every value in it is freshly computed.
    """
    errors = []
    source = (source or config.NAV_SOURCE).lower()

    nav_records, benchmark_records = load_series(source)
    nav, equity, drawdown, monthly, trailing = run_engine(nav_records, end_date=end_date)

    if nav.empty:
        errors.append("NAV series is empty after parsing.")

    benchmark = pd.Series(dtype=float, name="benchmark")
    if benchmark_records and not nav.empty:
        benchmark = rebase_to_index(benchmark_records, start=nav.index[0])
        benchmark = benchmark[benchmark.index <= nav.index[-1]]
        if benchmark.empty:
            errors.append("Benchmark series has no observations inside the NAV range.")

    blogs = []
    blog_resp = fetch_blogs()
    if blog_resp["success"]:
        blogs = blog_resp["data"]
    else:
        errors.append(blog_resp["error"])

    if errors:
        print(f"DEBUG: dash_wrappers found errors: {errors}")

    return MappingProxyType({
        "nav": nav,
        "equity": equity,
        "drawdown": drawdown,
        "monthly_series": monthly["monthly_series"],
        "monthly_returns": monthly["monthly_returns"],
        "monthly_by_year": monthly["monthly_by_year"],
        "trailing": trailing,
        "drawdown_stats": compute_drawdown_stats(drawdown),
        "benchmark": benchmark,
        "blogs": blogs,
        "inception_date": nav.index[0] if not nav.empty else None,
        "end_date": end_date,
        "source": source,
        "errors": errors,
    })


# ============================================================
# HELPERS
# ============================================================

def _hex_to_rgba(hex_code, alpha=0.2):
    """Helper to convert hex to rgba string."""
    hex_code = hex_code.lstrip('#')
    return f"rgba({int(hex_code[0:2], 16)}, {int(hex_code[2:4], 16)}, {int(hex_code[4:6], 16)}, {alpha})"


def filter_window(series: pd.Series, start=None, end=None) -> pd.Series:
    """Slice a date-indexed series to [start, end]; unparseable bounds are ignored."""
    if series is None or series.empty:
        return series
    start_ts = parse_nav_date(start) if start else None
    end_ts = parse_nav_date(end) if end else None
    return series.loc[start_ts:end_ts]


def get_chart_frame(equity: pd.Series, drawdown: pd.Series, benchmark: pd.Series = None) -> pd.DataFrame:
    """
    Merge equity, drawdown and benchmark on date for charting.

    Columns: date (YYYY-MM-DD), equity (4 dp), drawdown_pct (percent, 2 dp),
    benchmark (only when supplied).
    """
    frame = pd.DataFrame({
        "equity": equity.round(4),
        "drawdown_pct": (drawdown * 100.0).round(2),
    })
    if benchmark is not None and not benchmark.empty:
        frame = frame.join(benchmark.round(4).rename("benchmark"), how="outer")
    frame = frame.sort_index()
    frame.index = frame.index.strftime("%Y-%m-%d")
    frame.index.name = "date"
    return frame.reset_index()


def get_graph_config(filename=None):
    """dcc.Graph config with the PNG download button."""
    return {
        "displaylogo": False,
        "toImageButtonOptions": {
            "format": "png",
            "filename": filename or config.EXPORT_FILENAME,
            "scale": config.EXPORT_SCALE,
        },
    }


def get_live_since(data) -> str:
    inception = data.get("inception_date")
    return f"Live since {fmt_date_clean(inception)}" if inception is not None else "No data loaded"


def get_source_summary(data) -> dict:
    return {
        "source": data.get("source"),
        "rows": len(data["nav"]),
        "errors": list(data.get("errors") or []),
    }


# ============================================================
# CHARTS
# ============================================================

def get_equity_drawdown_chart(data, start_date=None, end_date=None, theme="light"):
    """
    Equity index line with the drawdown area underneath (secondary axis),
    optional benchmark, restricted to [start_date, end_date].
    """
    equity = filter_window(data["equity"], start_date, end_date)
    drawdown = filter_window(data["drawdown"], start_date, end_date)
    if equity is None or equity.empty:
        return go.Figure()

    benchmark = filter_window(data.get("benchmark"), start_date, end_date)
    frame = get_chart_frame(equity, drawdown, benchmark)

    fig = make_subplots(specs=[[{"secondary_y": True}]])

    # Drawdown area (under the lines)
    fig.add_trace(go.Scatter(
        x=frame["date"],
        y=frame["drawdown_pct"],
        mode='lines',
        fill='tozeroy',
        name='Drawdown (%)',
        line=dict(color=GLOBAL_PALETTE[1], width=1),
        fillcolor=_hex_to_rgba(GLOBAL_PALETTE[1], 0.18),
        connectgaps=True,
        hovertemplate="<b>Drawdown</b>: %{y:.2f}%<extra></extra>"
    ), secondary_y=True)

    fig.add_trace(go.Scatter(
        x=frame["date"],
        y=frame["equity"],
        mode='lines',
        name='Equity (index)',
        line=dict(color=GLOBAL_PALETTE[0], width=2),
        connectgaps=True,
        hovertemplate="<b>Equity</b>: %{y:.2f}<extra></extra>"
    ), secondary_y=False)

    if "benchmark" in frame.columns:
        fig.add_trace(go.Scatter(
            x=frame["date"],
            y=frame["benchmark"],
            mode='lines',
            name='Benchmark',
            line=dict(color=GLOBAL_PALETTE[2], width=1.5),
            connectgaps=True,
            hovertemplate="<b>Benchmark</b>: %{y:.2f}<extra></extra>"
        ), secondary_y=False)

    # Zero line for the drawdown axis
    fig.add_shape(
        type="line",
        x0=frame["date"].iloc[0], x1=frame["date"].iloc[-1],
        y0=0, y1=0,
        line=dict(color="#333", width=1.5, dash="dash"),
        row=1, col=1, secondary_y=True
    )

    fig.update_yaxes(title_text="Equity (index, base 100)", secondary_y=False)
    fig.update_yaxes(title_text="Drawdown (%)", ticksuffix="%", secondary_y=True)
    fig.update_layout(
        template="plotly_white" if theme == "light" else "plotly_dark",
        margin=dict(l=40, r=40, t=40, b=40),
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    return fig


def get_drawdown_chart(data, start_date=None, end_date=None, theme="light"):
    """
    Generates Underwater Chart (Drawdown) from the equity index.
    """
    drawdown = filter_window(data["drawdown"], start_date, end_date)
    if drawdown is None or drawdown.empty:
        return go.Figure()

    dd_pct = drawdown * 100.0

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=dd_pct.index,
        y=dd_pct.values,
        mode='lines',
        fill='tozeroy',
        name='Drawdown',
        line=dict(color=GLOBAL_PALETTE[1], width=1),
        fillcolor=_hex_to_rgba(GLOBAL_PALETTE[1], 0.3),
        hovertemplate="<b>Drawdown</b>: %{y:.2f}%<extra></extra>"
    ))

    # Annotate Max Drawdown of the visible window
    max_dd = float(dd_pct.min())
    if max_dd < 0:
        fig.add_annotation(
            x=dd_pct.idxmin(), y=max_dd,
            text=f"Max Drawdown: {max_dd:.2f}%",
            showarrow=True,
            arrowhead=1,
            yshift=-10
        )

    fig.update_layout(
        yaxis_title="Drawdown (%)",
        template="plotly_white" if theme == "light" else "plotly_dark",
        margin=dict(l=40, r=40, t=40, b=40),
        hovermode="x unified",
    )
    return fig


# ============================================================
# TABLES
# ============================================================

def get_trailing_rows(trailing: dict) -> list:
    """Rows for the trailing returns grid, in display order."""
    rows = []
    for label in TRAILING_DISPLAY_ORDER:
        val = trailing.get(label) if trailing else None
        rows.append({
            "Period": label,
            "Return": fmt_pct_clean(val),
            "_value": val,
        })
    return rows


def get_monthly_table_rows(monthly_by_year: dict) -> list:
    """
    Monthly returns grid: one row per year (descending), Jan..Dec columns.
    Missing months render as blanks.
    """
    rows = []
    for year in sorted(monthly_by_year, key=int, reverse=True):
        months = monthly_by_year[year]
        row = {"Year": year}
        for m in MONTH_LABELS:
            row[m] = fmt_pct_clean(months.get(m)) if m in months else ""
        rows.append(row)
    return rows


def get_monthly_column_defs() -> list:
    """AG Grid column defs for the monthly grid, coloured by sign."""
    defs = [{"field": "Year", "pinned": "left", "cellStyle": {"fontWeight": "bold"}}]
    for m in MONTH_LABELS:
        defs.append({
            "field": m,
            "cellStyle": {
                "styleConditions": [
                    {"condition": "params.value && params.value.includes('-')", "style": {"color": NEGATIVE_COLOR}},
                    {"condition": "params.value && !params.value.includes('-')", "style": {"color": POSITIVE_COLOR}},
                ]
            },
        })
    return defs
