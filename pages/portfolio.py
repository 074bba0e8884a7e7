import dash
from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_ag_grid as dag
import dash_wrappers as dw
import config
from components.data_source_badge import create_data_source_badge
from config import POSITIVE_COLOR, NEGATIVE_COLOR

layout = html.Div([
    html.Div([
        html.H1(config.PORTFOLIO_NAME, className="d-inline-block"),
        html.Div(id="data-source-badge-container", className="d-inline-block align-top"),
    ], className="mb-4"),

    dbc.Row([
        # Trailing returns panel
        dbc.Col(dbc.Card([
            html.H5("Trailing Returns", className="card-title p-2"),
            dcc.Loading(html.Div(id="trailing-table-container")),
            html.Small(id="trailing-as-of", className="text-muted p-2"),
        ]), width=3, className="mb-4"),

        # Equity curve + drawdown
        dbc.Col(dbc.Card([
            dbc.Row([
                dbc.Col([
                    html.H5("Equity Curve", className="card-title mb-1"),
                    html.Small(id="live-since-label", className="text-muted"),
                ], width=5),
                dbc.Col([
                    dcc.DatePickerRange(
                        id="equity-date-range",
                        display_format="YYYY-MM-DD",
                        start_date_placeholder_text="From date",
                        end_date_placeholder_text="To date",
                        clearable=True,
                    ),
                    dbc.Button("Reset", id="btn-reset-range", color="link", size="sm", className="ms-2 text-success"),
                ], width=7, className="text-end"),
            ], className="p-2"),
            dcc.Graph(id="equity-drawdown-chart", config=dw.get_graph_config()),
        ]), width=9, className="mb-4"),
    ]),

    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Drawdown Analysis (Underwater Chart)", className="card-title p-2"),
            dcc.Graph(id="underwater-chart", config=dw.get_graph_config(f"{config.EXPORT_FILENAME}-drawdown")),
            html.Small(id="drawdown-stats", className="text-muted fst-italic p-2"),
        ]), width=12, className="mb-4"),
    ]),

    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Monthly returns (by year)", className="card-title p-2"),
            dcc.Loading(html.Div(id="monthly-table-container")),
        ]), width=12, className="mb-4"),
    ]),
])


@callback(
    [Output("equity-date-range", "start_date"),
     Output("equity-date-range", "end_date")],
    Input("btn-reset-range", "n_clicks"),
    prevent_initial_call=True
)
def reset_range(_n):
    return None, None


@callback(
    [Output("trailing-table-container", "children"),
     Output("trailing-as-of", "children"),
     Output("live-since-label", "children"),
     Output("monthly-table-container", "children"),
     Output("drawdown-stats", "children"),
     Output("data-source-badge-container", "children")],
    [Input("data-signal", "data"),
     Input("theme-store", "data")]
)
def update_tables(_signal, theme):
    try:
        data = dw.get_data()
    except (OSError, ValueError, RuntimeError) as e:
        msg = f"Data unavailable: {e}"
        return msg, "", "", msg, "", None

    grid_class = "ag-theme-alpine-dark" if theme == "dark" else "ag-theme-alpine"

    trailing_table = dag.AgGrid(
        id="trailing-grid",
        rowData=dw.get_trailing_rows(data["trailing"]),
        columnDefs=[
            {"field": "Period", "cellStyle": {"fontWeight": "bold"}},
            {
                "field": "Return",
                "cellStyle": {
                    "styleConditions": [
                        {"condition": "params.data._value < 0", "style": {"color": NEGATIVE_COLOR}},
                        {"condition": "params.data._value > 0", "style": {"color": POSITIVE_COLOR}},
                    ]
                },
            },
        ],
        defaultColDef={"flex": 1, "sortable": False, "resizable": True},
        className=grid_class,
        dashGridOptions={"domLayout": "autoHeight"},
    )

    as_of = data["trailing"].get("asOf")
    as_of_text = f"As of {as_of}" if as_of else ""

    monthly_table = dag.AgGrid(
        id="monthly-grid",
        rowData=dw.get_monthly_table_rows(data["monthly_by_year"]),
        columnDefs=dw.get_monthly_column_defs(),
        defaultColDef={"flex": 1, "minWidth": 70, "resizable": True},
        className=grid_class,
        dashGridOptions={"domLayout": "autoHeight"},
    )

    stats = data["drawdown_stats"]
    if stats["trough_date"] is None:
        stats_text = "No drawdown recorded."
    else:
        recovered = (
            f"recovered on {stats['recovery_date']:%Y-%m-%d} after {stats['recovery_days']} days"
            if stats["recovery_date"] is not None
            else f"still underwater after {stats['recovery_days']} days"
        )
        stats_text = (
            f"Max drawdown {stats['max_drawdown'] * 100:.1f}% "
            f"(peak {stats['peak_date']:%Y-%m-%d}, trough {stats['trough_date']:%Y-%m-%d}), {recovered}."
        )

    source_badge = create_data_source_badge(dw.get_source_summary(data))

    return trailing_table, as_of_text, dw.get_live_since(data), monthly_table, stats_text, source_badge


@callback(
    [Output("equity-drawdown-chart", "figure"),
     Output("underwater-chart", "figure")],
    [Input("data-signal", "data"),
     Input("theme-store", "data"),
     Input("equity-date-range", "start_date"),
     Input("equity-date-range", "end_date")]
)
def update_charts(_signal, theme, start_date, end_date):
    try:
        data = dw.get_data()
    except (OSError, ValueError, RuntimeError):
        return dash.no_update, dash.no_update

    eq_fig = dw.get_equity_drawdown_chart(data, start_date, end_date, theme)
    dd_fig = dw.get_drawdown_chart(data, start_date, end_date, theme)
    return eq_fig, dd_fig
