import dash
from dash import dcc, html, Input, Output
import dash_bootstrap_components as dbc
from datetime import datetime

# Import wrappers
import dash_wrappers as dw
import config

# Import Pages
from pages import home, portfolio

# Initialize App
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.FLATLY],
    suppress_callback_exceptions=True,
    title=config.APP_TITLE
)
server = app.server

# Initialize Data Cache
try:
    dw.refresh_data()
    print("Initial data load complete.")
except Exception as e:
    print(f"Initial data load failed: {e}")

# Sidebar Component
sidebar = html.Div(
    [
        html.H3("CapitalMind", className="display-6"),
        html.P("Demo", className="lead"),
        html.Hr(),

        dbc.Nav(
            [
                dbc.NavLink("Home", href="/", active="exact"),
                dbc.NavLink("Portfolios", href="/portfolio", active="exact"),
                dbc.NavLink("Experimentals", href="#experimental", disabled=True),
                dbc.NavLink("Slack Archives", href="#archives", disabled=True),
                dbc.NavLink("Account", href="#account", disabled=True),
                dbc.NavLink("Help", href="#help", disabled=True),
            ],
            vertical=True,
            pills=True,
        ),

        html.Hr(),

        # Controls
        html.Div([
            dbc.Label("Theme"),
            dbc.Switch(id="theme-switch", label="Dark Mode", value=False, className="mb-2"),

            dbc.Label("Analysis End Date"),
            dcc.DatePickerSingle(
                id="date-picker-end",
                date=None,
                placeholder="Latest",
                clearable=True,
                display_format="YYYY-MM-DD",
                className="mb-2 d-block",
                style={'zIndex': 100}
            ),
            html.Div(id="load-status", className="small text-muted"),
        ]),
    ],
    id="sidebar",
    className="sidebar",
    style={
        "position": "fixed", "top": 0, "left": 0, "bottom": 0,
        "width": "16rem", "padding": "2rem 1rem", "overflowY": "auto",
    },
)

# Content Container
content = html.Div(id="page-content", className="content", style={"marginLeft": "17rem", "padding": "2rem 1rem"})

# Main Layout
app.layout = html.Div(
    [
        dcc.Location(id="url"),

        # Stores for Global State
        dcc.Store(id="data-signal", data=datetime.now().isoformat()),
        dcc.Store(id="theme-store", data="light"),

        sidebar,
        content,
    ],
    id="main-container",
)

# Validation Layout (Required for multi-page apps with global callbacks)
app.validation_layout = html.Div([
    app.layout,
    home.layout,
    portfolio.layout,
])

# ============================================================
# CALLBACKS
# ============================================================

# 1. Router
@app.callback(Output("page-content", "children"), [Input("url", "pathname")])
def render_page_content(pathname):
    if pathname == "/":
        return home.layout
    elif pathname == "/portfolio":
        return portfolio.layout
    return dbc.Container(
        [
            html.H1("404: Not found", className="text-danger"),
            html.Hr(),
            html.P(f"The pathname {pathname} was not recognised..."),
        ],
        className="py-3"
    )


# 2. Global State Updates
@app.callback(
    [Output("theme-store", "data"),
     Output("data-signal", "data"),
     Output("load-status", "children")],
    [Input("theme-switch", "value"),
     Input("date-picker-end", "date")]
)
def update_global_state(is_dark, end_date):
    theme = "dark" if is_dark else "light"

    # Refresh data with new end date
    try:
        data = dw.refresh_data(end_date=end_date)
        status = f"As of {data['trailing'].get('asOf') or 'N/A'}"
    except (OSError, ValueError, RuntimeError) as e:
        print(f"[WARNING] Data refresh failed: {e}")
        status = f"Load failed: {e}"

    return theme, datetime.now().isoformat(), status


if __name__ == "__main__":
    app.run(debug=config.DASH_DEBUG, port=config.PORT)
