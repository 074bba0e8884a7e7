from dash import html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_wrappers as dw
from components.post_card import create_post_card, create_info_card

layout = html.Div([
    html.H1("Home", className="mb-4"),

    dbc.Row([
        dbc.Col(create_info_card(
            "Get started",
            "Read our getting started guide to get the most out of your subscription."
        ), width=6),
        dbc.Col(create_info_card(
            "Community",
            "Join the conversation on our Slack for Capitalmind Premium subscribers."
        ), width=6),
    ], className="mb-4"),

    html.H2("Latest Posts", className="mt-2 mb-3"),
    html.Div(id="blog-list-container", children=html.P("Loading posts...", className="text-muted")),
])


@callback(
    Output("blog-list-container", "children"),
    Input("data-signal", "data"),
)
def update_home(_signal):
    try:
        data = dw.get_data()
    except (OSError, ValueError, RuntimeError) as e:
        return html.P(f"Posts unavailable: {e}", className="text-danger")

    blogs = data.get("blogs") or []
    if not blogs:
        return html.P("No posts yet.", className="text-muted")
    return [create_post_card(b) for b in blogs]
