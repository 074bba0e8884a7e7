import dash_bootstrap_components as dbc
from dash import html

SOURCE_LABELS = {
    "excel": "NAV Spreadsheet",
    "mock": "Mock API",
}


def create_data_source_badge(source_summary):
    """
    Creates a badge indicating where the NAV series came from.
    source_summary: {
        'source': 'excel' | 'mock',
        'rows': int,
        'errors': list of str
    }
    """
    if not source_summary:
        return html.Div()

    source = source_summary.get('source') or ''
    errors = source_summary.get('errors') or []
    rows = source_summary.get('rows', 0)

    label = SOURCE_LABELS.get(source, source.title() or "Unknown")
    color = "success" if source == "excel" else "info"
    header = f"{rows} NAV observations loaded from {label}."

    if errors:
        label = "Data Gaps"
        color = "warning" if rows else "danger"

    tooltip_content = html.Div([
        html.P(header, className="mb-2 fw-bold"),
        html.Hr(className="my-2") if errors else None,
        html.Div([html.P(f"• {e}", className="small mb-0") for e in errors]),
    ], style={"textAlign": "left", "padding": "5px"})

    badge = dbc.Badge(
        label,
        color=color,
        pill=True,
        id="data-source-badge",
        style={"cursor": "pointer", "fontSize": "0.8rem"}
    )

    return html.Div([
        badge,
        dbc.Tooltip(
            tooltip_content,
            target="data-source-badge",
            placement="bottom",
            className="source-tooltip"
        )
    ], style={"display": "inline-block", "marginLeft": "10px"})
