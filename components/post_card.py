import dash_bootstrap_components as dbc
from dash import html


def create_post_card(post):
    """
    Card for one blog post.
    post: { 'id', 'title', 'date', 'excerpt', 'url' }
    """
    if not post:
        return html.Div()

    post_id = post.get("id", "")
    return dbc.Card(
        dbc.CardBody([
            html.H5(post.get("title", "Untitled"), id=f"post-{post_id}", className="card-title blog-title"),
            html.Div(post.get("date", ""), className="text-muted small mb-2"),
            html.P(post.get("excerpt", ""), className="blog-excerpt"),
            html.A("Read full post", href=post.get("url") or "#", className="read-link", target="_blank"),
        ]),
        className="mb-3 shadow-sm",
    )


def create_info_card(title, content):
    return dbc.Card(
        dbc.CardBody([
            html.H5(title, className="card-title"),
            html.P(content, className="text-muted mb-0"),
        ]),
        className="h-100 shadow-sm",
    )
