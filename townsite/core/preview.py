"""Live preview documents for the embedded web view.

The preview is built from the same section view models as the published
site, but it is a single self-contained page: no external scripts, the blog
is rendered from the posts already in memory and the map is a placeholder.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, Sequence

from jinja2 import DictLoader, Environment, select_autoescape

from . import pagination, templates
from .models import BlogPost, Settlement, WebsiteComponent, sort_posts
from .sections import BLOG_DEFAULT_TITLE, build_sections, post_cards

PreviewMode = Literal["desktop", "tablet", "mobile"]

PREVIEW_WIDTHS = {
    "desktop": "100%",
    "tablet": "768px",
    "mobile": "375px",
}

EMPTY_MESSAGE = "Preview-ul va apărea aici după ce adaugi componente"

PREVIEW_CSS = """
body.preview {
    background: #e5e7eb;
}

.preview-frame {
    margin: 0 auto;
    background: #fff;
    min-height: 100vh;
    box-shadow: 0 0 24px rgba(0, 0, 0, 0.12);
}

.preview-empty {
    padding: 120px 20px;
    text-align: center;
    color: #6b7280;
    font-size: 18px;
}

.preview-more {
    grid-column: 1 / -1;
    text-align: center;
    padding: 20px;
    color: #6b7280;
    font-style: italic;
}

.map-placeholder {
    height: 400px;
    display: flex;
    flex-direction: column;
    align-items: center;
    justify-content: center;
    gap: 8px;
    background: #f3f4f6;
    color: #6b7280;
    border-radius: 12px;
}
"""

PREVIEW_TEMPLATE = """{% import "macros.html" as ui %}
<!DOCTYPE html>
<html lang="ro">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
{{ base_css | safe }}
{{ preview_css | safe }}
    </style>
{% if custom_css %}
    <style>
/* Custom Styles */
{{ custom_css | safe }}
    </style>
{% endif %}
</head>
<body class="preview preview-{{ mode }}">
<div class="preview-frame" style="max-width: {{ width }};">
{% for view in sections %}
{% if view.type == "header" %}
{{ ui.header(view, "") }}
{% elif view.type == "hero" %}
    <section class="hero {{ view.alignment }}">
        <h1>{{ view.title }}</h1>
        <p>{{ view.subtitle }}</p>
    </section>
{% elif view.type in ("about", "services", "contact") %}
    <section class="{{ view.type }} {{ view.alignment }}"{% if view.anchor %} id="{{ view.anchor }}"{% endif %}>
        <h2>{{ view.title }}</h2>
        <p>{{ view.body }}</p>
    </section>
{% elif view.type == "blog" %}
    <section class="blog {{ view.alignment }}" id="{{ view.anchor }}">
        <h2>{{ view.title }}</h2>
        <div class="blog-posts">
{% for card in teasers %}
{{ ui.teaser(card) }}
{% else %}
            <p class="blog-empty">Nu există postări încă.</p>
{% endfor %}
{% if remaining > 0 %}
            <p class="preview-more">... și încă {{ remaining }} postări</p>
{% endif %}
        </div>
    </section>
{% elif view.type == "map" %}
    <section class="map-section {{ view.alignment }}" id="{{ view.anchor }}">
        <h2>{{ view.title }}</h2>
        <div class="map-placeholder">
            <strong>{{ settlement.name }}, {{ settlement.region }}</strong>
            <span>{{ "%.4f"|format(settlement.lat) }}, {{ "%.4f"|format(settlement.lng) }}</span>
        </div>
    </section>
{% elif view.type == "footer" %}
{{ ui.footer(view) }}
{% endif %}
{% else %}
    <p class="preview-empty">{{ empty_message }}</p>
{% endfor %}
</div>
</body>
</html>
"""

BLOG_PREVIEW_TEMPLATE = """{% import "macros.html" as ui %}
<!DOCTYPE html>
<html lang="ro">
<head>
    <meta charset="UTF-8">
    <title>{{ title }}</title>
    <style>
{{ base_css | safe }}
{{ preview_css | safe }}
    </style>
</head>
<body class="preview page-blog">
<main class="blog-page">
    <section class="blog-listing">
        <h2>{{ title }}</h2>
{% if query %}
        <p class="blog-query">Rezultate pentru „{{ query }}”: {{ window.total }}</p>
{% endif %}
        <div class="blog-posts">
{% for card in cards %}
{{ ui.teaser(card) }}
{% else %}
            <p class="blog-empty">Nicio postare găsită.</p>
{% endfor %}
        </div>
        <div class="pagination">
            <button type="button" class="page-btn page-prev"{% if not window.has_prev %} disabled{% endif %}>&lsaquo; Înapoi</button>
{% for number in window.page_numbers %}
            <button type="button" class="page-btn page-number{% if number == window.page %} active{% endif %}">{{ number }}</button>
{% endfor %}
            <button type="button" class="page-btn page-next"{% if not window.has_next %} disabled{% endif %}>Înainte &rsaquo;</button>
        </div>
    </section>
</main>
</body>
</html>
"""


def _env() -> Environment:
    return Environment(
        loader=DictLoader(
            {
                "macros.html": templates.MACROS_TEMPLATE,
                "preview.html": PREVIEW_TEMPLATE,
                "blog_preview.html": BLOG_PREVIEW_TEMPLATE,
            }
        ),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


_ENV = _env()


def render_preview(
    settlement: Settlement,
    components: Sequence[WebsiteComponent],
    posts: Sequence[BlogPost] = (),
    custom_css: str = "",
    mode: PreviewMode = "desktop",
    year: Optional[int] = None,
) -> str:
    if mode not in PREVIEW_WIDTHS:
        raise ValueError(f"Unknown preview mode: {mode}")
    year = year if year is not None else datetime.now().year
    ordered = sort_posts(list(posts))
    shown = ordered[: pagination.TEASER_COUNT]
    return _ENV.get_template("preview.html").render(
        title=f"Preview - {settlement.name}",
        base_css=templates.BASE_CSS,
        preview_css=PREVIEW_CSS,
        custom_css=custom_css,
        mode=mode,
        width=PREVIEW_WIDTHS[mode],
        sections=build_sections(settlement, components, year),
        teasers=post_cards(shown),
        remaining=len(ordered) - len(shown),
        settlement=settlement,
        empty_message=EMPTY_MESSAGE,
    )


def render_blog_preview(
    settlement: Settlement,
    posts: Sequence[BlogPost],
    query: str = "",
    page: int = 1,
) -> str:
    """Preview one page of the blog listing, after search."""
    window = pagination.search_page(sort_posts(list(posts)), query, page)
    return _ENV.get_template("blog_preview.html").render(
        title=BLOG_DEFAULT_TITLE,
        base_css=templates.BASE_CSS,
        preview_css=PREVIEW_CSS,
        query=query.strip(),
        window=window,
        cards=post_cards(window.posts),
    )
