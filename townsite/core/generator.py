"""Static site generation for a settlement website."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import DictLoader, Environment, select_autoescape

from . import pagination, templates
from .models import BlogPost, Settlement, WebsiteComponent
from .sections import TEASER_LENGTH, SectionView, build_sections, post_cards

DEFAULT_PUBLIC_API_URL = "https://api.bachelordegree.tech/api/v1"
MAP_RETRY_LIMIT = 20
MAP_RETRY_DELAY_MS = 250


def _env() -> Environment:
    return Environment(
        loader=DictLoader(
            {
                "layout.html": templates.LAYOUT_TEMPLATE,
                "macros.html": templates.MACROS_TEMPLATE,
                "index.html": templates.INDEX_TEMPLATE,
                "blog.html": templates.BLOG_TEMPLATE,
                "post.html": templates.POST_TEMPLATE,
                "script.js": templates.SCRIPT_TEMPLATE,
            }
        ),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


_ENV = _env()


@dataclass(frozen=True)
class GeneratorOptions:
    api_url: str = DEFAULT_PUBLIC_API_URL
    year: Optional[int] = None

    def resolved_year(self) -> int:
        return self.year if self.year is not None else datetime.now().year


@dataclass(frozen=True)
class SiteBundle:
    html: str
    css: str
    js: str
    blog_html: Optional[str] = None
    post_html: Optional[str] = None

    def files(self) -> Dict[str, str]:
        """File name to content, as the publish webhook expects them."""
        files = {
            "index.html": self.html,
            "styles.css": self.css,
            "script.js": self.js,
        }
        if self.blog_html is not None:
            files["blog.html"] = self.blog_html
        if self.post_html is not None:
            files["post.html"] = self.post_html
        return files


def _find(sections: List[SectionView], component_type: str) -> Optional[SectionView]:
    for view in sections:
        if view.type == component_type:
            return view
    return None


def _page_context(sections: List[SectionView], page_kind: str, page_title: str) -> dict:
    return {
        "page_title": page_title,
        "page_kind": page_kind,
        "header": _find(sections, "header"),
        "footer": _find(sections, "footer"),
        "link_prefix": "" if page_kind == "index" else "index.html",
        "has_map": page_kind == "index" and _find(sections, "map") is not None,
        "leaflet_css": templates.LEAFLET_CSS,
        "leaflet_js": templates.LEAFLET_JS,
    }


def generate_html(
    settlement: Settlement,
    components: Sequence[WebsiteComponent],
    options: GeneratorOptions = GeneratorOptions(),
) -> str:
    sections = build_sections(settlement, components, options.resolved_year())
    context = _page_context(sections, "index", settlement.name or "Website")
    context["sections"] = sections
    return _ENV.get_template("index.html").render(**context)


def generate_css(custom_css: str = "") -> str:
    if custom_css:
        return f"{templates.BASE_CSS}\n/* Custom Styles */\n{custom_css}"
    return templates.BASE_CSS


def generate_js(
    settlement: Settlement,
    components: Sequence[WebsiteComponent],
    options: GeneratorOptions = GeneratorOptions(),
) -> str:
    types = {c.type for c in components}
    return _ENV.get_template("script.js").render(
        api_url=options.api_url,
        settlement_id=settlement.id,
        settlement_name=settlement.name,
        region=settlement.region,
        lat=settlement.lat,
        lng=settlement.lng,
        has_blog="blog" in types,
        has_map="map" in types,
        page_size=pagination.PAGE_SIZE,
        teaser_count=pagination.TEASER_COUNT,
        teaser_length=TEASER_LENGTH,
        map_retry_limit=MAP_RETRY_LIMIT,
        map_retry_delay=MAP_RETRY_DELAY_MS,
    )


def generate_blog_html(
    settlement: Settlement,
    components: Sequence[WebsiteComponent],
    posts: Sequence[BlogPost],
    options: GeneratorOptions = GeneratorOptions(),
) -> str:
    sections = build_sections(settlement, components, options.resolved_year())
    blog = _find(sections, "blog")
    context = _page_context(
        sections, "blog", f"{blog.title if blog else 'Noutăți'} - {settlement.name}"
    )
    context["blog"] = blog
    context["cards"] = post_cards(posts)
    return _ENV.get_template("blog.html").render(**context)


def generate_post_html(
    settlement: Settlement,
    components: Sequence[WebsiteComponent],
    posts: Sequence[BlogPost],
    options: GeneratorOptions = GeneratorOptions(),
) -> str:
    sections = build_sections(settlement, components, options.resolved_year())
    context = _page_context(sections, "post", f"Noutăți - {settlement.name}")
    context["cards"] = post_cards(posts)
    return _ENV.get_template("post.html").render(**context)


def generate_site(
    settlement: Settlement,
    components: Sequence[WebsiteComponent],
    posts: Sequence[BlogPost] = (),
    custom_css: str = "",
    options: GeneratorOptions = GeneratorOptions(),
) -> SiteBundle:
    """Render every file of the website.

    The blog listing and post pages are produced whenever a blog component
    is present, even with no posts yet.
    """
    if options.year is None:
        options = GeneratorOptions(api_url=options.api_url, year=options.resolved_year())
    has_blog = any(c.type == "blog" for c in components)
    return SiteBundle(
        html=generate_html(settlement, components, options),
        css=generate_css(custom_css),
        js=generate_js(settlement, components, options),
        blog_html=generate_blog_html(settlement, components, posts, options) if has_blog else None,
        post_html=generate_post_html(settlement, components, posts, options) if has_blog else None,
    )


def export_site(bundle: SiteBundle, output_dir: str | Path) -> List[Path]:
    """Write the bundle's files into ``output_dir``."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for filename, content in bundle.files().items():
        path = output_dir / filename
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written
