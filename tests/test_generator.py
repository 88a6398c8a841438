from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from townsite.core import generator
from townsite.core.generator import GeneratorOptions, export_site, generate_css, generate_site
from townsite.core.models import (
    BlogContent,
    BlogPost,
    FooterContent,
    HeaderContent,
    HeroContent,
    MapContent,
    SectionContent,
    Settlement,
    WebsiteComponent,
)
from townsite.core.templates import BASE_CSS

OPTIONS = GeneratorOptions(api_url="https://api.example.test/v1", year=2024)


def _settlement() -> Settlement:
    return Settlement(id="s1", name="Sibiu", region="Sibiu", lat=45.7983, lng=24.1256)


def _components(*middle: WebsiteComponent) -> list[WebsiteComponent]:
    items = [WebsiteComponent(id="hd", type="header", content=HeaderContent())]
    items.extend(middle)
    items.append(WebsiteComponent(id="ft", type="footer", content=FooterContent()))
    for idx, comp in enumerate(items):
        comp.position = idx
    return items


def _post(post_id: str, title: str, content: str, day: int) -> BlogPost:
    return BlogPost(
        id=post_id,
        title=title,
        description="Descriere",
        content=content,
        settlement="s1",
        date=datetime(2024, 3, day, 9, 0, tzinfo=timezone.utc),
    )


def test_exactly_one_header_and_footer_block() -> None:
    components = _components(
        WebsiteComponent(id="hero", type="hero", content=HeroContent()),
        WebsiteComponent(id="about", type="about", content=SectionContent()),
    )
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert html.count("<header") == 1
    assert html.count("<footer") == 1
    assert "Primăria Sibiu" in html
    assert "© 2024 Sibiu. Toate drepturile rezervate." in html


def test_sections_render_in_position_order() -> None:
    components = _components(
        WebsiteComponent(id="contact", type="contact", content=SectionContent()),
        WebsiteComponent(id="about", type="about", content=SectionContent()),
    )
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert html.index('id="contact"') < html.index('id="despre"')
    assert "Informații de contact..." in html
    assert "Descriere despre localitate..." in html


def test_output_is_deterministic() -> None:
    components = _components(
        WebsiteComponent(id="blog", type="blog", content=BlogContent()),
        WebsiteComponent(id="map", type="map", content=MapContent()),
    )
    posts = [_post("p1", "Primul", "Text", 1)]
    first = generate_site(_settlement(), components, posts, "h1 {}", OPTIONS)
    second = generate_site(_settlement(), components, posts, "h1 {}", OPTIONS)
    assert first == second


def test_navigation_follows_present_sections() -> None:
    components = _components(
        WebsiteComponent(id="about", type="about", content=SectionContent()),
        WebsiteComponent(id="contact", type="contact", content=SectionContent()),
    )
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert 'href="#despre"' in html
    assert 'href="#contact"' in html
    assert "#noutati" not in html


def test_hero_keeps_explicit_empty_strings() -> None:
    components = _components(
        WebsiteComponent(id="hero", type="hero", content=HeroContent(title="", subtitle="")),
    )
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert "<h1></h1>" in html
    assert "Bine ați venit" not in html


def test_hero_defaults_when_unset() -> None:
    components = _components(WebsiteComponent(id="hero", type="hero", content=HeroContent()))
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert "Bine ați venit" in html
    assert "Portal oficial" in html


def test_user_text_is_escaped() -> None:
    components = _components(
        WebsiteComponent(
            id="about",
            type="about",
            content=SectionContent(title="<script>alert(1)</script>", description="A & B"),
        ),
    )
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "A &amp; B" in html


def test_teaser_title_escaped_but_post_content_verbatim() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    posts = [_post("p1", "<b>Alertă</b>", "<p>Apa se <strong>oprește</strong></p>", 2)]
    bundle = generate_site(_settlement(), components, posts, options=OPTIONS)

    assert bundle.blog_html is not None and bundle.post_html is not None
    assert "&lt;b&gt;Alertă&lt;/b&gt;" in bundle.blog_html
    assert "<b>Alertă</b>" not in bundle.blog_html
    assert "<p>Apa se <strong>oprește</strong></p>" in bundle.post_html
    assert "<b>Alertă</b>" not in bundle.post_html


def test_script_title_in_post_is_escaped_in_listing_and_post_page() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    posts = [_post("p1", "<script>alert(1)</script>", "<p>Text</p>", 2)]
    bundle = generate_site(_settlement(), components, posts, options=OPTIONS)

    assert bundle.blog_html is not None and bundle.post_html is not None
    for page in (bundle.blog_html, bundle.post_html):
        assert "<script>alert(1)</script>" not in page
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in page


def test_post_page_loads_live_post_with_inert_snapshot() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    posts = [_post("p1", "Apa", "<p>Apa se <strong>oprește</strong></p>", 2)]
    bundle = generate_site(_settlement(), components, posts, options=OPTIONS)
    post_html = bundle.post_html or ""

    assert 'id="post-article" hidden' in post_html
    assert '<div class="post-content"></div>' in post_html
    snapshot = post_html.index('<template class="post-snapshot" data-post-id="p1"')
    assert post_html.index("<p>Apa se <strong>oprește</strong></p>") > snapshot
    assert "<article" not in post_html[snapshot:]

    body = _function_body(bundle.js, "fetchPost")
    assert "${API_URL}/blog-posts/${encodeURIComponent(postId)}" in body
    assert "response.status === 404" in body
    assert "readSnapshotPost(postId)" in _function_body(bundle.js, "initPostPage")


def _function_body(js: str, name: str) -> str:
    start = js.index(f"function {name}(")
    end = js.find("\n}\n", start)
    return js[start:end]


def test_script_pagination_disables_prev_and_next_at_the_ends() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    js = generate_site(_settlement(), components, options=OPTIONS).js

    assert "Math.max(1, Math.ceil(blogState.filteredPosts.length / PAGE_SIZE))" in _function_body(js, "pageCount")
    controls = _function_body(js, "renderPagination")
    assert "data-page=\"${current - 1}\"${current === 1 ? ' disabled' : ''}" in controls
    assert "data-page=\"${current + 1}\"${current === total ? ' disabled' : ''}" in controls
    assert "for (let page = 1; page <= numbered; page++)" in controls

    page = _function_body(js, "renderBlogPage")
    assert "const start = (blogState.currentPage - 1) * PAGE_SIZE;" in page
    assert "blogState.filteredPosts.slice(start, start + PAGE_SIZE)" in page


def test_script_search_resets_to_first_page() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    js = generate_site(_settlement(), components, options=OPTIONS).js
    search = _function_body(js, "applySearch")
    assert "toLowerCase().includes(needle)" in search
    assert "[post.title, post.description, post.content]" in search
    assert "blogState.currentPage = 1;" in search


def test_script_teasers_escape_every_text_field() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    js = generate_site(_settlement(), components, options=OPTIONS).js
    teaser = _function_body(js, "renderTeaser")
    assert "<h3>${escapeHtml(post.title)}</h3>" in teaser
    assert "${escapeHtml(post.description)}" in teaser
    assert "${escapeHtml(truncate(post.content, TEASER_LENGTH))}" in teaser
    assert "${escapeHtml(formatDate(post.date))}" in teaser
    assert ".replace(/</g, '&lt;')" in _function_body(js, "escapeHtml")


def test_blog_pages_only_with_blog_component() -> None:
    without = generate_site(_settlement(), _components(), options=OPTIONS)
    assert set(without.files()) == {"index.html", "styles.css", "script.js"}

    with_blog = generate_site(
        _settlement(),
        _components(WebsiteComponent(id="blog", type="blog", content=BlogContent())),
        options=OPTIONS,
    )
    assert set(with_blog.files()) == {"index.html", "styles.css", "script.js", "blog.html", "post.html"}
    assert "Nu există postări încă." in (with_blog.blog_html or "")


def test_blog_listing_is_newest_first_with_truncated_preview() -> None:
    components = _components(WebsiteComponent(id="blog", type="blog", content=BlogContent()))
    posts = [_post("old", "Vechi", "x" * 400, 1), _post("new", "Nou", "Scurt", 5)]
    blog_html = generate_site(_settlement(), components, posts, options=OPTIONS).blog_html or ""
    assert blog_html.index('data-post-id="new"') < blog_html.index('data-post-id="old"')
    assert "x" * 150 + "..." in blog_html
    assert "5 martie 2024" in blog_html
    assert 'href="index.html#noutati"' in blog_html
    assert "Acasă" in blog_html


def test_custom_css_is_appended_verbatim() -> None:
    assert generate_css("") == BASE_CSS
    css = generate_css(".hero { background: red; }")
    assert css.startswith(BASE_CSS)
    assert css.endswith("/* Custom Styles */\n.hero { background: red; }")


def test_script_is_parameterized_with_json_literals() -> None:
    components = _components(
        WebsiteComponent(id="blog", type="blog", content=BlogContent()),
        WebsiteComponent(id="map", type="map", content=MapContent()),
    )
    js = generate_site(_settlement(), components, options=OPTIONS).js
    assert 'const API_URL = "https://api.example.test/v1";' in js
    assert 'const SETTLEMENT_ID = "s1";' in js
    assert "lat: 45.7983" in js
    assert "const PAGE_SIZE = 9;" in js
    assert "const TEASER_COUNT = 5;" in js
    assert "const MAP_RETRY_LIMIT = 20;" in js
    assert "function initMap" in js


def test_script_omits_blog_and_map_code_when_absent() -> None:
    js = generate_site(_settlement(), _components(), options=OPTIONS).js
    assert "PAGE_SIZE" not in js
    assert "function initMap" not in js


def test_map_section_loads_leaflet() -> None:
    components = _components(WebsiteComponent(id="map", type="map", content=MapContent()))
    html = generate_site(_settlement(), components, options=OPTIONS).html
    assert 'id="map"' in html
    assert "leaflet.js" in html


def test_export_writes_every_file(tmp_path: Path) -> None:
    bundle = generate_site(
        _settlement(),
        _components(WebsiteComponent(id="blog", type="blog", content=BlogContent())),
        options=OPTIONS,
    )
    written = export_site(bundle, tmp_path / "site")
    assert sorted(p.name for p in written) == sorted(bundle.files())
    assert (tmp_path / "site" / "index.html").read_text(encoding="utf-8") == bundle.html


def test_default_year_is_current() -> None:
    html = generator.generate_html(_settlement(), _components())
    assert f"© {datetime.now().year} Sibiu" in html
