"""Content decisions shared by the generator and the live preview.

Every default title, placeholder sentence and navigation entry is decided
here, so the published site and the preview never disagree.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .models import (
    BlogContent,
    BlogPost,
    HeaderContent,
    HeroContent,
    MapContent,
    SectionContent,
    Settlement,
    WebsiteComponent,
    sort_posts,
)

HEADER_SUBTITLE = "Portalul oficial al localității"
HERO_DEFAULT_TITLE = "Bine ați venit"
HERO_DEFAULT_SUBTITLE = "Portal oficial"
BLOG_DEFAULT_TITLE = "Ultimele Noutăți"
MAP_DEFAULT_TITLE = "Localizare"

SECTION_DEFAULTS = {
    "about": ("Despre Noi", "Descriere despre localitate..."),
    "services": ("Servicii", "Lista serviciilor disponibile..."),
    "contact": ("Contact", "Informații de contact..."),
}

# Section anchors, also the targets of the header navigation.
ANCHORS = {
    "about": "despre",
    "services": "servicii",
    "blog": "noutati",
    "map": "harta",
    "contact": "contact",
}

NAV_ORDER = (("about", "Despre"), ("blog", "Noutăți"), ("contact", "Contact"))

TEASER_LENGTH = 150

RO_MONTHS = (
    "ianuarie",
    "februarie",
    "martie",
    "aprilie",
    "mai",
    "iunie",
    "iulie",
    "august",
    "septembrie",
    "octombrie",
    "noiembrie",
    "decembrie",
)


@dataclass(frozen=True)
class NavLink:
    text: str
    anchor: str


@dataclass(frozen=True)
class SectionView:
    id: str
    type: str
    alignment: str
    title: str = ""
    subtitle: str = ""
    body: str = ""
    anchor: Optional[str] = None
    nav: List[NavLink] = field(default_factory=list)


def nav_links(types: Iterable[str]) -> List[NavLink]:
    present = set(types)
    return [NavLink(text, ANCHORS[t]) for t, text in NAV_ORDER if t in present]


def header_title(content: HeaderContent, settlement: Settlement) -> str:
    return content.title or f"Primăria {settlement.name}"


def footer_text(settlement: Settlement, year: int) -> str:
    return f"© {year} {settlement.name}. Toate drepturile rezervate."


def teaser_text(content: str, limit: int = TEASER_LENGTH) -> str:
    if len(content) <= limit:
        return content
    return content[:limit].rstrip() + "..."


def format_post_date(value: datetime) -> str:
    return f"{value.day} {RO_MONTHS[value.month - 1]} {value.year}"


def _section_view(
    component: WebsiteComponent, settlement: Settlement, year: int, nav: List[NavLink]
) -> SectionView:
    content = component.content
    base = dict(id=component.id, type=component.type, alignment=component.alignment)
    anchor = ANCHORS.get(component.type)

    if isinstance(content, HeaderContent):
        return SectionView(
            title=header_title(content, settlement),
            subtitle=HEADER_SUBTITLE,
            nav=nav,
            **base,
        )
    if isinstance(content, HeroContent):
        # Explicit empty strings are kept as they are.
        return SectionView(
            title=HERO_DEFAULT_TITLE if content.title is None else content.title,
            subtitle=HERO_DEFAULT_SUBTITLE if content.subtitle is None else content.subtitle,
            **base,
        )
    if isinstance(content, SectionContent):
        default_title, placeholder = SECTION_DEFAULTS[component.type]
        return SectionView(
            title=content.title or default_title,
            body=content.description or placeholder,
            anchor=anchor,
            **base,
        )
    if isinstance(content, BlogContent):
        return SectionView(title=content.title or BLOG_DEFAULT_TITLE, anchor=anchor, **base)
    if isinstance(content, MapContent):
        return SectionView(title=content.title or MAP_DEFAULT_TITLE, anchor=anchor, **base)
    return SectionView(body=footer_text(settlement, year), **base)


def build_sections(
    settlement: Settlement, components: Sequence[WebsiteComponent], year: int
) -> List[SectionView]:
    """View models for ``components`` in render order."""
    ordered = sorted(components, key=lambda c: c.position)
    nav = nav_links(c.type for c in ordered)
    views: List[SectionView] = []
    seen_anchors: set[str] = set()
    for component in ordered:
        view = _section_view(component, settlement, year, nav)
        if view.anchor in seen_anchors:
            # Repeated sections (services) keep the anchor on the first one only.
            view = replace(view, anchor=None)
        elif view.anchor:
            seen_anchors.add(view.anchor)
        views.append(view)
    return views


@dataclass(frozen=True)
class PostCard:
    """A blog post prepared for teaser cards and the post page."""

    id: str
    title: str
    description: str
    content: str
    preview: str
    date: str
    iso_date: str


def post_cards(posts: Sequence[BlogPost]) -> List[PostCard]:
    return [
        PostCard(
            id=post.id,
            title=post.title,
            description=post.description,
            content=post.content,
            preview=teaser_text(post.content),
            date=format_post_date(post.date),
            iso_date=post.date.isoformat(),
        )
        for post in sort_posts(list(posts))
    ]
