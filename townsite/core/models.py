"""Data models for settlements, blog posts and page components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Union, cast

from .errors import ValidationError

ComponentType = Literal[
    "header", "hero", "about", "services", "blog", "map", "contact", "footer"
]
Alignment = Literal["left", "center", "right"]

COMPONENT_TYPES: tuple[ComponentType, ...] = (
    "header",
    "hero",
    "about",
    "services",
    "blog",
    "map",
    "contact",
    "footer",
)
ALIGNMENTS: tuple[Alignment, ...] = ("left", "center", "right")

# Labels shown in the component picker.
COMPONENT_LABELS: Dict[str, str] = {
    "header": "Header",
    "hero": "Hero Section",
    "about": "Despre",
    "services": "Servicii",
    "blog": "Blog",
    "map": "Hartă",
    "contact": "Contact",
    "footer": "Footer",
}

MAX_TITLE_LENGTH = 30
MAX_DESCRIPTION_LENGTH = 100


@dataclass
class Settlement:
    id: str
    name: str
    region: str
    lat: float
    lng: float
    active: bool = False

    def validate(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValidationError(f"Latitude {self.lat} is outside [-90, 90]")
        if not -180.0 <= self.lng <= 180.0:
            raise ValidationError(f"Longitude {self.lng} is outside [-180, 180]")

    @property
    def site_name(self) -> str:
        """Name the publish webhook deploys the site under."""
        return f"{self.name}-{self.region.upper()}"


@dataclass
class BlogPost:
    id: str
    title: str
    description: str
    content: str
    settlement: str
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def validate(self) -> None:
        if not self.title:
            raise ValidationError("A blog post must have a title")
        if len(self.title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"A blog post title must have at most {MAX_TITLE_LENGTH} characters"
            )
        if not self.description:
            raise ValidationError("A blog post must have a description")
        if len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"A blog post description must have at most {MAX_DESCRIPTION_LENGTH} characters"
            )
        if not self.content:
            raise ValidationError("A blog post must have content")
        if not self.settlement:
            raise ValidationError("A blog post must be associated with a settlement")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "settlement": self.settlement,
            "date": self.date.isoformat(),
        }


def sort_posts(posts: List[BlogPost]) -> List[BlogPost]:
    """Newest first; ties keep a stable order by id."""
    return sorted(posts, key=lambda p: (p.date.timestamp(), p.id), reverse=True)


# ---------------------------------------------------------------------------
# Component content variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeaderContent:
    title: Optional[str] = None


@dataclass(frozen=True)
class HeroContent:
    title: Optional[str] = None
    subtitle: Optional[str] = None


@dataclass(frozen=True)
class SectionContent:
    """Shared by the about, services and contact sections."""

    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class BlogContent:
    title: Optional[str] = None


@dataclass(frozen=True)
class MapContent:
    title: Optional[str] = None


@dataclass(frozen=True)
class FooterContent:
    pass


ComponentContent = Union[
    HeaderContent, HeroContent, SectionContent, BlogContent, MapContent, FooterContent
]

CONTENT_TYPES: Dict[str, type] = {
    "header": HeaderContent,
    "hero": HeroContent,
    "about": SectionContent,
    "services": SectionContent,
    "contact": SectionContent,
    "blog": BlogContent,
    "map": MapContent,
    "footer": FooterContent,
}


def content_fields(component_type: str) -> tuple[str, ...]:
    return tuple(f.name for f in fields(CONTENT_TYPES[component_type]))


def content_from_dict(component_type: str, data: dict) -> ComponentContent:
    cls = CONTENT_TYPES[component_type]
    values: Dict[str, Optional[str]] = {}
    for name in content_fields(component_type):
        raw = data.get(name)
        values[name] = str(raw) if raw is not None else None
    return cast(ComponentContent, cls(**values))


def default_content(component_type: str) -> ComponentContent:
    """Content a freshly added component starts with."""
    cls = CONTENT_TYPES[component_type]
    names = content_fields(component_type)
    values: Dict[str, str] = {}
    if "title" in names:
        values["title"] = f"Titlu {component_type}"
    if "description" in names:
        values["description"] = "Descriere..."
    return cast(ComponentContent, cls(**values))


@dataclass
class WebsiteComponent:
    id: str
    type: ComponentType
    content: ComponentContent
    position: int = 0
    alignment: Alignment = "center"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "content": {k: v for k, v in asdict(self.content).items() if v is not None},
            "position": self.position,
            "alignment": self.alignment,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WebsiteComponent":
        def safe_int(val, default=0):
            try:
                return int(val)
            except (TypeError, ValueError):
                return default

        comp_type = str(data.get("type", ""))
        if comp_type not in CONTENT_TYPES:
            raise ValueError(f"Unknown component type: {comp_type!r}")
        raw_content = data.get("content")
        alignment = str(data.get("alignment", "center"))
        return cls(
            id=str(data.get("id", "")),
            type=cast(ComponentType, comp_type),
            content=content_from_dict(
                comp_type, raw_content if isinstance(raw_content, dict) else {}
            ),
            position=safe_int(data.get("position", 0)),
            alignment=cast(Alignment, alignment if alignment in ALIGNMENTS else "center"),
        )


@dataclass
class DraftEntry:
    settlement_id: str
    components: List[WebsiteComponent]
    css: str
    updated_at: str

    def to_dict(self) -> dict:
        return {
            "settlement_id": self.settlement_id,
            "components": [c.to_dict() for c in self.components],
            "css": self.css,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DraftEntry":
        components: List[WebsiteComponent] = []
        for entry in data.get("components", []):
            if not isinstance(entry, dict):
                continue
            try:
                components.append(WebsiteComponent.from_dict(entry))
            except ValueError:
                continue
        components.sort(key=lambda c: c.position)
        return cls(
            settlement_id=str(data.get("settlement_id", "")),
            components=components,
            css=str(data.get("css", "")),
            updated_at=str(data.get("updated_at", "")),
        )
