"""Ordered list of page components and the rules for editing it."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, cast

from .models import (
    ALIGNMENTS,
    COMPONENT_LABELS,
    COMPONENT_TYPES,
    Alignment,
    ComponentType,
    FooterContent,
    HeaderContent,
    HeroContent,
    WebsiteComponent,
    content_fields,
    default_content,
)

logger = logging.getLogger(__name__)

MANDATORY_TYPES = frozenset({"header", "footer"})
REPEATABLE_TYPES = frozenset({"hero", "services"})


def new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class TreeChange:
    """Outcome of a tree operation. Rejected changes leave the tree untouched."""

    accepted: bool
    warning: Optional[str] = None
    component: Optional[WebsiteComponent] = None


def _rejected(message: str) -> TreeChange:
    logger.warning("Component change rejected: %s", message)
    return TreeChange(accepted=False, warning=message)


class ComponentTree:
    def __init__(
        self,
        components: Iterable[WebsiteComponent] = (),
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._id_factory = id_factory
        self._components: List[WebsiteComponent] = sorted(
            components, key=lambda c: c.position
        )
        if self._components:
            self._drop_duplicates()
            self._ensure_mandatory()
        self._renumber()

    # ------------------------------------------------------------- Queries --
    @property
    def components(self) -> List[WebsiteComponent]:
        return list(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def __bool__(self) -> bool:
        return bool(self._components)

    def get(self, component_id: str) -> Optional[WebsiteComponent]:
        for comp in self._components:
            if comp.id == component_id:
                return comp
        return None

    def has_type(self, component_type: str) -> bool:
        return any(c.type == component_type for c in self._components)

    def types(self) -> set[str]:
        return {c.type for c in self._components}

    # ----------------------------------------------------------- Mutations --
    def clear(self) -> None:
        self._components = []

    def seed_defaults(self, settlement_name: str) -> TreeChange:
        """Start a new site with a header, a hero and the mandatory footer."""
        if self._components:
            return _rejected("Website-ul are deja componente.")
        self._components = [
            self._make("header", HeaderContent(title=f"Primăria {settlement_name}".rstrip())),
            self._make("hero", HeroContent(title="Bine ați venit", subtitle="Portal oficial")),
        ]
        self._ensure_mandatory()
        self._renumber()
        return TreeChange(accepted=True, component=self._components[0])

    def add_component(self, component_type: str) -> TreeChange:
        if component_type not in COMPONENT_TYPES:
            return _rejected(f"Tip de componentă necunoscut: {component_type}")
        label = COMPONENT_LABELS[component_type]
        if component_type not in REPEATABLE_TYPES and self.has_type(component_type):
            return _rejected(f"Componenta {label} există deja și nu poate fi adăugată de două ori.")

        comp_type = cast(ComponentType, component_type)
        component = self._make(comp_type, default_content(comp_type))
        if component_type == "header":
            self._components.insert(0, component)
        elif self._components and self._components[-1].type == "footer":
            self._components.insert(len(self._components) - 1, component)
        else:
            self._components.append(component)
        self._ensure_mandatory()
        self._renumber()
        return TreeChange(accepted=True, component=component)

    def delete_component(self, component_id: str) -> TreeChange:
        component = self.get(component_id)
        if component is None:
            return _rejected(f"Componenta {component_id} nu există.")
        if component.type in MANDATORY_TYPES:
            return _rejected(
                f"Componenta {COMPONENT_LABELS[component.type]} este obligatorie și nu poate fi ștearsă."
            )
        self._components.remove(component)
        self._renumber()
        return TreeChange(accepted=True, component=component)

    def move_component(self, component_id: str, direction: str) -> TreeChange:
        if direction not in ("up", "down"):
            return _rejected(f"Direcție invalidă: {direction}")
        index = self._index_of(component_id)
        if index is None:
            return _rejected(f"Componenta {component_id} nu există.")
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self._components):
            return TreeChange(accepted=False)
        items = self._components
        items[index], items[target] = items[target], items[index]
        self._renumber()
        return TreeChange(accepted=True, component=items[target])

    def set_alignment(self, component_id: str, alignment: str) -> TreeChange:
        if alignment not in ALIGNMENTS:
            return _rejected(f"Aliniere invalidă: {alignment}")
        component = self.get(component_id)
        if component is None:
            return _rejected(f"Componenta {component_id} nu există.")
        component.alignment = cast(Alignment, alignment)
        return TreeChange(accepted=True, component=component)

    def edit_content(self, component_id: str, patch: Dict[str, Optional[str]]) -> TreeChange:
        component = self.get(component_id)
        if component is None:
            return _rejected(f"Componenta {component_id} nu există.")
        allowed = content_fields(component.type)
        unknown = sorted(set(patch) - set(allowed))
        if unknown:
            return _rejected(
                f"Câmpuri nepermise pentru {COMPONENT_LABELS[component.type]}: {', '.join(unknown)}"
            )
        component.content = dataclasses.replace(component.content, **patch)
        return TreeChange(accepted=True, component=component)

    # ------------------------------------------------------------- Helpers --
    def _make(self, component_type: ComponentType, content) -> WebsiteComponent:
        return WebsiteComponent(
            id=self._id_factory(),
            type=component_type,
            content=content,
            position=len(self._components),
            alignment="center",
        )

    def _index_of(self, component_id: str) -> Optional[int]:
        for idx, comp in enumerate(self._components):
            if comp.id == component_id:
                return idx
        return None

    def _drop_duplicates(self) -> None:
        """Keep the first component of each single-use type and of each id."""
        seen_types: set[str] = set()
        seen_ids: set[str] = set()
        kept: List[WebsiteComponent] = []
        for comp in self._components:
            if comp.id in seen_ids:
                continue
            if comp.type not in REPEATABLE_TYPES and comp.type in seen_types:
                continue
            seen_types.add(comp.type)
            seen_ids.add(comp.id)
            kept.append(comp)
        dropped = len(self._components) - len(kept)
        if dropped:
            logger.warning("Dropped %d duplicate component(s) from a restored tree", dropped)
        self._components = kept

    def _ensure_mandatory(self) -> None:
        if not self.has_type("header"):
            self._components.insert(0, self._make("header", HeaderContent()))
        if not self.has_type("footer"):
            self._components.append(self._make("footer", FooterContent()))

    def _renumber(self) -> None:
        for idx, comp in enumerate(self._components):
            comp.position = idx
