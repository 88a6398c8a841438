"""Editing state for one settlement's website."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .cache import DraftCache
from .generator import GeneratorOptions, SiteBundle, generate_site
from .models import BlogPost, Settlement, WebsiteComponent, sort_posts
from .preview import PreviewMode, render_blog_preview, render_preview
from .publish import Publisher, PublishResult
from .tree import ComponentTree, TreeChange, new_id

logger = logging.getLogger(__name__)


class EditorSession:
    """Holds the component tree and custom CSS of one settlement.

    Every accepted change is written to the draft cache before the method
    returns, so anything rendered afterwards sees it.
    """

    def __init__(
        self,
        settlement: Settlement,
        posts: Sequence[BlogPost] = (),
        cache: Optional[DraftCache] = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.settlement = settlement
        self.posts: List[BlogPost] = sort_posts(list(posts))
        self.cache = cache
        self.tree = ComponentTree(id_factory=id_factory)
        self.css = ""
        self.dirty = False
        self._id_factory = id_factory

    @property
    def components(self) -> List[WebsiteComponent]:
        return self.tree.components

    def open(self) -> bool:
        """Restore the cached draft; returns True when one was found."""
        if self.cache is None:
            return False
        entry = self.cache.load(self.settlement.id)
        if entry is None:
            return False
        self.tree = ComponentTree(entry.components, id_factory=self._id_factory)
        self.css = entry.css
        self.dirty = True
        return True

    # ----------------------------------------------------------- Mutations --
    def create_website(self) -> TreeChange:
        return self._apply(self.tree.seed_defaults(self.settlement.name))

    def add(self, component_type: str) -> TreeChange:
        return self._apply(self.tree.add_component(component_type))

    def delete(self, component_id: str) -> TreeChange:
        return self._apply(self.tree.delete_component(component_id))

    def move(self, component_id: str, direction: str) -> TreeChange:
        return self._apply(self.tree.move_component(component_id, direction))

    def align(self, component_id: str, alignment: str) -> TreeChange:
        return self._apply(self.tree.set_alignment(component_id, alignment))

    def edit(self, component_id: str, patch: Dict[str, Optional[str]]) -> TreeChange:
        return self._apply(self.tree.edit_content(component_id, patch))

    def set_css(self, text: str) -> None:
        if text == self.css:
            return
        self.css = text
        self._save()

    def reset(self) -> None:
        """Forget the draft, both cached and in memory."""
        if self.cache is not None:
            self.cache.clear(self.settlement.id)
        self.tree.clear()
        self.css = ""
        self.dirty = False
        logger.info("Draft reset for %s", self.settlement.id)

    def set_posts(self, posts: Sequence[BlogPost]) -> None:
        self.posts = sort_posts(list(posts))

    # -------------------------------------------------------------- Output --
    def bundle(self, options: GeneratorOptions = GeneratorOptions()) -> SiteBundle:
        return generate_site(self.settlement, self.components, self.posts, self.css, options)

    def preview(self, mode: PreviewMode = "desktop", year: Optional[int] = None) -> str:
        return render_preview(self.settlement, self.components, self.posts, self.css, mode, year)

    def blog_preview(self, query: str = "", page: int = 1) -> str:
        return render_blog_preview(self.settlement, self.posts, query, page)

    def publish(self, publisher: Publisher) -> PublishResult:
        result = publisher.publish(self.settlement, self.components, self.posts, self.css)
        self.dirty = False
        return result

    # ------------------------------------------------------------- Helpers --
    def _apply(self, change: TreeChange) -> TreeChange:
        if change.accepted:
            self._save()
        return change

    def _save(self) -> None:
        self.dirty = True
        if self.cache is not None:
            self.cache.save(self.settlement.id, self.components, self.css)
