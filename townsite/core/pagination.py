"""Blog listing pagination and search.

The generated ``script.js`` implements the same algorithm in the browser;
keep the two in step.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

from .models import BlogPost

PAGE_SIZE = 9
TEASER_COUNT = 5


@dataclass(frozen=True)
class PageWindow:
    posts: List[BlogPost]
    page: int
    page_count: int
    total: int
    page_size: int = PAGE_SIZE

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def page_numbers(self) -> List[int]:
        # An empty result has no numbered buttons, only disabled prev/next.
        return list(range(1, math.ceil(self.total / self.page_size) + 1))


def filter_posts(posts: Sequence[BlogPost], query: str) -> List[BlogPost]:
    needle = query.strip().lower()
    if not needle:
        return list(posts)
    return [
        p
        for p in posts
        if needle in p.title.lower()
        or needle in p.description.lower()
        or needle in p.content.lower()
    ]


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(total / page_size))


def paginate(posts: Sequence[BlogPost], page: int = 1, page_size: int = PAGE_SIZE) -> PageWindow:
    pages = page_count(len(posts), page_size)
    page = min(max(1, page), pages)
    start = (page - 1) * page_size
    return PageWindow(
        posts=list(posts[start:start + page_size]),
        page=page,
        page_count=pages,
        total=len(posts),
        page_size=page_size,
    )


def search_page(
    posts: Sequence[BlogPost], query: str = "", page: int = 1, page_size: int = PAGE_SIZE
) -> PageWindow:
    """Filter by ``query`` then return the requested page of the result."""
    return paginate(filter_posts(posts, query), page, page_size)
