"""Per-settlement draft cache for the component tree and custom CSS."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .models import DraftEntry, WebsiteComponent
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "website-draft:"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class DraftCache:
    """Write-through cache of in-progress edits, keyed by settlement id.

    Storage problems never escape this class: a failed read is a cache miss
    and a failed write is logged.
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], str] = _utc_now) -> None:
        self.store = store
        self._clock = clock

    @staticmethod
    def key_for(settlement_id: str) -> str:
        return f"{KEY_PREFIX}{settlement_id}"

    def load(self, settlement_id: str) -> Optional[DraftEntry]:
        key = self.key_for(settlement_id)
        try:
            raw = self.store.get(key)
        except (OSError, ValueError) as exc:
            logger.warning("Draft storage unavailable for %s: %s", settlement_id, exc)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("draft is not a JSON object")
            entry = DraftEntry.from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Ignoring corrupt draft for %s: %s", settlement_id, exc)
            return None
        entry.settlement_id = settlement_id
        logger.info(
            "Restored draft for %s (%d components)", settlement_id, len(entry.components)
        )
        return entry

    def save(self, settlement_id: str, components: List[WebsiteComponent], css: str) -> DraftEntry:
        entry = DraftEntry(
            settlement_id=settlement_id,
            components=list(components),
            css=css,
            updated_at=self._clock(),
        )
        try:
            self.store.set(
                self.key_for(settlement_id),
                json.dumps(entry.to_dict(), ensure_ascii=False),
            )
        except OSError as exc:
            logger.warning("Could not save draft for %s: %s", settlement_id, exc)
        return entry

    def clear(self, settlement_id: str) -> None:
        try:
            self.store.delete(self.key_for(settlement_id))
        except (OSError, ValueError) as exc:
            logger.warning("Could not clear draft for %s: %s", settlement_id, exc)
