from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from townsite.core.cache import DraftCache
from townsite.core.models import HeroContent, SectionContent, WebsiteComponent
from townsite.core.storage import JsonFileStore, MemoryStore


def _components() -> list[WebsiteComponent]:
    return [
        WebsiteComponent(id="h", type="hero", content=HeroContent(title="Salut", subtitle=""), position=0),
        WebsiteComponent(
            id="a",
            type="about",
            content=SectionContent(title="Despre", description=None),
            position=1,
            alignment="right",
        ),
    ]


def test_round_trip_in_memory() -> None:
    cache = DraftCache(MemoryStore(), clock=lambda: "2024-05-01T10:00:00+00:00")
    cache.save("s1", _components(), "body { color: red; }")
    entry = cache.load("s1")
    assert entry is not None
    assert entry.components == _components()
    assert entry.css == "body { color: red; }"
    assert entry.updated_at == "2024-05-01T10:00:00+00:00"
    assert entry.settlement_id == "s1"


def test_drafts_are_scoped_per_settlement() -> None:
    cache = DraftCache(MemoryStore())
    cache.save("s1", _components(), "")
    assert cache.load("s2") is None


def test_round_trip_through_json_file(tmp_path: Path) -> None:
    path = tmp_path / "drafts.json"
    DraftCache(JsonFileStore(path)).save("s1", _components(), "h1 {}")

    entry = DraftCache(JsonFileStore(path)).load("s1")
    assert entry is not None
    assert entry.components == _components()
    assert entry.css == "h1 {}"
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert list(stored) == ["website-draft:s1"]


def test_clear_removes_entry(tmp_path: Path) -> None:
    cache = DraftCache(JsonFileStore(tmp_path / "drafts.json"))
    cache.save("s1", _components(), "")
    cache.clear("s1")
    assert cache.load("s1") is None


def test_corrupt_entry_is_a_miss() -> None:
    store = MemoryStore()
    store.set(DraftCache.key_for("s1"), "{not json")
    assert DraftCache(store).load("s1") is None

    store.set(DraftCache.key_for("s1"), "[1, 2, 3]")
    assert DraftCache(store).load("s1") is None


def test_corrupt_file_is_a_miss_and_recoverable(tmp_path: Path) -> None:
    path = tmp_path / "drafts.json"
    path.write_text("garbage", encoding="utf-8")
    cache = DraftCache(JsonFileStore(path))
    assert cache.load("s1") is None

    cache.save("s1", _components(), "")
    assert cache.load("s1") is not None


def test_unknown_component_types_are_skipped() -> None:
    store = MemoryStore()
    store.set(
        DraftCache.key_for("s1"),
        json.dumps(
            {
                "components": [
                    {"id": "x", "type": "gallery", "content": {}, "position": 0},
                    {"id": "a", "type": "about", "content": {"title": "T"}, "position": 1},
                ],
                "css": "",
            }
        ),
    )
    entry = DraftCache(store).load("s1")
    assert entry is not None
    assert [c.id for c in entry.components] == ["a"]
