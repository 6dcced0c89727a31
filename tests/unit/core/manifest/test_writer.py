from __future__ import annotations

"""
Unit tests for the Link Manifest Writer.
"""

import json
from pathlib import Path

from monolinker.core.manifest.writer import LinkManifest
from monolinker.domain.link_models import LinkManifestEntry


def test_save_follows_project_order_and_omits_empty(tmp_path: Path) -> None:
    """TC-01: Keys follow configuration order even when entries arrive out of order."""
    manifest = LinkManifest(["a", "b", "c"])
    manifest.add(LinkManifestEntry(project="c", local_links=["a"]))
    manifest.add(LinkManifestEntry(project="b"))
    manifest.add(LinkManifestEntry(project="a", local_links=["b", "c"]))

    target = tmp_path / "temp" / "link.json"
    manifest.save(str(target))

    text = target.read_text(encoding="utf-8")
    assert json.loads(text) == {"localLinks": {"a": ["b", "c"], "c": ["a"]}}
    assert list(json.loads(text)["localLinks"]) == ["a", "c"]
    assert text.endswith("\n")
    assert [e.project for e in manifest.entries] == ["a", "b", "c"]


def test_save_leaves_no_temporary_files(tmp_path: Path) -> None:
    manifest = LinkManifest()
    manifest.add(LinkManifestEntry(project="a"))
    manifest.save(str(tmp_path / "link.json"))

    assert sorted(p.name for p in tmp_path.iterdir()) == ["link.json"]


def test_load_round_trip(tmp_path: Path) -> None:
    manifest = LinkManifest(["a"])
    manifest.add(LinkManifestEntry(project="a", local_links=["b"]))
    path = str(tmp_path / "link.json")
    manifest.save(path)

    assert LinkManifest.load(path) == {"a": ["b"]}


def test_load_missing_or_corrupted_returns_none(tmp_path: Path) -> None:
    assert LinkManifest.load(str(tmp_path / "absent.json")) is None

    broken = tmp_path / "link.json"
    broken.write_text("[not an object", encoding="utf-8")
    assert LinkManifest.load(str(broken)) is None


def test_load_rejects_non_object_json(tmp_path: Path) -> None:
    path = tmp_path / "link.json"
    path.write_text('["a", "b"]\n', encoding="utf-8")

    assert LinkManifest.load(str(path)) is None
