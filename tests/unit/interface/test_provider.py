from __future__ import annotations

"""
Unit tests for the Tree Data Provider.

Verifies root filtering, dispatch per node kind, per-cycle memoization of
the tag build, refresh notifications and how failures surface to the UI.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import patch

import pytest

from notetree.core.services import tag_index
from notetree.domain.errors import DirectoryReadError
from notetree.domain.tree_models import FileEntry, NodeKind, RootNode, TagNode
from notetree.interface import provider as provider_module
from notetree.interface.provider import NoteTreeProvider

FILES_ROOT = RootNode(NodeKind.ROOT_FILES)
TAGS_ROOT = RootNode(NodeKind.ROOT_TAGS)


def _names(nodes: List[Any]) -> List[str]:
    return [n.label for n in nodes]


# -----------------------------------------------------------------------------
# Roots
# -----------------------------------------------------------------------------

def test_roots_follow_configuration(notes_config: Dict[str, Any]) -> None:
    assert _names(NoteTreeProvider(notes_config).get_roots()) == ["Files", "Tags"]

    notes_config["hide_files"] = True
    assert _names(NoteTreeProvider(notes_config).get_roots()) == ["Tags"]

    notes_config["hide_tags"] = True
    assert NoteTreeProvider(notes_config).get_roots() == []


def test_children_of_none_are_roots(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)
    assert asyncio.run(provider.get_children()) == [FILES_ROOT, TAGS_ROOT]


def test_configuration_is_normalized(notes_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTES_HOME", str(notes_dir))
    provider = NoteTreeProvider({"notes_path": "$NOTES_HOME", "hide_tags": "yes"})

    assert provider.base_dir == str(notes_dir)
    assert provider.hide_tags is True


# -----------------------------------------------------------------------------
# Files hierarchy
# -----------------------------------------------------------------------------

def test_files_root_lists_base_directory(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)

    children = asyncio.run(provider.get_children(FILES_ROOT))

    assert _names(children) == ["broken.md", "journal", "note1.md", "note2.md", "plain.md"]


def test_directory_entry_expands_and_file_is_leaf(notes_config: Dict[str, Any], notes_dir: Path) -> None:
    provider = NoteTreeProvider(notes_config)
    journal = FileEntry(name="journal", path=str(notes_dir / "journal"), is_directory=True)
    note = FileEntry(name="note1.md", path=str(notes_dir / "note1.md"), is_directory=False)

    assert _names(asyncio.run(provider.get_children(journal))) == ["day.md"]
    assert asyncio.run(provider.get_children(note)) == []


def test_unreadable_directory_yields_empty_node(notes_config: Dict[str, Any], tmp_path: Path) -> None:
    provider = NoteTreeProvider(notes_config)
    gone = FileEntry(name="gone", path=str(tmp_path / "gone"), is_directory=True)

    assert asyncio.run(provider.get_children(gone)) == []


def test_missing_base_directory_yields_empty_roots(tmp_path: Path) -> None:
    provider = NoteTreeProvider({"notes_path": str(tmp_path / "missing")})

    assert asyncio.run(provider.get_children(FILES_ROOT)) == []
    assert asyncio.run(provider.get_children(TAGS_ROOT)) == []


def test_list_directory_propagates_errors(notes_config: Dict[str, Any], tmp_path: Path) -> None:
    provider = NoteTreeProvider(notes_config)

    with pytest.raises(DirectoryReadError):
        asyncio.run(provider.list_directory(str(tmp_path / "missing")))


# -----------------------------------------------------------------------------
# Tags hierarchy
# -----------------------------------------------------------------------------

def test_tags_root_and_tag_children(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)

    async def scenario() -> None:
        roots = await provider.get_children(TAGS_ROOT)
        assert _names(roots) == ["personal", "work"]

        work = roots[1]
        assert isinstance(work, TagNode)
        sub = await provider.get_children(work)
        assert _names(sub) == ["meeting", "project"]

        leaves = await provider.get_children(sub[0])
        assert _names(leaves) == ["note2.md"]
        assert await provider.get_children(leaves[0]) == []

    asyncio.run(scenario())


def test_tag_build_is_memoized_until_refresh(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)
    real_build = tag_index.build_tag_index
    calls: List[str] = []

    async def counting_build(*args: Any, **kwargs: Any):
        calls.append(args[0])
        return await real_build(*args, **kwargs)

    async def scenario() -> None:
        first, second = await asyncio.gather(
            provider.get_children(TAGS_ROOT),
            provider.get_children(TAGS_ROOT),
        )
        assert first == second
        await provider.get_tag_index()
        assert len(calls) == 1

        provider.refresh()
        await provider.get_children(TAGS_ROOT)
        assert len(calls) == 2

    with patch.object(provider_module, "build_tag_index", side_effect=counting_build):
        asyncio.run(scenario())


def test_refresh_reflects_new_notes(notes_config: Dict[str, Any], notes_dir: Path, note_writer) -> None:
    provider = NoteTreeProvider(notes_config)

    async def scenario() -> None:
        assert _names(await provider.get_children(TAGS_ROOT)) == ["personal", "work"]

        note_writer(notes_dir / "idea.md", ["ideas"])
        assert _names(await provider.get_children(TAGS_ROOT)) == ["personal", "work"]

        provider.refresh()
        assert _names(await provider.get_children(TAGS_ROOT)) == ["ideas", "personal", "work"]

    asyncio.run(scenario())


def test_failed_tag_build_is_retried(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)
    real_build = tag_index.build_tag_index
    attempts: List[int] = []

    async def flaky_build(*args: Any, **kwargs: Any):
        attempts.append(1)
        if len(attempts) == 1:
            raise DirectoryReadError(args[0], PermissionError("denied"))
        return await real_build(*args, **kwargs)

    async def scenario() -> None:
        assert await provider.get_children(TAGS_ROOT) == []
        assert _names(await provider.get_children(TAGS_ROOT)) == ["personal", "work"]

    with patch.object(provider_module, "build_tag_index", side_effect=flaky_build):
        asyncio.run(scenario())

    assert len(attempts) == 2


# -----------------------------------------------------------------------------
# Change notification & dispatch errors
# -----------------------------------------------------------------------------

def test_refresh_notifies_subscribers(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)
    events: List[str] = []

    dispose = provider.on_did_change(lambda: events.append("a"))
    provider.on_did_change(lambda: events.append("b"))

    provider.refresh()
    dispose()
    provider.refresh()

    assert events == ["a", "b", "b"]


def test_failing_listener_does_not_block_others(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)
    events: List[str] = []

    def broken() -> None:
        raise RuntimeError("listener bug")

    provider.on_did_change(broken)
    provider.on_did_change(lambda: events.append("ok"))
    provider.refresh()

    assert events == ["ok"]


def test_unknown_node_is_rejected(notes_config: Dict[str, Any]) -> None:
    provider = NoteTreeProvider(notes_config)

    with pytest.raises(TypeError):
        asyncio.run(provider.get_children("not a node"))  # type: ignore[arg-type]
