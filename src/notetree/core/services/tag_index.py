from __future__ import annotations

"""
Tag Index Builder.

Builds the Tags tree from the front matter of every note:
1. Reads every note through the corpus walker and, in the same bounded
   worker slot, extracts its ``tags`` list, skipping unusable metadata.
2. Splits each tag into path segments and inserts it into an accumulator.
3. Freezes the accumulator into sorted, immutable TagNode objects.

Insertion starts only after the walk has finished and visits notes in path
order, so read completion order never influences the result.
"""

import logging
import os
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from notetree.core.processing.metadata import MetadataExtractor, extract_metadata
from notetree.core.services.walker import map_corpus
from notetree.domain.config import DEFAULT_MAX_CONCURRENCY
from notetree.domain.errors import FileReadError
from notetree.domain.tree_models import (
    FileEntry,
    IndexIssue,
    NoteRecord,
    TagIndex,
    TagNode,
)

logger = logging.getLogger(__name__)

TAGS_FIELD = "tags"


# -----------------------------------------------------------------------------
# ACCUMULATOR
# -----------------------------------------------------------------------------

class _TagBranch:
    """Mutable build-time counterpart of TagNode."""

    __slots__ = ("label", "branches", "files")

    def __init__(self, label: str) -> None:
        self.label = label
        self.branches: Dict[str, _TagBranch] = {}
        self.files: Dict[str, FileEntry] = {}


TagAccumulator = Dict[str, _TagBranch]


def insert_tag_path(
        accumulator: TagAccumulator,
        segments: Sequence[str],
        leaf: FileEntry,
) -> TagAccumulator:
    """
    Insert one tag path and attach ``leaf`` under its deepest segment.

    Existing branches with an equal label are reused at every depth. A file
    already attached to the deepest branch is not attached twice.

    Args:
        accumulator: Top-level branches, keyed by label.
        segments: Non-empty tag path.
        leaf: File entry of the note carrying the tag.

    Returns:
        TagAccumulator: The same accumulator, updated.
    """
    if not segments:
        raise ValueError("A tag path needs at least one segment")

    level = accumulator
    branch: Optional[_TagBranch] = None
    for segment in segments:
        branch = level.get(segment)
        if branch is None:
            branch = _TagBranch(segment)
            level[segment] = branch
        level = branch.branches

    branch.files.setdefault(leaf.path, leaf)
    return accumulator


def freeze_tag_tree(accumulator: TagAccumulator) -> Tuple[TagNode, ...]:
    """Convert the accumulator into sorted immutable TagNode roots."""
    return tuple(sort_nodes([_freeze(branch) for branch in accumulator.values()]))


def _freeze(branch: _TagBranch) -> TagNode:
    children: List[Union[TagNode, FileEntry]] = [_freeze(b) for b in branch.branches.values()]
    children.extend(branch.files.values())
    return TagNode(label=branch.label, children=tuple(sort_nodes(children)))


# -----------------------------------------------------------------------------
# ORDERING
# -----------------------------------------------------------------------------

def node_sort_key(node: Union[TagNode, FileEntry]) -> Tuple[int, str, str]:
    """
    Total order for tag tree children.

    Tags come before files. Tags compare by label and files by name, both
    by code point; files with equal names are ordered by path.

    Raises:
        TypeError: ``node`` is neither a TagNode nor a FileEntry.
    """
    if isinstance(node, TagNode):
        return 0, node.label, ""
    if isinstance(node, FileEntry):
        return 1, node.name, node.path
    raise TypeError(f"Cannot order tree node of type {type(node).__name__}")


def sort_nodes(nodes: Sequence[Union[TagNode, FileEntry]]) -> List[Union[TagNode, FileEntry]]:
    return sorted(nodes, key=node_sort_key)


# -----------------------------------------------------------------------------
# TAG EXTRACTION
# -----------------------------------------------------------------------------

def split_tag(tag: str, splitter: str) -> List[str]:
    """
    Split a tag string into path segments.

    Without a splitter the whole tag is one segment. Segments are stripped
    and empty ones are dropped, so ``"work//meeting/"`` and
    ``"work/meeting"`` name the same path.
    """
    parts = tag.split(splitter) if splitter else [tag]
    return [p.strip() for p in parts if p.strip()]


def extract_tags(data: Mapping[str, Any]) -> List[str]:
    """
    Return the ``tags`` list of a metadata mapping.

    Anything other than a list of strings (a bare string, a mapping, a
    list holding numbers...) is treated as if no tags were declared.
    """
    raw = data.get(TAGS_FIELD)
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)) or not all(isinstance(t, str) for t in raw):
        logger.debug(f"Ignoring malformed '{TAGS_FIELD}' field of type {type(raw).__name__}")
        return []
    return list(raw)


def _note_tags(
        record: NoteRecord,
        extractor: MetadataExtractor,
) -> Tuple[List[str], Optional[IndexIssue]]:
    # Runs in a worker thread; failures are returned, not collected here
    try:
        parsed = extractor(record.contents)
    except Exception as e:
        logger.warning(f"Skipping front matter of '{record.path}': {e}")
        return [], IndexIssue(path=record.path, error=str(e))

    if not isinstance(parsed.data, Mapping):
        msg = f"Front matter is not a mapping (got {type(parsed.data).__name__})"
        logger.warning(f"Skipping front matter of '{record.path}': {msg}")
        return [], IndexIssue(path=record.path, error=msg)

    return extract_tags(parsed.data), None


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

async def build_tag_index(
        root: str,
        ignore_rx: Optional[re.Pattern],
        tag_splitter: str = "",
        *,
        extractor: MetadataExtractor = extract_metadata,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> TagIndex:
    """
    Walk ``root`` and build the full tag tree.

    Per-note failures (unreadable file, broken front matter) are logged,
    recorded as issues and skipped. Only directory traversal failures
    propagate.

    Args:
        root: Notes directory.
        ignore_rx: Combined ignore pattern, or None.
        tag_splitter: Hierarchy separator; empty disables splitting.
        extractor: Front matter parser.
        max_concurrency: Upper bound on notes read or parsed at once.

    Returns:
        TagIndex: Sorted tag roots plus scan statistics.

    Raises:
        DirectoryReadError: A directory of the corpus could not be read.
    """
    logger.info(f"Building tag index for: {root}")

    issues: List[IndexIssue] = []
    tagged_notes: List[Tuple[str, List[str]]] = []
    notes_scanned = 0

    def _on_read_error(path: str, error: FileReadError) -> None:
        issues.append(IndexIssue(path=path, error=str(error)))

    def _parse(record: NoteRecord) -> Tuple[List[str], Optional[IndexIssue]]:
        return _note_tags(record, extractor)

    async for path, (tags, issue) in map_corpus(
            root,
            ignore_rx,
            _parse,
            max_concurrency=max_concurrency,
            on_read_error=_on_read_error,
    ):
        notes_scanned += 1
        if issue is not None:
            issues.append(issue)
        if tags:
            tagged_notes.append((path, tags))

    accumulator: TagAccumulator = {}
    notes_tagged = 0
    for path, tags in sorted(tagged_notes):
        leaf = FileEntry(name=os.path.basename(path), path=path, is_directory=False)
        contributed = False
        for tag in tags:
            segments = split_tag(tag, tag_splitter)
            if not segments:
                continue
            accumulator = insert_tag_path(accumulator, segments, leaf)
            contributed = True
        if contributed:
            notes_tagged += 1

    roots = freeze_tag_tree(accumulator)
    logger.info(
        f"Tag index ready: {len(roots)} top-level tags, "
        f"{notes_tagged}/{notes_scanned} notes tagged, {len(issues)} skipped"
    )

    return TagIndex(
        roots=roots,
        notes_scanned=notes_scanned,
        notes_tagged=notes_tagged,
        issues=tuple(sorted(issues, key=lambda i: i.path)),
    )


# -----------------------------------------------------------------------------
# QUERY HELPERS
# -----------------------------------------------------------------------------

def find_tag_node(roots: Sequence[TagNode], segments: Sequence[str]) -> Optional[TagNode]:
    """Follow ``segments`` from the roots; None if the path does not exist."""
    level: Sequence[Union[TagNode, FileEntry]] = roots
    node: Optional[TagNode] = None
    for segment in segments:
        node = next(
            (n for n in level if isinstance(n, TagNode) and n.label == segment),
            None,
        )
        if node is None:
            return None
        level = node.children
    return node


def iter_tagged_files(node: TagNode) -> Iterator[FileEntry]:
    """Yield every file leaf under ``node`` (depth first, duplicates kept)."""
    for tag in node.tags:
        yield from iter_tagged_files(tag)
    yield from node.files
