from __future__ import annotations

"""
Tree Node Data Models.

Defines the closed set of nodes served to the side panel: the two synthetic
roots, tag nodes and file entries. All nodes are frozen; a tag tree is never
mutated once built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Tuple, Union

# -----------------------------------------------------------------------------
# NODE KINDS
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    ROOT_FILES = "rootFile"
    ROOT_TAGS = "rootTag"
    TAG = "tag"
    FILE = "file"


_ROOT_LABELS = {
    NodeKind.ROOT_FILES: "Files",
    NodeKind.ROOT_TAGS: "Tags",
}

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RootNode:
    """
    Synthetic first-level entry (Files or Tags).

    Owns no data; the provider decides how its children are fetched.
    """
    kind: NodeKind

    def __post_init__(self) -> None:
        if self.kind not in _ROOT_LABELS:
            raise ValueError(f"Not a root kind: {self.kind!r}")

    @property
    def label(self) -> str:
        return _ROOT_LABELS[self.kind]


@dataclass(frozen=True)
class FileEntry:
    """
    One filesystem child, also used as a file leaf of the tag tree.

    Attributes:
        name: Base name of the entry.
        path: Absolute path.
        is_directory: True when the entry is a directory.
    """
    name: str
    path: str
    is_directory: bool = False

    kind: ClassVar[NodeKind] = NodeKind.FILE

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class TagNode:
    """
    One tag path segment with its sorted children.

    Attributes:
        label: The segment text (case-sensitive).
        children: Sub-tags first, then tagged files.
    """
    label: str
    children: Tuple[Union["TagNode", FileEntry], ...] = ()

    kind: ClassVar[NodeKind] = NodeKind.TAG

    @property
    def tags(self) -> Tuple["TagNode", ...]:
        return tuple(c for c in self.children if isinstance(c, TagNode))

    @property
    def files(self) -> Tuple[FileEntry, ...]:
        return tuple(c for c in self.children if isinstance(c, FileEntry))


TreeNode = Union[RootNode, TagNode, FileEntry]

# -----------------------------------------------------------------------------
# INDEXING RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NoteRecord:
    """Raw bytes of one note, alive only until its metadata is extracted."""
    path: str
    contents: bytes = field(repr=False)


@dataclass(frozen=True)
class IndexIssue:
    """
    A per-file failure absorbed while building the tag index.

    Attributes:
        path: Absolute path of the offending note.
        error: Human readable reason.
    """
    path: str
    error: str


@dataclass(frozen=True)
class TagIndex:
    """
    Result of one full tag build.

    Attributes:
        roots: Top-level tag nodes, sorted.
        notes_scanned: Number of notes whose bytes were read.
        notes_tagged: Number of notes that contributed at least one tag.
        issues: Notes skipped because of unreadable or unparsable metadata.
    """
    roots: Tuple[TagNode, ...] = ()
    notes_scanned: int = 0
    notes_tagged: int = 0
    issues: Tuple[IndexIssue, ...] = ()

# -----------------------------------------------------------------------------
# ROOT FACTORY
# -----------------------------------------------------------------------------

def build_root_nodes(hide_files: bool = False, hide_tags: bool = False) -> List[RootNode]:
    """Return the visible synthetic roots, Files before Tags."""
    roots: List[RootNode] = []
    if not hide_files:
        roots.append(RootNode(NodeKind.ROOT_FILES))
    if not hide_tags:
        roots.append(RootNode(NodeKind.ROOT_TAGS))
    return roots
