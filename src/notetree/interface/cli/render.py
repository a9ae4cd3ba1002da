from __future__ import annotations

"""
Tree rendering for the command line.

The provider is pulled until every node is expanded, producing a plain
nested dictionary. That dictionary is then either dumped as JSON or drawn
with box-drawing connectors.
"""

from typing import Any, Dict, List, Optional

from notetree.domain.tree_models import FileEntry, TagNode, TreeNode
from notetree.interface.provider import NoteTreeProvider


# -----------------------------------------------------------------------------
# Expansion
# -----------------------------------------------------------------------------
def node_to_dict(node: TreeNode) -> Dict[str, Any]:
    """Describe one node without its children."""
    out: Dict[str, Any] = {"kind": node.kind.value, "label": node.label}
    if isinstance(node, FileEntry):
        out["path"] = node.path
        out["is_directory"] = node.is_directory
    return out


async def expand_tree(
        provider: NoteTreeProvider,
        node: TreeNode,
        max_depth: Optional[int] = None,
        _depth: int = 0,
) -> Dict[str, Any]:
    """
    Recursively pull the children of ``node`` from the provider.

    Args:
        provider: The data provider to query.
        node: Node to expand.
        max_depth: Stop expanding below this depth (None means unlimited).

    Returns:
        Dict[str, Any]: The node description with a ``children`` list.
    """
    out = node_to_dict(node)
    if max_depth is not None and _depth >= max_depth:
        out["children"] = []
        return out

    children = await provider.get_children(node)
    out["children"] = [
        await expand_tree(provider, child, max_depth=max_depth, _depth=_depth + 1)
        for child in children
    ]
    return out


# -----------------------------------------------------------------------------
# Text Rendering
# -----------------------------------------------------------------------------
def render_tree_lines(tree: Dict[str, Any]) -> List[str]:
    """Render an expanded root (or any expanded node) as text lines."""
    lines: List[str] = [_display_label(tree)]
    _render_children(tree.get("children", []), lines, prefix="")
    return lines


def _render_children(children: List[Dict[str, Any]], lines: List[str], prefix: str) -> None:
    total = len(children)
    for i, child in enumerate(children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{_display_label(child)}")

        grandchildren = child.get("children", [])
        if grandchildren:
            new_prefix = prefix + ("    " if is_last else "│   ")
            _render_children(grandchildren, lines, new_prefix)


def _display_label(item: Dict[str, Any]) -> str:
    label = item["label"]
    if item["kind"] == TagNode.kind.value:
        return f"#{label}"
    if item.get("is_directory"):
        return f"{label}/"
    return label
