from __future__ import annotations

"""
Tree Data Provider.

Pull-based facade for a side panel: the UI asks for the roots, then for the
children of whatever node gets expanded, and subscribes to the refresh event
to know when to pull again from the roots.

The tag build is memoized for one refresh cycle, so expanding many tag nodes
during one render walks the corpus only once.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from notetree.core.filters import compile_ignore_pattern
from notetree.core.processing.metadata import MetadataExtractor, extract_metadata
from notetree.core.services.enumerator import list_directory
from notetree.core.services.tag_index import build_tag_index
from notetree.core.validator import validate_config
from notetree.domain.errors import DirectoryReadError
from notetree.domain.tree_models import (
    FileEntry,
    NodeKind,
    RootNode,
    TagIndex,
    TagNode,
    TreeNode,
    build_root_nodes,
)
from notetree.infra.fs import DEFAULT_NOTES_DIR, normalize_path

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class NoteTreeProvider:
    """
    Serves the Files and Tags hierarchies of one notes directory.

    Configuration is read once, at construction.

    Args:
        config: Raw configuration dictionary (validated here).
        extractor: Front matter parser used by the tag build.
    """

    def __init__(
            self,
            config: Optional[Dict[str, Any]] = None,
            *,
            extractor: MetadataExtractor = extract_metadata,
    ) -> None:
        cfg, warnings = validate_config(config if config is not None else {})
        for w in warnings:
            logger.warning(f"Configuration Constraint: {w}")

        self.base_dir: str = normalize_path(cfg["notes_path"], DEFAULT_NOTES_DIR)
        self.ignore_rx = compile_ignore_pattern(cfg["ignore_patterns"])
        self.hide_files: bool = cfg["hide_files"]
        self.hide_tags: bool = cfg["hide_tags"]
        self.tag_splitter: str = cfg["tag_splitter"]
        self.max_concurrency: int = cfg["max_concurrency"]

        self._extractor = extractor
        self._tag_task: Optional[asyncio.Task[TagIndex]] = None
        self._listeners: List[ChangeListener] = []

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def on_did_change(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Subscribe to refresh events.

        Returns:
            Callable[[], None]: Call it to unsubscribe.
        """
        self._listeners.append(listener)

        def _dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _dispose

    def refresh(self) -> None:
        """Drop the memoized tag build and tell subscribers to re-query."""
        self._tag_task = None
        logger.debug(f"Refresh requested; notifying {len(self._listeners)} listener(s)")
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Tree change listener failed")

    # -------------------------------------------------------------------------
    # Tree queries
    # -------------------------------------------------------------------------

    def get_roots(self) -> List[RootNode]:
        return build_root_nodes(hide_files=self.hide_files, hide_tags=self.hide_tags)

    async def get_children(self, node: Optional[TreeNode] = None) -> List[Union[RootNode, TagNode, FileEntry]]:
        """
        Return the children of ``node`` (the roots when ``node`` is None).

        A directory that cannot be read, or a failed tag build, is logged and
        shows up as an empty node.

        Raises:
            TypeError: ``node`` is not a tree node.
        """
        if node is None:
            return list(self.get_roots())

        if isinstance(node, RootNode):
            if node.kind is NodeKind.ROOT_FILES:
                return list(await self._list_or_empty(self.base_dir))
            if node.kind is NodeKind.ROOT_TAGS:
                try:
                    index = await self.get_tag_index()
                except DirectoryReadError as e:
                    logger.error(f"Tag index unavailable: {e}")
                    return []
                return list(index.roots)
            raise TypeError(f"Unknown root kind: {node.kind!r}")

        if isinstance(node, TagNode):
            return list(node.children)

        if isinstance(node, FileEntry):
            if node.is_directory:
                return list(await self._list_or_empty(node.path))
            return []

        raise TypeError(f"Unsupported tree node: {type(node).__name__}")

    async def get_tag_index(self) -> TagIndex:
        """
        Return the tag index of the current refresh cycle, building it once.

        Concurrent callers share one build. A failed build is not kept, so
        the next call tries again.

        Raises:
            DirectoryReadError: The notes directory could not be traversed.
        """
        task = self._tag_task
        if task is None:
            task = asyncio.ensure_future(
                build_tag_index(
                    self.base_dir,
                    self.ignore_rx,
                    self.tag_splitter,
                    extractor=self._extractor,
                    max_concurrency=self.max_concurrency,
                )
            )
            self._tag_task = task

        try:
            return await asyncio.shield(task)
        except Exception:
            if self._tag_task is task:
                self._tag_task = None
            raise

    async def list_directory(self, directory: str) -> List[FileEntry]:
        """
        List one directory off the event loop.

        Raises:
            DirectoryReadError: The directory is missing or unreadable.
        """
        return await asyncio.to_thread(list_directory, directory, self.ignore_rx)

    async def _list_or_empty(self, directory: str) -> List[FileEntry]:
        try:
            return await self.list_directory(directory)
        except DirectoryReadError as e:
            logger.error(str(e))
            return []
