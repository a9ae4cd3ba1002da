from __future__ import annotations

"""
Directory Enumeration Service.

Lists the immediate children of one directory for the Files tree. Nothing is
cached: every call lists and stats again so external changes show up on the
next expansion.
"""

import logging
import os
import re
import stat
from typing import List, Optional

from notetree.core.filters import is_ignored
from notetree.domain.errors import DirectoryReadError
from notetree.domain.tree_models import FileEntry

logger = logging.getLogger(__name__)


def list_directory(directory: str, ignore_rx: Optional[re.Pattern]) -> List[FileEntry]:
    """
    List the visible children of ``directory``.

    Entries whose name matches ``ignore_rx`` are dropped. Each remaining
    entry is classified with a synchronous ``os.stat`` on its full path
    (symlinks are followed). Results are ordered by name.

    Args:
        directory: Absolute path of the directory to list.
        ignore_rx: Combined ignore pattern, or None.

    Returns:
        List[FileEntry]: The visible children.

    Raises:
        DirectoryReadError: The directory is missing or unreadable.
    """
    try:
        names = os.listdir(directory)
    except OSError as e:
        raise DirectoryReadError(directory, e) from e

    entries: List[FileEntry] = []
    for name in sorted(names):
        if is_ignored(name, ignore_rx):
            continue
        path = os.path.join(directory, name)
        entries.append(FileEntry(name=name, path=path, is_directory=_is_directory(path)))

    logger.debug(f"Listed {len(entries)} entries in {directory}")
    return entries


def _is_directory(path: str) -> bool:
    # Dangling symlinks and entries removed since listing count as files
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False
