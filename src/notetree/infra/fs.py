from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Path resolution helpers shared by configuration, logging and the notes
services. Wraps 'os' so that home and environment expansion behave the same
everywhere a user-supplied path enters the system.
"""

import os
from typing import Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "notetree"
UNIX_APP_DIR_NAME = ".notetree"
DEFAULT_NOTES_DIR = os.path.join("~", "notes")

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/notetree
    - Linux/Mac: ~/.notetree

    The directory is created when missing.

    Returns:
        str: Absolute path to the application data directory.
    """
    path = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    safe_mkdir(path)
    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Turn a user-supplied directory string into an absolute path.

    Expands a leading ``~`` and ``$VAR``/``%VAR%`` references. Empty input
    resolves the fallback instead.

    Args:
        path: Raw path string.
        fallback: Path used when ``path`` is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def is_readable_dir(path: str) -> bool:
    """Return True if ``path`` is an existing directory we may list."""
    return os.path.isdir(path) and os.access(path, os.R_OK | os.X_OK)


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Create a directory hierarchy without raising.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if any).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)
