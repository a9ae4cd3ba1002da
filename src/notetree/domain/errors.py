from __future__ import annotations

"""
Error taxonomy for the notes index.

Only DirectoryReadError is allowed to escape a tree operation. The other
errors describe per-file anomalies that the index absorbs after logging.
"""


class NoteTreeError(Exception):
    """Base class for every notetree failure."""


class DirectoryReadError(NoteTreeError, OSError):
    """A directory could not be listed or traversed."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot read directory '{path}'{detail}")


class FileReadError(NoteTreeError, OSError):
    """The bytes of one note could not be read."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot read note '{path}'{detail}")


class MetadataParseError(NoteTreeError, ValueError):
    """The front matter block is not valid YAML or is not a mapping."""
