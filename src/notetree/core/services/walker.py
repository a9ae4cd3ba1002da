from __future__ import annotations

"""
Corpus Walker.

Iterative, asynchronous traversal of the notes directory. Discovery and
reads both run blocking filesystem calls through ``asyncio.to_thread``.
Reads go through a bounded pool: once ``max_concurrency`` reads are in
flight, discovery waits until one of them finishes.
"""

import asyncio
import logging
import os
import re
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Set,
    Tuple,
    TypeVar,
)

from notetree.core.filters import is_ignored
from notetree.domain.config import DEFAULT_MAX_CONCURRENCY
from notetree.domain.errors import DirectoryReadError, FileReadError
from notetree.domain.tree_models import NoteRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

ReadErrorCallback = Callable[[str, FileReadError], None]
_ScanEntry = Tuple[str, str, bool]

# -----------------------------------------------------------------------------
# DISCOVERY
# -----------------------------------------------------------------------------

async def iter_note_paths(root: str, ignore_rx: Optional[re.Pattern]) -> AsyncIterator[str]:
    """
    Yield the path of every file under ``root``, depth first.

    Ignored names are skipped at every depth, and an ignored directory is
    not descended into. Entries are visited in name order. Each real
    directory is visited once, so symlink cycles terminate. Open
    directories are kept on an explicit stack, so nesting depth is not
    limited by the interpreter's recursion limit.

    Raises:
        DirectoryReadError: A directory could not be opened.
    """
    visited: Set[str] = set()
    stack: List[Iterator[_ScanEntry]] = [iter(await _enter_directory(root, visited))]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        name, path, is_dir = entry
        if is_ignored(name, ignore_rx):
            continue
        if is_dir:
            stack.append(iter(await _enter_directory(path, visited)))
        else:
            yield path


async def _enter_directory(directory: str, visited: Set[str]) -> List[_ScanEntry]:
    real = os.path.realpath(directory)
    if real in visited:
        logger.debug(f"Skipping already visited directory: {directory}")
        return []
    visited.add(real)
    return await _scan_directory(directory)


async def _scan_directory(directory: str) -> List[_ScanEntry]:
    def _scan() -> List[_ScanEntry]:
        with os.scandir(directory) as it:
            return sorted((entry.name, entry.path, _entry_is_dir(entry)) for entry in it)

    try:
        return await asyncio.to_thread(_scan)
    except OSError as e:
        logger.error(f"Error while walking notes folder at {directory}: {e}")
        raise DirectoryReadError(directory, e) from e


def _entry_is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False

# -----------------------------------------------------------------------------
# READING
# -----------------------------------------------------------------------------

async def read_note(path: str) -> NoteRecord:
    """
    Read the full contents of one note.

    Raises:
        FileReadError: The file could not be opened or read.
    """
    try:
        contents = await asyncio.to_thread(_read_bytes, path)
    except OSError as e:
        raise FileReadError(path, e) from e
    return NoteRecord(path=path, contents=contents)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


async def walk_corpus(
        root: str,
        ignore_rx: Optional[re.Pattern],
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        on_read_error: Optional[ReadErrorCallback] = None,
) -> AsyncIterator[NoteRecord]:
    """
    Stream the contents of every non-ignored file under ``root``.

    Records are yielded in completion order. A file that cannot be read is
    logged, reported to ``on_read_error`` and left out. A directory failure
    aborts the walk; reads still in flight are cancelled.

    Args:
        root: Notes directory.
        ignore_rx: Combined ignore pattern, or None.
        max_concurrency: Upper bound on reads in flight.
        on_read_error: Optional callback receiving (path, error).

    Yields:
        NoteRecord: Path and raw bytes of one note.

    Raises:
        DirectoryReadError: A directory could not be traversed.
    """
    async def _job(path: str) -> Optional[NoteRecord]:
        return await _read_or_skip(path, on_read_error)

    async for record in _run_bounded(root, ignore_rx, _job, max_concurrency):
        yield record


async def map_corpus(
        root: str,
        ignore_rx: Optional[re.Pattern],
        parse: Callable[[NoteRecord], T],
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        on_read_error: Optional[ReadErrorCallback] = None,
) -> AsyncIterator[Tuple[str, T]]:
    """
    Read every non-ignored file under ``root`` and run ``parse`` on it.

    ``parse`` runs in a worker thread inside the same bounded slot as the
    read, so at most ``max_concurrency`` notes are being read or parsed at
    once. Unreadable files are handled as in ``walk_corpus``; exceptions
    raised by ``parse`` propagate.

    Yields:
        Tuple[str, T]: Note path and the value returned by ``parse``, in
        completion order.

    Raises:
        DirectoryReadError: A directory could not be traversed.
    """
    async def _job(path: str) -> Optional[Tuple[str, T]]:
        record = await _read_or_skip(path, on_read_error)
        if record is None:
            return None
        return record.path, await asyncio.to_thread(parse, record)

    async for item in _run_bounded(root, ignore_rx, _job, max_concurrency):
        yield item

# -----------------------------------------------------------------------------
# BOUNDED POOL
# -----------------------------------------------------------------------------

async def _read_or_skip(path: str, on_read_error: Optional[ReadErrorCallback]) -> Optional[NoteRecord]:
    try:
        return await read_note(path)
    except FileReadError as e:
        logger.warning(f"Skipping unreadable note: {e}")
        if on_read_error is not None:
            on_read_error(path, e)
        return None


async def _run_bounded(
        root: str,
        ignore_rx: Optional[re.Pattern],
        job: Callable[[str], Awaitable[Optional[Any]]],
        max_concurrency: int,
) -> AsyncIterator[Any]:
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

    pending: Set[asyncio.Task] = set()
    try:
        async for path in iter_note_paths(root, ignore_rx):
            if len(pending) >= max_concurrency:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for result in _finished_results(done):
                    yield result
            pending.add(asyncio.create_task(job(path)))

        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for result in _finished_results(done):
                yield result
    finally:
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)


def _finished_results(done: Iterable[asyncio.Task]) -> Iterable[Any]:
    for task in done:
        result = task.result()
        if result is not None:
            yield result
