from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

1. Puts the 'src' directory on sys.path so the package imports uninstalled.
2. Provides notes corpora and configuration dictionaries shared by tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def write_note(path: Path, tags: Optional[List[str]] = None, body: str = "Body text.\n") -> Path:
    """Write a markdown note, with a YAML tags block when ``tags`` is given."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if tags is None:
        path.write_text(body, encoding="utf-8")
    else:
        tag_lines = "".join(f"  - {t}\n" for t in tags)
        path.write_text(f"---\ntitle: {path.stem}\ntags:\n{tag_lines}---\n{body}", encoding="utf-8")
    return path


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """
    Corpus used across indexing tests.

    Structure:
    /notes
      note1.md            tags: work/project, personal
      note2.md            tags: work/meeting
      plain.md            no front matter
      broken.md           invalid YAML
      /journal
        day.md            tags: personal
      /.hidden
        secret.md         tags: secret (ignored directory)
      .draft.md           tags: draft (ignored file)
    """
    root = tmp_path / "notes"
    root.mkdir()

    write_note(root / "note1.md", ["work/project", "personal"])
    write_note(root / "note2.md", ["work/meeting"])
    write_note(root / "plain.md")
    (root / "broken.md").write_text("---\ntags: [work\ntitle: : :\n---\nBody\n", encoding="utf-8")
    write_note(root / "journal" / "day.md", ["personal"])
    write_note(root / ".hidden" / "secret.md", ["secret"])
    write_note(root / ".draft.md", ["draft"])

    return root


@pytest.fixture
def notes_config(notes_dir: Path) -> Dict[str, Any]:
    """Configuration dictionary pointing at the ``notes_dir`` corpus."""
    return {
        "notes_path": str(notes_dir),
        "ignore_patterns": [r"^\.", r"^node_modules$"],
        "hide_files": False,
        "hide_tags": False,
        "tag_splitter": "/",
        "max_concurrency": 4,
    }


@pytest.fixture
def deep_note_chain(tmp_path: Path):
    """
    A tagged note nested more levels deep than the recursion limit.

    Yields (root, note_path). Levels are created and removed one at a time,
    since recursive helpers such as shutil.rmtree would overflow the stack.
    """
    depth = sys.getrecursionlimit() + 100
    if depth * 2 > 3500:
        pytest.skip("recursion limit too high for a portable path length")

    root = tmp_path / "deep"
    root.mkdir()
    chain = [root]
    for _ in range(depth):
        chain.append(chain[-1] / "a")
        chain[-1].mkdir()
    note = write_note(chain[-1] / "bottom.md", ["deep/end"])

    yield root, note

    note.unlink()
    for directory in reversed(chain):
        directory.rmdir()


@pytest.fixture
def note_writer():
    """Expose ``write_note`` to tests that build their own corpus."""
    return write_note
