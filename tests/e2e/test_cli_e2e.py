from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Invokes the entry point script via subprocess and checks exit codes and
stream output (stdout/stderr) for a real notes directory.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "notetree" / "main.py"


def run_cli(
        args: List[str],
        cwd: Path | None = None,
        home: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """
    Execute the CLI in a separate process with 'src' on PYTHONPATH.

    Args:
        args: Command line arguments (excluding 'python' and script path).
        cwd: Optional working directory for the subprocess.
        home: Optional HOME override, isolating the user data directory.
    """
    env = os.environ.copy()
    if home is not None:
        env["HOME"] = str(home)
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8"
    )


def test_cli_renders_both_trees(notes_dir: Path) -> None:
    """TC-01: Default run prints the Files and Tags trees plus statistics."""
    result = run_cli(["--use-defaults", "-d", str(notes_dir)])

    assert result.returncode == 0, result.stderr
    out = result.stdout
    assert "Files" in out
    assert "Tags" in out
    assert "journal/" in out
    assert "#work" in out
    assert "#meeting" in out
    assert ".draft.md" not in out
    assert "secret" not in out
    assert "Notes scanned: 5" in out
    assert "Notes tagged: 3" in out
    assert "skipped" in out and "broken.md" in out


def test_cli_json_output(notes_dir: Path) -> None:
    """TC-02: --json emits the expanded trees and tag statistics."""
    result = run_cli(["--use-defaults", "-d", str(notes_dir), "--json", "--tags-only"])

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)

    assert [r["kind"] for r in data["roots"]] == ["rootTag"]
    tag_root = data["roots"][0]
    assert [c["label"] for c in tag_root["children"]] == ["personal", "work"]
    work = tag_root["children"][1]
    assert [c["label"] for c in work["children"]] == ["meeting", "project"]
    assert data["tag_stats"]["notes_tagged"] == 3


def test_cli_files_only_no_split(notes_dir: Path) -> None:
    result = run_cli(["--use-defaults", "-d", str(notes_dir), "--json", "--files-only"])

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert [r["kind"] for r in data["roots"]] == ["rootFile"]
    assert "tag_stats" not in data


def test_cli_missing_directory(tmp_path: Path) -> None:
    """TC-03: Exit code 2 when the notes directory does not exist."""
    result = run_cli(["--use-defaults", "-d", str(tmp_path / "nope")])

    assert result.returncode == 2
    assert "does not exist" in result.stderr


def test_cli_empty_directory(tmp_path: Path) -> None:
    result = run_cli(["--use-defaults", "-d", str(tmp_path)])

    assert result.returncode == 0, result.stderr
    assert "Notes scanned: 0" in result.stdout


def test_cli_dump_config(tmp_path: Path) -> None:
    """TC-04: --dump-config prints the merged configuration and exits."""
    result = run_cli([
        "--use-defaults", "-d", str(tmp_path), "--no-split", "--ignore", "^_,^tmp$", "--dump-config",
    ])

    assert result.returncode == 0
    cfg = json.loads(result.stdout)
    assert cfg["notes_path"] == str(tmp_path)
    assert cfg["tag_splitter"] == ""
    assert cfg["ignore_patterns"] == ["^_", "^tmp$"]


def test_cli_save_config_and_log_file(tmp_path: Path, notes_dir: Path) -> None:
    """TC-05: Saved settings become the defaults of the next run."""
    home = tmp_path / "home"
    home.mkdir()
    data_dir = home / ".notetree"

    result = run_cli(
        ["-d", str(notes_dir), "--no-split", "--save-config", "--log-file", "--dump-config"],
        home=home,
    )
    assert result.returncode == 0, result.stderr

    stored = json.loads((data_dir / "config.json").read_text(encoding="utf-8"))
    assert stored["notes_path"] == str(notes_dir)
    assert stored["tag_splitter"] == ""
    assert "version" in stored
    assert (data_dir / "logs" / "notetree.log").exists()

    result = run_cli(["--json", "--tags-only"], home=home)

    assert result.returncode == 0, result.stderr
    labels = [c["label"] for c in json.loads(result.stdout)["roots"][0]["children"]]
    assert labels == ["personal", "work/meeting", "work/project"]
