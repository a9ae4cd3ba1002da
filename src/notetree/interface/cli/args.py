from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the validator.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the notetree CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="notetree",
        description="Show the file tree and the front matter tag tree of a notes directory.",
    )

    # --- Notes location and filtering ---
    p.add_argument(
        "-d", "--notes-dir",
        dest="notes_path",
        default=None,
        help="Notes directory (default: configured path, ~/notes).",
    )
    p.add_argument(
        "--ignore",
        dest="ignore_patterns",
        default=None,
        help="Comma-separated regexes; matching file and directory names are hidden.",
    )

    # --- Tag hierarchy ---
    p.add_argument(
        "--splitter",
        dest="tag_splitter",
        default=None,
        help="Character splitting tags into nested levels (default '/').",
    )
    p.add_argument(
        "--no-split",
        action="store_true",
        help="Treat every tag as a single level.",
    )
    p.add_argument(
        "--max-concurrency",
        dest="max_concurrency",
        type=int,
        default=None,
        help="Maximum number of notes read at the same time.",
    )

    # --- View selection ---
    view = p.add_mutually_exclusive_group()
    view.add_argument(
        "--files-only",
        action="store_true",
        help="Show only the Files tree.",
    )
    view.add_argument(
        "--tags-only",
        action="store_true",
        help="Show only the Tags tree.",
    )
    p.add_argument(
        "--depth",
        dest="max_depth",
        type=int,
        default=None,
        help="Limit the number of expanded levels below each root.",
    )

    # --- Configuration and diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the stored configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Store the effective configuration as the new default.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        nargs="?",
        const="",
        default=None,
        help="Also write logs to a rotating file (default: the user data directory).",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the trees as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Overrides; None values mean "not given".
    """
    overrides: Dict[str, Any] = {}

    overrides["notes_path"] = args.notes_path
    overrides["max_concurrency"] = args.max_concurrency

    if args.ignore_patterns is not None:
        overrides["ignore_patterns"] = _split_csv(args.ignore_patterns)

    if args.no_split:
        overrides["tag_splitter"] = ""
    elif args.tag_splitter is not None:
        overrides["tag_splitter"] = args.tag_splitter

    if args.files_only:
        overrides["hide_tags"] = True
    if args.tags_only:
        overrides["hide_files"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of stripped items."""
    if value is None:
        return None
    return [x.strip() for x in value.split(",") if x.strip()]
