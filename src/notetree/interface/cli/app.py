from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Bootstraps logging, resolves the configuration (defaults, stored file, CLI
overrides), drives the tree provider the same way a side panel would and
prints the resulting trees.
"""

import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from notetree.core.validator import validate_config
from notetree.domain.config import get_default_config, load_config, save_config
from notetree.domain.errors import DirectoryReadError
from notetree.infra.fs import DEFAULT_NOTES_DIR, is_readable_dir, normalize_path
from notetree.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
)
from notetree.interface.cli import args as cli_args
from notetree.interface.cli.render import expand_tree, render_tree_lines
from notetree.interface.provider import NoteTreeProvider

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional argument list. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad input,
        130 interrupted).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.debug else "WARNING"
    log_file = None
    if args.log_file is not None:
        log_file = args.log_file or get_default_log_path()
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file))

    logger.debug("CLI execution initiated. Resolving configuration...")

    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.save_config:
        if save_config(clean_conf):
            logger.info("Configuration saved as the new default.")
        else:
            print("WARNING: Configuration could not be saved.", file=sys.stderr)

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    notes_dir = normalize_path(clean_conf["notes_path"], DEFAULT_NOTES_DIR)
    if not is_readable_dir(notes_dir):
        msg = f"Notes directory does not exist or is not readable: {notes_dir}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    provider = NoteTreeProvider(clean_conf)
    try:
        trees = asyncio.run(_collect_trees(provider, args.max_depth))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        logger.critical(f"Failed to build note trees: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json_output:
        print(json.dumps(trees, ensure_ascii=False, indent=2))
    else:
        _print_human_trees(trees)

    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of the known, non-None override keys into ``base``."""
    out = dict(base)
    keys_to_merge = [
        "notes_path", "ignore_patterns", "hide_files", "hide_tags",
        "tag_splitter", "max_concurrency",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# TREE COLLECTION & VIEW
# -----------------------------------------------------------------------------

async def _collect_trees(provider: NoteTreeProvider, max_depth: Optional[int]) -> Dict[str, Any]:
    roots = []
    for root in provider.get_roots():
        roots.append(await expand_tree(provider, root, max_depth=max_depth))

    result: Dict[str, Any] = {"notes_path": provider.base_dir, "roots": roots}
    if not provider.hide_tags:
        try:
            index = await provider.get_tag_index()
        except DirectoryReadError as e:
            result["tag_stats"] = {"error": str(e)}
            return result
        result["tag_stats"] = {
            "notes_scanned": index.notes_scanned,
            "notes_tagged": index.notes_tagged,
            "skipped": [{"path": i.path, "error": i.error} for i in index.issues],
        }
    return result


def _print_human_trees(trees: Dict[str, Any]) -> None:
    for i, root in enumerate(trees["roots"]):
        if i:
            print()
        for line in render_tree_lines(root):
            print(line)

    stats = trees.get("tag_stats")
    if stats:
        print()
        if "error" in stats:
            print(f"Tag index unavailable: {stats['error']}")
            return
        print(f"Notes scanned: {stats['notes_scanned']}")
        print(f"Notes tagged: {stats['notes_tagged']}")
        for item in stats["skipped"]:
            print(f"  - skipped {item['path']}: {item['error']}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
