from __future__ import annotations

"""
Ignore Pattern Engine.

The configured ignore patterns are alternation branches of a single regular
expression. The combined pattern is searched (not anchored) against bare
entry names, so anchors must be written explicitly in the patterns.
"""

import logging
import re
from typing import List, Optional

logger = logging.getLogger(__name__)


def compile_ignore_pattern(patterns: List[str]) -> Optional[re.Pattern]:
    """
    Join the patterns as ``(p1)|(p2)|...`` and compile the result.

    Malformed patterns are dropped with a warning instead of invalidating
    the whole matcher.

    Args:
        patterns: Raw regex strings.

    Returns:
        Optional[re.Pattern]: The combined matcher, or None when no valid
        pattern remains (nothing is ignored).
    """
    valid: List[str] = []
    for p in patterns:
        if not p:
            continue
        try:
            re.compile(p)
        except re.error as e:
            logger.warning(f"Discarding invalid ignore pattern '{p}': {e}")
            continue
        valid.append(p)

    if not valid:
        return None
    return re.compile("|".join(f"({p})" for p in valid))


def is_ignored(name: str, ignore_rx: Optional[re.Pattern]) -> bool:
    """Return True if the entry name matches the ignore pattern."""
    if ignore_rx is None:
        return False
    return ignore_rx.search(name) is not None
