from __future__ import annotations

"""
Configuration Validator.

Normalizes the configuration dictionary before it reaches the services.
Fields are grouped by type and coerced declaratively; anything unusable
falls back to its default and produces a warning (or an exception when
``strict`` is set).
"""

import logging
from typing import Any, Dict, List, Tuple

from notetree.domain.config import get_default_config

logger = logging.getLogger(__name__)

_STRING_FIELDS = ["notes_path"]
_BOOL_FIELDS = ["hide_files", "hide_tags"]
_LIST_FIELDS = ["ignore_patterns"]
_INT_FIELDS = {"max_concurrency": (1, 1024)}


def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a configuration dictionary.

    Args:
        config: The raw configuration (untrusted).
        strict: Raise TypeError/ValueError instead of falling back.

    Returns:
        Tuple[Dict, List[str]]: (Normalized config, warnings).
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in _STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in _BOOL_FIELDS:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    for field in _LIST_FIELDS:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    for field, bounds in _INT_FIELDS.items():
        merged[field] = _as_int(merged.get(field), defaults[field], bounds, field, warnings, strict)

    merged["tag_splitter"] = _as_splitter(
        merged.get("tag_splitter"), defaults["tag_splitter"], warnings, strict
    )

    return merged, warnings


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Ensure value is a non-empty string."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback
    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_splitter(value: Any, fallback: str, warnings: List[str], strict: bool) -> str:
    """The splitter may legitimately be empty (no hierarchy)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    msg = f"Invalid field 'tag_splitter': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce value to boolean."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure value is a list of strings. An explicit empty list is kept."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return items

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_int(
        value: Any,
        fallback: int,
        bounds: Tuple[int, int],
        field: str,
        warnings: List[str],
        strict: bool,
) -> int:
    """Coerce value to an int within ``bounds`` (inclusive)."""
    if value is None:
        return fallback

    number: int | None = None
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and not strict:
        try:
            number = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = None

    if number is None:
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    low, high = bounds
    if not low <= number <= high:
        msg = f"Field '{field}' out of range [{low}, {high}]: {number}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Clamped.")
        return max(low, min(high, number))

    return number
