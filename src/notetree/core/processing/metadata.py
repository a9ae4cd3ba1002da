from __future__ import annotations

"""
Front Matter Metadata Extractor.

Thin boundary over python-frontmatter's YAML handler. Turns the raw bytes of
a note into a metadata mapping plus the remaining body text.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

import yaml
from frontmatter.default_handlers import YAMLHandler

from notetree.domain.errors import MetadataParseError

_BOM = "\ufeff"
_YAML_HANDLER = YAMLHandler()


@dataclass(frozen=True)
class ParsedNote:
    """
    Metadata and body of one note.

    Attributes:
        data: Front matter key/value mapping (empty when absent).
        body: Text following the front matter block.
    """
    data: Mapping[str, Any] = field(default_factory=dict)
    body: str = ""


MetadataExtractor = Callable[[bytes], ParsedNote]


def extract_metadata(contents: bytes) -> ParsedNote:
    """
    Parse the leading ``---`` delimited YAML block of a note.

    Bytes are decoded as UTF-8 with replacement characters so that stray
    binary files never abort an index run. A note without a front matter
    block (or with an unterminated one) yields an empty mapping.

    Args:
        contents: Raw file bytes.

    Returns:
        ParsedNote: Parsed metadata and body.

    Raises:
        MetadataParseError: The block is not valid YAML or not a mapping.
    """
    text = contents.decode("utf-8", errors="replace")
    if text.startswith(_BOM):
        text = text[len(_BOM):]

    if not _YAML_HANDLER.detect(text):
        return ParsedNote(data={}, body=text)

    try:
        raw_front_matter, body = _YAML_HANDLER.split(text)
    except ValueError:
        return ParsedNote(data={}, body=text)

    try:
        data = _YAML_HANDLER.load(raw_front_matter)
    except yaml.YAMLError as e:
        raise MetadataParseError(f"Invalid YAML front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise MetadataParseError(
            f"Front matter is not a mapping (got {type(data).__name__})"
        )

    return ParsedNote(data=_as_plain_dict(data), body=body.lstrip("\r\n"))


def _as_plain_dict(data: Mapping[Any, Any]) -> Dict[str, Any]:
    # YAML allows non-string keys such as dates or numbers
    return {str(k): v for k, v in data.items()}
