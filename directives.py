"""
In-document metadata directives.

A directive is a line fragment of the form ``ssg-<key>: <value>``. Directives
are applied in document order, so a later occurrence of a key wins:

    ssg-title: A better title
    ssg-tags: #python, #static site
    ssg-created-at: 1700000000
    ssg-modified-at: 1700003600
"""

from __future__ import annotations

import re
from typing import List, NamedTuple, Tuple

from errors import DirectiveParseError


DIRECTIVE_PATTERN = re.compile(r"ssg-([A-Za-z0-9\-]+):[ \t]*([^\n]+)")
TAG_PATTERN = re.compile(r"#([^#,]+)(?:,\s*)?")
INTEGER_PATTERN = re.compile(r"[+-]?\d+")


class DocumentMetadata(NamedTuple):
    title: str
    tags: Tuple[str, ...]
    created_at: int
    modified_at: int


def parse_tags(value: str) -> List[str]:
    """Parse ``#a, #b #c`` into ``["a", "b", "c"]``. Duplicates are kept."""
    tags = []
    for match in TAG_PATTERN.finditer(value):
        tag = match.group(1).strip()
        if tag:
            tags.append(tag)
    return tags


def parse_epoch_seconds(key: str, value: str) -> int:
    if not INTEGER_PATTERN.fullmatch(value):
        raise DirectiveParseError(key, value)
    return int(value)


def extract(raw_text: str, fallback_title: str, fs_created_at: int, fs_modified_at: int) -> DocumentMetadata:
    """Resolve a document's metadata from its directives and filesystem defaults.

    ``created-at`` sets both timestamps; a ``modified-at`` appearing after it
    overrides the modification time only. Unknown keys are ignored.
    Raises DirectiveParseError when a timestamp directive is not an integer.
    """
    title = fallback_title
    tags: List[str] = []
    created_at = fs_created_at
    modified_at = fs_modified_at

    for match in DIRECTIVE_PATTERN.finditer(raw_text):
        key = match.group(1)
        value = match.group(2).strip()
        if key == "title":
            title = value
        elif key == "tags":
            tags = parse_tags(value)
        elif key == "created-at":
            created_at = parse_epoch_seconds(key, value)
            modified_at = created_at
        elif key == "modified-at":
            modified_at = parse_epoch_seconds(key, value)

    return DocumentMetadata(title=title, tags=tuple(tags), created_at=created_at, modified_at=modified_at)
