"""
Helper functions for normalizing loosely-typed LLM output.

Models are asked for JSON arrays but frequently return a single bulleted or
comma-joined string instead. Values are first classified into an explicit
TextOrSequence union, and only then flattened into a canonical list of
trimmed, non-empty strings.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

import re


_MAX_HASHTAGS = 7

# A leading bullet run ("-", "•", "*", "--") or numbering marker ("1.", "12)").
_LINE_MARKER_PATTERN = re.compile(r"^[ \t]*(?:[-•*]+|\d+[.)])[ \t]*", re.MULTILINE)
_SPLIT_PATTERN = re.compile(r"\r?\n|,|;|\|")


@dataclass(frozen=True, slots=True)
class TextValue:
    """A single free-form string that may encode several items."""
    text: str


@dataclass(frozen=True, slots=True)
class SequenceValue:
    """An already list-shaped value, elements stringified."""
    items: tuple[str, ...]


TextOrSequence = Union[TextValue, SequenceValue]


def classify(value: Any) -> Optional[TextOrSequence]:
    """
    Tag a raw value as text or sequence.

    Returns None for anything that is neither (numbers, dicts, None), which
    the normalizers treat as an empty sequence. None elements inside a list
    are dropped; other elements are stringified.
    """
    if isinstance(value, str):
        return TextValue(value)
    if isinstance(value, (list, tuple)):
        return SequenceValue(tuple(str(item) for item in value if item is not None))
    return None


def to_sequence(value: Any) -> list[str]:
    """
    Convert a string or list into an ordered list of trimmed, non-empty strings.

    Strings have bullet/numbering markers stripped from the start of each line,
    then are split on newline, comma, semicolon or pipe.

    Examples:
        >>> to_sequence(["  a ", "", "b"])
        ['a', 'b']
        >>> to_sequence("- first\\n- second")
        ['first', 'second']
        >>> to_sequence("1. x; 2) y | z")
        ['x', 'y', 'z']
        >>> to_sequence(42)
        []
    """
    tagged = classify(value)
    if tagged is None:
        return []

    if isinstance(tagged, SequenceValue):
        parts = tagged.items
    else:
        stripped = _LINE_MARKER_PATTERN.sub("", tagged.text)
        parts = _SPLIT_PATTERN.split(stripped)

    return [part.strip() for part in parts if part.strip()]


def to_hashtag_sequence(value: Any) -> list[str]:
    """
    Normalize hashtags: no leading '#', lowercase, deduplicated, at most 7.

    Order of first occurrence is preserved.
    """
    tags: list[str] = []
    seen: set[str] = set()
    for item in to_sequence(value):
        tag = item.lstrip("#").strip().lower()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        tags.append(tag)
        if len(tags) == _MAX_HASHTAGS:
            break
    return tags
