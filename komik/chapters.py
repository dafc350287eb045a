from __future__ import annotations

import functools
import math
import re
from dataclasses import dataclass

UNKNOWN_CHAPTER = "unknown"
CHAPTER_MARKER = "chapter-"
# Checked in order; the first suffix present cuts the reference.
LOCALE_SUFFIXES = ("-bahasa-indonesia", "-indonesia", "-english")

_HAS_DIGIT = re.compile(r"\d")


@dataclass(frozen=True)
class ChapterRef:
    """A chapter locator together with its canonical key."""

    url: str
    key: str = ""
    title: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", parse_chapter_key(self.url))


def parse_chapter_key(raw_reference: str) -> str:
    """
    Derives the canonical chapter key from a chapter URL or slug.

    The text after ``chapter-`` is cut at the first known locale suffix and
    at the next path separator. Sources that append extra hyphenated parts
    (``chapter-12-5-end``) keep only the first part; ``35-1`` style
    sub-chapters are kept whole. Returns ``"unknown"`` when no numeric
    token can be extracted.
    """
    if not raw_reference:
        return UNKNOWN_CHAPTER

    lowered = raw_reference.strip().lower()
    _, marker, tail = lowered.partition(CHAPTER_MARKER)
    if not marker:
        return UNKNOWN_CHAPTER

    for suffix in LOCALE_SUFFIXES:
        if suffix in tail:
            tail = tail.split(suffix, 1)[0]
            break
    segment = tail.split("/", 1)[0].strip("-")

    parts = segment.split("-")
    if len(parts) > 2:
        segment = parts[0]

    if not segment or not _HAS_DIGIT.search(segment):
        return UNKNOWN_CHAPTER
    return segment


def chapter_number(key: str) -> float:
    """Numeric magnitude of a key (``35-1`` -> 35.1); unparsable keys sort last."""
    try:
        value = float(key.replace("-", ".", 1))
    except (AttributeError, ValueError):
        return math.inf
    if math.isnan(value):
        return math.inf
    return value


def compare_chapter_keys(a: str, b: str) -> int:
    """Three-way comparison of chapter keys by numeric value, then by text."""
    fa, fb = chapter_number(a), chapter_number(b)
    if fa < fb:
        return -1
    if fa > fb:
        return 1
    if a == b:
        return 0
    return -1 if a < b else 1


chapter_sort_key = functools.cmp_to_key(compare_chapter_keys)


def normalize_chapter_input(text: str) -> str:
    """Turns operator input like ``35.1`` or ``Chapter 35.1`` into a key."""
    cleaned = text.strip().lower()
    for prefix in (CHAPTER_MARKER, "chapter "):
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):].strip()
    return cleaned.replace(".", "-", 1)


__all__ = [
    "CHAPTER_MARKER",
    "UNKNOWN_CHAPTER",
    "ChapterRef",
    "chapter_number",
    "chapter_sort_key",
    "compare_chapter_keys",
    "normalize_chapter_input",
    "parse_chapter_key",
]
