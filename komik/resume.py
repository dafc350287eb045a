from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .chapters import (
    ChapterRef,
    chapter_number,
    chapter_sort_key,
    compare_chapter_keys,
    normalize_chapter_input,
)


@dataclass
class ResumePlan:
    total: int
    materialized: List[str] = field(default_factory=list)
    last_key: Optional[str] = None
    next_index: Optional[int] = None

    @property
    def remaining(self) -> int:
        if self.next_index is None:
            return 0
        return remaining_count(self.total, self.next_index)

    @property
    def all_done(self) -> bool:
        return self.last_key is not None and self.next_index is None


def order_chapters(refs: Iterable[ChapterRef]) -> List[ChapterRef]:
    """Chapters in ascending key order, whatever order the source used."""
    return sorted(refs, key=lambda ref: chapter_sort_key(ref.key))


def next_unprocessed_index(
    refs: Sequence[ChapterRef], last_key: Optional[str]
) -> Optional[int]:
    """Index of the first chapter strictly after ``last_key``, or None."""
    if last_key is None:
        return 0 if refs else None
    for index, ref in enumerate(refs):
        if compare_chapter_keys(ref.key, last_key) > 0:
            return index
    return None


def remaining_count(total: int, start_index: int) -> int:
    return total - start_index


def find_chapter_index(refs: Sequence[ChapterRef], target: str) -> Optional[int]:
    """Position of the chapter named by operator input such as ``35.1``."""
    wanted = normalize_chapter_input(target)
    if not wanted:
        return None
    for index, ref in enumerate(refs):
        if ref.key == wanted:
            return index
    return None


def plan_resume(refs: Sequence[ChapterRef], materialized: Sequence[str]) -> ResumePlan:
    keys = sorted(materialized, key=chapter_sort_key)
    # Folders without a chapter number never mark the resume point.
    numbered = [key for key in keys if not math.isinf(chapter_number(key))]
    last_key = numbered[-1] if numbered else None
    return ResumePlan(
        total=len(refs),
        materialized=keys,
        last_key=last_key,
        next_index=next_unprocessed_index(refs, last_key),
    )


__all__ = [
    "ResumePlan",
    "find_chapter_index",
    "next_unprocessed_index",
    "order_chapters",
    "plan_resume",
    "remaining_count",
]
