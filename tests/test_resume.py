from __future__ import annotations

from komik.chapters import ChapterRef
from komik.resume import (
    find_chapter_index,
    next_unprocessed_index,
    order_chapters,
    plan_resume,
    remaining_count,
)


def _refs(*keys: str):
    return [ChapterRef(url=f"https://example.com/chapter-{k}/", key=k) for k in keys]


def test_next_index_after_materialized_chapters() -> None:
    refs = _refs(*[str(n) for n in range(1, 11)])
    plan = plan_resume(refs, ["1", "2", "3"])
    assert plan.last_key == "3"
    assert plan.next_index == 3
    assert refs[plan.next_index].key == "4"
    assert plan.remaining == 7


def test_next_index_uses_numeric_order() -> None:
    refs = _refs("9", "10", "10-5", "11")
    assert next_unprocessed_index(refs, "10") == 2
    assert next_unprocessed_index(refs, "10-5") == 3


def test_everything_downloaded() -> None:
    refs = _refs("1", "2")
    assert next_unprocessed_index(refs, "2") is None
    plan = plan_resume(refs, ["2", "1"])
    assert plan.all_done
    assert plan.remaining == 0


def test_nothing_downloaded_starts_at_zero() -> None:
    refs = _refs("1", "2", "3")
    plan = plan_resume(refs, [])
    assert plan.last_key is None
    assert plan.next_index == 0
    assert plan.remaining == 3
    assert not plan.all_done
    assert next_unprocessed_index([], None) is None


def test_remaining_count() -> None:
    assert remaining_count(10, 3) == 7
    assert remaining_count(3, 0) == 3


def test_order_chapters_reverses_newest_first_sources() -> None:
    refs = _refs("3", "2-1", "2", "1")
    assert [r.key for r in order_chapters(refs)] == ["1", "2", "2-1", "3"]


def test_find_chapter_index_accepts_dotted_input() -> None:
    refs = _refs("35", "35-1", "36")
    assert find_chapter_index(refs, "35.1") == 1
    assert find_chapter_index(refs, "36") == 2
    assert find_chapter_index(refs, "37") is None
    assert find_chapter_index(refs, "  ") is None


def test_unnumbered_folder_does_not_move_the_resume_point() -> None:
    refs = _refs("1", "2", "3", "unknown")
    plan = plan_resume(refs, ["1", "unknown"])
    assert plan.materialized == ["1", "unknown"]
    assert plan.last_key == "1"
    assert refs[plan.next_index].key == "2"
    assert not plan.all_done

    assert plan_resume(refs, ["unknown"]).next_index == 0
