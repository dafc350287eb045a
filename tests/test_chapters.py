from __future__ import annotations

import pytest

from komik.chapters import (
    ChapterRef,
    chapter_sort_key,
    compare_chapter_keys,
    normalize_chapter_input,
    parse_chapter_key,
)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://komiku.id/one-piece-chapter-35/", "35"),
        ("https://komiku.id/one-piece-chapter-35-1/", "35-1"),
        ("https://komiku.id/ch/one-piece-chapter-1110-bahasa-indonesia/", "1110"),
        ("https://komiku.id/one-piece-chapter-35-1-bahasa-indonesia/", "35-1"),
        ("https://onepieceberwarna.com/one-piece-berwarna-chapter-1024/", "1024"),
        ("https://example.com/chapter-12-5-end/", "12"),
        ("https://example.com/chapter-7-2-3/", "7"),
        ("https://example.com/Chapter-8/", "8"),
    ],
)
def test_parse_chapter_key(url: str, expected: str) -> None:
    assert parse_chapter_key(url) == expected


@pytest.mark.parametrize(
    "url",
    ["", "https://example.com/manga/one-piece/", "https://example.com/chapter-/", "chapter-extra/"],
)
def test_parse_chapter_key_falls_back_to_unknown(url: str) -> None:
    assert parse_chapter_key(url) == "unknown"


def test_parse_chapter_key_is_deterministic() -> None:
    url = "https://komiku.id/ch/boruto-chapter-80-2/"
    assert parse_chapter_key(url) == parse_chapter_key(url) == "80-2"


def test_sub_chapter_sorts_between_neighbours() -> None:
    assert compare_chapter_keys("35", "35.1") < 0 < compare_chapter_keys("36", "35.1")
    assert compare_chapter_keys("35-1", "35.1") != 0
    assert compare_chapter_keys("35-1", "35-1") == 0
    assert compare_chapter_keys("9", "10") < 0


def test_unknown_keys_sort_last() -> None:
    keys = ["unknown", "10", "2", "35-1", "35", "1"]
    assert sorted(keys, key=chapter_sort_key) == ["1", "2", "10", "35", "35-1", "unknown"]


def test_chapter_ref_derives_key_from_url() -> None:
    ref = ChapterRef(url="https://komiku.id/one-piece-chapter-1000/")
    assert ref.key == "1000"
    assert ChapterRef(url="https://x/", key="5").key == "5"


@pytest.mark.parametrize(
    "text, expected",
    [("35.1", "35-1"), ("35-1", "35-1"), (" Chapter 12 ", "12"), ("chapter-7", "7"), ("1110", "1110")],
)
def test_normalize_chapter_input(text: str, expected: str) -> None:
    assert normalize_chapter_input(text) == expected
