from __future__ import annotations

from pathlib import Path

from komik.workspace import (
    chapter_dir,
    count_finished_files,
    is_chapter_complete,
    list_materialized_chapter_keys,
    natural_sort_key,
    sanitize_filename,
)


def _chapter(root: Path, key: str, finished: int, raw: int = 0) -> Path:
    folder = root / key
    folder.mkdir(parents=True)
    for i in range(1, finished + 1):
        (folder / f"scaled_image_{i}.png").write_bytes(b"png")
    for i in range(1, raw + 1):
        (folder / f"raw_image_{i}.jpg").write_bytes(b"jpg")
    return folder


def test_materialized_keys_are_numerically_ordered(tmp_path: Path) -> None:
    for key in ("10", "2", "35-1", "35", "1"):
        _chapter(tmp_path, key, finished=1)
    assert list_materialized_chapter_keys(str(tmp_path)) == ["1", "2", "10", "35", "35-1"]


def test_materialized_keys_ignore_folders_without_finished_files(tmp_path: Path) -> None:
    _chapter(tmp_path, "1", finished=2)
    _chapter(tmp_path, "2", finished=0, raw=3)
    (tmp_path / "notes.txt").write_text("x")
    assert list_materialized_chapter_keys(str(tmp_path)) == ["1"]


def test_missing_workspace_is_empty(tmp_path: Path) -> None:
    assert list_materialized_chapter_keys(str(tmp_path / "nope")) == []


def test_completeness_requires_exact_count(tmp_path: Path) -> None:
    folder = _chapter(tmp_path, "5", finished=4, raw=1)
    assert count_finished_files(str(folder)) == 4
    assert is_chapter_complete(str(folder), 4)
    assert not is_chapter_complete(str(folder), 5)
    assert not is_chapter_complete(str(folder), 3)
    assert not is_chapter_complete(str(tmp_path / "missing"), 0)


def test_unscaled_files_count_as_finished(tmp_path: Path) -> None:
    folder = _chapter(tmp_path, "1", finished=1)
    (folder / "scaled_image_2_skip_.png").write_bytes(b"png")
    assert is_chapter_complete(str(folder), 2)


def test_chapter_dir_layout() -> None:
    assert chapter_dir("out", "My Title?", "35-1").replace("\\", "/") == "out/My_Title/35-1"
    assert sanitize_filename('a/b:c "d"') == "abc_d"


def test_natural_sort_key() -> None:
    names = ["scaled_image_10.png", "scaled_image_2.png", "scaled_image_1.png"]
    assert sorted(names, key=natural_sort_key) == [
        "scaled_image_1.png",
        "scaled_image_2.png",
        "scaled_image_10.png",
    ]
    assert sorted(["36", "35.1", "35"], key=natural_sort_key) == ["35", "35.1", "36"]
