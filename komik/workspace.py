"""On-disk layout of downloaded titles.

``<output_dir>/<title>/<chapter key>/`` holds the finished page images of one
chapter. Finished files are recognised by their ``.png`` extension; the
``raw_image_*.jpg`` intermediates never count. The number of finished files
is the only record of how far a chapter got.
"""

from __future__ import annotations

import os
import re
from typing import List

from .chapters import chapter_sort_key
from .log import log_debug

FINISHED_SUFFIX = ".png"
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif")

_NATURAL_SPLIT = re.compile(r"(\d+)")


def sanitize_filename(name):
    return re.sub(r'[\\/*?:"<>|]', "", name).replace(" ", "_")


def raw_file_name(index: int) -> str:
    return f"raw_image_{index}.jpg"


def scaled_file_name(index: int) -> str:
    return f"scaled_image_{index}.png"


def unscaled_file_name(index: int) -> str:
    # Stored as-is because the download was already large enough.
    return f"scaled_image_{index}_skip_.png"


def is_finished_file(name: str) -> bool:
    return name.lower().endswith(FINISHED_SUFFIX)


def title_dir(output_dir: str, title: str) -> str:
    return os.path.join(output_dir, sanitize_filename(title))


def chapter_dir(output_dir: str, title: str, key: str) -> str:
    return os.path.join(title_dir(output_dir, title), key)


def ensure_folder_exists(folder_path: str) -> str:
    os.makedirs(folder_path, exist_ok=True)
    return folder_path


def list_finished_files(folder_path: str) -> List[str]:
    try:
        names = os.listdir(folder_path)
    except OSError:
        return []
    return sorted(
        (
            n
            for n in names
            if is_finished_file(n) and os.path.isfile(os.path.join(folder_path, n))
        ),
        key=natural_sort_key,
    )


def count_finished_files(folder_path: str) -> int:
    return len(list_finished_files(folder_path))


def is_chapter_complete(folder_path: str, expected_count: int) -> bool:
    """True only when the folder holds exactly ``expected_count`` finished files."""
    if not os.path.isdir(folder_path):
        return False
    found = count_finished_files(folder_path)
    log_debug(f"  {folder_path}: {found}/{expected_count} finished files")
    return found == expected_count


def list_materialized_chapter_keys(workspace: str) -> List[str]:
    """
    Chapter keys under a title folder that hold at least one finished file,
    in ascending chapter order. A missing folder yields an empty list.
    """
    try:
        entries = os.listdir(workspace)
    except OSError:
        return []
    keys = []
    for entry in entries:
        path = os.path.join(workspace, entry)
        if os.path.isdir(path) and list_finished_files(path):
            keys.append(entry)
    return sorted(keys, key=chapter_sort_key)


def natural_sort_key(name: str):
    """Sort key that orders embedded numbers numerically (``2`` before ``10``)."""
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in _NATURAL_SPLIT.split(name)
        if part
    ]


def is_image_file(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


__all__ = [
    "chapter_dir",
    "count_finished_files",
    "is_chapter_complete",
    "list_materialized_chapter_keys",
    "natural_sort_key",
    "sanitize_filename",
    "title_dir",
]
