from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from komik.chapters import ChapterRef
from komik.config import DownloaderConfig
from komik.errors import AssetTransferFailure, NormalizationFailure
from sites.base import Asset

SMALL = b"s" * 100
LARGE = b"L" * 5000


class FakeSource:
    """Canned Asset Source: chapter key -> list of asset URLs."""

    def __init__(self, pages: Dict[str, List[str]], title: str = "Sample Title", newest_first: bool = False):
        self.pages = pages
        self.title = title
        self.newest_first = newest_first
        self.asset_calls: List[str] = []

    def resolve_title_display_name(self, title_ref: str) -> str:
        return self.title

    def list_chapters(self, title_ref: str) -> List[ChapterRef]:
        refs = [
            ChapterRef(url=f"https://example.com/ch/sample-chapter-{key}/", key=key)
            for key in self.pages
        ]
        return list(reversed(refs)) if self.newest_first else refs

    def list_assets(self, chapter: ChapterRef) -> List[Asset]:
        self.asset_calls.append(chapter.key)
        return [Asset(url=url) for url in self.pages.get(chapter.key, [])]


class FakeDownloader:
    def __init__(self, payloads: Optional[Dict[str, bytes]] = None, failing: Iterable[str] = ()):
        self.payloads = payloads or {}
        self.failing = set(failing)
        self.calls: List[str] = []

    def download(self, url: str, path: str) -> str:
        self.calls.append(url)
        if url in self.failing:
            raise AssetTransferFailure(url, "HTTP 404")
        Path(path).write_bytes(self.payloads.get(url, SMALL))
        return path


class FakeNormalizer:
    """Writes ``sizes[i]`` bytes on the i-th call (last size repeats)."""

    def __init__(self, sizes: Iterable[int] = (1000,), fail: bool = False):
        self.sizes = list(sizes)
        self.fail = fail
        self.calls: List[tuple] = []

    def normalize(self, input_path: str, output_path: str) -> str:
        self.calls.append((input_path, output_path))
        if self.fail:
            raise NormalizationFailure("waifu2x exited with 255")
        size = self.sizes[min(len(self.calls), len(self.sizes)) - 1]
        Path(output_path).write_bytes(b"n" * size)
        return output_path


@pytest.fixture
def config(tmp_path: Path) -> DownloaderConfig:
    return DownloaderConfig(
        output_dir=str(tmp_path / "komik"),
        history_file=str(tmp_path / "history.json"),
        skip_scale_size=2000,
        min_scaled_size=500,
    )


def urls(key: str, count: int) -> List[str]:
    return [f"https://img.example.com/{key}/{i}.jpg" for i in range(1, count + 1)]
