"""Per-chapter download and normalization.

Assets are handled one after another, in source order. For each page the
raw download goes to ``raw_image_<n>.jpg``; a download larger than
``skip_scale_size`` is renamed straight to ``scaled_image_<n>_skip_.png``,
anything smaller is upscaled into ``scaled_image_<n>.png`` (regenerated once
if the result is below ``min_scaled_size``) and the raw file is removed.

A failing page is logged and skipped. The chapter then holds fewer finished
files than it has pages, which is what makes the next run process it again.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import List

from .chapters import ChapterRef
from .config import DownloaderConfig
from .errors import NormalizationFailure
from .log import log_debug, log_error, log_verbose
from .workspace import (
    chapter_dir,
    count_finished_files,
    ensure_folder_exists,
    is_chapter_complete,
    raw_file_name,
    scaled_file_name,
    unscaled_file_name,
)


class ChapterOutcome(enum.Enum):
    NO_CONTENT = "no content"
    ALREADY_DONE = "already done"
    PROCESSED = "processed"


@dataclass
class AssetFailure:
    index: int
    url: str
    reason: str


@dataclass
class ChapterReport:
    key: str
    outcome: ChapterOutcome
    asset_count: int = 0
    finished_files: int = 0
    downloads: int = 0
    normalizations: int = 0
    scaled: int = 0
    kept: int = 0
    undersized: int = 0
    failures: List[AssetFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.asset_count > 0 and self.finished_files == self.asset_count

    def summary(self) -> str:
        return (
            f"Finished Chapter {self.key}: {self.finished_files}/{self.asset_count} files "
            f"({self.scaled} scaled, {self.kept} kept as-is, {len(self.failures)} failed)"
        )


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class ChapterEngine:
    def __init__(self, config: DownloaderConfig, source, downloader, normalizer):
        self.config = config
        self.source = source
        self.downloader = downloader
        self.normalizer = normalizer

    def process_chapter(self, chapter: ChapterRef, title: str) -> ChapterReport:
        key = chapter.key
        print(f"\nProcessing Chapter: {key} of {title}")

        assets = self.source.list_assets(chapter)
        if not assets:
            print(f"  Warning: No images found for {chapter.url}. Skipping.")
            return ChapterReport(key=key, outcome=ChapterOutcome.NO_CONTENT)
        print(f"  Found {len(assets)} images in chapter {key}")

        folder = chapter_dir(self.config.output_dir, title, key)
        if is_chapter_complete(folder, len(assets)):
            print(f"  Images for Chapter {key} are already downloaded.")
            return ChapterReport(
                key=key,
                outcome=ChapterOutcome.ALREADY_DONE,
                asset_count=len(assets),
                finished_files=len(assets),
            )

        ensure_folder_exists(folder)
        report = ChapterReport(
            key=key, outcome=ChapterOutcome.PROCESSED, asset_count=len(assets)
        )
        for index, asset in enumerate(assets, start=1):
            try:
                self._process_asset(asset.url, index, len(assets), folder, report)
            except Exception as e:
                log_error(f"  Error processing image {index}: {e}")
                report.failures.append(AssetFailure(index, asset.url, str(e)))

        report.finished_files = count_finished_files(folder)
        print(f"  {report.summary()}")
        return report

    def _process_asset(
        self, url: str, index: int, total: int, folder: str, report: ChapterReport
    ) -> None:
        raw_path = os.path.join(folder, raw_file_name(index))
        scaled_path = os.path.join(folder, scaled_file_name(index))
        unscaled_path = os.path.join(folder, unscaled_file_name(index))

        log_verbose(f"  Downloading image {index} of {total}...")
        report.downloads += 1
        self.downloader.download(url, raw_path)

        raw_size = os.path.getsize(raw_path)
        log_debug(f"    raw size: {raw_size} bytes")
        if raw_size > self.config.skip_scale_size:
            log_verbose(f"  Image {index} is large enough, skipping scaling...")
            os.replace(raw_path, unscaled_path)
            _discard(scaled_path)
            report.kept += 1
            return

        log_verbose(f"  Scaling image {index} of {total}...")
        _discard(scaled_path)
        report.normalizations += 1
        self.normalizer.normalize(raw_path, scaled_path)

        if os.path.getsize(scaled_path) < self.config.min_scaled_size:
            log_verbose(f"  Retrying scaling for image {index}...")
            report.normalizations += 1
            try:
                self.normalizer.normalize(raw_path, scaled_path)
            except NormalizationFailure as e:
                log_verbose(f"  Retry failed for image {index}: {e}")
            if not os.path.isfile(scaled_path):
                raise NormalizationFailure(f"No output for image {index} after retry")
            if os.path.getsize(scaled_path) < self.config.min_scaled_size:
                if not self.config.keep_undersized:
                    _discard(scaled_path)
                    raise NormalizationFailure(
                        f"Scaled image {index} still below "
                        f"{self.config.min_scaled_size} bytes after retry"
                    )
                log_verbose(f"  Keeping undersized scaled image {index}")
                report.undersized += 1

        _discard(unscaled_path)
        os.remove(raw_path)
        report.scaled += 1


__all__ = ["AssetFailure", "ChapterEngine", "ChapterOutcome", "ChapterReport"]
