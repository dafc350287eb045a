from __future__ import annotations

import re
from typing import List

from komik.chapters import ChapterRef

from .base import Asset, BaseSiteHandler, SiteComicContext

_IMAGE_EXT = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)
_NOT_A_PAGE = re.compile(r"logo|banner|iklan|ads|wp-content/themes", re.IGNORECASE)


class OnePieceBerwarnaSiteHandler(BaseSiteHandler):
    """
    Colored One Piece chapters.

    The site has no series index worth scraping, so chapters are generated
    from 1 up to ``latest_chapter``; chapters that do not exist yet simply
    yield no images and are skipped by the engine.
    """

    name = "onepieceberwarna"
    domains = ("onepieceberwarna.com", "www.onepieceberwarna.com")

    _BASE_URL = "https://onepieceberwarna.com"
    _TITLE = "one-piece-berwarna-indo"

    reader_selectors = (".main-reading-area", ".reading-content", "article")

    def __init__(self, latest_chapter: int = 1200) -> None:
        super().__init__()
        self.latest_chapter = latest_chapter

    def chapter_url(self, number) -> str:
        return f"{self._BASE_URL}/one-piece-berwarna-chapter-{number}/"

    # -- Base overrides ----------------------------------------------
    def fetch_comic_context(
        self, url: str, scraper, make_request
    ) -> SiteComicContext:
        return SiteComicContext(title=self._TITLE, identifier=self._TITLE, url=url)

    def get_chapters(
        self, context: SiteComicContext, scraper, make_request
    ) -> List[ChapterRef]:
        return [
            ChapterRef(url=self.chapter_url(n), key=str(n))
            for n in range(1, self.latest_chapter + 1)
        ]

    def get_chapter_images(
        self, chapter: ChapterRef, scraper, make_request
    ) -> List[Asset]:
        response = make_request(chapter.url, scraper)
        soup = self._make_soup(response.text)

        container = None
        for selector in self.reader_selectors:
            container = soup.select_one(selector)
            if container:
                break
        if not container:
            return []

        images = []
        for img in container.find_all("img"):
            src = (img.get("src") or "").strip()
            if _IMAGE_EXT.search(src) and not _NOT_A_PAGE.search(src):
                images.append(Asset(url=src, label=img.get("alt", "")))
        return images
