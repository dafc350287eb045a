from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlparse

from komik.chapters import ChapterRef

from .base import Asset, BaseSiteHandler, SiteComicContext


class KomikuSiteHandler(BaseSiteHandler):
    name = "komiku"
    domains = ("komiku.id", "www.komiku.id", "komiku.org")

    _BASE_URL = "https://komiku.id"

    # -- Helpers -----------------------------------------------------
    def _fetch_html(self, url: str, scraper, make_request) -> str:
        response = make_request(url, scraper)
        response.encoding = response.encoding or "utf-8"
        return response.text

    def _slug_from_url(self, url: str) -> str:
        # URL: https://komiku.id/manga/<slug>/
        parts = [p for p in urlparse(url).path.split("/") if p]
        if "manga" in parts:
            idx = parts.index("manga")
            if idx + 1 < len(parts):
                return parts[idx + 1]
        return ""

    # -- Base overrides ----------------------------------------------
    def fetch_comic_context(
        self, url: str, scraper, make_request
    ) -> SiteComicContext:
        slug = self._slug_from_url(url)
        return SiteComicContext(title=slug, identifier=slug, url=url)

    def get_chapters(
        self, context: SiteComicContext, scraper, make_request
    ) -> List[ChapterRef]:
        soup = context.soup
        if not soup:
            soup = self._make_soup(self._fetch_html(context.url, scraper, make_request))
            context.soup = soup

        chapters = []
        for link in soup.select("td.judulseries a"):
            href = link.get("href")
            if not href:
                continue
            chapters.append(
                ChapterRef(
                    url=urljoin(self._BASE_URL, href),
                    title=link.get_text(strip=True),
                )
            )
        # The series page lists the newest chapter first.
        chapters.reverse()
        return chapters

    def get_chapter_images(
        self, chapter: ChapterRef, scraper, make_request
    ) -> List[Asset]:
        soup = self._make_soup(self._fetch_html(chapter.url, scraper, make_request))
        images = []
        for img in soup.select('img[itemprop="image"]'):
            src = img.get("src") or img.get("data-src")
            if src:
                images.append(Asset(url=urljoin(chapter.url, src), label=img.get("alt", "")))
        return images
