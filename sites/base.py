from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, FeatureNotFound

from komik.chapters import ChapterRef

try:
    import lxml  # type: ignore  # noqa: F401

    _PARSER = "lxml"
except Exception:
    _PARSER = "html.parser"


@dataclass(frozen=True)
class Asset:
    """One page image of a chapter, in reading order."""

    url: str
    label: str = ""


@dataclass
class SiteComicContext:
    title: str
    identifier: str
    url: str
    soup: Optional[BeautifulSoup] = None


class BaseSiteHandler:
    """Base class for site-specific handlers."""

    name: str = "base"
    domains: tuple[str, ...] = ()

    def matches(self, url: str) -> bool:
        netloc = urlparse(url).netloc.lower()
        return any(domain in netloc for domain in self.domains)

    # --- Session lifecycle -------------------------------------------------
    def configure_session(self, scraper, config) -> None:
        """Give the handler a chance to tweak the HTTP session."""
        return None

    # --- Helpers -----------------------------------------------------------
    def _make_soup(self, html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html, _PARSER)
        except FeatureNotFound:
            return BeautifulSoup(html, "html.parser")

    def _slug_from_url(self, url: str) -> str:
        parsed = urlparse(url)
        parts = [p for p in parsed.path.split("/") if p]
        return parts[-1] if parts else "unknown"

    # --- Initial comic retrieval ------------------------------------------
    def fetch_comic_context(self, url: str, scraper, make_request) -> SiteComicContext:
        """Return the title data needed by the chapter listing."""
        raise NotImplementedError

    # --- Chapter helpers ---------------------------------------------------
    def get_chapters(
        self, context: SiteComicContext, scraper, make_request
    ) -> List[ChapterRef]:
        raise NotImplementedError

    def get_chapter_images(
        self, chapter: ChapterRef, scraper, make_request
    ) -> List[Asset]:
        raise NotImplementedError


__all__ = [
    "Asset",
    "BaseSiteHandler",
    "SiteComicContext",
]
