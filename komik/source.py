"""The Asset Source seen by the pipeline.

Anything with ``list_chapters``, ``list_assets`` and
``resolve_title_display_name`` can feed the orchestrator and the engine.
``SiteAssetSource`` adapts a site handler and an HTTP session to that shape
and turns every remote failure into an empty result.
"""

from __future__ import annotations

import sys
from typing import Dict, List, Optional, Protocol

import requests

# cloudscraper is optional; fall back to requests.Session if unavailable
try:
    import cloudscraper  # type: ignore
except Exception:  # pragma: no cover
    cloudscraper = None

from sites import get_handler_by_name, get_handler_for_url
from sites.base import Asset, BaseSiteHandler, SiteComicContext

from .chapters import ChapterRef
from .errors import InvalidSelection, SourceUnavailable
from .log import log_debug, log_error, log_verbose


class AssetSource(Protocol):
    def list_chapters(self, title_ref: str) -> List[ChapterRef]:
        ...

    def list_assets(self, chapter: ChapterRef) -> List[Asset]:
        ...

    def resolve_title_display_name(self, title_ref: str) -> str:
        ...


def make_request(url: str, scraper, timeout: Optional[float] = 30):
    log_debug(f"  GET {url}")
    try:
        r = scraper.get(url, timeout=timeout)
        # Some sites return 403 from Cloudflare but still serve the page.
        # Only fail if we got a real error (4xx/5xx) AND no content
        if r.status_code >= 400:
            if not r.text or len(r.text) < 100:
                r.raise_for_status()
            log_verbose(f"  Warning: Got status {r.status_code} but response has content, continuing...")
        return r
    except requests.exceptions.RequestException as e:
        raise SourceUnavailable(f"Request failed: {e}") from e


def create_session(cookies: str = ""):
    """HTTP session, preferring cloudscraper when it initialises."""
    use_cloudscraper = cloudscraper is not None and sys.version_info >= (3, 7)
    scraper = None
    if use_cloudscraper:
        try:
            scraper = cloudscraper.create_scraper(
                browser={
                    "browser": "chrome",
                    "platform": "darwin",
                    "mobile": False,
                }
            )
        except Exception as e:
            log_verbose(
                f"  Warning: cloudscraper init failed ({e}). "
                "Falling back to requests.Session()"
            )
    if scraper is None:
        scraper = requests.Session()
    if cookies:
        scraper.cookies.update(
            dict(kv.strip().split("=", 1) for kv in cookies.split(";") if "=" in kv)
        )
    return scraper


def resolve_site_handler(url: str, site_name: Optional[str] = None) -> BaseSiteHandler:
    if site_name:
        handler = get_handler_by_name(site_name)
        if not handler:
            raise InvalidSelection(f"Unknown site handler: {site_name}")
        return handler

    handler = get_handler_for_url(url)
    if not handler:
        raise InvalidSelection(
            "Unable to auto-detect a site handler for the provided URL. "
            "Please specify one with --site."
        )
    return handler


class SiteAssetSource:
    """Asset Source backed by a site handler and a live HTTP session."""

    def __init__(self, handler: BaseSiteHandler, scraper, timeout: Optional[float] = 30):
        self.handler = handler
        self.scraper = scraper
        self.timeout = timeout
        self._contexts: Dict[str, SiteComicContext] = {}

    def _request(self, url: str, scraper):
        return make_request(url, scraper, timeout=self.timeout)

    def _context(self, title_ref: str) -> SiteComicContext:
        context = self._contexts.get(title_ref)
        if context is None:
            context = self.handler.fetch_comic_context(
                title_ref, self.scraper, self._request
            )
            self._contexts[title_ref] = context
        return context

    def resolve_title_display_name(self, title_ref: str) -> str:
        try:
            return self._context(title_ref).title
        except Exception as e:
            log_error(f"  Error resolving title for {title_ref}: {e}")
            return ""

    def list_chapters(self, title_ref: str) -> List[ChapterRef]:
        try:
            return list(
                self.handler.get_chapters(
                    self._context(title_ref), self.scraper, self._request
                )
                or []
            )
        except Exception as e:
            log_error(f"  Error fetching chapters from {title_ref}: {e}")
            return []

    def list_assets(self, chapter: ChapterRef) -> List[Asset]:
        try:
            return list(
                self.handler.get_chapter_images(chapter, self.scraper, self._request)
                or []
            )
        except Exception as e:
            log_error(f"  Error scraping images from {chapter.url}: {e}")
            return []


__all__ = [
    "AssetSource",
    "SiteAssetSource",
    "create_session",
    "make_request",
    "resolve_site_handler",
]
