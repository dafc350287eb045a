"""Site handlers for the downloader."""

from __future__ import annotations

from typing import Iterable, Optional

from .base import Asset, BaseSiteHandler, SiteComicContext
from .komiku import KomikuSiteHandler
from .onepieceberwarna import OnePieceBerwarnaSiteHandler

_REGISTERED_HANDLERS: Iterable[BaseSiteHandler] = (
    KomikuSiteHandler(),
    OnePieceBerwarnaSiteHandler(),
)


def get_handler_by_name(name: str) -> Optional[BaseSiteHandler]:
    lowered = name.lower()
    for handler in _REGISTERED_HANDLERS:
        if handler.name == lowered:
            return handler
    return None


def get_handler_for_url(url: str) -> Optional[BaseSiteHandler]:
    for handler in _REGISTERED_HANDLERS:
        if handler.matches(url):
            return handler
    return None


def handler_names():
    return [handler.name for handler in _REGISTERED_HANDLERS]


__all__ = [
    "Asset",
    "BaseSiteHandler",
    "SiteComicContext",
    "get_handler_by_name",
    "get_handler_for_url",
    "handler_names",
]
