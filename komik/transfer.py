from __future__ import annotations

import os
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from .errors import AssetTransferFailure
from .log import log_debug


def verify_image(path: str) -> None:
    """Raises AssetTransferFailure unless ``path`` decodes as an image."""
    try:
        with Image.open(path) as im:
            im.verify()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        raise AssetTransferFailure(path, f"not a valid image ({e})") from e


class AssetDownloader:
    """Streams one page image to disk; a single attempt per call."""

    def __init__(self, scraper, timeout: Optional[float] = 30, verify: bool = True):
        self.scraper = scraper
        self.timeout = timeout
        self.verify = verify

    def download(self, url: str, path: str) -> str:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        log_debug(f"  Downloading {url} -> {os.path.basename(path)}")
        try:
            with self.scraper.get(url, stream=True, timeout=self.timeout) as r:
                r.raise_for_status()
                with open(path, "wb") as fh:
                    for chunk in r.iter_content(8192):
                        fh.write(chunk)
        except requests.exceptions.RequestException as e:
            raise AssetTransferFailure(url, str(e)) from e

        if os.path.getsize(path) == 0:
            raise AssetTransferFailure(url, "empty response body")
        if self.verify:
            try:
                verify_image(path)
            except AssetTransferFailure as e:
                raise AssetTransferFailure(url, e.reason) from e
        return path

    __call__ = download


__all__ = ["AssetDownloader", "verify_image"]
