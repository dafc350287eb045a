"""Failure kinds raised inside the pipeline.

Only ``InvalidSelection`` is meant to end a run. Everything else is caught
at the asset, chapter or ledger boundary and logged.
"""


class KomikError(Exception):
    """Base class for downloader errors."""


class SourceUnavailable(KomikError):
    """The remote source failed or returned nothing usable."""


class AssetTransferFailure(KomikError):
    """A single page image could not be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class NormalizationFailure(KomikError):
    """The external upscaler failed or produced unusable output."""


class LedgerCorruption(KomikError):
    """The persisted history file could not be parsed."""


class InvalidSelection(KomikError):
    """A user-supplied title, chapter, history index or count does not resolve."""
