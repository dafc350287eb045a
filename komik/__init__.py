"""Resumable chapter downloader with waifu2x normalization."""

__version__ = "0.3.0"
