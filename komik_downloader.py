#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ------------------------------------------------------------------
# Resumable chapter downloader  →  waifu2x-upscaled page images
# -----------------------------------------------------------
import argparse
import dataclasses
import sys
from pathlib import Path

from komik.config import DownloaderConfig
from komik.engine import ChapterEngine
from komik.errors import InvalidSelection
from komik.history import HistoryLedger
from komik.log import set_verbosity
from komik.normalize import Waifu2xNormalizer
from komik.orchestrator import Orchestrator, resolve_title_choice
from komik.source import SiteAssetSource, create_session, resolve_site_handler
from komik.transfer import AssetDownloader
from sites import handler_names


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("komik downloader")
    p.add_argument(
        "comic",
        nargs="?",
        default=None,
        help="Series URL, or the number of an entry in the recent-titles history. "
        "Prompted for when omitted.",
    )
    p.add_argument(
        "--site",
        type=str,
        default=None,
        choices=handler_names(),
        help="Explicitly select the site handler (auto-detected by URL when omitted).",
    )
    p.add_argument("--cookies", default="")
    start = p.add_mutually_exclusive_group()
    start.add_argument(
        "--start",
        default=None,
        help="Chapter to start from (e.g., 35.1 or 35-1).",
    )
    start.add_argument(
        "--continue",
        dest="resume",
        action="store_true",
        help="Start right after the last chapter found on disk.",
    )
    p.add_argument(
        "--count",
        type=int,
        default=None,
        help="How many chapters to download (default: all remaining).",
    )
    p.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Never prompt; use defaults for anything not given on the command line.",
    )
    p.add_argument("--output-dir", default=None, help="Root folder for downloaded titles.")
    p.add_argument("--waifu2x", default=None, help="Path to the waifu2x executable.")
    p.add_argument("--noise", type=int, default=None, choices=range(-1, 4), metavar="[-1-3]")
    p.add_argument("--scale", type=int, default=None, help="waifu2x scale factor.")
    p.add_argument("--history-file", default=None)
    p.add_argument(
        "--history",
        action="store_true",
        help="Print the recent-titles history and exit.",
    )
    p.add_argument(
        "--serve",
        action="store_true",
        help="Serve the download folder as JSON for the web viewer instead of downloading.",
    )
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=3000)
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable detailed, step-by-step logging.",
    )
    p.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug-level logging (URLs, file sizes, tool command lines).",
    )
    return p


def config_from_args(args) -> DownloaderConfig:
    try:
        config = DownloaderConfig.from_env()
    except ValueError as e:
        sys.exit(f"Invalid configuration: {e}")
    overrides = {
        "output_dir": args.output_dir,
        "waifu2x_path": args.waifu2x,
        "noise_reduction": args.noise,
        "scale_factor": args.scale,
        "history_file": args.history_file,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return dataclasses.replace(config, **overrides)


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_verbosity(args.verbose, args.debug)
    config = config_from_args(args)

    if args.serve:
        from komik.server import ServerConfig, serve

        root = Path(config.output_dir)
        root.mkdir(parents=True, exist_ok=True)
        serve(ServerConfig(root=root, host=args.host, port=args.port))
        return

    history = HistoryLedger(config.history_file, config.max_history).load()
    if args.history:
        lines = history.describe()
        print("\n".join(lines) if lines else "No history found.")
        return

    ask = None if args.yes else input
    print("Komik downloader + waifu2x scale")

    choice = args.comic
    if choice is None:
        if ask is None:
            sys.exit("No comic URL given.")
        lines = history.describe()
        if lines:
            print("\nRecent Comics:")
            print("\n".join(lines))
        else:
            print("No history found.")
        choice = ask("\nEnter a history number or paste a new URL: ")

    try:
        url = resolve_title_choice(choice, history)
        handler = resolve_site_handler(url, args.site)
    except InvalidSelection as e:
        sys.exit(str(e))

    scraper = create_session(args.cookies)
    handler.configure_session(scraper, config)
    source = SiteAssetSource(handler, scraper, timeout=config.request_timeout)
    engine = ChapterEngine(
        config,
        source,
        AssetDownloader(scraper, timeout=config.request_timeout),
        Waifu2xNormalizer(config),
    )
    orchestrator = Orchestrator(config, source, engine, history)

    try:
        orchestrator.run(
            url,
            start=args.start,
            resume=args.resume,
            count=args.count,
            ask=ask,
        )
    except InvalidSelection as e:
        sys.exit(str(e))


if __name__ == "__main__":
    main()
