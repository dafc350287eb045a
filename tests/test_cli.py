from __future__ import annotations

import json

import pytest

import komik_downloader
from komik_downloader import build_parser, config_from_args


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "WAIFU2X_PATH",
        "OUTPUT_DIR",
        "HISTORY_FILE",
        "MIN_IMAGE_SIZE",
        "MAX_IMAGE_SIZE",
        "NOISE_REDUCTION",
        "SCALE_FACTOR",
    ):
        monkeypatch.delenv(name, raising=False)


def test_start_and_continue_are_exclusive() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["https://komiku.id/manga/x/", "--start", "3", "--continue"])


def test_flags_override_environment(monkeypatch) -> None:
    monkeypatch.setenv("OUTPUT_DIR", "from-env")
    monkeypatch.setenv("MIN_IMAGE_SIZE", "700")
    args = build_parser().parse_args(["--output-dir", "from-flag", "--noise", "1", "--scale", "4"])
    config = config_from_args(args)
    assert config.output_dir == "from-flag"
    assert config.noise_reduction == 1
    assert config.scale_factor == 4
    assert config.skip_scale_size == 700 * 1024


def test_invalid_environment_exits(monkeypatch) -> None:
    monkeypatch.setenv("SCALE_FACTOR", "big")
    with pytest.raises(SystemExit):
        config_from_args(build_parser().parse_args([]))


def test_history_listing(monkeypatch, tmp_path, capsys) -> None:
    history_file = tmp_path / "history.json"
    history_file.write_text(
        json.dumps(
            [{"url": "https://komiku.id/manga/one-piece/", "title": "one-piece", "lastAccessed": "2026-01-01T00:00:00Z"}]
        ),
        encoding="utf-8",
    )
    komik_downloader.main(["--history", "--history-file", str(history_file)])
    assert "1. one-piece (https://komiku.id/manga/one-piece/)" in capsys.readouterr().out


def test_unattended_run_needs_a_url(tmp_path) -> None:
    with pytest.raises(SystemExit):
        komik_downloader.main(["-y", "--history-file", str(tmp_path / "h.json")])


def test_unknown_site_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc:
        komik_downloader.main(["https://unknown.example/x/", "-y", "--history-file", str(tmp_path / "h.json")])
    assert "auto-detect" in str(exc.value)
