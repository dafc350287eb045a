from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_WAIFU2X_PATH = "~/Repos/tools/waifu2x/waifu2x-ncnn-vulkan"
DEFAULT_OUTPUT_DIR = "komik"
DEFAULT_HISTORY_FILE = "history.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_size(size_str: str) -> int:
    """Parses a human-readable size string (e.g., '400MB') into bytes."""
    if not size_str:
        return 0
    size_str = size_str.strip().upper()
    match = re.match(r"^([\d.]+)\s*([KMGT]?B?)$", size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    value, unit = match.groups()
    value = float(value)
    unit = unit.replace("B", "")

    multipliers = {"K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}
    multiplier = multipliers.get(unit, 1)
    return int(value * multiplier)


def parse_threshold(value: str) -> int:
    """Size threshold from the environment; a bare number means kilobytes."""
    value = value.strip()
    if re.fullmatch(r"\d+(\.\d+)?", value):
        return int(float(value) * 1024)
    return parse_size(value)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value}") from None


@dataclass
class DownloaderConfig:
    """Settings shared by the orchestrator, engine and helpers.

    Sizes are in bytes. ``skip_scale_size`` is the raw size above which an
    image is considered large enough and stored unscaled;
    ``min_scaled_size`` is the size below which a normalized output is
    regenerated once.
    """

    waifu2x_path: str = DEFAULT_WAIFU2X_PATH
    output_dir: str = DEFAULT_OUTPUT_DIR
    skip_scale_size: int = 900 * 1024
    min_scaled_size: int = 1024 * 1024
    noise_reduction: int = 2
    scale_factor: int = 2
    history_file: str = DEFAULT_HISTORY_FILE
    max_history: int = 10
    request_timeout: float = 30.0
    keep_undersized: bool = True
    extra_tool_args: list = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_history < 1:
            raise ValueError("max_history must be at least 1")
        if self.skip_scale_size < 0 or self.min_scaled_size < 0:
            raise ValueError("Size thresholds cannot be negative")

    @property
    def tool_path(self) -> str:
        return os.path.expanduser(self.waifu2x_path)

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, dotenv: bool = True
    ) -> "DownloaderConfig":
        """Builds a config from environment variables (and ``.env``)."""
        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        kwargs = {}
        if env.get("WAIFU2X_PATH"):
            kwargs["waifu2x_path"] = env["WAIFU2X_PATH"]
        if env.get("OUTPUT_DIR"):
            kwargs["output_dir"] = env["OUTPUT_DIR"]
        if env.get("MIN_IMAGE_SIZE"):
            kwargs["skip_scale_size"] = parse_threshold(env["MIN_IMAGE_SIZE"])
        if env.get("MAX_IMAGE_SIZE"):
            kwargs["min_scaled_size"] = parse_threshold(env["MAX_IMAGE_SIZE"])
        if env.get("NOISE_REDUCTION"):
            kwargs["noise_reduction"] = _parse_int(
                "NOISE_REDUCTION", env["NOISE_REDUCTION"]
            )
        if env.get("SCALE_FACTOR"):
            kwargs["scale_factor"] = _parse_int("SCALE_FACTOR", env["SCALE_FACTOR"])
        if env.get("HISTORY_FILE"):
            kwargs["history_file"] = env["HISTORY_FILE"]
        if env.get("MAX_HISTORY"):
            kwargs["max_history"] = _parse_int("MAX_HISTORY", env["MAX_HISTORY"])
        if env.get("REQUEST_TIMEOUT"):
            try:
                kwargs["request_timeout"] = float(env["REQUEST_TIMEOUT"])
            except ValueError:
                raise ValueError(
                    f"Invalid number for REQUEST_TIMEOUT: {env['REQUEST_TIMEOUT']}"
                ) from None
        if env.get("KEEP_UNDERSIZED"):
            kwargs["keep_undersized"] = _parse_bool(
                "KEEP_UNDERSIZED", env["KEEP_UNDERSIZED"]
            )
        return cls(**kwargs)


__all__ = ["DownloaderConfig", "parse_size", "parse_threshold"]
