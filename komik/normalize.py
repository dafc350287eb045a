from __future__ import annotations

import os
import subprocess
from typing import List

from .config import DownloaderConfig
from .errors import NormalizationFailure
from .log import log_debug


class Waifu2xNormalizer:
    """Runs waifu2x-ncnn-vulkan (or a compatible CLI) on one image at a time."""

    def __init__(self, config: DownloaderConfig):
        self.tool_path = config.tool_path
        self.noise_reduction = config.noise_reduction
        self.scale_factor = config.scale_factor
        self.extra_args = list(config.extra_tool_args)

    def command(self, input_path: str, output_path: str) -> List[str]:
        return [
            self.tool_path,
            "-i", input_path,
            "-o", output_path,
            "-n", str(self.noise_reduction),
            "-s", str(self.scale_factor),
            *self.extra_args,
        ]

    def normalize(self, input_path: str, output_path: str) -> str:
        """Upscales ``input_path`` into ``output_path``, blocking until done."""
        cmd = self.command(input_path, output_path)
        log_debug(f"  Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace"
            )
        except OSError as e:
            raise NormalizationFailure(f"Could not run {self.tool_path}: {e}") from e
        if result.returncode != 0:
            raise NormalizationFailure(
                f"{os.path.basename(self.tool_path)} exited with {result.returncode}\n"
                f"stderr: {(result.stderr or '')[-2000:]}"
            )
        if not os.path.isfile(output_path):
            raise NormalizationFailure(f"No output written to {output_path}")
        return output_path

    __call__ = normalize


__all__ = ["Waifu2xNormalizer"]
