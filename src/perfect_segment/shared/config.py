"""Application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from perfect_segment.core.errors import ConfigurationError

DEFAULT_PHYSICAL_BLOCK_SIZE = 4096
# 232.89 GiB drive: 2**13 * 3**3 * 7 * 161507
DEFAULT_TOTAL_LENGTH = 250059350016
DEFAULT_OUTPUT_FILE = Path("perfect_segment.bin")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Fixed per-invocation settings for segment generation."""

    physical_block_size: int = DEFAULT_PHYSICAL_BLOCK_SIZE
    total_length: int = DEFAULT_TOTAL_LENGTH
    output_file: Path = DEFAULT_OUTPUT_FILE

    @classmethod
    def default(cls) -> "AppConfig":
        """Returns the built-in defaults."""

        return cls()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Builds a configuration from defaults overridden by the environment.

        Recognised variables:
        - `PERFECTSEGMENT_BLOCK_SIZE`
        - `PERFECTSEGMENT_TOTAL_LENGTH`
        - `PERFECTSEGMENT_OUTPUT`
        """

        config = cls.default()
        block_size = _int_from_env("PERFECTSEGMENT_BLOCK_SIZE")
        total_length = _int_from_env("PERFECTSEGMENT_TOTAL_LENGTH")
        output = (os.getenv("PERFECTSEGMENT_OUTPUT") or "").strip()

        if block_size is not None:
            config = replace(config, physical_block_size=block_size)
        if total_length is not None:
            config = replace(config, total_length=total_length)
        if output:
            config = replace(config, output_file=Path(output))
        return config

    def override(
        self,
        *,
        physical_block_size: int | None = None,
        total_length: int | None = None,
        output_file: Path | None = None,
    ) -> "AppConfig":
        """Returns a copy with the non-None values replaced (CLI options)."""

        changes: dict[str, object] = {}
        if physical_block_size is not None:
            changes["physical_block_size"] = physical_block_size
        if total_length is not None:
            changes["total_length"] = total_length
        if output_file is not None:
            changes["output_file"] = Path(output_file)
        return replace(self, **changes)


def _int_from_env(key: str) -> int | None:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
