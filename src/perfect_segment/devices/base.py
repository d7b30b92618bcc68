"""Base interface for block writers."""

from __future__ import annotations

from typing import Protocol


class WriterError(RuntimeError):
    """Device- or source-level failure while etching."""


class BlockWriter(Protocol):
    """Minimal interface of something that can etch one full cycle onto a sink."""

    name: str

    def write_cycle(self) -> int:
        """Writes one full cycle from the start of the sink and returns the byte count."""

    def close(self) -> None:
        """Releases writer resources."""
