"""Pytest configuration shared by the test suite."""

from __future__ import annotations

import pytest

_ENV_KEYS = (
    "PERFECTSEGMENT_BLOCK_SIZE",
    "PERFECTSEGMENT_TOTAL_LENGTH",
    "PERFECTSEGMENT_OUTPUT",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keeps developer-local settings and error reports out of test runs."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PERFECTSEGMENT_ERROR_DIR", str(tmp_path / "error_reports"))


@pytest.fixture
def feed():
    """Builds a read_line callable that replays the given answers."""

    def _feed(*answers: str):
        pending = iter(answers)
        prompts: list[str] = []

        def read_line(prompt: str) -> str:
            prompts.append(prompt)
            try:
                return next(pending)
            except StopIteration:
                raise EOFError from None

        read_line.prompts = prompts  # type: ignore[attr-defined]
        return read_line

    return _feed
