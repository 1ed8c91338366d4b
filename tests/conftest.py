"""Shared pytest fixtures for passgen tests."""

from __future__ import annotations

from typing import Callable, List, Sequence, Union

import pytest

from common.secure_random import WORD_BYTES

ScriptItem = Union[int, bytes, BaseException]


class ScriptedSource:
    """Entropy source that replays a fixed script.

    Each call consumes one item: an int is returned as a big-endian word,
    bytes are returned as-is, and an exception instance is raised.
    """

    def __init__(self, script: Sequence[ScriptItem]) -> None:
        self.script: List[ScriptItem] = list(script)
        self.calls = 0

    @property
    def remaining(self) -> int:
        return len(self.script)

    def __call__(self, size: int) -> bytes:
        assert size == WORD_BYTES
        if not self.script:
            raise AssertionError("entropy script exhausted")
        self.calls += 1
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, int):
            return item.to_bytes(WORD_BYTES, "big")
        return item


@pytest.fixture
def scripted_source() -> Callable[[Sequence[ScriptItem]], ScriptedSource]:
    """Factory for entropy sources that replay a script.

    Returns:
        Callable building a ScriptedSource from a list of items
    """
    return ScriptedSource
