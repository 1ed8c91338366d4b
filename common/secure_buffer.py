"""Mutable buffers for secrets that are zeroed before release."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import IO, Iterator

logger = logging.getLogger(__name__)


def scrub(buffer: bytearray) -> None:
    """Overwrite every byte of `buffer` with zero, in place."""
    buffer[:] = bytes(len(buffer))


@contextmanager
def scrubbed_buffer(size: int) -> Iterator[bytearray]:
    """Yield a zeroed bytearray of `size` bytes and scrub it on exit.

    The buffer is overwritten whether the block completes or raises.
    """
    buffer = bytearray(size)
    try:
        yield buffer
    finally:
        scrub(buffer)
        logger.debug(f"Scrubbed {size}-byte secret buffer")


def write_secret(buffer: bytearray, stream: IO[str]) -> None:
    """Write `buffer` and a newline to `stream`.

    Text streams that expose their binary layer get the raw bytes, so no
    immutable ``str`` copy of the secret is created. Other streams receive
    decoded ASCII text.
    """
    stream.flush()
    raw = getattr(stream, "buffer", None)
    if raw is None:
        stream.write(buffer.decode("ascii") + "\n")
        stream.flush()
        return
    raw.write(buffer)
    raw.write(b"\n")
    raw.flush()
