"""Unbiased random integers drawn from the operating system CSPRNG.

`random_index(limit)` maps 64-bit words of OS entropy onto ``[0, limit)``
without modulo bias. Words that fall in the tail of the word range, where some
residues would be represented once more than others, are rejected and drawn
again.

Reads from the entropy source retry on transient failures (interrupted calls,
a not-yet-ready pool, short reads). Any other ``OSError`` is surfaced as
`EntropySourceError`; a value is never invented when the source is down.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional, TypeVar

from common.exceptions import EntropySourceError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RandomByteSource = Callable[[int], bytes]

WORD_BYTES = 8
WORD_MAX = (1 << (8 * WORD_BYTES)) - 1

TRANSIENT_ERRORS = (InterruptedError, BlockingIOError)


def system_entropy(size: int) -> bytes:
    """Read `size` bytes from the OS random source (the one `secrets` uses)."""
    return os.urandom(size)


def retry_until_value(attempt: Callable[[], Optional[T]]) -> T:
    """Call `attempt` until it returns something other than None.

    Exceptions raised by `attempt` end the loop and propagate.
    """
    while True:
        result = attempt()
        if result is not None:
            return result


def rejection_threshold(limit: int) -> int:
    """Largest multiple of `limit` that does not exceed WORD_MAX."""
    return WORD_MAX // limit * limit


def _try_read_word(source: RandomByteSource) -> Optional[int]:
    try:
        chunk = source(WORD_BYTES)
    except TRANSIENT_ERRORS as ex:
        logger.debug(f"Transient entropy read failure ({ex}); retrying")
        return None
    except OSError as ex:
        raise EntropySourceError.from_os_error(ex) from ex

    if len(chunk) != WORD_BYTES:
        logger.debug(f"Short entropy read ({len(chunk)}/{WORD_BYTES} bytes); retrying")
        return None
    return int.from_bytes(chunk, "big")


def read_word(source: Optional[RandomByteSource] = None) -> int:
    """Return one full 64-bit word of entropy as an unsigned integer.

    Raises:
        EntropySourceError: If the source fails with a non-transient error
    """
    src = source if source is not None else system_entropy
    return retry_until_value(lambda: _try_read_word(src))


def _check_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise TypeError(f"limit must be an int, not {type(limit).__name__}")
    if limit < 1:
        raise ValidationError(f"limit must be >= 1 (got {limit})")
    if limit > WORD_MAX:
        raise ValidationError(f"limit must be <= {WORD_MAX} (got {limit})")


def random_index(limit: int, source: Optional[RandomByteSource] = None) -> int:
    """Return an integer uniformly distributed over ``[0, limit)``.

    Args:
        limit: Exclusive upper bound, 1 <= limit <= WORD_MAX
        source: Callable returning the requested number of random bytes
            (default: the OS CSPRNG)

    Returns:
        Uniform integer r with 0 <= r < limit

    Raises:
        TypeError: If limit is not an int
        ValidationError: If limit is out of range
        EntropySourceError: If the random source is unavailable
    """
    _check_limit(limit)
    threshold = rejection_threshold(limit)

    def draw() -> Optional[int]:
        word = read_word(source)
        if word >= threshold:
            logger.debug(f"Rejected draw in biased tail for limit={limit}")
            return None
        return word % limit

    return retry_until_value(draw)
