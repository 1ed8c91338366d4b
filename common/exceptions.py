"""Shared exception classes for passgen."""

from __future__ import annotations

from typing import Optional


class PassgenError(Exception):
    """Base exception for all passgen errors."""

    pass


class ValidationError(PassgenError, ValueError):
    """Input validation error."""

    pass


class EmptyAlphabetError(ValidationError):
    """No character class is enabled, so there is nothing to sample from."""

    pass


class EntropySourceError(PassgenError):
    """The operating system random source failed with a non-retryable error."""

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        strerror: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.errno = errno
        self.strerror = strerror

    @classmethod
    def from_os_error(cls, exc: OSError) -> "EntropySourceError":
        reason = exc.strerror or str(exc) or type(exc).__name__
        return cls(f"Failed to get random: {reason}", exc.errno, exc.strerror)
