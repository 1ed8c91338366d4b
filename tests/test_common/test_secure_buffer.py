"""Tests for common.secure_buffer module."""

from __future__ import annotations

import io

import pytest

from common.secure_buffer import scrub, scrubbed_buffer, write_secret


def test_scrub_overwrites_in_place():
    """Test scrub zeroes the same bytearray object."""
    buffer = bytearray(b"hunter2")
    view = memoryview(buffer)

    scrub(buffer)

    assert buffer == bytearray(7)
    assert bytes(view) == b"\x00" * 7
    view.release()


def test_scrubbed_buffer_zeroed_after_block():
    """Test the buffer is scrubbed once the block completes."""
    with scrubbed_buffer(5) as buffer:
        assert buffer == bytearray(5)
        buffer[:] = b"abcde"

    assert buffer == bytearray(5)


def test_scrubbed_buffer_zeroed_after_error():
    """Test the buffer is scrubbed when the block raises."""
    with pytest.raises(RuntimeError):
        with scrubbed_buffer(3) as buffer:
            buffer[:] = b"xyz"
            raise RuntimeError("abort")

    assert buffer == bytearray(3)


def test_scrubbed_buffer_empty():
    """Test a zero-length buffer is supported."""
    with scrubbed_buffer(0) as buffer:
        assert len(buffer) == 0


def test_write_secret_binary_layer():
    """Test text streams with a binary buffer receive raw bytes."""
    raw = io.BytesIO()
    stream = io.TextIOWrapper(raw, encoding="ascii")

    write_secret(bytearray(b"s3cret"), stream)

    assert raw.getvalue() == b"s3cret\n"


def test_write_secret_plain_text_stream():
    """Test streams without a binary layer get decoded text."""
    stream = io.StringIO()

    write_secret(bytearray(b"s3cret"), stream)

    assert stream.getvalue() == "s3cret\n"
