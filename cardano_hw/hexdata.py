"""Helpers for measuring and slicing hex-encoded payloads."""

from __future__ import annotations

from typing import Iterator


class HexLengthError(ValueError):
    """Raised when a hex string cannot describe a whole number of bytes."""


def hex_byte_length(data: str) -> int:
    """Return the number of bytes encoded by the hex string *data*.

    The characters themselves are not checked; callers are expected to pass
    well-formed hex.
    """

    if len(data) % 2:
        raise HexLengthError(f"hex string has odd length {len(data)}")
    return len(data) // 2


def iter_hex_chunks(data: str, chunk_size: int) -> Iterator[str]:
    """Yield consecutive slices of *data* that are at most ``chunk_size`` long."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    offset = 0
    while offset < len(data):
        chunk = data[offset : offset + chunk_size]
        yield chunk
        offset += len(chunk)
