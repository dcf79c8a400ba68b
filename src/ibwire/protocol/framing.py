"""
Frame encoding and incremental frame decoding.

A frame is a 4-byte big-endian length followed by a payload of fields, each
terminated by a NUL byte. The decoder is fed arbitrary chunks of the byte
stream and returns every complete frame it holds; a partial trailing frame is
kept until the rest arrives.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from typing import Any

from ibwire.errors import FrameTooLargeError, TruncatedError
from ibwire.protocol.constants import HEADER_LEN, MAX_MSG_LEN, UNSET_DOUBLE, UNSET_INTEGER


RawMessage = tuple[str, ...]

_HEADER = struct.Struct(">I")


# =============================================================================
# Encoding
# =============================================================================


def make_field(value: Any) -> str:
    """
    Render one outbound field.

    None and the unset sentinels become an empty field, booleans become 1/0.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value == UNSET_DOUBLE:
        return ""
    if isinstance(value, int) and value == UNSET_INTEGER:
        return ""
    return str(value)


def encode_fields(fields: Iterable[Any]) -> bytes:
    """Encode fields into a NUL-terminated payload (no length prefix)."""
    return "".join(make_field(f) + "\0" for f in fields).encode("utf-8")


def frame(payload: bytes) -> bytes:
    """Prefix a payload with its length."""
    if len(payload) > MAX_MSG_LEN:
        raise FrameTooLargeError(len(payload), MAX_MSG_LEN)
    return _HEADER.pack(len(payload)) + payload


def encode_message(fields: Iterable[Any]) -> bytes:
    """Encode a complete outbound frame."""
    return frame(encode_fields(fields))


def split_fields(payload: bytes) -> RawMessage:
    """Split a payload into decoded fields, dropping the terminator's empty tail."""
    parts = payload.split(b"\0")
    if parts and parts[-1] == b"":
        parts.pop()
    return tuple(p.decode("utf-8", errors="backslashreplace") for p in parts)


# =============================================================================
# Decoding
# =============================================================================


class FrameDecoder:
    """
    Incremental frame decoder.

    Example:
        decoder = FrameDecoder()
        for chunk in chunks:
            for fields in decoder.feed(chunk):
                handle(fields)
        decoder.eof()  # raises TruncatedError if a partial frame is left
    """

    def __init__(self, max_len: int = MAX_MSG_LEN) -> None:
        self._buffer = bytearray()
        self._max_len = max_len

    @property
    def buffered(self) -> int:
        """Number of bytes waiting for the rest of a frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[RawMessage]:
        """
        Append a chunk and return every complete frame now available.

        Raises:
            FrameTooLargeError: If a frame header declares an oversized payload
        """
        if data:
            self._buffer.extend(data)

        messages: list[RawMessage] = []
        buf = self._buffer
        offset = 0
        while len(buf) - offset >= HEADER_LEN:
            (size,) = _HEADER.unpack_from(buf, offset)
            if size > self._max_len:
                raise FrameTooLargeError(size, self._max_len)
            end = offset + HEADER_LEN + size
            if end > len(buf):
                break
            messages.append(split_fields(bytes(buf[offset + HEADER_LEN : end])))
            offset = end

        if offset:
            del buf[:offset]
        return messages

    def eof(self) -> None:
        """
        Signal end of stream.

        Raises:
            TruncatedError: If a partial frame is still buffered
        """
        if self._buffer:
            raise TruncatedError(len(self._buffer))

    def reset(self) -> None:
        """Discard buffered bytes."""
        self._buffer.clear()
