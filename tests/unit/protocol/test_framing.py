"""Tests for frame encoding and incremental decoding."""

from __future__ import annotations

import struct

import pytest

from ibwire.errors import FrameTooLargeError, TruncatedError
from ibwire.protocol.constants import MAX_MSG_LEN, UNSET_DOUBLE, UNSET_INTEGER
from ibwire.protocol.framing import (
    FrameDecoder,
    encode_fields,
    encode_message,
    frame,
    make_field,
    split_fields,
)


class TestMakeField:
    """Tests for outbound field rendering."""

    def test_plain_values(self) -> None:
        assert make_field("AAPL") == "AAPL"
        assert make_field(42) == "42"
        assert make_field(1.5) == "1.5"

    def test_booleans(self) -> None:
        assert make_field(True) == "1"
        assert make_field(False) == "0"

    def test_unset_values_are_empty(self) -> None:
        """None and the reserved maxima encode as empty fields."""
        assert make_field(None) == ""
        assert make_field(UNSET_INTEGER) == ""
        assert make_field(UNSET_DOUBLE) == ""


class TestEncoding:
    """Tests for payload and frame encoding."""

    def test_encode_fields_terminates_each_field(self) -> None:
        assert encode_fields([49, 1]) == b"49\x001\x00"

    def test_empty_field_is_just_a_terminator(self) -> None:
        assert encode_fields(["a", "", "b"]) == b"a\x00\x00b\x00"

    def test_frame_prefix_is_big_endian_length(self) -> None:
        framed = frame(b"abc")
        assert framed[:4] == b"\x00\x00\x00\x03"
        assert framed[4:] == b"abc"

    def test_encode_message(self) -> None:
        data = encode_message([71, 2, 0, ""])
        payload = b"71\x002\x000\x00\x00"
        assert data == struct.pack(">I", len(payload)) + payload

    def test_oversized_payload_rejected(self) -> None:
        with pytest.raises(FrameTooLargeError):
            frame(b"x" * (MAX_MSG_LEN + 1))


class TestSplitFields:
    """Tests for payload splitting."""

    def test_split(self) -> None:
        assert split_fields(b"9\x001\x0042\x00") == ("9", "1", "42")

    def test_keeps_interior_empty_fields(self) -> None:
        assert split_fields(b"a\x00\x00b\x00") == ("a", "", "b")

    def test_invalid_utf8_does_not_raise(self) -> None:
        fields = split_fields(b"\xff\x00")
        assert len(fields) == 1


class TestFrameDecoder:
    """Tests for the incremental decoder."""

    def test_single_frame(self) -> None:
        decoder = FrameDecoder()
        assert decoder.feed(encode_message(["9", "1", "42"])) == [("9", "1", "42")]
        assert decoder.buffered == 0

    def test_several_frames_in_one_chunk(self) -> None:
        decoder = FrameDecoder()
        data = encode_message(["1"]) + encode_message(["2"]) + encode_message(["3"])
        assert decoder.feed(data) == [("1",), ("2",), ("3",)]

    def test_byte_at_a_time(self) -> None:
        """Chunk boundaries never change the decoded messages."""
        decoder = FrameDecoder()
        data = encode_message(["17", "42", "a", "b"]) + encode_message(["49", "1", "1700000000"])
        messages = []
        for i in range(len(data)):
            messages.extend(decoder.feed(data[i : i + 1]))
        assert messages == [("17", "42", "a", "b"), ("49", "1", "1700000000")]

    def test_partial_frame_is_buffered(self) -> None:
        decoder = FrameDecoder()
        data = encode_message(["4", "2", "-1", "2104", "ok"])
        assert decoder.feed(data[:6]) == []
        assert decoder.buffered == 6
        assert decoder.feed(data[6:]) == [("4", "2", "-1", "2104", "ok")]
        assert decoder.buffered == 0

    def test_empty_frame(self) -> None:
        decoder = FrameDecoder()
        assert decoder.feed(b"\x00\x00\x00\x00") == [()]

    def test_oversized_header_raises(self) -> None:
        decoder = FrameDecoder(max_len=16)
        with pytest.raises(FrameTooLargeError) as exc_info:
            decoder.feed(struct.pack(">I", 17))
        assert exc_info.value.length == 17
        assert exc_info.value.limit == 16

    def test_eof_with_partial_frame(self) -> None:
        decoder = FrameDecoder()
        decoder.feed(encode_message(["9", "1", "42"])[:5])
        with pytest.raises(TruncatedError) as exc_info:
            decoder.eof()
        assert exc_info.value.buffered == 5

    def test_eof_when_clean(self) -> None:
        decoder = FrameDecoder()
        decoder.feed(encode_message(["9", "1", "42"]))
        decoder.eof()

    def test_reset(self) -> None:
        decoder = FrameDecoder()
        decoder.feed(b"\x00\x00")
        decoder.reset()
        assert decoder.buffered == 0
