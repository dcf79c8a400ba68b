"""
Wire protocol primitives: constants, framing and typed field reading.
"""

from ibwire.protocol.constants import (
    IN,
    MAX_CLIENT_VERSION,
    MAX_MSG_LEN,
    MIN_CLIENT_VERSION,
    OUT,
    UNSET_DOUBLE,
    UNSET_INTEGER,
    ServerVersion,
    TickType,
)
from ibwire.protocol.fields import FieldReader
from ibwire.protocol.framing import (
    FrameDecoder,
    RawMessage,
    encode_fields,
    encode_message,
    frame,
    make_field,
    split_fields,
)


__all__ = [
    "IN",
    "MAX_CLIENT_VERSION",
    "MAX_MSG_LEN",
    "MIN_CLIENT_VERSION",
    "OUT",
    "UNSET_DOUBLE",
    "UNSET_INTEGER",
    "FieldReader",
    "FrameDecoder",
    "RawMessage",
    "ServerVersion",
    "TickType",
    "encode_fields",
    "encode_message",
    "frame",
    "make_field",
    "split_fields",
]
