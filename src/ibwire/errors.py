"""
Error taxonomy.

- ConnError: transport level (refused, version mismatch, closed)
- DecodeError: framing level, fatal to the current connection
- InterpretError: single message level, logged and skipped by the receive loop
- ClientError: request issuing level, raised to the caller of the request
"""

from __future__ import annotations


class IBWireError(Exception):
    """Base exception for ibwire errors."""


# =============================================================================
# Connection
# =============================================================================


class ConnError(IBWireError):
    """Transport-level failure."""


class ConnRefusedError(ConnError):
    """Gateway refused or dropped the connection during the handshake."""


class VersionMismatchError(ConnError):
    """Gateway answered with a protocol version outside the supported range."""

    def __init__(self, server_version: str, min_version: int, max_version: int) -> None:
        self.server_version = server_version
        self.min_version = min_version
        self.max_version = max_version
        super().__init__(
            f"Server version {server_version!r} outside supported range "
            f"{min_version}..{max_version}"
        )


class ConnClosedError(ConnError):
    """Transport is closed."""


# =============================================================================
# Framing
# =============================================================================


class DecodeError(IBWireError):
    """Byte stream could not be split into frames."""


class TruncatedError(DecodeError):
    """Transport closed in the middle of a frame."""

    def __init__(self, buffered: int) -> None:
        self.buffered = buffered
        super().__init__(f"Connection closed with {buffered} bytes of a partial frame buffered")


class FrameTooLargeError(DecodeError):
    """Declared frame length exceeds the protocol maximum."""

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Frame length {length} exceeds limit {limit}")


# =============================================================================
# Interpretation
# =============================================================================


class InterpretError(IBWireError):
    """A single message could not be turned into typed events."""


class UnknownTagError(InterpretError):
    """Message tag is not in the known set."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unknown message tag: {tag!r}")


class MalformedFieldError(InterpretError):
    """A required field is missing or fails to parse as its declared type."""

    def __init__(self, tag: int | str, index: int, value: str | None, expected: str) -> None:
        self.tag = tag
        self.index = index
        self.value = value
        self.expected = expected
        shown = "<missing>" if value is None else repr(value)
        super().__init__(f"Message {tag}: field {index} = {shown} is not a valid {expected}")


# =============================================================================
# Client
# =============================================================================


class ClientError(IBWireError):
    """A request could not be issued."""


class NotConnectedError(ClientError):
    """Request issued while the client is not connected; the request is dropped."""


class SendFailedError(ClientError):
    """Transport rejected the outbound message."""


class OrderIdUnavailableError(ClientError):
    """No next valid order id has been received from the gateway yet."""
