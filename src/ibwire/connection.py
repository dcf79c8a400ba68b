"""
Transport: TCP stream, handshake, framed send and receive.

Handshake:
1. Client sends the ``API\\0`` prefix and a framed version range ``v{min}..{max}``
2. Gateway answers with ``[server_version, connection_time]``
3. Client sends START_API with its client id and optional capabilities

Sends are safe from the event-loop thread and from other threads; writes from
other threads are marshalled onto the loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from collections.abc import Iterable
from typing import Any

from ibwire.errors import ConnClosedError, ConnRefusedError, DecodeError, VersionMismatchError
from ibwire.protocol.constants import API_PREFIX, MAX_CLIENT_VERSION, MIN_CLIENT_VERSION, OUT
from ibwire.protocol.framing import FrameDecoder, RawMessage, encode_message, frame


logger = logging.getLogger(__name__)

READ_CHUNK = 64 * 1024

START_API_VERSION = 2


class Connection:
    """
    One gateway connection.

    Example:
        conn = Connection(timeout=10.0)
        await conn.connect("127.0.0.1", 7497, client_id=1)
        conn.send([OUT.REQ_CURRENT_TIME, 1])
        fields = await conn.receive()
        conn.close()
    """

    def __init__(self, timeout: float = 30.0, connect_options: str = "") -> None:
        self.timeout = timeout
        self.connect_options = connect_options

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: int | None = None
        self._decoder = FrameDecoder()
        self._pending: deque[RawMessage] = deque()
        self._outbox: deque[bytes] = deque()
        self._outbox_lock = threading.Lock()
        self._open = False

        self._server_version: int | None = None
        self._connection_time: str | None = None

    # =========================================================================
    # Handshake
    # =========================================================================

    async def connect(
        self,
        host: str,
        port: int,
        client_id: int,
        optional_capabilities: str = "",
    ) -> None:
        """
        Open the stream and run the handshake.

        Raises:
            ConnRefusedError: Gateway unreachable, closed the socket, or timed out
            VersionMismatchError: Gateway version missing or outside the supported range
        """
        if self._open:
            raise ConnRefusedError("Connection already open")

        logger.info("Connecting to %s:%d (client_id=%d)", host, port, client_id)
        self._decoder.reset()
        self._pending.clear()
        try:
            async with asyncio.timeout(self.timeout):
                self._reader, self._writer = await asyncio.open_connection(host, port)
                self._loop = asyncio.get_running_loop()
                self._loop_thread = threading.get_ident()

                self._writer.write(API_PREFIX + frame(self._version_range().encode("ascii")))
                await self._writer.drain()

                fields = await self._read_handshake()
        except TimeoutError:
            self._abort()
            raise ConnRefusedError(
                f"Handshake with {host}:{port} timed out after {self.timeout}s"
            ) from None
        except OSError as e:
            self._abort()
            raise ConnRefusedError(f"Cannot connect to {host}:{port}: {e}") from e
        except DecodeError as e:
            self._abort()
            raise ConnRefusedError(f"Unreadable handshake reply from {host}:{port}: {e}") from e
        except BaseException:
            self._abort()
            raise

        self._server_version = self._check_version(fields)
        self._connection_time = fields[1] if len(fields) > 1 else ""
        self._open = True

        self.send([OUT.START_API, START_API_VERSION, client_id, optional_capabilities])
        logger.info(
            "Connected: server_version=%d connection_time=%s",
            self._server_version,
            self._connection_time,
        )

    def _version_range(self) -> str:
        text = f"v{MIN_CLIENT_VERSION}..{MAX_CLIENT_VERSION}"
        if self.connect_options:
            text += f" {self.connect_options}"
        return text

    async def _read_handshake(self) -> RawMessage:
        assert self._reader is not None
        while not self._pending:
            data = await self._reader.read(READ_CHUNK)
            if not data:
                raise ConnRefusedError("Gateway closed the connection during the handshake")
            self._pending.extend(self._decoder.feed(data))
        return self._pending.popleft()

    def _check_version(self, fields: RawMessage) -> int:
        raw = fields[0] if fields else ""
        try:
            version = int(raw)
        except ValueError:
            self._abort()
            raise VersionMismatchError(raw, MIN_CLIENT_VERSION, MAX_CLIENT_VERSION) from None
        if not MIN_CLIENT_VERSION <= version <= MAX_CLIENT_VERSION:
            self._abort()
            raise VersionMismatchError(raw, MIN_CLIENT_VERSION, MAX_CLIENT_VERSION)
        return version

    # =========================================================================
    # Send / receive
    # =========================================================================

    def send(self, fields: Iterable[Any]) -> None:
        """
        Encode and write one message.

        Raises:
            ConnClosedError: Transport is closed
        """
        self.send_bytes(encode_message(fields))

    def send_bytes(self, data: bytes) -> None:
        """
        Queue one encoded message and flush the queue on the loop.

        Every write goes through the same FIFO, so bytes reach the socket in
        the order send_bytes was called, whichever thread called it.
        """
        if not self._open or self._writer is None or self._loop is None:
            raise ConnClosedError("Connection is closed")
        with self._outbox_lock:
            self._outbox.append(data)
        if threading.get_ident() == self._loop_thread:
            self._flush()
        else:
            self._loop.call_soon_threadsafe(self._flush)

    def _flush(self) -> None:
        """Write everything queued so far. Loop thread only."""
        with self._outbox_lock:
            if not self._outbox:
                return
            data = b"".join(self._outbox)
            self._outbox.clear()
        if self._writer is None or self._writer.is_closing():
            logger.warning("Dropped %d bytes written after close", len(data))
            return
        self._writer.write(data)

    async def receive(self) -> RawMessage:
        """
        Wait for the next complete message.

        Raises:
            ConnClosedError: Peer closed the stream cleanly, or we closed it
            TruncatedError: Peer closed the stream in the middle of a frame
            FrameTooLargeError: Peer declared an oversized frame
        """
        while not self._pending:
            if not self._open or self._reader is None:
                raise ConnClosedError("Connection is closed")
            try:
                data = await self._reader.read(READ_CHUNK)
            except OSError as e:
                raise ConnClosedError(f"Read failed: {e}") from e
            if not data:
                if self._open:
                    self._decoder.eof()
                raise ConnClosedError("Connection closed by peer")
            self._pending.extend(self._decoder.feed(data))
        return self._pending.popleft()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the stream. Safe to call more than once."""
        was_open = self._open
        self._open = False
        self._pending.clear()
        self._abort()
        if was_open:
            logger.info("Connection closed")

    def _abort(self) -> None:
        writer, self._writer = self._writer, None
        self._reader = None
        if writer is None:
            return
        if self._loop is not None and threading.get_ident() != self._loop_thread:
            self._loop.call_soon_threadsafe(writer.close)
        else:
            writer.close()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def server_version(self) -> int | None:
        """Negotiated server version, once the handshake succeeded."""
        return self._server_version

    @property
    def connection_time(self) -> str | None:
        return self._connection_time
