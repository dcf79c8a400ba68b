"""
In-process fake gateway for client integration tests.

Speaks the server side of the handshake, records every framed message the
client sends and lets tests push scripted messages back.
"""

from __future__ import annotations

import asyncio
import struct
from collections.abc import Callable
from typing import Any

import pytest

from ibwire.protocol.constants import API_PREFIX, HEADER_LEN
from ibwire.protocol.framing import RawMessage, encode_message, split_fields


class FakeGateway:
    """
    Single-connection gateway stub.

    Example:
        async with FakeGateway(server_version=151) as gw:
            await client.connect("127.0.0.1", gw.port)
            await gw.send("9", "1", "100")
            assert await gw.expect("49") == ("49", "1")
    """

    def __init__(self, server_version: int | str = 151, connection_time: str = "20240101 12:00:00 EST") -> None:
        self.server_version = server_version
        self.connection_time = connection_time
        self.port = 0
        self.version_text: str | None = None
        self.received: asyncio.Queue[RawMessage] = asyncio.Queue()
        self.connected = asyncio.Event()

        self._server: asyncio.Server | None = None
        self._writer: asyncio.StreamWriter | None = None

    async def __aenter__(self) -> FakeGateway:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(self, *args: object) -> None:
        self.drop()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def _read_frame(self, reader: asyncio.StreamReader) -> bytes:
        header = await reader.readexactly(HEADER_LEN)
        (size,) = struct.unpack(">I", header)
        return await reader.readexactly(size)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writer = writer
        try:
            prefix = await reader.readexactly(len(API_PREFIX))
            assert prefix == API_PREFIX
            self.version_text = (await self._read_frame(reader)).decode("ascii")
            writer.write(encode_message([self.server_version, self.connection_time]))
            await writer.drain()
            self.connected.set()
            while True:
                await self.received.put(split_fields(await self._read_frame(reader)))
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    async def send(self, *fields: Any) -> None:
        """Push one framed message to the client."""
        assert self._writer is not None
        self._writer.write(encode_message(fields))
        await self._writer.drain()

    async def send_raw(self, data: bytes) -> None:
        assert self._writer is not None
        self._writer.write(data)
        await self._writer.drain()

    async def expect(self, tag: str, timeout: float = 2.0) -> RawMessage:
        """Wait for the next client message with the given tag, skipping others."""
        async with asyncio.timeout(timeout):
            while True:
                message = await self.received.get()
                if message and message[0] == tag:
                    return message

    def drop(self) -> None:
        """Close the client's socket from the gateway side."""
        if self._writer is not None:
            self._writer.close()


async def until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll until predicate holds."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


@pytest.fixture
def gateway_factory() -> type[FakeGateway]:
    return FakeGateway


@pytest.fixture
def wait_for() -> Callable[..., Any]:
    return until
