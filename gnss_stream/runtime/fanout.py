"""Expose output streams on TCP (or minimal HTTP) listeners."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from functools import partial
from typing import Sequence

from gnss_stream.errors import ConfigurationError
from gnss_stream.runtime.streams import OutputStream

logger = logging.getLogger(__name__)

PROTOCOLS = ("tcp", "http")
HTTP_RESPONSE_HEAD = (
    b"HTTP/1.1 200 OK\r\n"
    b"Content-Type: application/octet-stream\r\n"
    b"Cache-Control: no-cache\r\n"
    b"Connection: close\r\n"
    b"\r\n"
)
_MAX_REQUEST_HEAD = 16 * 1024
_HANGUP_POLL_S = 0.25
_CONNECTION_ERRORS = (ConnectionResetError, BrokenPipeError, ConnectionAbortedError)


async def _wait_for_hangup(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    eof_is_hangup: bool,
) -> None:
    """Return once the peer is gone.

    Raw TCP peers may half-close their sending side and keep reading, so
    unless ``eof_is_hangup`` only the transport closing (after a failed
    write) counts as a hang-up.
    """
    try:
        while await reader.read(4096):
            pass
    except _CONNECTION_ERRORS:
        return
    if eof_is_hangup:
        return
    while not writer.is_closing():
        await asyncio.sleep(_HANGUP_POLL_S)


class FanoutAdapter:
    """One listener per ``(stream, port)`` pair, relaying stream bytes to clients."""

    def __init__(
        self,
        bindings: Sequence[tuple[OutputStream, int]],
        host: str = "127.0.0.1",
        protocol: str = "tcp",
    ) -> None:
        if protocol not in PROTOCOLS:
            raise ConfigurationError(f"protocol must be one of {PROTOCOLS}, got {protocol!r}")
        ports = [port for _, port in bindings]
        taken = [port for port in set(ports) if port != 0 and ports.count(port) > 1]
        if taken:
            raise ConfigurationError(f"ports bound more than once: {sorted(taken)}")
        self.bindings = list(bindings)
        self.host = host
        self.protocol = protocol
        self.connection_count = 0
        self._servers: list[asyncio.AbstractServer] = []
        self._watchers: list[asyncio.Task[None]] = []
        self._ports: list[int] = []

    @property
    def ports(self) -> list[int]:
        """Ports actually bound, in binding order; kept after listeners close."""
        return list(self._ports)

    async def start(self) -> None:
        """Open every listener, or none: a failed bind closes those already open."""

        try:
            for stream, port in self.bindings:
                server = await asyncio.start_server(partial(self._handle, stream), self.host, port)
                self._servers.append(server)
                bound = server.sockets[0].getsockname()[1]
                self._ports.append(bound)
                logger.info("Serving stream %d on %s://%s:%d", stream.index, self.protocol, self.host, bound)
                self._watchers.append(asyncio.create_task(self._close_when_done(stream, server, bound)))
        except Exception:
            await self.close()
            raise

    async def wait_closed(self) -> None:
        await asyncio.gather(*self._watchers)

    async def close(self) -> None:
        for server in self._servers:
            server.close()
        for watcher in self._watchers:
            watcher.cancel()
        await asyncio.gather(*self._watchers, return_exceptions=True)

    async def _close_when_done(self, stream: OutputStream, server: asyncio.AbstractServer, port: int) -> None:
        await stream.wait_closed()
        server.close()
        await server.wait_closed()
        logger.info("Stream %d ended; listener on port %d closed", stream.index, port)

    async def _handle(
        self,
        stream: OutputStream,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        peer = writer.get_extra_info("peername")
        self.connection_count += 1
        logger.debug("Client %s connected to stream %d", peer, stream.index)
        try:
            if self.protocol == "http":
                await self._read_request_head(reader)
                writer.write(HTTP_RESPONSE_HEAD)
                await writer.drain()
            await self._relay(stream, reader, writer)
        except _CONNECTION_ERRORS as exc:
            logger.warning("Client %s on stream %d dropped: %s", peer, stream.index, exc)
        except (asyncio.IncompleteReadError, asyncio.LimitOverrunError) as exc:
            logger.warning("Client %s on stream %d sent a bad request: %s", peer, stream.index, exc)
        finally:
            writer.close()
            with contextlib.suppress(*_CONNECTION_ERRORS):
                await writer.wait_closed()
            logger.debug("Client %s on stream %d disconnected", peer, stream.index)

    async def _read_request_head(self, reader: asyncio.StreamReader) -> bytes:
        head = await reader.readuntil(b"\r\n\r\n")
        if len(head) > _MAX_REQUEST_HEAD:
            raise asyncio.LimitOverrunError("request head too large", len(head))
        return head

    async def _relay(
        self,
        stream: OutputStream,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        subscription = stream.subscribe()
        hangup = asyncio.ensure_future(_wait_for_hangup(reader, writer, eof_is_hangup=self.protocol == "http"))
        pull: asyncio.Future[bytes] | None = None
        try:
            while True:
                pull = asyncio.ensure_future(subscription.read())
                done, _ = await asyncio.wait({pull, hangup}, return_when=asyncio.FIRST_COMPLETED)
                if pull not in done:
                    return
                chunk = pull.result()
                if not chunk:
                    return
                writer.write(chunk)
                await writer.drain()
        finally:
            if pull is not None and not pull.done():
                pull.cancel()
            hangup.cancel()
            subscription.close()
