"""In-memory byte streams fed by the scheduler and read by subscribers."""

from __future__ import annotations

import asyncio

from gnss_stream.errors import StreamClosedError

DEFAULT_READ_SIZE = 64 * 1024


class StreamSubscription:
    """One reader's private queue of an ``OutputStream``'s bytes.

    Every chunk written while the subscription is attached is delivered to
    it, whatever other subscribers exist. ``read`` returns ``b""`` once the
    stream has ended (or the subscription was closed) and the queue is empty.
    """

    def __init__(self, stream: OutputStream, backlog: bytes = b"") -> None:
        self.stream = stream
        self._buffer = bytearray(backlog)
        self._attached = True
        self._data_ready = asyncio.Event()
        if self._buffer:
            self._data_ready.set()

    def __repr__(self) -> str:
        return f"StreamSubscription(stream={self.stream.index}, pending={len(self._buffer)})"

    @property
    def pending(self) -> int:
        return len(self._buffer)

    @property
    def attached(self) -> bool:
        return self._attached

    def _feed(self, data: bytes) -> None:
        self._buffer.extend(data)
        self._data_ready.set()

    def _wake(self) -> None:
        self._data_ready.set()

    def _detach(self) -> None:
        self._attached = False
        self._wake()

    def _ended(self) -> bool:
        return self.stream.closed or not self._attached

    def read_nowait(self, max_bytes: int = -1) -> bytes:
        if max_bytes < 0 or max_bytes >= len(self._buffer):
            chunk = bytes(self._buffer)
            self._buffer.clear()
        else:
            chunk = bytes(self._buffer[:max_bytes])
            del self._buffer[:max_bytes]
        if not self._buffer and not self._ended():
            self._data_ready.clear()
        return chunk

    async def read(self, max_bytes: int = DEFAULT_READ_SIZE) -> bytes:
        """Wait for data and return up to ``max_bytes`` of it."""

        while not self._buffer and not self._ended():
            self._data_ready.clear()
            await self._data_ready.wait()
        return self.read_nowait(max_bytes)

    async def read_all(self) -> bytes:
        """Collect everything until end-of-data."""

        chunks = []
        while True:
            chunk = await self.read()
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def close(self) -> None:
        """Stop receiving; bytes still queued stay readable."""
        self.stream.unsubscribe(self)


class OutputStream:
    """Unbounded byte stream with one writer and any number of subscribers.

    Each write is copied to every attached subscription. Bytes written while
    nobody is subscribed are held and handed to the next subscriber, so a
    reader that attaches late still sees everything not yet delivered.

    ``read``/``read_all``/``read_nowait`` go through a default subscription
    created on first use, for callers that are the stream's only consumer.
    """

    def __init__(self, index: int) -> None:
        self.index = index
        self.bytes_written = 0
        self._backlog = bytearray()
        self._subscribers: list[StreamSubscription] = []
        self._default: StreamSubscription | None = None
        self._closed = False
        self._closed_event = asyncio.Event()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return (
            f"OutputStream(index={self.index}, {state}, "
            f"subscribers={len(self._subscribers)}, pending={self.pending})"
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def pending(self) -> int:
        """Undelivered bytes plus the deepest subscriber queue."""
        deepest = max((sub.pending for sub in self._subscribers), default=0)
        return len(self._backlog) + deepest

    def write(self, data: bytes) -> None:
        if self._closed:
            raise StreamClosedError(f"stream {self.index} has ended")
        if not data:
            return
        self.bytes_written += len(data)
        if not self._subscribers:
            self._backlog.extend(data)
            return
        for subscription in self._subscribers:
            subscription._feed(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscribers:
            subscription._wake()
        self._closed_event.set()

    def subscribe(self) -> StreamSubscription:
        """Attach a new reader; it receives any held backlog first."""

        subscription = StreamSubscription(self, bytes(self._backlog))
        self._backlog.clear()
        self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: StreamSubscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
        subscription._detach()

    def _reader(self) -> StreamSubscription:
        if self._default is None:
            self._default = self.subscribe()
        return self._default

    def read_nowait(self, max_bytes: int = -1) -> bytes:
        return self._reader().read_nowait(max_bytes)

    async def read(self, max_bytes: int = DEFAULT_READ_SIZE) -> bytes:
        return await self._reader().read(max_bytes)

    async def read_all(self) -> bytes:
        return await self._reader().read_all()

    async def wait_closed(self) -> None:
        await self._closed_event.wait()
