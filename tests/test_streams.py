import asyncio

import pytest

from gnss_stream.errors import StreamClosedError
from gnss_stream.runtime.streams import OutputStream


def test_write_then_read_preserves_order() -> None:
    async def scenario() -> bytes:
        stream = OutputStream(0)
        for chunk in (b"tick-1|", b"tick-2|", b"tick-3|"):
            stream.write(chunk)
        stream.close()
        return await stream.read_all()

    assert asyncio.run(scenario()) == b"tick-1|tick-2|tick-3|"


def test_reader_waits_for_data_and_sees_end_of_data() -> None:
    async def scenario() -> list[bytes]:
        stream = OutputStream(1)
        received: list[bytes] = []

        async def consume() -> None:
            while chunk := await stream.read():
                received.append(chunk)
            received.append(b"")

        consumer = asyncio.create_task(consume())
        await asyncio.sleep(0)
        stream.write(b"abc")
        await asyncio.sleep(0)
        stream.write(b"def")
        stream.close()
        await consumer
        return received

    received = asyncio.run(scenario())
    assert b"".join(received) == b"abcdef"
    assert received[-1] == b""


def test_partial_reads_leave_remaining_bytes() -> None:
    stream = OutputStream(0)
    stream.write(b"0123456789")

    assert stream.read_nowait(4) == b"0123"
    assert stream.pending == 6
    assert stream.read_nowait() == b"456789"
    assert stream.bytes_written == 10


def test_write_after_close_is_rejected_and_close_is_idempotent() -> None:
    stream = OutputStream(2)
    stream.close()
    stream.close()

    assert stream.closed
    with pytest.raises(StreamClosedError):
        stream.write(b"late")


def test_every_subscriber_receives_every_write() -> None:
    async def scenario() -> tuple[bytes, bytes]:
        stream = OutputStream(0)
        first = stream.subscribe()
        second = stream.subscribe()
        for index in range(5):
            stream.write(f"f{index};".encode())
        stream.close()
        return await first.read_all(), await second.read_all()

    first, second = asyncio.run(scenario())
    assert first == second == b"f0;f1;f2;f3;f4;"


def test_backlog_goes_to_first_subscriber_and_later_ones_start_at_attach() -> None:
    stream = OutputStream(0)
    stream.write(b"early;")
    first = stream.subscribe()
    stream.write(b"shared;")
    second = stream.subscribe()
    stream.write(b"late;")

    assert first.read_nowait() == b"early;shared;late;"
    assert second.read_nowait() == b"late;"
    assert stream.subscriber_count == 2


def test_closed_subscription_stops_receiving_and_reports_end() -> None:
    async def scenario() -> tuple[bytes, bytes]:
        stream = OutputStream(0)
        leaving = stream.subscribe()
        staying = stream.subscribe()
        stream.write(b"a;")
        leaving.close()
        stream.write(b"b;")
        stream.close()
        return await leaving.read_all(), await staying.read_all()

    leaving, staying = asyncio.run(scenario())
    assert leaving == b"a;"
    assert staying == b"a;b;"


def test_writes_without_subscribers_are_held_for_the_next_one() -> None:
    stream = OutputStream(0)
    gone = stream.subscribe()
    gone.close()
    stream.write(b"kept;")

    assert stream.pending == 6
    assert stream.subscribe().read_nowait() == b"kept;"
