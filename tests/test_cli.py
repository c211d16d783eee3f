from __future__ import annotations

import argparse
import asyncio
import json
import threading
from pathlib import Path

import pytest

from gnss_stream.runtime import OutputStream
from sim.cli import _capture, build_parser, config_from_args, main, parse_duration, parse_ports


@pytest.mark.parametrize(
    "raw, expected_ms",
    [
        ("1500", 1500),
        ("500ms", 500),
        ("10s", 10_000),
        ("2m", 120_000),
        ("1h30m", 5_400_000),
        ("1.5s", 1500),
    ],
)
def test_parse_duration(raw: str, expected_ms: int) -> None:
    assert parse_duration(raw) == expected_ms


@pytest.mark.parametrize("raw", ["", "ten", "5 fortnights", "10s!"])
def test_parse_duration_rejects_garbage(raw: str) -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        parse_duration(raw)


def test_parse_ports() -> None:
    assert parse_ports("8000,8001") == [8000, 8001]
    with pytest.raises(argparse.ArgumentTypeError):
        parse_ports("80,http")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_ports("70000")


def test_config_from_args_uses_path_and_flags() -> None:
    args = build_parser().parse_args(
        ["--path", "37.42N,122.16W,30;37.43N,122.15W,45", "-n", "3", "-z", "5", "-d", "30s"]
    )
    cfg = config_from_args(args)

    assert cfg.stream_count == 3
    assert cfg.update_hz == 5.0
    assert cfg.duration_ms == 30_000
    assert cfg.route[0].lon_deg == pytest.approx(-122.16)


def test_config_file_values_are_overridden_by_flags(tmp_path: Path) -> None:
    scenario = tmp_path / "scenario.json"
    scenario.write_text(
        json.dumps(
            {
                "route": [{"lat": 0, "lon": 0, "alt": 0}, {"lat": 1, "lon": 1, "alt": 1}],
                "numStreams": 2,
                "hz": 2,
                "durationMs": 4000,
            }
        )
    )
    args = build_parser().parse_args(["--config", str(scenario), "-z", "8"])
    cfg = config_from_args(args)

    assert cfg.stream_count == 2
    assert cfg.update_hz == 8.0
    assert cfg.duration_ms == 4000


def test_main_captures_streams_to_files(tmp_path: Path) -> None:
    out_dir = tmp_path / "capture"
    main(
        [
            "--path",
            "0N,0E,0;1N,1E,100",
            "-n",
            "2",
            "-z",
            "20",
            "-d",
            "300ms",
            "--codec",
            "nmea",
            "--rng-seed",
            "1",
            "--out-dir",
            str(out_dir),
            "--log-level",
            "WARNING",
        ]
    )

    for index in range(2):
        text = (out_dir / f"stream_{index}.nmea").read_text(encoding="ascii")
        assert "$GNZDA" in text
        assert "$GNGGA" in text


def test_main_reports_configuration_errors() -> None:
    with pytest.raises(SystemExit, match="at least 2 waypoints"):
        main(["--path", "0N,0E,0", "-d", "1s", "--log-level", "ERROR"])
    with pytest.raises(SystemExit, match="--path or --config"):
        main(["-d", "1s", "--log-level", "ERROR"])


def test_capture_writes_through_executor_without_blocking_the_loop(tmp_path: Path) -> None:
    target = tmp_path / "stream_0.bin"
    loop_threads: set[int] = set()
    write_threads: set[int] = set()

    class _RecordingHandle:
        def __init__(self, handle) -> None:
            self._handle = handle

        def write(self, data: bytes) -> int:
            write_threads.add(threading.get_ident())
            return self._handle.write(data)

        def __enter__(self) -> _RecordingHandle:
            return self

        def __exit__(self, *exc_info) -> None:
            self._handle.close()

    class _RecordingPath:
        def open(self, mode: str) -> _RecordingHandle:
            return _RecordingHandle(target.open(mode))

    async def scenario() -> None:
        loop_threads.add(threading.get_ident())
        stream = OutputStream(0)
        capture = asyncio.create_task(_capture(stream, _RecordingPath()))
        await asyncio.sleep(0)
        for index in range(3):
            stream.write(f"chunk-{index};".encode())
            await asyncio.sleep(0.01)
        stream.close()
        await asyncio.wait_for(capture, timeout=5.0)

    asyncio.run(scenario())
    assert target.read_bytes() == b"chunk-0;chunk-1;chunk-2;"
    assert write_threads
    assert not write_threads & loop_threads
