"""Command-line entrypoint for synthetic telemetry streams.

Example:
    gnss-stream --path "37.42N,122.16W,30;37.43N,122.15W,45" -n 2 -z 10 -d 60s -p 8000,8001
"""

from __future__ import annotations

import argparse
import asyncio
import re
from pathlib import Path

from gnss_stream import __version__
from gnss_stream.codec import CODECS, create_codec
from gnss_stream.config import SimulationConfig, load_config
from gnss_stream.coords import parse_route
from gnss_stream.errors import ConfigurationError, GnssStreamError
from gnss_stream.models import MessageCodec
from gnss_stream.runtime import FanoutAdapter, OutputStream, Scheduler
from gnss_stream.runtime.fanout import PROTOCOLS
from gnss_stream.utils.logging import get_logger

_DURATION_UNITS_MS = {
    "ms": 1.0,
    "s": 1000.0,
    "sec": 1000.0,
    "m": 60_000.0,
    "min": 60_000.0,
    "h": 3_600_000.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)\s*([a-z]*)")


def parse_duration(raw: str) -> int:
    """Parse ``1h30m``, ``10s``, ``500ms`` or a bare millisecond count."""

    text = raw.strip().lower()
    if not text:
        raise argparse.ArgumentTypeError("duration cannot be empty")
    total_ms = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position or not match.group(0):
            break
        value, unit = match.groups()
        unit = unit or "ms"
        if unit not in _DURATION_UNITS_MS:
            raise argparse.ArgumentTypeError(f"unknown duration unit {unit!r} in {raw!r}")
        total_ms += float(value) * _DURATION_UNITS_MS[unit]
        position = match.end()
        while position < len(text) and text[position] == " ":
            position += 1
    if position != len(text):
        raise argparse.ArgumentTypeError(f"cannot parse duration {raw!r}")
    return int(round(total_ms))


def parse_ports(raw: str) -> list[int]:
    try:
        ports = [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"ports must be integers: {raw!r}") from exc
    for port in ports:
        if not 0 <= port <= 65535:
            raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return ports


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gnss-stream", description="Synthetic GNSS telemetry streams")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-s",
        "--path",
        type=str,
        default=None,
        help="Waypoints to interpolate, semicolon-separated lat,lon,alt (e.g. 37.42N,122.16W,30;...)",
    )
    parser.add_argument("--config", type=str, default=None, help="JSON scenario file (overrides defaults)")
    parser.add_argument("-n", "--num-streams", type=int, default=None, help="Number of output streams")
    parser.add_argument("-z", "--hz", type=float, default=None, help="Update rate in hertz")
    parser.add_argument(
        "-d",
        "--duration",
        type=parse_duration,
        default=None,
        help="Run duration, e.g. 500ms, 10s, 2m (bare numbers are milliseconds)",
    )
    parser.add_argument("-p", "--ports", type=parse_ports, default=[], help="Comma-separated listener ports")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Listener bind address")
    parser.add_argument("--protocol", choices=PROTOCOLS, default="http", help="Listener protocol")
    parser.add_argument("--codec", choices=sorted(CODECS), default="sbp", help="Wire format")
    parser.add_argument(
        "--out-dir",
        type=str,
        default=None,
        help="Capture every stream without a port to stream_<i>.<ext> in this folder",
    )
    parser.add_argument("--rng-seed", type=int, default=None, help="Seed for reproducible jitter")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Console log level",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    overrides = {
        "stream_count": args.num_streams,
        "update_hz": args.hz,
        "duration_ms": args.duration,
        "rng_seed": args.rng_seed,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}

    if args.config:
        base = load_config(args.config)
        route = parse_route(args.path) if args.path else base.route
        values = {
            "route": route,
            "stream_count": base.stream_count,
            "update_hz": base.update_hz,
            "duration_ms": base.duration_ms,
            "jitter_lat_deg": base.jitter_lat_deg,
            "jitter_lon_deg": base.jitter_lon_deg,
            "jitter_alt_m": base.jitter_alt_m,
            "rng_seed": base.rng_seed,
        }
        values.update(overrides)
        return SimulationConfig(**values)

    if not args.path:
        raise ConfigurationError("Provide --path or --config")
    return SimulationConfig(route=parse_route(args.path), **overrides)


async def _capture(stream: OutputStream, path: Path) -> None:
    # Blocking file writes stay off the event loop.
    loop = asyncio.get_running_loop()
    subscription = stream.subscribe()
    with path.open("wb") as handle:
        while chunk := await subscription.read():
            await loop.run_in_executor(None, handle.write, chunk)


async def _discard(stream: OutputStream) -> None:
    subscription = stream.subscribe()
    while await subscription.read():
        pass


async def run_streams(
    cfg: SimulationConfig,
    *,
    codec: MessageCodec,
    ports: list[int],
    host: str = "127.0.0.1",
    protocol: str = "http",
    out_dir: Path | None = None,
) -> Scheduler:
    """Run one scheduler, serving the first streams on ``ports``."""

    if len(ports) > cfg.stream_count:
        raise ConfigurationError(f"{len(ports)} port(s) given for only {cfg.stream_count} stream(s)")

    scheduler = Scheduler(cfg, codec)
    fanout: FanoutAdapter | None = None
    consumers: list[asyncio.Task[None]] = []
    try:
        streams = scheduler.start()
        fanout = FanoutAdapter(list(zip(streams, ports)), host=host, protocol=protocol)
        await fanout.start()

        if out_dir is not None:
            out_dir.mkdir(parents=True, exist_ok=True)
        for stream in streams[len(ports) :]:
            if out_dir is not None:
                target = out_dir / f"stream_{stream.index}.{codec.file_extension}"
                consumers.append(asyncio.create_task(_capture(stream, target)))
            else:
                consumers.append(asyncio.create_task(_discard(stream)))

        await scheduler.wait_completed()
        await asyncio.gather(*consumers)
        await fanout.wait_closed()
    finally:
        scheduler.stop()
        for consumer in consumers:
            consumer.cancel()
        if fanout is not None:
            await fanout.close()
    return scheduler


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    get_logger("gnss_stream", args.log_level)

    try:
        cfg = config_from_args(args)
        codec = create_codec(args.codec)
        asyncio.run(
            run_streams(
                cfg,
                codec=codec,
                ports=args.ports,
                host=args.host,
                protocol=args.protocol,
                out_dir=Path(args.out_dir) if args.out_dir else None,
            )
        )
    except (GnssStreamError, OSError) as exc:
        raise SystemExit(f"gnss-stream: {exc}") from exc
    except KeyboardInterrupt:
        raise SystemExit(130) from None


if __name__ == "__main__":
    main()
