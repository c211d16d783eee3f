"""Fixed-rate scheduler producing jittered telemetry on N output streams."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from enum import Enum
from typing import Callable

from gnss_stream.codec import create_codec
from gnss_stream.config import SimulationConfig
from gnss_stream.coords import to_earth_fixed
from gnss_stream.errors import SchedulerStateError
from gnss_stream.frames import build_frame, encode_frame
from gnss_stream.jitter import JitterGenerator, spawn_jitter_generators
from gnss_stream.models import GpsClock, MessageCodec, TelemetryFrame
from gnss_stream.route import Route
from gnss_stream.runtime.streams import OutputStream
from gnss_stream.timing.gps_time import to_gps_time

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class Scheduler:
    """Drive one telemetry run from start to end-of-data.

    ``start`` must be called from inside a running event loop. The run is a
    single task that sleeps on an explicit stop event until the next tick
    or the termination deadline, whichever comes first.
    """

    def __init__(
        self,
        config: SimulationConfig,
        codec: MessageCodec | str = "sbp",
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.codec = create_codec(codec) if isinstance(codec, str) else codec
        self.route = Route(config.route)
        self.state = SchedulerState.IDLE
        self.streams: list[OutputStream] = []
        self.tick_count = 0
        self.skipped_ticks = 0
        self.frames_written = 0
        self._clock = clock
        self._jitters: list[JitterGenerator] = spawn_jitter_generators(
            config.stream_count,
            config.jitter_lat_deg,
            config.jitter_lon_deg,
            config.jitter_alt_m,
            seed=config.rng_seed,
        )
        self._started_wall_s: float | None = None
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    def start(self) -> list[OutputStream]:
        """Create the output streams and arm the tick/termination task."""

        if self.state is not SchedulerState.IDLE:
            raise SchedulerStateError(f"cannot start a scheduler in state {self.state.value}")
        loop = asyncio.get_running_loop()
        self.streams = [OutputStream(index) for index in range(self.config.stream_count)]
        self._stop_event = asyncio.Event()
        self._started_wall_s = self._clock()
        self.state = SchedulerState.RUNNING
        self._task = loop.create_task(self._run(loop.time()))
        logger.info(
            "Started %d stream(s): %d waypoints, %.3g Hz, %d ms, codec=%s",
            self.config.stream_count,
            len(self.route),
            self.config.update_hz,
            self.config.duration_ms,
            self.codec.name,
        )
        return self.streams

    def stop(self) -> None:
        """Request early completion; streams close on the next wake-up."""

        if self._stop_event is not None:
            self._stop_event.set()

    async def wait_completed(self) -> None:
        if self._task is None:
            raise SchedulerStateError("scheduler was never started")
        await asyncio.shield(self._task)

    async def run(self) -> list[OutputStream]:
        """Start, wait for completion and return the (closed) streams."""

        streams = self.start()
        await self.wait_completed()
        return streams

    def frames_at(self, elapsed_ms: float, gps_clock: GpsClock) -> list[TelemetryFrame] | None:
        """Build one independently jittered frame per stream, or None past the route end."""

        segment = self.route.position_at(elapsed_ms, self.config.duration_ms)
        if segment is None:
            return None
        position = segment.interpolate()
        frames = []
        for jitter in self._jitters:
            jittered = jitter.apply(position)
            frames.append(build_frame(gps_clock, jittered, to_earth_fixed(jittered)))
        return frames

    def tick(self, now_s: float | None = None) -> int:
        """Write one frame to every stream; returns the number of frames written."""

        if self.state is not SchedulerState.RUNNING:
            raise SchedulerStateError(f"cannot tick a scheduler in state {self.state.value}")
        if self._started_wall_s is None:
            raise SchedulerStateError("scheduler has no start time")
        now_s = self._clock() if now_s is None else now_s
        self.tick_count += 1
        elapsed_ms = (now_s - self._started_wall_s) * 1000.0
        frames = self.frames_at(elapsed_ms, to_gps_time(now_s))
        if frames is None:
            self.skipped_ticks += 1
            logger.debug("Tick %d at %.1f ms is past the route end; skipped", self.tick_count, elapsed_ms)
            return 0
        for stream, frame in zip(self.streams, frames, strict=True):
            stream.write(encode_frame(self.codec, frame))
        self.frames_written += len(frames)
        return len(frames)

    async def _run(self, started: float) -> None:
        loop = asyncio.get_running_loop()
        period_s = 1.0 / self.config.update_hz
        finish_at = started + self.config.duration_s
        tick_index = 1
        try:
            while True:
                wake_at = min(started + tick_index * period_s, finish_at)
                if await self._wait_for_stop(wake_at - loop.time()):
                    logger.info("Stop requested after %d tick(s)", self.tick_count)
                    break
                now = loop.time()
                if now >= finish_at:
                    break
                self.tick()
                # Skip ticks that were missed while this one ran late.
                tick_index = max(tick_index + 1, math.floor((loop.time() - started) / period_s) + 1)
        finally:
            self._complete()

    async def _wait_for_stop(self, timeout_s: float) -> bool:
        if self._stop_event is None:
            raise SchedulerStateError("scheduler was never started")
        if self._stop_event.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(timeout_s, 0.0))
        except asyncio.TimeoutError:
            return False
        return True

    def _complete(self) -> None:
        if self.state is SchedulerState.COMPLETED:
            return
        self.state = SchedulerState.COMPLETED
        for stream in self.streams:
            stream.close()
        logger.info(
            "Completed: %d tick(s), %d skipped, %d frame(s) written",
            self.tick_count,
            self.skipped_ticks,
            self.frames_written,
        )
