"""Configuration objects for telemetry stream runs."""

from __future__ import annotations

import json
import math
import numbers
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from gnss_stream.errors import ConfigurationError
from gnss_stream.models import Waypoint
from gnss_stream.route import Route

DEFAULT_JITTER_LAT_DEG = 0.001
DEFAULT_JITTER_LON_DEG = 0.001
DEFAULT_JITTER_ALT_M = 0.01


def _real(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return value


def _integral(name: str, value: Any) -> int:
    number = _real(name, value)
    if not number.is_integer():
        raise ConfigurationError(f"{name} must be an integer value, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class SimulationConfig:
    """One telemetry run: route, stream fan-out, rate, duration and jitter."""

    route: tuple[Waypoint, ...]
    stream_count: int = 1
    update_hz: float = 1.0
    duration_ms: int = 10_000
    jitter_lat_deg: float = DEFAULT_JITTER_LAT_DEG
    jitter_lon_deg: float = DEFAULT_JITTER_LON_DEG
    jitter_alt_m: float = DEFAULT_JITTER_ALT_M
    rng_seed: int | None = None

    def __post_init__(self) -> None:
        route = self.route.waypoints if isinstance(self.route, Route) else self.route
        object.__setattr__(self, "route", Route(route).waypoints)

        stream_count = _integral("stream_count", self.stream_count)
        if stream_count < 1:
            raise ConfigurationError(f"stream_count must be >= 1, got {stream_count}")
        object.__setattr__(self, "stream_count", stream_count)

        update_hz = _real("update_hz", self.update_hz)
        if update_hz <= 0.0:
            raise ConfigurationError(f"update_hz must be > 0, got {update_hz}")
        object.__setattr__(self, "update_hz", update_hz)

        duration_ms = _integral("duration_ms", self.duration_ms)
        if duration_ms <= 0:
            raise ConfigurationError(f"duration_ms must be > 0, got {duration_ms}")
        object.__setattr__(self, "duration_ms", duration_ms)

        for name in ("jitter_lat_deg", "jitter_lon_deg", "jitter_alt_m"):
            magnitude = _real(name, getattr(self, name))
            if magnitude < 0.0:
                raise ConfigurationError(f"{name} must be >= 0, got {magnitude}")
            object.__setattr__(self, name, magnitude)

        if self.rng_seed is not None:
            object.__setattr__(self, "rng_seed", _integral("rng_seed", self.rng_seed))

    @property
    def tick_interval_ms(self) -> float:
        return 1000.0 / self.update_hz

    @property
    def duration_s(self) -> float:
        return self.duration_ms / 1000.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "SimulationConfig":
        """Build a config from snake_case or camelCase keys."""

        known = {field.name for field in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in raw.items():
            name = _ALIASES.get(key, _snake_case(key))
            if name not in known:
                raise ConfigurationError(f"Unknown SimulationConfig key '{key}'")
            if name in kwargs:
                raise ConfigurationError(f"Duplicate SimulationConfig key '{key}'")
            kwargs[name] = value
        if "route" not in kwargs:
            raise ConfigurationError("SimulationConfig requires a 'route'")
        return cls(**kwargs)


# Names used by the original command line and older scenario files.
_ALIASES = {
    "points": "route",
    "path": "route",
    "numStreams": "stream_count",
    "num_streams": "stream_count",
    "hz": "update_hz",
    "updateFrequencyHz": "update_hz",
    "durationMs": "duration_ms",
    "timeDuration": "duration_ms",
    "jitterLat": "jitter_lat_deg",
    "jitterLon": "jitter_lon_deg",
    "jitterAlt": "jitter_alt_m",
    "jitter_lat": "jitter_lat_deg",
    "jitter_lon": "jitter_lon_deg",
    "jitter_alt": "jitter_alt_m",
}


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def load_config(path: str | Path) -> SimulationConfig:
    """Load a JSON scenario file into a SimulationConfig."""

    target = Path(path)
    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Scenario {target} is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Scenario {target} must contain a JSON object")
    return SimulationConfig.from_mapping(raw)
