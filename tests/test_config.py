import json
from pathlib import Path

import pytest

from gnss_stream.config import SimulationConfig, load_config
from gnss_stream.errors import ConfigurationError, CoordinateError
from gnss_stream.models import Waypoint


def test_simulation_config_defaults(two_point_route) -> None:
    cfg = SimulationConfig(route=two_point_route)

    assert cfg.stream_count == 1
    assert cfg.update_hz == 1.0
    assert cfg.jitter_lat_deg == 0.001
    assert cfg.jitter_lon_deg == 0.001
    assert cfg.jitter_alt_m == 0.01
    assert cfg.rng_seed is None
    assert cfg.tick_interval_ms == 1000.0


def test_simulation_config_coerces_route_and_integral_floats(two_point_route) -> None:
    cfg = SimulationConfig(route=list(two_point_route), stream_count=3.0, update_hz=4, duration_ms=2500.0)

    assert isinstance(cfg.route, tuple)
    assert cfg.stream_count == 3
    assert isinstance(cfg.stream_count, int)
    assert cfg.duration_ms == 2500
    assert cfg.tick_interval_ms == 250.0
    assert cfg.duration_s == 2.5


@pytest.mark.parametrize(
    "overrides",
    [
        {"stream_count": 0},
        {"stream_count": 1.5},
        {"stream_count": "2"},
        {"update_hz": 0.0},
        {"update_hz": "10"},
        {"update_hz": True},
        {"duration_ms": -5},
        {"duration_ms": float("nan")},
        {"jitter_alt_m": -0.01},
        {"jitter_lat_deg": None},
        {"rng_seed": 1.25},
    ],
)
def test_simulation_config_rejects_bad_values(two_point_route, overrides) -> None:
    with pytest.raises(ConfigurationError):
        SimulationConfig(route=two_point_route, **overrides)


def test_simulation_config_rejects_bad_routes() -> None:
    with pytest.raises(ConfigurationError):
        SimulationConfig(route=(Waypoint(0.0, 0.0, 0.0),))
    with pytest.raises(ConfigurationError):
        SimulationConfig(route=())
    with pytest.raises(ConfigurationError):
        SimulationConfig(route=42)


def test_from_mapping_accepts_original_key_names() -> None:
    cfg = SimulationConfig.from_mapping(
        {
            "points": [
                {"lat": 0.0, "lon": 0.0, "alt": 0.0},
                {"lat": 1.0, "lng": 1.0, "alt": 100.0},
            ],
            "numStreams": 2,
            "hz": 10,
            "durationMs": 1000,
            "jitterAlt": 0.0,
            "rngSeed": 9,
        }
    )

    assert cfg.stream_count == 2
    assert cfg.update_hz == 10.0
    assert cfg.duration_ms == 1000
    assert cfg.jitter_alt_m == 0.0
    assert cfg.rng_seed == 9
    assert cfg.route[1] == Waypoint(1.0, 1.0, 100.0)


def test_from_mapping_rejects_unknown_duplicate_and_missing_keys(two_point_route) -> None:
    route = [{"lat": 0.0, "lon": 0.0, "alt": 0.0}, {"lat": 1.0, "lon": 1.0, "alt": 0.0}]
    with pytest.raises(ConfigurationError, match="Unknown"):
        SimulationConfig.from_mapping({"route": route, "speed": 3})
    with pytest.raises(ConfigurationError, match="Duplicate"):
        SimulationConfig.from_mapping({"route": route, "hz": 1, "update_hz": 2})
    with pytest.raises(ConfigurationError, match="route"):
        SimulationConfig.from_mapping({"hz": 1})


def test_load_config_reads_json(tmp_path: Path) -> None:
    path = tmp_path / "scenario.json"
    path.write_text(
        json.dumps(
            {
                "route": [
                    {"latitude": 37.0, "longitude": 122.0, "lon_pole": "W", "altitude": 10.0},
                    {"latitude": 37.1, "longitude": 122.1, "lon_pole": "W", "altitude": 20.0},
                ],
                "stream_count": 4,
                "update_hz": 5,
                "duration_ms": 60000,
            }
        )
    )

    cfg = load_config(path)

    assert cfg.stream_count == 4
    assert cfg.route[0].lon_deg == -122.0


def test_load_config_reports_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_simulation_config_rejects_out_of_range_waypoints() -> None:
    with pytest.raises(CoordinateError):
        SimulationConfig(route=(Waypoint(95.0, 0.0, 0.0), Waypoint(0.0, 400.0, 0.0)))
    with pytest.raises(CoordinateError):
        SimulationConfig(route=({"lat": 0.0, "lon": 0.0, "alt": 0.0}, {"lat": 0.0, "lon": 181.0, "alt": 0.0}))
