"""Tests for constants and run settings."""

import pytest

from ferry_sim.config.constants import (
    DEFAULT_FLEET,
    FERRY_CAPACITY,
    VEHICLE_QUOTAS,
    quota_for,
    total_quota,
)
from ferry_sim.config.settings import SimulationConfig
from ferry_sim.utils.clock import SimClock


class TestConstants:
    def test_quotas(self):
        assert VEHICLE_QUOTAS == {"CAR": 1, "MINIBUS": 2, "TRUCK": 3}

    def test_quota_for_case_insensitive(self):
        assert quota_for("minibus") == 2

    def test_quota_for_unknown(self):
        with pytest.raises(ValueError):
            quota_for("BOAT")

    def test_default_fleet_total_quota(self):
        assert sum(DEFAULT_FLEET.values()) == 30
        assert total_quota(DEFAULT_FLEET) == 56


class TestSimulationConfig:
    def test_defaults(self):
        config = SimulationConfig()
        assert config.capacity == FERRY_CAPACITY
        assert config.booths_per_side == 2
        assert config.container_limit == 30
        assert config.duration == 180
        assert config.total_vehicles == 30
        assert config.seed is None

    def test_fleet_keys_normalised(self):
        config = SimulationConfig(fleet={"car": 3, "Truck": 1})
        assert config.fleet == {"CAR": 3, "TRUCK": 1}
        assert config.total_vehicles == 4

    @pytest.mark.parametrize("overrides", [
        {"duration": 0},
        {"capacity": -1},
        {"booths_per_side": 0},
        {"container_limit": 0},
        {"max_records": -1},
        {"time_scale": 0},
        {"fleet": {}},
        {"fleet": {"CAR": -2}},
        {"fleet": {"BOAT": 1}},
        {"fleet": {"TRUCK": 1}, "capacity": 2},
        {"toll_time": (2.0, 1.0)},
        {"travel_time": (-1.0, 1.0)},
    ])
    def test_invalid_settings_rejected(self, overrides):
        with pytest.raises(ValueError):
            SimulationConfig(**overrides)

    def test_small_ferry_allowed_without_trucks(self):
        config = SimulationConfig(capacity=2, fleet={"CAR": 4, "MINIBUS": 2, "TRUCK": 0})
        assert config.capacity == 2

    def test_to_dict(self):
        data = SimulationConfig(seed=4).to_dict()
        assert data["seed"] == 4
        assert data["fleet"] == DEFAULT_FLEET


class TestFromEnv:
    def test_reads_prefixed_variables(self):
        env = {
            "FERRY_SIM_CAPACITY": "24",
            "FERRY_SIM_TIME_SCALE": "0.01",
            "FERRY_SIM_SEED": "9",
            "FERRY_SIM_FLEET_TRUCK": "4",
        }
        config = SimulationConfig.from_env(env)
        assert config.capacity == 24
        assert config.time_scale == 0.01
        assert config.seed == 9
        assert config.fleet["TRUCK"] == 4
        assert config.fleet["CAR"] == 12

    def test_empty_environment_gives_defaults(self):
        assert SimulationConfig.from_env({}) == SimulationConfig()

    def test_overrides_win(self):
        config = SimulationConfig.from_env({"FERRY_SIM_CAPACITY": "24"}, capacity=30, seed=None)
        assert config.capacity == 30
        assert config.seed is None

    def test_bad_value(self):
        with pytest.raises(ValueError, match="FERRY_SIM_CAPACITY"):
            SimulationConfig.from_env({"FERRY_SIM_CAPACITY": "big"})

    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown setting"):
            SimulationConfig.from_env({}, speed=3)


class TestSimClock:
    def test_rejects_non_positive_scale(self):
        with pytest.raises(ValueError):
            SimClock(0)

    def test_now_is_monotonic(self):
        clock = SimClock(0.001)
        first = clock.now()
        clock.sleep(2)
        assert clock.now() >= first + 1

    def test_wait_returns_when_event_set(self):
        import threading

        event = threading.Event()
        event.set()
        assert SimClock(1.0).wait(event, 100) is True
        assert SimClock(0.001).wait(threading.Event(), 1) is False
