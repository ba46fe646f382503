"""Tests for the command-line entry point."""

import json

import pytest

from ferry_sim.main import build_parser, config_from_args, main


def _json_from(output):
    """The JSON report is the last thing printed; logs may come before it."""
    lines = output.splitlines()
    start = lines.index("{")
    return json.loads("\n".join(lines[start:]))


class TestArgs:
    def test_flags_override_fleet(self, monkeypatch):
        monkeypatch.delenv("FERRY_SIM_CAPACITY", raising=False)
        args = build_parser().parse_args(["--cars", "5", "--trucks", "0", "--capacity", "24"])
        config = config_from_args(args)
        assert config.fleet == {"CAR": 5, "MINIBUS": 10, "TRUCK": 0}
        assert config.capacity == 24

    def test_environment_used_when_flag_missing(self, monkeypatch):
        monkeypatch.setenv("FERRY_SIM_FLEET_MINIBUS", "3")
        config = config_from_args(build_parser().parse_args([]))
        assert config.fleet["MINIBUS"] == 3


class TestMain:
    def test_invalid_config_exit_code(self, capsys):
        assert main(["--capacity", "0"]) == 2
        assert "capacity" in capsys.readouterr().err

    def test_unknown_start_side(self, capsys):
        assert main(["--start-side", "Side_C", "--time-scale", "0.001"]) == 2

    def test_json_report(self, capsys):
        code = main(["--json", "--time-scale", "0.001", "--seed", "3", "--duration", "100000",
                     "--cars", "4", "--minibuses", "2", "--trucks", "2",
                     "--start-side", "Side_A"])
        assert code == 0
        data = _json_from(capsys.readouterr().out)
        assert data["total_vehicles"] == 8
        assert data["transported"] == 8
        assert data["quota"]["total"] == 14
        assert len(data["vehicles"]) == 8
        assert all(v["origin"] == "Side_A" for v in data["vehicles"])

    def test_text_report(self, capsys):
        code = main(["--time-scale", "0.001", "--seed", "1", "--duration", "100000", "--cars", "3",
                     "--minibuses", "0", "--trucks", "0"])
        assert code == 0
        out = capsys.readouterr().out
        assert "FERRY SIMULATION REPORT" in out
        assert "Transported Vehicles:" in out
