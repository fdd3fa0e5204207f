"""
test_cli.py — command-line entry point.
"""

import json

import pytest

from strata_engine.analysis import validation
from strata_engine.cli import main


def test_info(capsys):
    assert main(["info"]) == 0
    out = capsys.readouterr().out
    assert "poverty_line_gdp" in out
    assert "class5" in out


def test_scenarios(capsys):
    assert main(["scenarios"]) == 0
    out = capsys.readouterr().out
    assert "long_horizon" in out
    assert "creamy_layer" in out


def test_run_json(capsys):
    assert main(["run", "--ticks", "3", "--reservation", "class5=5", "--json"]) == 0
    stats = json.loads(capsys.readouterr().out)
    assert stats["n_ticks"] == 3
    assert stats["final_gdp_per_capita"] > stats["initial_gdp_per_capita"]


def test_run_scenario_text(capsys):
    assert main(["run", "--scenario", "targeted_reservation", "--per-class"]) == 0
    out = capsys.readouterr().out
    assert "Simulation completed: 1 ticks" in out
    assert "class5:" in out


def test_run_writes_trajectory(tmp_path, capsys):
    target = tmp_path / "run.json"
    assert main(["run", "--ticks", "2", "--cap", "50", "--output", str(target)]) == 0
    data = json.loads(target.read_text())
    assert len(data["trajectory"]) == 3
    assert data["settings"]["totalReservationCap"] == 50.0


def test_run_unknown_scenario(capsys):
    assert main(["run", "--scenario", "utopia"]) == 1
    assert "not found" in capsys.readouterr().err


def test_run_negative_ticks(capsys):
    assert main(["run", "--ticks", "-1"]) == 2


def test_run_bad_reservation():
    with pytest.raises(SystemExit) as exc:
        main(["run", "--reservation", "class5"])
    assert exc.value.code == 2


def test_check(capsys):
    assert main(["check", "--reservation", "class4=20", "--cap", "50", "--ews", "10"]) == 0
    assert "Settings are valid." in capsys.readouterr().out
    assert main(["check", "--reservation", "class4=40", "--reservation", "class5=35",
                 "--cap", "50"]) == 1
    assert "exceed the cap" in capsys.readouterr().out


def test_validate(capsys):
    assert main(["validate"]) == 0
    assert "All 8 validation checks passed." in capsys.readouterr().out


def test_validate_reports_failed_check(monkeypatch, capsys):
    def broken():
        assert False, "population drifted"

    monkeypatch.setattr(validation, "CHECKS", [("9. Broken check", broken)])
    assert main(["validate"]) == 1
    err = capsys.readouterr().err
    assert "Validation failed: 9. Broken check" in err
    assert "population drifted" in err
