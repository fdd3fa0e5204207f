"""
test_session.py — simulation session, runner and snapshot logger.
"""

import logging

import pytest

from conftest import make_settings
from strata_engine.analysis.logging import SnapshotLogger
from strata_engine.core.integrator import calculate_next_time_step, multi_step
from strata_engine.core.state import Snapshot
from strata_engine.simulation.runner import SimulationRunner
from strata_engine.simulation.session import SimulationSession


# --------------------------------------------------------------------------- #
# SimulationSession                                                            #
# --------------------------------------------------------------------------- #


def test_advance_uses_engine(baseline, mock_settings):
    session = SimulationSession.from_baseline(mock_settings)
    first = session.advance()
    assert session.tick == 1
    assert first == calculate_next_time_step(baseline, mock_settings, 0)
    second = session.advance()
    assert second == calculate_next_time_step(first, mock_settings, 1)
    assert session.snapshot is second


def test_uninitialised_session():
    session = SimulationSession()
    with pytest.raises(RuntimeError, match="not initialised"):
        session.advance()
    with pytest.raises(RuntimeError):
        session.snapshot
    with pytest.raises(RuntimeError):
        session.reset()


def test_initialise_and_reset(baseline, mock_settings):
    session = SimulationSession(settings=mock_settings)
    session.initialise(baseline)
    session.advance_many(3)
    assert session.tick == 3
    session.reset()
    assert session.tick == 0
    assert session.snapshot is baseline


def test_advance_many(baseline, mock_settings):
    session = SimulationSession(settings=mock_settings, snapshot=baseline)
    final = session.advance_many(5)
    assert final == multi_step(baseline, mock_settings, 5)
    assert session.advance_many(0) is final
    with pytest.raises(ValueError):
        session.advance_many(-2)


def test_hooks_receive_before_and_after(baseline, no_policy):
    calls = []
    session = SimulationSession(
        settings=no_policy,
        snapshot=baseline,
        pre_step_hooks=[lambda b, a: calls.append(("pre", b, a))],
    )
    session.register_post_hook(lambda b, a: calls.append(("post", b, a)))
    after = session.advance()
    assert calls[0] == ("pre", baseline, baseline)
    assert calls[1][0] == "post"
    assert calls[1][1] is baseline
    assert calls[1][2] is after


def test_update_settings_applies_next_tick(baseline, mock_settings, no_policy):
    session = SimulationSession(settings=no_policy, snapshot=baseline)
    first = session.advance()
    report = session.update_settings(mock_settings)
    assert report.is_valid
    assert session.settings is mock_settings
    assert session.advance() == calculate_next_time_step(first, mock_settings, 1)


def test_invalid_settings_are_logged_not_rejected(baseline, caplog):
    session = SimulationSession(snapshot=baseline)
    bad = make_settings({"class4": 40, "class5": 35}, 50, 10)
    with caplog.at_level(logging.WARNING, logger="strata_engine.session"):
        report = session.update_settings(bad)
    assert not report.is_valid
    assert "invalid reservation settings" in caplog.text
    assert session.settings is bad
    session.advance()
    assert session.tick == 1


def test_summary_tracks_tick(mock_settings):
    session = SimulationSession.from_baseline(mock_settings)
    session.advance_many(4)
    summary = session.summary()
    assert summary.tick == 4
    assert summary.population_total == pytest.approx(1.0)


def test_sessions_are_independent(mock_settings, no_policy):
    a = SimulationSession.from_baseline(mock_settings)
    b = SimulationSession.from_baseline(no_policy)
    a.advance_many(3)
    b.advance()
    assert a.tick == 3
    assert b.tick == 1
    assert a.snapshot != b.snapshot


# --------------------------------------------------------------------------- #
# SimulationRunner                                                             #
# --------------------------------------------------------------------------- #


def test_runner_trajectory(baseline, mock_settings):
    trajectory = SimulationRunner().run(settings=mock_settings, n_ticks=6)
    assert len(trajectory) == 7
    assert trajectory[0] == baseline
    assert trajectory[-1] == multi_step(baseline, mock_settings, 6)


def test_runner_defaults(baseline):
    runner = SimulationRunner(default_ticks=3)
    assert len(runner.run()) == 4
    assert runner.run(n_ticks=0) == [baseline]
    with pytest.raises(ValueError):
        runner.run(n_ticks=-1)
    with pytest.raises(ValueError):
        SimulationRunner(default_ticks=-1)


def test_runner_settings_schedule(baseline, mock_settings, no_policy):
    trajectory = SimulationRunner().run(
        settings=no_policy, n_ticks=8, settings_schedule={5: mock_settings}
    )
    midway = multi_step(baseline, no_policy, 5)
    assert trajectory[5] == midway
    assert trajectory[-1] == multi_step(midway, mock_settings, 3, start_tick=5)


def test_run_headless_matches_run(mock_settings):
    runner = SimulationRunner()
    assert runner.run_headless(settings=mock_settings, n_ticks=5) == runner.run(
        settings=mock_settings, n_ticks=5
    )[-1]


# --------------------------------------------------------------------------- #
# SnapshotLogger                                                               #
# --------------------------------------------------------------------------- #


def test_logger_as_post_hook(mock_settings):
    log = SnapshotLogger()
    session = SimulationSession.from_baseline(mock_settings)
    session.register_post_hook(lambda before, after: log.record(after, session.tick + 1))
    session.advance_many(3)
    assert len(log) == 3
    assert log.ticks() == [1, 2, 3]
    assert log.records()[-1] is session.snapshot


def test_logger_default_ticks_and_eviction(baseline):
    log = SnapshotLogger(max_records=2)
    for _ in range(3):
        log.record(baseline)
    assert len(log) == 2
    assert log.ticks() == [1, 2]
    log.clear()
    assert len(log) == 0
    with pytest.raises(ValueError):
        SnapshotLogger(max_records=0)


def test_logger_to_dicts(baseline):
    log = SnapshotLogger()
    log.record(baseline, tick=7)
    (entry,) = log.to_dicts()
    assert entry["tick"] == 7
    assert Snapshot.from_dict(entry["classes"]) == baseline


def test_logger_series(baseline, mock_settings):
    log = SnapshotLogger()
    log.record(baseline)
    log.record(calculate_next_time_step(baseline, mock_settings, 0))
    aggregates = log.aggregate_series()
    assert len(aggregates) == 9
    assert aggregates["trust_in_government"] == pytest.approx([0.38, 0.385])
    assert aggregates["gdp_per_capita"][0] == pytest.approx(39250.0)

    series = log.class_series("class5")
    assert len(series) == 12
    assert series["gdp_per_capita"][0] == 5000.0
    assert series["tertiary"][1] > series["tertiary"][0]
    with pytest.raises(KeyError):
        log.class_series("class9")
    assert SnapshotLogger().class_series("class5")["population"] == []
