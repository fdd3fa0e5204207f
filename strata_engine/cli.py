"""
Command-line interface for the Strata engine.

Usage:
    python -m strata_engine.cli [--log-level LEVEL] command [options]

Commands:
    run         Run a simulation and print summary statistics.
    scenarios   List the scenarios in a config file.
    check       Validate reservation settings against the quota rules.
    validate    Run the invariant validation suite (exit 0 on pass).
    info        Print default parameters and the baseline table.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from .analysis.metrics import society_summary, summary_statistics
from .analysis.validation import run_all_checks
from .core.baseline import get_initial_conditions
from .core.parameters import EngineParams
from .core.policy import EwsSettings, ReservationSettings
from .scenario_loader import (
    build_initial_snapshot,
    build_params,
    build_settings,
    get_scenario_by_name,
    list_scenarios,
    load_scenario_config,
)
from .simulation.runner import SimulationRunner
from .systems.quota import validate_settings

logger = logging.getLogger("strata_engine.cli")


def _parse_reservations(pairs: List[str]) -> Dict[str, float]:
    """Parse KEY=PCT pairs into a reservation mapping."""
    reservations: Dict[str, float] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(
                f"reservation must look like KEY=PCT, got {pair!r}"
            )
        try:
            reservations[key] = float(value)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"reservation percentage for {key!r} is not a number: {value!r}"
            ) from None
    return reservations


def _add_settings_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--reservation", action="append", default=[], metavar="KEY=PCT",
        help="Reservation percentage for one class (repeatable)"
    )
    p.add_argument(
        "--cap", type=float, default=None, metavar="PCT",
        help="Total reservation cap (default: none)"
    )
    p.add_argument(
        "--ews", type=float, default=None, metavar="PCT",
        help="EWS percentage"
    )
    p.add_argument(
        "--all-eligible", action="store_true",
        help="Make every class EWS-eligible"
    )


def _settings_from_args(
    args: argparse.Namespace,
    base: Optional[ReservationSettings] = None,
) -> ReservationSettings:
    """Start from base (scenario) settings and apply explicit flags on top."""
    settings = base or ReservationSettings.none()
    reservations = dict(settings.class_reservations)
    reservations.update(_parse_reservations(args.reservation))
    cap = args.cap if args.cap is not None else settings.total_reservation_cap
    ews = EwsSettings(
        percentage=(
            args.ews if args.ews is not None else settings.ews_settings.percentage
        ),
        all_classes_eligible=(
            args.all_eligible or settings.ews_settings.all_classes_eligible
        ),
    )
    return ReservationSettings(
        class_reservations=reservations,
        total_reservation_cap=cap,
        ews_settings=ews,
    )


def _build_subparsers(parser: argparse.ArgumentParser) -> None:
    """Register all sub-commands on the root parser."""
    sub = parser.add_subparsers(dest="command", required=True)

    # ------------------------------------------------------------------ run --
    run_p = sub.add_parser("run", help="Run a simulation")
    run_p.add_argument(
        "--scenario", default=None, metavar="NAME",
        help="Scenario to start from (flags below override its settings)"
    )
    run_p.add_argument(
        "--config", default=None, metavar="PATH",
        help="Scenario YAML file (default: bundled scenarios)"
    )
    run_p.add_argument(
        "--ticks", type=int, default=None, metavar="N",
        help="Number of ticks (default: scenario ticks, else 20)"
    )
    _add_settings_arguments(run_p)
    run_p.add_argument(
        "--per-class", action="store_true",
        help="Also print the final per-class metrics"
    )
    run_p.add_argument(
        "--json", action="store_true",
        help="Output summary statistics as JSON"
    )
    run_p.add_argument(
        "--output", default=None, metavar="PATH",
        help="Write the full trajectory as JSON to this path"
    )

    # ------------------------------------------------------------ scenarios --
    sc_p = sub.add_parser("scenarios", help="List available scenarios")
    sc_p.add_argument("--config", default=None, metavar="PATH")

    # ---------------------------------------------------------------- check --
    check_p = sub.add_parser("check", help="Validate reservation settings")
    _add_settings_arguments(check_p)

    # -------------------------------------------------------------- validate --
    sub.add_parser("validate", help="Run the invariant validation suite")

    # ---------------------------------------------------------------- info --
    sub.add_parser("info", help="Print default parameters and baseline")


def _cmd_run(args: argparse.Namespace) -> int:
    """Execute the run sub-command."""
    if args.scenario is not None:
        config = load_scenario_config(args.config)
        scenario = get_scenario_by_name(config, args.scenario)
        params = build_params(scenario)
        initial = build_initial_snapshot(scenario)
        settings = _settings_from_args(args, build_settings(scenario))
        ticks = args.ticks if args.ticks is not None else int(scenario.get("ticks", 20))
    else:
        params = EngineParams()
        initial = get_initial_conditions()
        settings = _settings_from_args(args)
        ticks = args.ticks if args.ticks is not None else 20

    if ticks < 0:
        print(f"error: --ticks must be >= 0, got {ticks}", file=sys.stderr)
        return 2

    report = validate_settings(settings, initial.keys())
    for message in report.messages:
        logger.warning(message)

    runner = SimulationRunner(params=params)
    trajectory = runner.run(initial=initial, settings=settings, n_ticks=ticks)
    stats = summary_statistics(trajectory, params)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(
                {
                    "settings": settings.to_dict(),
                    "trajectory": [s.to_dict() for s in trajectory],
                },
                f,
                indent=2,
            )
        logger.info(f"trajectory written to {args.output}")

    if args.json:
        print(json.dumps(stats, indent=2))
    else:
        print(f"Simulation completed: {stats['n_ticks']} ticks")
        print(f"  GDP per capita:     {stats['initial_gdp_per_capita']:.0f} -> "
              f"{stats['final_gdp_per_capita']:.0f}")
        print(f"  Poverty rate:       {stats['initial_poverty_rate']:.2f}% -> "
              f"{stats['final_poverty_rate']:.2f}%")
        print(f"  Tertiary education: {stats['initial_tertiary_education']:.2f}% -> "
              f"{stats['final_tertiary_education']:.2f}%")
        print(f"  Job access:         {stats['initial_job_access']:.2f}% -> "
              f"{stats['final_job_access']:.2f}%")
        print(f"  Life expectancy:    {stats['initial_life_expectancy']:.2f} -> "
              f"{stats['final_life_expectancy']:.2f}")
        print(f"  Crime level:        {stats['final_crime_level']}")
        print(f"  Trust in govt:      {stats['final_trust_in_government']:.2f}")

    if args.per_class:
        final = trajectory[-1]
        summary = society_summary(final, ticks, params)
        print(f"Final snapshot (tick {summary.tick}):")
        for key, m in final.items():
            print(
                f"  {key}: pop {m.population:.4f}  tertiary {m.education.tertiary:.2f}%"
                f"  jobs {m.job_access:.2f}%  poverty {m.poverty_rate:.2f}%"
                f"  gdp {m.gdp_per_capita:.0f}"
            )
    return 0


def _cmd_scenarios(args: argparse.Namespace) -> int:
    """Execute the scenarios sub-command."""
    config = load_scenario_config(args.config)
    for name, description in list_scenarios(config):
        print(f"{name:<24} {description}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Execute the check sub-command; exit status 1 when settings are invalid."""
    settings = _settings_from_args(args)
    report = validate_settings(settings, get_initial_conditions().keys())
    print(f"Total reservation:       {report.total_reservation:g}%")
    print(f"Effective cap:           {report.effective_cap:g}%")
    print(f"Remaining general quota: {report.remaining_general_quota:g}%")
    if report.is_valid:
        print("Settings are valid.")
        return 0
    for message in report.messages:
        print(f"  - {message}")
    return 1


def _cmd_validate(_args: argparse.Namespace) -> int:
    """Execute the validate sub-command; exit status 1 on the first failed check."""
    try:
        names = run_all_checks()
    except AssertionError as exc:
        print(f"Validation failed: {exc}", file=sys.stderr)
        return 1
    print(f"All {len(names)} validation checks passed.")
    return 0


def _cmd_info(_args: argparse.Namespace) -> int:
    """Execute the info sub-command."""
    params = EngineParams()
    print("Strata multi-class policy simulation engine")
    print("Default EngineParams:")
    for name, value in params.to_dict().items():
        print(f"  {name}: {value}")
    print("Baseline classes (highest tier first):")
    for key, m in get_initial_conditions().items():
        print(
            f"  {key}: pop {m.population:.2f}  gdp {m.gdp_per_capita:.0f}"
            f"  poverty {m.poverty_rate:g}%  tertiary {m.education.tertiary:g}%"
        )
    return 0


_COMMANDS = {
    "run": _cmd_run,
    "scenarios": _cmd_scenarios,
    "check": _cmd_check,
    "validate": _cmd_validate,
    "info": _cmd_info,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="strata-engine",
        description="Multi-class social policy simulation engine",
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    _build_subparsers(parser)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        return _COMMANDS[args.command](args)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
