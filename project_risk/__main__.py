#!/usr/bin/env python
"""
Project Risk Engine - Command Line.

Usage:
    python -m project_risk portfolio snapshots.json [--preset conservative]
    python -m project_risk portfolio snapshots.json --thresholds thresholds.json --json
    python -m project_risk validate thresholds.json

``snapshots.json`` holds a list of snapshot records (snake_case
or camelCase keys). ``--now`` pins the reference time so a
batch run can be reproduced.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .clock import FixedClock, SystemClock
from .config import RiskEngineConfig, detect_preset, get_preset, validate_thresholds
from .engine import format_risk_summary
from .portfolio import PortfolioAggregator, PortfolioReport
from .schemas import parse_snapshots, parse_threshold_set
from .types import RiskScoreResult, ThresholdPreset


logger = logging.getLogger("project_risk")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="project_risk",
        description="Score construction projects and summarize portfolio risk",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    portfolio = sub.add_parser("portfolio", help="Score every project in a snapshot file")
    portfolio.add_argument("snapshots", type=Path, help="JSON list of project snapshots")
    source = portfolio.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        choices=[p.value for p in ThresholdPreset],
        help="Use a named threshold preset",
    )
    source.add_argument("--thresholds", type=Path, help="JSON threshold settings file")
    portfolio.add_argument("--now", help="Reference time (ISO 8601), defaults to current UTC")
    portfolio.add_argument("--workers", type=int, default=None, help="Thread pool size")
    portfolio.add_argument("--json", action="store_true", help="Emit the report as JSON")

    validate = sub.add_parser("validate", help="Check a threshold settings file")
    validate.add_argument("thresholds", type=Path, help="JSON threshold settings file")

    return parser


def _format_report(report: PortfolioReport) -> str:
    lines: List[str] = []
    for project in report.risk.project_risks:
        result = RiskScoreResult(
            score=project.risk_score,
            status=project.risk_status,
            label=project.risk_label,
            factors=project.factors,
        )
        title = f"{project.project_name or project.project_id}"
        lines.append(format_risk_summary(result, title=title))
        if project.projections.has_projection:
            lines.append(
                f"Projected cost: {project.projections.estimated_completion_cost:,} "
                f"(margin {project.projections.estimated_final_margin:.1f}%)"
            )
        lines.append("")

    lines.append(
        f"Alerts: {report.risk.critical_count} critical, "
        f"{report.risk.warning_count} warning, {report.risk.info_count} info"
    )
    for alert in report.risk.all_alerts:
        lines.append(
            f"  [{alert.type.value.upper():<8}] {alert.project_name or alert.project_id}: "
            f"{alert.title} - {alert.description} -> {alert.action_target.value}"
        )

    m = report.metrics
    h = report.health
    lines.extend([
        "",
        f"Portfolio value: {m.total_portfolio_value:,.0f} "
        f"(earned {m.total_earned:,.0f}, remaining {m.total_remaining:,.0f}, "
        f"{m.weighted_completion}% complete)",
        f"Health: {h.complete} complete, {h.on_track} on track, "
        f"{h.at_risk} at risk, {h.over_budget} over budget",
    ])
    return "\n".join(lines)


def _run_portfolio(args: argparse.Namespace) -> int:
    records = json.loads(args.snapshots.read_text(encoding="utf-8"))
    snapshots = parse_snapshots(records)

    config = RiskEngineConfig.from_env()
    if args.preset:
        config = RiskEngineConfig(thresholds=get_preset(args.preset), alerting=config.alerting)
    elif args.thresholds:
        thresholds = parse_threshold_set(json.loads(args.thresholds.read_text(encoding="utf-8")))
        validation = validate_thresholds(thresholds)
        if not validation.ok:
            logger.error(f"Invalid thresholds: {validation.message}")
            return 1
        config = RiskEngineConfig(thresholds=thresholds, alerting=config.alerting)

    clock = FixedClock(datetime.fromisoformat(args.now)) if args.now else SystemClock()
    report = PortfolioAggregator(config=config, clock=clock, max_workers=args.workers).analyze(snapshots)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(_format_report(report))
    return 0


def _run_validate(args: argparse.Namespace) -> int:
    thresholds = parse_threshold_set(json.loads(args.thresholds.read_text(encoding="utf-8")))
    validation = validate_thresholds(thresholds)
    if not validation.ok:
        print(f"INVALID: {validation.message}")
        return 1

    preset = detect_preset(thresholds)
    print(f"OK (preset: {preset.value if preset else 'custom'})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if args.command == "portfolio":
        return _run_portfolio(args)
    return _run_validate(args)


if __name__ == "__main__":
    sys.exit(main())
