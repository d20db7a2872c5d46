"""
Case Reasoning Engine CLI.

Commands:
    casereason analyse CASE.json     — Full analysis (summary or --json envelope)
    casereason pillars CASE.json     — Pillar map for the case's practice lens
    casereason strategies CASE.json  — Normalised strategies
    casereason routes CASE.json      — Fight-engine route plans
    casereason demo                  — Analyse the built-in sample case

Every command reads one case file and never writes anything. Date-based
checks are measured from --today, the case file's reference_date, or
the current date, in that order.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from datetime import date
from typing import Any, Optional

from ..config import get_settings
from ..errors import CaseReasoningError
from ..lenses.base import PillarStatus
from ..lenses.registry import build_default_registry
from ..log import configure_logging
from ..strategy.facts import RouteType
from ..strategy.routes import RoutePlan
from .pipeline import (
    SAMPLE_CASE,
    CaseAnalysis,
    CaseInput,
    analyse_case,
    build_envelope,
    load_case_file,
    parse_case,
    pillars_data,
    routes_data,
    strategies_data,
)


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_status_badge(status: PillarStatus) -> str:
    """Format pillar status as a visual badge."""
    badges = {
        PillarStatus.SAFE: "[SAFE]     ",
        PillarStatus.PREMATURE: "[PREMATURE]",
        PillarStatus.UNSAFE: "[UNSAFE]   ",
    }
    return badges.get(status, "[?]")


def format_pillars(analysis: CaseAnalysis) -> str:
    lens = analysis.lens
    lines = [f"Phase {lens.phase}: {lens.phase_label}", ""]
    for pillar_id, assessment in lens.pillars.items():
        label = analysis.pillar_labels.get(pillar_id, pillar_id)
        lines.append(f"{format_status_badge(assessment.status)} {label}")
        lines.append(f"    {assessment.reason}")

    if lens.safety_checks:
        lines.append("")
        lines.append("SAFETY CHECKS:")
        for flag in lens.safety_checks:
            lines.append(f"  • [{flag.severity}] {flag.message}")

    if lens.deadline_checks:
        lines.append("")
        lines.append("DEADLINES:")
        for name, check in lens.deadline_checks.items():
            days = "" if check.days_remaining is None else f" ({check.days_remaining} days)"
            lines.append(f"  • {name}: {check.status.value}{days} - {check.reason}")

    if lens.irreversible_decisions:
        lines.append("")
        lines.append("IRREVERSIBLE DECISIONS:")
        for decision in lens.irreversible_decisions:
            lines.append(f"  • {decision.label}: {decision.description}")

    return "\n".join(lines)


def format_strategies(analysis: CaseAnalysis) -> str:
    if not analysis.normalized_strategies:
        return "No strategies are generated for this practice area."

    lines = []
    for n, strategy in enumerate(analysis.normalized_strategies, start=1):
        marker = " (provisional)" if strategy.provisional else ""
        lines.append(f"{n}. [{strategy.label}] {strategy.title}{marker}")
        lines.append(f"   Why: {strategy.why}")
        if strategy.immediate_actions:
            lines.append(f"   First action: {strategy.immediate_actions[0]}")
        if strategy.next_docs_to_request:
            lines.append(f"   Request: {', '.join(strategy.next_docs_to_request[:3])}")
    return "\n".join(lines)


def format_route(plan: RoutePlan) -> str:
    viability = plan.viability
    lines = [
        plan.route.label,
        "-" * 50,
        f"Viability: {viability.status.value} (weight {viability.weight})",
    ]
    lines += [f"  • {reason}" for reason in viability.reasons]

    lines.append("")
    lines.append(f"ATTACK PATHS ({plan.hypothesis_count} hypothesis):")
    for path in plan.attack_paths:
        tag = " [hypothesis]" if path.is_hypothesis else ""
        lines.append(f"  • {path.id}: {path.target}{tag}")

    lines.append("")
    lines.append("KILL SWITCHES:")
    for switch in plan.kill_switches:
        lines.append(f"  • {switch.evidence_event}")

    if plan.evidence_impact:
        lines.append("")
        lines.append("EVIDENCE IMPACT:")
        for impact in plan.evidence_impact:
            lines.append(f"  • {impact.item}: {impact.impact.value} ({impact.urgency.value})")

    return "\n".join(lines)


def print_banner(analysis: CaseAnalysis) -> None:
    if analysis.banner is not None:
        print(f"WARNING: {analysis.banner.title}")
        print(f"  {analysis.banner.message}")
        print()


def print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


# =============================================================================
# CASE LOADING
# =============================================================================

def _reference_date(args: argparse.Namespace) -> Optional[date]:
    return getattr(args, "today", None)


def load_case(args: argparse.Namespace) -> CaseInput:
    case_input = load_case_file(args.case_file, _reference_date(args))
    if case_input.reference_date is None:
        case_input = replace(case_input, reference_date=date.today())
    return case_input


def run_analysis(case_input: CaseInput) -> CaseAnalysis:
    return analyse_case(case_input, build_default_registry(), get_settings())


# =============================================================================
# CLI COMMANDS
# =============================================================================

def print_summary(analysis: CaseAnalysis) -> None:
    graph = analysis.graph
    print("Case Reasoning Engine")
    print("=" * 50)
    print(f"Practice area: {analysis.practice_area.value}")
    if graph.case_meta.case_ref:
        print(f"Case: {graph.case_meta.case_ref}")
    if graph.case_meta.charge:
        print(f"Charge: {graph.case_meta.charge}")
    print()

    print_banner(analysis)

    print("READINESS:")
    print(f"  Can commit strategy: {'yes' if analysis.can_commit_strategy else 'no'}")
    for reason in graph.readiness.reasons:
        print(f"  • {reason}")
    print()

    print("EVIDENCE:")
    print(f"  Items:          {len(graph.evidence_items)}")
    print(f"  Gaps:           {len(graph.disclosure_gaps)}")
    print(f"  Contradictions: {len(graph.contradictions)}")
    print(f"  Disclosure complete: {'yes' if analysis.disclosure.is_complete else 'no'}")
    if analysis.checklist is not None:
        print(f"  Checklist: {analysis.checklist.status.value}")
        for line in analysis.checklist.rationale:
            print(f"    {line}")
    print()

    print("PILLARS:")
    print(format_pillars(analysis))
    print()

    print("STRATEGIES:")
    print(format_strategies(analysis))


def cmd_analyse(args: argparse.Namespace) -> int:
    """Run the full analysis for a case file."""
    analysis = run_analysis(load_case(args))
    if args.json:
        print_json(build_envelope(analysis))
        return 0
    print_summary(analysis)
    return 0


def cmd_pillars(args: argparse.Namespace) -> int:
    """Show the pillar map."""
    analysis = run_analysis(load_case(args))
    if args.json:
        print_json(build_envelope(analysis, pillars_data(analysis)))
        return 0

    print(f"Case Reasoning Engine — Pillars ({analysis.practice_area.value})")
    print("=" * 50)
    print()
    print_banner(analysis)
    print(format_pillars(analysis))
    return 0


def cmd_strategies(args: argparse.Namespace) -> int:
    """Show normalised strategies."""
    analysis = run_analysis(load_case(args))
    if args.json:
        print_json(build_envelope(analysis, strategies_data(analysis)))
        return 0

    print("Case Reasoning Engine — Strategies")
    print("=" * 50)
    print()
    print_banner(analysis)
    if not analysis.can_commit_strategy:
        print("Strategies are provisional:")
        for reason in analysis.graph.readiness.reasons:
            print(f"  • {reason}")
        print()
    print(format_strategies(analysis))
    return 0


def cmd_routes(args: argparse.Namespace) -> int:
    """Show route plans from the fight engine."""
    analysis = run_analysis(load_case(args))
    route = RouteType(args.route) if args.route else None

    if args.json:
        print_json(build_envelope(analysis, routes_data(analysis, route)))
        return 0

    if not analysis.route_plans:
        print("Route plans are only produced for criminal cases.")
        return 0

    print("Case Reasoning Engine — Routes")
    print("=" * 50)
    print()
    plans = analysis.route_plans
    selected = [plans[route]] if route is not None else list(plans.values())
    for plan in selected:
        print(format_route(plan))
        print()
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    """Analyse the built-in sample case."""
    case_input = parse_case(SAMPLE_CASE, "sample", _reference_date(args) or date.today())
    analysis = run_analysis(case_input)
    if args.json:
        print_json(build_envelope(analysis))
        return 0
    print_summary(analysis)
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value!r}")


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="casereason",
        description="Case Reasoning Engine — deterministic case readiness and strategy analysis",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Console log level (defaults to CASEREASON_LOG_LEVEL or WARNING)",
    )

    # Options shared by every case command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--json",
        action="store_true",
        help="Print the response envelope as JSON",
    )
    common.add_argument(
        "--today",
        type=_iso_date,
        default=None,
        help="Reference date for deadline checks (YYYY-MM-DD)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Analyse command
    analyse_parser = subparsers.add_parser(
        "analyse",
        parents=[common],
        help="Run the full analysis for a case file",
    )
    analyse_parser.add_argument("case_file", help="Path to a JSON case file")
    analyse_parser.set_defaults(func=cmd_analyse)

    # Pillars command
    pillars_parser = subparsers.add_parser(
        "pillars",
        parents=[common],
        help="Show the pillar map",
    )
    pillars_parser.add_argument("case_file", help="Path to a JSON case file")
    pillars_parser.set_defaults(func=cmd_pillars)

    # Strategies command
    strategies_parser = subparsers.add_parser(
        "strategies",
        parents=[common],
        help="Show normalised strategies",
    )
    strategies_parser.add_argument("case_file", help="Path to a JSON case file")
    strategies_parser.set_defaults(func=cmd_strategies)

    # Routes command
    routes_parser = subparsers.add_parser(
        "routes",
        parents=[common],
        help="Show route plans",
    )
    routes_parser.add_argument("case_file", help="Path to a JSON case file")
    routes_parser.add_argument(
        "--route",
        choices=[route.value for route in RouteType],
        default=None,
        help="Show a single route",
    )
    routes_parser.set_defaults(func=cmd_routes)

    # Demo command
    demo_parser = subparsers.add_parser(
        "demo",
        parents=[common],
        help="Analyse the built-in sample case",
    )
    demo_parser.set_defaults(func=cmd_demo)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level or get_settings().log_level)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except CaseReasoningError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
