"""Command-line interface for teamflow."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from teamflow.analyser import TeamRequirementsAnalyser
from teamflow.errors import TeamFlowError
from teamflow.logging import get_logger, set_global_log_level
from teamflow.model import has_skills
from teamflow.scenario import Scenario
from teamflow.team_network import TeamNetwork

logger = get_logger(__name__)

# Failures reported as "invalid scenario" rather than crashes
_SCENARIO_ERRORS = (TeamFlowError, jsonschema.ValidationError, yaml.YAMLError)


def _format_table(headers: List[str], rows: List[List[str]], min_width: int = 8) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    all_data = [headers] + rows
    col_widths = [
        max(max(len(str(row[i])) for row in all_data), min_width)
        for i in range(len(headers))
    ]

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    lines.extend(format_row(row) for row in rows)
    return "\n".join(lines)


def _format_skills(skills: Any) -> str:
    return ", ".join(sorted(skills)) or "(none)"


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    return f"{seconds:.2f} s"


def _emit(result: Dict[str, Any], results_path: Optional[Path], stdout: bool) -> None:
    json_str = json.dumps(result, indent=2)
    if results_path is not None:
        results_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Writing results to: {results_path}")
        results_path.write_text(json_str)
        print(f"✅ Results written to: {results_path}")
    if stdout:
        print(json_str)


def _match(scenario: Scenario) -> Dict[str, Any]:
    """Staff the team with a maximum flow, starting from the current assignments.

    Seeded assignments may be rerouted when that lets more roles be filled.
    """
    team_network = TeamNetwork.new_team_network(
        has_skills, scenario.applicants.values(), scenario.requirements
    )
    if scenario.assignments:
        team_network.set_flows(scenario.team_roles_assignment())
    stats = team_network.preflow_push()
    logger.info(
        f"Max flow {stats.flow_value} after {stats.pushes} pushes "
        f"and {stats.relabels} relabels"
    )

    role_assignments = team_network.get_role_assignments()
    assignments = {
        applicant.name: sorted(skills)
        for applicant, skills in sorted(
            role_assignments.items(), key=lambda item: item[0].name
        )
    }
    unassigned = sorted(
        name
        for name, applicant in scenario.applicants.items()
        if applicant not in role_assignments
    )
    return {
        "flow": stats.flow_value,
        "assignments": assignments,
        "unassigned": unassigned,
    }


def _demand(scenario: Scenario) -> Dict[str, Any]:
    """Roles in demand for the scenario's team, or for a max-flow staffing."""
    if scenario.assignments:
        role_assignments = scenario.assignment_map()
    else:
        logger.info("No assignments given; staffing the team with a maximum flow first")
        team_network = TeamNetwork.new_team_network(
            has_skills, scenario.applicants.values(), scenario.requirements
        )
        team_network.preflow_push()
        role_assignments = team_network.get_role_assignments()

    roles = TeamRequirementsAnalyser().get_roles_in_demand(
        scenario.requirements, role_assignments, has_skills
    )
    return {"roles_in_demand": sorted(sorted(skills) for skills in roles)}


def _run(
    command: str, path: Path, results_path: Optional[Path], stdout: bool
) -> None:
    """Load a scenario, run ``command`` on it and report the outcome.

    Exits with status 1 when the scenario cannot be read or is inconsistent.
    """
    logger.info(f"Loading scenario from: {path}")
    start = perf_counter()
    try:
        scenario = Scenario.from_path(path)
        if command == "match":
            result = _match(scenario)
            rows = [
                [name, _format_skills(skills)]
                for name, skills in result["assignments"].items()
            ]
            rows += [[name, "(unassigned)"] for name in result["unassigned"]]
            print(_format_table(["Applicant", "Role skills"], rows))
            print(f"Total flow: {result['flow']}")
        else:
            result = _demand(scenario)
            print("Roles in demand:")
            for skills in result["roles_in_demand"]:
                print(f"  - {_format_skills(skills)}")
    except FileNotFoundError:
        logger.error(f"Scenario file not found: {path}")
        print(f"❌ ERROR: Scenario file not found: {path}")
        sys.exit(1)
    except _SCENARIO_ERRORS as e:
        logger.error(f"Failed to run scenario: {type(e).__name__}: {e}")
        print(f"❌ ERROR: Failed to run scenario: {type(e).__name__}: {e}")
        sys.exit(1)

    _emit(result, results_path, stdout)
    logger.info(f"{command} completed in {_format_duration(perf_counter() - start)}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``teamflow`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="teamflow",
        description="Staff team roles with maximum flow and find roles in demand.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{match,demand}",
        help="Available commands",
    )
    match_parser = subparsers.add_parser(
        "match", help="Assign applicants to roles with a maximum flow"
    )
    demand_parser = subparsers.add_parser(
        "demand", help="List the roles that are still in demand"
    )
    for p in (match_parser, demand_parser):
        p.add_argument("scenario", type=Path, help="Path to scenario YAML")
        p.add_argument(
            "--results",
            "-r",
            type=Path,
            default=None,
            help="Write results to this JSON file",
        )
        p.add_argument(
            "--stdout", action="store_true", help="Print JSON results to stdout"
        )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    _run(args.command, args.scenario, args.results, args.stdout)


if __name__ == "__main__":
    main()
