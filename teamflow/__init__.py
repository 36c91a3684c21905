"""teamflow: staffing team roles with maximum flow.

teamflow models the assignment of applicants to team roles as a flow network
and solves it with push-relabel maximum flow. The same network answers which
roles remain in demand for a given staffing by probing it with temporarily
raised capacities.

Primary API:
    FlowNetwork, PushRelabelMaxFlow - Flow network and max-flow solver
    Matching - Bipartite matching with snapshot/restore
    TeamNetwork - Applicants x team requirements network
    TeamRequirementsAnalyser - Roles in demand

Example:
    from teamflow import TeamNetwork, has_skills, new_applicant, new_team_requirement

    applicants = [new_applicant("a1", "python"), new_applicant("a2", "go")]
    roles = [new_team_requirement(1, "python"), new_team_requirement(1, "go")]

    team = TeamNetwork.new_team_network(has_skills, applicants, roles)
    team.preflow_push()
    team.get_role_assignments()
"""

from __future__ import annotations

from teamflow import cli, logging
from teamflow._version import __version__
from teamflow.algorithms import FlowState, PushRelabelMaxFlow, PushRelabelStats
from teamflow.analyser import TeamRequirementsAnalyser
from teamflow.config import SOLVER_CONFIG, SolverConfig
from teamflow.errors import (
    ErrorKind,
    FlowEditResult,
    FlowInvariantError,
    InvalidArgumentError,
    InvalidStateError,
    TeamFlowError,
    UnmatchedAssignmentError,
)
from teamflow.graph import SINK, SOURCE, FlowNetwork, ValueNode, node
from teamflow.matching import Matching
from teamflow.model import (
    Applicant,
    TeamRequirement,
    has_skills,
    new_applicant,
    new_team_requirement,
)
from teamflow.scenario import Scenario, load_scenario_yaml
from teamflow.team_network import TeamNetwork

__all__ = [
    # Version
    "__version__",
    # Graph
    "FlowNetwork",
    "SOURCE",
    "SINK",
    "ValueNode",
    "node",
    # Solver
    "PushRelabelMaxFlow",
    "PushRelabelStats",
    "FlowState",
    "SolverConfig",
    "SOLVER_CONFIG",
    # Matching
    "Matching",
    "TeamNetwork",
    "TeamRequirementsAnalyser",
    # Model
    "Applicant",
    "TeamRequirement",
    "has_skills",
    "new_applicant",
    "new_team_requirement",
    "Scenario",
    "load_scenario_yaml",
    # Errors
    "ErrorKind",
    "FlowEditResult",
    "TeamFlowError",
    "InvalidArgumentError",
    "InvalidStateError",
    "UnmatchedAssignmentError",
    "FlowInvariantError",
    # Utilities
    "cli",
    "logging",
]
