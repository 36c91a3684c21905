"""Which roles is the team still looking for?"""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Set

from teamflow.config import SolverConfig
from teamflow.errors import InvalidArgumentError
from teamflow.logging import get_logger
from teamflow.matching import Matching
from teamflow.model import Applicant, Skills, TeamRequirement, group_assignments
from teamflow.team_network import QualificationPredicate

logger = get_logger(__name__)


class TeamRequirementsAnalyser:
    """Decides which roles are in demand given the current staffing."""

    def __init__(self, config: Optional[SolverConfig] = None) -> None:
        self._config = config

    def get_roles_in_demand(
        self,
        team_requirements: Iterable[TeamRequirement],
        role_assignments: Mapping[Applicant, AbstractSet[str]],
        qualifications_predicate: QualificationPredicate,
    ) -> Set[Skills]:
        """Return the skill sets of the roles that are in demand.

        A role is in demand when someone with the required skills could join
        the team without replacing anyone already on it.

        A requirement with fewer members than it needs is in demand. For a
        satisfied requirement we check whether at least one of its members
        could be doing something else: each member's source arc gets one
        extra unit of capacity and the flow is maximized again. If the flow
        grows, a member found another role without pushing anyone out, so
        their current role could be taken by a newcomer. Every probe is rolled
        back (flows and capacities) before the next requirement is looked at.

        Args:
            team_requirements: Roles of the team, with distinct skill sets.
            role_assignments: Current team members mapped to the skills of the
                role each holds.
            qualifications_predicate: Whether an applicant may hold a role
                with the given skills.

        Raises:
            InvalidArgumentError: If two requirements share a skill set.
            UnmatchedAssignmentError: If an assignment names skills no
                requirement has.
            InvalidStateError: If the assignments themselves are infeasible.
        """
        requirements = list(dict.fromkeys(team_requirements))
        head_counts: Dict[Skills, int] = {}
        for tr in requirements:
            if tr.required_skills in head_counts:
                raise InvalidArgumentError(
                    f"More than one team requirement needs {sorted(tr.required_skills)}"
                )
            head_counts[tr.required_skills] = tr.team_members_required

        team_network: Matching[Applicant, Skills] = Matching.new_matching(
            qualifications_predicate, role_assignments.keys(), head_counts, self._config
        )
        roles_assignment = group_assignments(requirements, role_assignments)
        for tr, members in roles_assignment.items():
            for member in members:
                team_network.set_match(member, tr.required_skills)

        sought_after_skills: Set[Skills] = set()
        for tr in requirements:
            members = roles_assignment.get(tr, [])
            if len(members) < tr.team_members_required:
                logger.debug(
                    "%s has %d of %d members",
                    sorted(tr.required_skills),
                    len(members),
                    tr.team_members_required,
                )
                sought_after_skills.add(tr.required_skills)
            elif _could_be_reassigned(team_network, members):
                logger.debug(
                    "A member of %s could take another role", sorted(tr.required_skills)
                )
                sought_after_skills.add(tr.required_skills)

        return sought_after_skills


def _could_be_reassigned(
    team_network: Matching[Applicant, Skills], members: List[Applicant]
) -> bool:
    flow_state = team_network.get_state()
    bumped: List[Applicant] = []
    try:
        for member in members:
            team_network.increase_u_count(member, 1)
            bumped.append(member)
        team_network.find_matching()
        return team_network.get_flow_amount() > flow_state.flow_value
    finally:
        team_network.restore(flow_state)
        for member in bumped:
            team_network.increase_u_count(member, -1)
