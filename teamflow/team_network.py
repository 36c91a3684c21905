"""Staffing flow network: applicants on one side, team requirements on the other."""

from __future__ import annotations

from typing import AbstractSet, Callable, Dict, Iterable, Mapping, Optional, cast

from teamflow.algorithms.push_relabel import PushRelabelMaxFlow
from teamflow.algorithms.types import PushRelabelStats
from teamflow.config import SolverConfig
from teamflow.errors import ErrorKind, FlowEditResult, InvalidStateError, TeamFlowError
from teamflow.graph.flow_network import FlowNetwork
from teamflow.graph.nodes import SINK, SOURCE, ValueNode, node
from teamflow.logging import get_logger
from teamflow.model import Applicant, Skills, TeamRequirement

logger = get_logger(__name__)

QualificationPredicate = Callable[[Applicant, AbstractSet[str]], bool]


class TeamNetwork:
    """Flow network built from applicants and team requirements.

    The flow is "not set" until the first call to :meth:`set_flows`,
    :meth:`set_flow` or :meth:`preflow_push`.
    """

    def __init__(
        self, flow_network: FlowNetwork, config: Optional[SolverConfig] = None
    ) -> None:
        self._flow_network = flow_network
        self._config = config
        self._flow: Optional[PushRelabelMaxFlow] = None

    @classmethod
    def new_team_network(
        cls,
        applicant_qualifications: QualificationPredicate,
        applicants: Iterable[Applicant],
        team_requirements: Iterable[TeamRequirement],
        config: Optional[SolverConfig] = None,
    ) -> TeamNetwork:
        """Build the network from the bipartite applicant/requirement graph.

        - The source reaches every applicant with capacity 1: an applicant
          holds at most one role.
        - An applicant reaches a requirement with capacity 1 when
          ``applicant_qualifications(applicant, requirement.required_skills)``
          holds: one person reduces the head-count by one.
        - Every requirement reaches the sink with capacity equal to its
          ``team_members_required``.
        """
        requirements = list(dict.fromkeys(team_requirements))
        flow_network = FlowNetwork(SOURCE, SINK)
        for tr in requirements:
            flow_network.set_arc_capacity(tr.team_members_required, node(tr), SINK)
        for applicant in dict.fromkeys(applicants):
            applicant_node = node(applicant)
            flow_network.set_arc_capacity(1, SOURCE, applicant_node)
            for tr in requirements:
                if applicant_qualifications(applicant, tr.required_skills):
                    flow_network.set_arc_capacity(1, applicant_node, node(tr))

        return cls(flow_network, config)

    @property
    def flow_network(self) -> FlowNetwork:
        return self._flow_network

    @property
    def is_flow_set(self) -> bool:
        return self._flow is not None

    def _set_up_flow(self) -> PushRelabelMaxFlow:
        self._flow = PushRelabelMaxFlow(self._flow_network, self._config)
        self._flow.init_flow()
        return self._flow

    def set_flows(
        self, team_roles_assignment: Mapping[TeamRequirement, Iterable[Applicant]]
    ) -> None:
        """Seed a feasible flow reflecting the team's current role assignments.

        For every assigned applicant one unit goes source -> applicant ->
        requirement -> sink, so each requirement sends as many units to the
        sink as it has members.

        Raises:
            InvalidStateError: If the flow is already set, or an assignment
                has no qualifying edge or no capacity left. A failed call
                leaves the flow unset.
        """
        if self._flow is not None:
            raise InvalidStateError("Flow is already set")

        self._set_up_flow()
        try:
            for tr, members in team_roles_assignment.items():
                for applicant in members:
                    self.set_flow(applicant, tr)
        except TeamFlowError:
            self._flow_network.set_flows({})
            self._flow = None
            raise

    def try_set_flow(self, applicant: Applicant, tr: TeamRequirement) -> FlowEditResult:
        """Push one unit along source -> applicant -> requirement -> sink.

        Nothing changes when the result is a failure.
        """
        network = self._flow_network
        applicant_node, tr_node = node(applicant), node(tr)
        if tr_node not in network.get_successors(applicant_node):
            return FlowEditResult.failure(
                ErrorKind.INVALID_STATE,
                f"There is no path between {applicant!r} and {tr!r}",
            )
        path = [
            (network.source, applicant_node),
            (applicant_node, tr_node),
            (tr_node, network.sink),
        ]
        for tail, head in path:
            if network.residual_capacity(tail, head) < 1:
                return FlowEditResult.failure(
                    ErrorKind.INVALID_STATE,
                    f"No capacity left on {tail!r}->{head!r}",
                )

        flow = self._flow if self._flow is not None else self._set_up_flow()
        for tail, head in path:
            flow.push_flow(1, tail, head)
        return FlowEditResult.success()

    def set_flow(self, applicant: Applicant, tr: TeamRequirement) -> None:
        """Assign ``applicant`` to ``tr`` on top of the existing flow.

        Raises:
            InvalidStateError: If the applicant does not qualify for the
                requirement, is already assigned, or the requirement is full.
        """
        self.try_set_flow(applicant, tr).raise_for_error()

    def preflow_push(self) -> PushRelabelStats:
        """Push as much flow as possible from source to sink."""
        flow = self._flow if self._flow is not None else self._set_up_flow()
        stats = flow.preflow_push()
        logger.debug("Team network flow is %d", stats.flow_value)
        return stats

    def get_flow_amount(self) -> int:
        if self._flow is None:
            raise InvalidStateError("Flow is not set")
        return self._flow.get_flow_amount()

    def get_role_assignments(self) -> Dict[Applicant, Skills]:
        """Map every assigned applicant to the skills of the role they hold."""
        network = self._flow_network
        role_assignments: Dict[Applicant, Skills] = {}
        for tr_node in network.get_successors(network.sink):
            for member_node in network.get_predecessors(network.source):
                if _exists_flow_between(tr_node, member_node, network):
                    applicant = cast(ValueNode, member_node).value
                    requirement = cast(ValueNode, tr_node).value
                    role_assignments[applicant] = requirement.required_skills
        return role_assignments


def _exists_flow_between(origin, destination, network: FlowNetwork) -> bool:
    return destination in network.get_successors(origin)
