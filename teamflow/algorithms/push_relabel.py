"""Push-relabel (preflow-push) maximum flow.

The solver works in place on a :class:`~teamflow.graph.FlowNetwork` and
starts from whatever flow the network already carries, so it can compute a
maximum flow from scratch, extend a flow seeded by manual ``push_flow``
calls, or re-optimize after capacities were raised.

Heights start at 0 except for the source, which sits at ``|V|``. Excess that
cannot reach the sink climbs above ``|V|`` and drains back to the source, so
every run ends with a true flow rather than a maximal preflow.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Hashable, List, Optional, Set

from teamflow.algorithms.types import FlowState, PushRelabelStats
from teamflow.config import SOLVER_CONFIG, SolverConfig
from teamflow.errors import (
    FlowInvariantError,
    InvalidArgumentError,
    InvalidStateError,
)
from teamflow.graph.flow_network import FlowNetwork
from teamflow.logging import get_logger

logger = get_logger(__name__)

NodeID = Hashable


class PushRelabelMaxFlow:
    """Maximum flow solver bound to a single flow network.

    Args:
        network: Network whose arc flows the solver reads and writes.
        config: Solver settings; defaults to ``SOLVER_CONFIG``.
    """

    def __init__(
        self, network: FlowNetwork, config: Optional[SolverConfig] = None
    ) -> None:
        self._network = network
        self._config = config if config is not None else SOLVER_CONFIG
        self._config.validate()
        self._initialized = False
        self._height: Dict[NodeID, int] = {}
        self._excess: Dict[NodeID, int] = {}

    @property
    def network(self) -> FlowNetwork:
        return self._network

    @property
    def is_initialized(self) -> bool:
        """True once a flow (possibly all-zero) has been established."""
        return self._initialized

    def init_flow(self) -> None:
        """Accept the network's current flow as the established flow."""
        self._initialized = True

    #
    # Manual edits
    #
    def push_flow(self, amount: int, tail: NodeID, head: NodeID) -> None:
        """Move ``amount`` units along the residual edge tail->head.

        This is a single hop. Callers seeding a known assignment chain the
        hops themselves (source->u, u->v, v->sink) so conservation holds once
        the whole path is pushed.

        Args:
            amount: Positive number of units to move.
            tail: Node the flow leaves.
            head: Node the flow enters.

        Raises:
            InvalidArgumentError: If ``amount`` is not a positive integer.
            InvalidStateError: If the residual capacity of tail->head is below
                ``amount``. Nothing is changed in that case.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidArgumentError(
                f"Amount must be a positive integer, got {amount!r}"
            )
        residual = self._network.residual_capacity(tail, head)
        if residual < amount:
            raise InvalidStateError(
                f"Cannot push {amount} from {tail!r} to {head!r}: "
                f"residual capacity is {residual}"
            )
        self._send(amount, tail, head)
        self._initialized = True

    def _send(self, amount: int, tail: NodeID, head: NodeID) -> None:
        """Apply a push already known to fit the residual capacity.

        Unused forward capacity is consumed first, then flow on head->tail
        is cancelled.
        """
        network = self._network
        forward = network.get_arc_capacity(tail, head) - network.get_arc_flow(
            tail, head
        )
        along = min(amount, forward)
        if along > 0:
            network.add_flow(along, tail, head)
        back = amount - along
        if back > 0:
            network.add_flow(-back, head, tail)

    #
    # Snapshot / restore
    #
    def get_state(self) -> FlowState:
        """Capture the current flow on every arc."""
        flows = tuple(self._network.get_flows().items())
        return FlowState(
            flows=flows,
            flow_value=-self._network.excess(self._network.source),
            owner=id(self._network),
        )

    def restore(self, state: FlowState) -> None:
        """Put every arc flow back to the value captured in ``state``.

        Capacities are left untouched.

        Raises:
            InvalidArgumentError: If ``state`` was taken from another network.
            InvalidStateError: If a captured flow no longer fits its arc.
        """
        if state.owner != id(self._network):
            raise InvalidArgumentError("Flow state belongs to a different network")
        self._network.set_flows(state.as_dict())
        self._height.clear()
        self._excess.clear()
        self._initialized = True

    #
    # Queries
    #
    def get_flow_amount(self) -> int:
        """Net flow leaving the source.

        Raises:
            InvalidStateError: If no flow has been established yet.
        """
        if not self._initialized:
            raise InvalidStateError("Flow is not initialized")
        return -self._network.excess(self._network.source)

    #
    # Algorithm
    #
    def preflow_push(self) -> PushRelabelStats:
        """Raise the current flow to a maximum flow.

        Returns:
            PushRelabelStats: Operation counts of this run. Both counts are
                zero when the flow was already maximal.

        Raises:
            InvalidStateError: If a node other than source and sink carries
                negative excess, i.e. the current flow is not a preflow.
            FlowInvariantError: If a height exceeds its theoretical bound.
        """
        network = self._network
        source, sink = network.source, network.sink
        self._initialized = True

        self._excess = {v: network.excess(v) for v in network.nodes}
        for v, value in self._excess.items():
            if value < 0 and v != source and v != sink:
                raise InvalidStateError(
                    f"Node {v!r} sends out {-value} more units than it receives"
                )

        if not self._active_nodes() and not self._sink_reachable():
            logger.debug(
                "Flow already maximal (%d); nothing to do", self.get_flow_amount()
            )
            return PushRelabelStats(0, 0, self.get_flow_amount())

        node_count = network.number_of_nodes()
        bound = self._config.height_bound(node_count)
        self._height = {v: 0 for v in network.nodes}
        self._height[source] = node_count
        neighbours = {v: self._neighbours(v) for v in network.nodes}

        pushes = 0
        for v in neighbours[source]:
            residual = network.residual_capacity(source, v)
            if residual > 0:
                self._send(residual, source, v)
                self._excess[source] -= residual
                self._excess[v] += residual
                pushes += 1

        active: Deque[NodeID] = deque(self._active_nodes())
        queued: Set[NodeID] = set(active)
        relabels = 0
        while active:
            u = self._select(active)
            queued.discard(u)
            p, r = self._discharge(u, neighbours[u], active, queued, bound)
            pushes += p
            relabels += r

        stats = PushRelabelStats(pushes, relabels, self.get_flow_amount())
        logger.debug(
            "Push-relabel (%s) finished: %d pushes, %d relabels, flow %d",
            self._config.selection,
            stats.pushes,
            stats.relabels,
            stats.flow_value,
        )
        return stats

    def _discharge(
        self,
        u: NodeID,
        neighbours: List[NodeID],
        active: Deque[NodeID],
        queued: Set[NodeID],
        bound: int,
    ) -> tuple[int, int]:
        """Push excess out of ``u`` until it is gone, relabeling as needed."""
        network = self._network
        terminals = (network.source, network.sink)
        height = self._height
        excess = self._excess
        pushes = relabels = 0

        while excess[u] > 0:
            for v in neighbours:
                if height[u] != height[v] + 1:
                    continue
                residual = network.residual_capacity(u, v)
                if residual <= 0:
                    continue
                delta = min(excess[u], residual)
                self._send(delta, u, v)
                excess[u] -= delta
                excess[v] += delta
                pushes += 1
                if v not in terminals and v not in queued:
                    active.append(v)
                    queued.add(v)
                if excess[u] == 0:
                    break

            if excess[u] > 0:
                reachable = [
                    height[v] for v in neighbours if network.residual_capacity(u, v) > 0
                ]
                if not reachable:
                    raise FlowInvariantError(
                        f"Node {u!r} has excess but no residual edge"
                    )
                height[u] = 1 + min(reachable)
                relabels += 1
                if height[u] > bound:
                    raise FlowInvariantError(
                        f"Height of {u!r} reached {height[u]}, above bound {bound}"
                    )

        return pushes, relabels

    def _select(self, active: Deque[NodeID]) -> NodeID:
        if self._config.selection == "highest_label":
            u = max(active, key=self._height.__getitem__)
            active.remove(u)
            return u
        return active.popleft()

    def _active_nodes(self) -> List[NodeID]:
        source, sink = self._network.source, self._network.sink
        return [
            v
            for v, value in self._excess.items()
            if value > 0 and v != source and v != sink
        ]

    def _neighbours(self, u: NodeID) -> List[NodeID]:
        """Every node sharing an arc with ``u``, in either direction."""
        network = self._network
        result = list(network.succ[u])
        seen = set(result)
        result.extend(v for v in network.pred[u] if v not in seen)
        return result

    def _sink_reachable(self) -> bool:
        """Whether an augmenting path exists in the residual graph."""
        network = self._network
        seen = {network.source}
        stack = [network.source]
        while stack:
            n = stack.pop()
            for nbr in network.get_successors(n):
                if nbr == network.sink:
                    return True
                if nbr not in seen:
                    seen.add(nbr)
                    stack.append(nbr)
        return False
