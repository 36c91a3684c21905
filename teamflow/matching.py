"""Bipartite matching on top of a flow network.

A :class:`Matching` wires a U-side and a V-side into the network
``source -> u -> v -> sink``:

- every ``source -> u`` arc has capacity 1 (one match per U-item),
- ``u -> v`` exists with capacity 1 iff ``qualifies(u, v)``,
- every ``v -> sink`` arc has the V-item's requirement as capacity.

Besides committing matches and maximizing, it exposes flow snapshots and
U-side capacity bumps so callers can ask "what if" questions and roll the
answer back.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterable, List, Mapping, Optional, TypeVar

from teamflow.algorithms.push_relabel import PushRelabelMaxFlow
from teamflow.algorithms.types import FlowState, PushRelabelStats
from teamflow.config import SolverConfig
from teamflow.errors import ErrorKind, FlowEditResult, InvalidArgumentError
from teamflow.graph.flow_network import FlowNetwork
from teamflow.graph.nodes import SINK, SOURCE, node
from teamflow.logging import get_logger

logger = get_logger(__name__)

U = TypeVar("U")
V = TypeVar("V")


class Matching(Generic[U, V]):
    """Flow network plus solver for one U/V matching session.

    Use :meth:`new_matching` to build one. The all-zero flow counts as
    established from the start, so ``get_flow_amount`` works immediately.
    """

    def __init__(
        self,
        network: FlowNetwork,
        solver: PushRelabelMaxFlow,
        u_items: Iterable[U],
        v_items: Iterable[V],
    ) -> None:
        self._network = network
        self._solver = solver
        self._u_items: List[U] = list(u_items)
        self._v_items: List[V] = list(v_items)
        self._u_set = set(self._u_items)
        self._v_set = set(self._v_items)

    @classmethod
    def new_matching(
        cls,
        qualifies: Callable[[U, V], bool],
        u_items: Iterable[U],
        v_requirements: Mapping[V, int],
        config: Optional[SolverConfig] = None,
    ) -> Matching[U, V]:
        """Build the matching network.

        Args:
            qualifies: Predicate telling whether a U-item may serve a V-item.
            u_items: U-side items, hashable.
            v_requirements: V-side items mapped to how many U-items each takes.
            config: Solver settings.

        Returns:
            Matching: Matching with an all-zero flow.

        Raises:
            InvalidArgumentError: If a U-item equals a V-item, or a requirement
                is not a non-negative integer.
        """
        u_list = list(dict.fromkeys(u_items))
        v_list = list(v_requirements)
        overlap = set(u_list) & set(v_list)
        if overlap:
            raise InvalidArgumentError(
                "Items appear on both sides of the matching: "
                f"{sorted(map(repr, overlap))}"
            )

        network = FlowNetwork(SOURCE, SINK)
        for v in v_list:
            network.set_arc_capacity(v_requirements[v], node(v), SINK)
        for u in u_list:
            network.set_arc_capacity(1, SOURCE, node(u))
            for v in v_list:
                if qualifies(u, v):
                    network.set_arc_capacity(1, node(u), node(v))

        solver = PushRelabelMaxFlow(network, config)
        solver.init_flow()
        logger.debug(
            "Built matching network: %d U-items, %d V-items, %d arcs",
            len(u_list),
            len(v_list),
            network.number_of_edges(),
        )
        return cls(network, solver, u_list, v_list)

    @property
    def flow_network(self) -> FlowNetwork:
        return self._network

    @property
    def solver(self) -> PushRelabelMaxFlow:
        return self._solver

    def try_set_match(self, u: U, v: V) -> FlowEditResult:
        """Commit one unit of flow along source -> u -> v -> sink.

        Every hop is checked before anything is pushed, so a failed attempt
        leaves the flow as it was.
        """
        if u not in self._u_set:
            return FlowEditResult.failure(
                ErrorKind.INVALID_ARGUMENT, f"Unknown U-item {u!r}"
            )
        if v not in self._v_set:
            return FlowEditResult.failure(
                ErrorKind.INVALID_ARGUMENT, f"Unknown V-item {v!r}"
            )

        u_node, v_node = node(u), node(v)
        if not self._network.has_edge(u_node, v_node):
            return FlowEditResult.failure(
                ErrorKind.INVALID_STATE, f"There is no path between {u!r} and {v!r}"
            )
        path = [(SOURCE, u_node), (u_node, v_node), (v_node, SINK)]
        for tail, head in path:
            if self._network.residual_capacity(tail, head) < 1:
                return FlowEditResult.failure(
                    ErrorKind.INVALID_STATE,
                    f"No capacity left on {tail!r}->{head!r} to match {u!r} with {v!r}",
                )
        for tail, head in path:
            self._solver.push_flow(1, tail, head)
        return FlowEditResult.success()

    def set_match(self, u: U, v: V) -> None:
        """Commit one unit of flow along source -> u -> v -> sink.

        Raises:
            InvalidStateError: If u and v are not connected or a hop is full.
            InvalidArgumentError: If u or v is not part of this matching.
        """
        self.try_set_match(u, v).raise_for_error()

    def increase_u_count(self, u: U, delta: int) -> None:
        """Add ``delta`` to the capacity of the source -> u arc.

        A negative ``delta`` undoes an earlier bump as long as the capacity
        stays at or above the arc's current flow.
        """
        if u not in self._u_set:
            raise InvalidArgumentError(f"Unknown U-item {u!r}")
        u_node = node(u)
        capacity = self._network.get_arc_capacity(SOURCE, u_node)
        self._network.set_arc_capacity(capacity + delta, SOURCE, u_node)

    def find_matching(self) -> PushRelabelStats:
        """Extend the current flow to a maximum one."""
        return self._solver.preflow_push()

    def get_state(self) -> FlowState:
        return self._solver.get_state()

    def restore(self, state: FlowState) -> None:
        """Roll arc flows back to ``state``; capacities are not touched."""
        self._solver.restore(state)

    def get_flow_amount(self) -> int:
        return self._solver.get_flow_amount()

    def get_matches(self) -> Dict[U, List[V]]:
        """V-items each matched U-item currently sends flow to."""
        matches: Dict[U, List[V]] = {}
        for u in self._u_items:
            u_node = node(u)
            targets = [
                v
                for v in self._v_items
                if self._network.get_arc_flow(u_node, node(v)) > 0
            ]
            if targets:
                matches[u] = targets
        return matches
