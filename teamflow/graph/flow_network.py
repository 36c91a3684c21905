from __future__ import annotations

from pickle import dumps, loads
from typing import Any, Dict, Hashable, List, Mapping, Tuple

import networkx as nx

from teamflow.errors import InvalidArgumentError, InvalidStateError
from teamflow.graph.nodes import SINK, SOURCE

NodeID = Hashable
Arc = Tuple[NodeID, NodeID]

CAPACITY_ATTR = "capacity"
FLOW_ATTR = "flow"


def _check_amount(value: Any, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{what} must be an integer, got {value!r}")


class FlowNetwork(nx.DiGraph):
    """
    A directed graph of arcs carrying integer capacity and flow.

    This class enforces:
      - 0 <= flow <= capacity on every arc, at all times. Every way of adding
        arcs (add_edge, add_edges_from, add_weighted_edges_from) is checked;
        update() raises.
      - A fixed source and sink for the lifetime of the network.
      - Nodes and arcs are never removed; an arc's capacity or flow can only
        be changed in place. Removal methods raise InvalidStateError.
      - copy() performs a pickle-based deep copy.

    The residual view (get_successors / get_predecessors) treats flow on an
    arc t->h as residual capacity h->t, so undoing an assignment looks like
    a forward edge.

    Inherits from:
        networkx.DiGraph
    """

    def __init__(
        self,
        source: NodeID = SOURCE,
        sink: NodeID = SINK,
        **attr: Any,
    ) -> None:
        """
        Initialize an empty FlowNetwork holding only its source and sink.

        Args:
            source (NodeID): The node flow originates from.
            sink (NodeID): The node flow terminates at.
            **attr: Graph attributes forwarded to the DiGraph constructor.

        Raises:
            InvalidArgumentError: If source and sink are the same node.
        """
        if source == sink:
            raise InvalidArgumentError("Source and sink must be different nodes.")
        super().__init__(**attr)
        self._source = source
        self._sink = sink
        super().add_node(source)
        super().add_node(sink)

    @property
    def source(self) -> NodeID:
        return self._source

    @property
    def sink(self) -> NodeID:
        return self._sink

    def copy(self, as_view: bool = False) -> FlowNetwork:
        """
        Create a deep copy of this network, arcs and flows included.

        Args:
            as_view (bool): Views are not supported; must be False.

        Returns:
            FlowNetwork: A new, independent network.
        """
        if as_view:
            raise InvalidArgumentError("FlowNetwork does not support views.")
        return loads(dumps(self))

    #
    # Arc management
    #
    def add_edge(self, u_of_edge: NodeID, v_of_edge: NodeID, **attr: Any) -> None:
        """
        Add an arc; equivalent to set_arc_capacity plus an optional flow.

        Args:
            u_of_edge (NodeID): Tail node.
            v_of_edge (NodeID): Head node.
            **attr: Must contain ``capacity``; may contain ``flow``.

        Raises:
            InvalidArgumentError: If capacity is missing or malformed.
            InvalidStateError: If the given flow violates the capacity.
        """
        if CAPACITY_ATTR not in attr:
            raise InvalidArgumentError(
                f"Arc {u_of_edge!r}->{v_of_edge!r} needs a '{CAPACITY_ATTR}' attribute."
            )
        capacity = attr.pop(CAPACITY_ATTR)
        flow = attr.pop(FLOW_ATTR, 0)
        _check_amount(capacity, "Capacity")
        _check_amount(flow, "Flow")
        if not 0 <= flow <= capacity:
            raise InvalidStateError(
                f"Flow {flow} out of bounds for arc {u_of_edge!r}->{v_of_edge!r}."
            )
        self.set_arc_capacity(capacity, u_of_edge, v_of_edge)
        self[u_of_edge][v_of_edge][FLOW_ATTR] = flow
        self[u_of_edge][v_of_edge].update(attr)

    def add_edges_from(self, ebunch_to_add: Any, **attr: Any) -> None:
        """
        Add arcs one by one through :meth:`add_edge`.

        Each item is (u, v) or (u, v, data); ``attr`` applies to every arc and
        is overridden by per-arc data. Arcs before a rejected one stay added.
        """
        for e in ebunch_to_add:
            if len(e) == 3:
                u, v, data = e
            elif len(e) == 2:
                u, v = e
                data = {}
            else:
                raise InvalidArgumentError(
                    f"Arc tuple {e!r} must be a 2-tuple or 3-tuple."
                )
            self.add_edge(u, v, **{**attr, **data})

    def add_weighted_edges_from(
        self, ebunch_to_add: Any, weight: str = "weight", **attr: Any
    ) -> None:
        """Add (u, v, w) arcs, storing w under ``weight``, via :meth:`add_edge`."""
        self.add_edges_from(
            ((u, v, {weight: w}) for u, v, w in ebunch_to_add), **attr
        )

    def update(self, edges: Any = None, nodes: Any = None) -> None:
        raise InvalidStateError(
            "FlowNetwork.update is not supported; use add_edge or set_arc_capacity."
        )

    def set_arc_capacity(self, capacity: int, tail: NodeID, head: NodeID) -> None:
        """
        Create the arc tail->head or update its capacity.

        Missing nodes are created. A new arc starts with zero flow.

        Args:
            capacity (int): Non-negative arc capacity.
            tail (NodeID): Tail node.
            head (NodeID): Head node.

        Raises:
            InvalidArgumentError: If capacity is not a non-negative integer,
                or if tail and head are the same node.
            InvalidStateError: If capacity is below the arc's current flow.
        """
        _check_amount(capacity, "Capacity")
        if capacity < 0:
            raise InvalidArgumentError(
                f"Capacity must be non-negative, got {capacity} for {tail!r}->{head!r}."
            )
        if tail == head:
            raise InvalidArgumentError(f"Self-loop on {tail!r} is not allowed.")

        if self.has_edge(tail, head):
            data = self[tail][head]
            if capacity < data[FLOW_ATTR]:
                raise InvalidStateError(
                    f"Capacity {capacity} is below current flow {data[FLOW_ATTR]} "
                    f"on {tail!r}->{head!r}."
                )
            data[CAPACITY_ATTR] = capacity
        else:
            super().add_edge(tail, head, **{CAPACITY_ATTR: capacity, FLOW_ATTR: 0})

    def get_arc_capacity(self, tail: NodeID, head: NodeID) -> int:
        """Capacity of tail->head, or 0 if there is no such arc."""
        data = self._adj.get(tail, {}).get(head)
        return 0 if data is None else data[CAPACITY_ATTR]

    def get_arc_flow(self, tail: NodeID, head: NodeID) -> int:
        """Flow on tail->head, or 0 if there is no such arc."""
        data = self._adj.get(tail, {}).get(head)
        return 0 if data is None else data[FLOW_ATTR]

    def residual_capacity(self, tail: NodeID, head: NodeID) -> int:
        """
        Units that can still be sent from tail to head in one hop.

        This is the unused capacity of tail->head plus the flow on head->tail
        that could be cancelled.
        """
        return (
            self.get_arc_capacity(tail, head)
            - self.get_arc_flow(tail, head)
            + self.get_arc_flow(head, tail)
        )

    def add_flow(self, amount: int, tail: NodeID, head: NodeID) -> None:
        """
        Change the flow on the existing arc tail->head by ``amount``.

        Args:
            amount (int): Signed flow change.
            tail (NodeID): Tail node.
            head (NodeID): Head node.

        Raises:
            InvalidArgumentError: If the arc does not exist.
            InvalidStateError: If the new flow would leave [0, capacity].
        """
        if not self.has_edge(tail, head):
            raise InvalidArgumentError(f"No arc {tail!r}->{head!r}.")
        data = self[tail][head]
        new_flow = data[FLOW_ATTR] + amount
        if not 0 <= new_flow <= data[CAPACITY_ATTR]:
            raise InvalidStateError(
                f"Flow {new_flow} out of bounds [0, {data[CAPACITY_ATTR]}] "
                f"on {tail!r}->{head!r}."
            )
        data[FLOW_ATTR] = new_flow

    #
    # Residual graph
    #
    def get_successors(self, n: NodeID) -> List[NodeID]:
        """
        Nodes reachable from ``n`` over one residual edge.

        Returns:
            List[NodeID]: Heads of unsaturated arcs leaving ``n`` followed by
                tails of arcs entering ``n`` that carry flow.
        """
        if n not in self._adj:
            return []
        result = [
            head
            for head, data in self._adj[n].items()
            if data[CAPACITY_ATTR] > data[FLOW_ATTR]
        ]
        seen = set(result)
        for tail, data in self._pred[n].items():
            if data[FLOW_ATTR] > 0 and tail not in seen:
                result.append(tail)
        return result

    def get_predecessors(self, n: NodeID) -> List[NodeID]:
        """
        Nodes with a residual edge into ``n``.

        Returns:
            List[NodeID]: Tails of unsaturated arcs entering ``n`` followed by
                heads of arcs leaving ``n`` that carry flow.
        """
        if n not in self._pred:
            return []
        result = [
            tail
            for tail, data in self._pred[n].items()
            if data[CAPACITY_ATTR] > data[FLOW_ATTR]
        ]
        seen = set(result)
        for head, data in self._adj[n].items():
            if data[FLOW_ATTR] > 0 and head not in seen:
                result.append(head)
        return result

    def excess(self, n: NodeID) -> int:
        """Inflow minus outflow at ``n``."""
        inflow = sum(data[FLOW_ATTR] for data in self._pred[n].values())
        outflow = sum(data[FLOW_ATTR] for data in self._adj[n].values())
        return inflow - outflow

    #
    # Convenience methods
    #
    def get_arcs(self) -> Dict[Arc, Tuple[int, int]]:
        """Map each arc (tail, head) to its (capacity, flow)."""
        return {
            (u, v): (d[CAPACITY_ATTR], d[FLOW_ATTR])
            for u, v, d in self.edges(data=True)
        }

    def get_flows(self) -> Dict[Arc, int]:
        """Map each arc (tail, head) to its current flow."""
        return {(u, v): d[FLOW_ATTR] for u, v, d in self.edges(data=True)}

    def set_flows(self, flows: Mapping[Arc, int]) -> None:
        """
        Replace every arc's flow; arcs missing from ``flows`` get 0.

        All values are validated before any arc is written.

        Raises:
            InvalidArgumentError: If ``flows`` names an arc that does not exist.
            InvalidStateError: If a value falls outside [0, capacity].
        """
        for (tail, head), value in flows.items():
            if not self.has_edge(tail, head):
                raise InvalidArgumentError(f"No arc {tail!r}->{head!r}.")
            capacity = self[tail][head][CAPACITY_ATTR]
            if not 0 <= value <= capacity:
                raise InvalidStateError(
                    f"Flow {value} out of bounds [0, {capacity}] on {tail!r}->{head!r}."
                )
        for u, v, d in self.edges(data=True):
            d[FLOW_ATTR] = flows.get((u, v), 0)

    #
    # Nodes and arcs are permanent
    #
    def remove_node(self, n: NodeID) -> None:
        raise InvalidStateError("Nodes cannot be removed from a FlowNetwork.")

    def remove_nodes_from(self, nodes: Any) -> None:
        raise InvalidStateError("Nodes cannot be removed from a FlowNetwork.")

    def remove_edge(self, u: NodeID, v: NodeID) -> None:
        raise InvalidStateError("Arcs cannot be removed from a FlowNetwork.")

    def remove_edges_from(self, ebunch: Any) -> None:
        raise InvalidStateError("Arcs cannot be removed from a FlowNetwork.")

    def clear(self) -> None:
        raise InvalidStateError("A FlowNetwork cannot be cleared.")

    def clear_edges(self) -> None:
        raise InvalidStateError("A FlowNetwork cannot be cleared.")
