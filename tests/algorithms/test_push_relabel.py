import random

import networkx as nx
import pytest

from teamflow.algorithms.push_relabel import PushRelabelMaxFlow
from teamflow.algorithms.types import FlowState
from teamflow.config import SolverConfig
from teamflow.errors import InvalidArgumentError, InvalidStateError
from teamflow.graph.flow_network import FlowNetwork

HIGHEST_LABEL = SolverConfig(selection="highest_label")


def residual_reachable(network):
    """Nodes reachable from the source over residual edges."""
    seen = {network.source}
    stack = [network.source]
    while stack:
        n = stack.pop()
        for nbr in network.get_successors(n):
            if nbr not in seen:
                seen.add(nbr)
                stack.append(nbr)
    return seen


def assert_valid_flow(network):
    for (u, v), (capacity, flow) in network.get_arcs().items():
        assert 0 <= flow <= capacity, (u, v)
    for n in network.nodes:
        if n not in (network.source, network.sink):
            assert network.excess(n) == 0, n


def reference_max_flow(network):
    """Max flow value computed by networkx on a plain copy of the arcs."""
    graph = nx.DiGraph()
    graph.add_nodes_from(network.nodes)
    for (u, v), (capacity, _) in network.get_arcs().items():
        graph.add_edge(u, v, capacity=capacity)
    return nx.maximum_flow_value(graph, network.source, network.sink)


class TestMaxFlowValues:
    """
    Flow values on the hand-built networks from sample_networks.
    """

    @pytest.mark.parametrize(
        "fixture_name,expected",
        [
            ("line1", 3),
            ("clrs1", 23),
            ("diamond1", 18),
            ("dead_end1", 3),
            ("antiparallel1", 4),
            ("disconnected1", 0),
        ],
    )
    @pytest.mark.parametrize("config", [None, HIGHEST_LABEL])
    def test_max_flow(self, request, fixture_name, expected, config):
        network = request.getfixturevalue(fixture_name)
        solver = PushRelabelMaxFlow(network, config)
        stats = solver.preflow_push()
        assert stats.flow_value == expected
        assert solver.get_flow_amount() == expected
        assert_valid_flow(network)

    def test_dead_end_excess_returns_to_source(self, dead_end1):
        """
        On dead_end1:
         - Flow pushed into D has nowhere to go and must be drained back,
           leaving every internal node balanced.
        """
        PushRelabelMaxFlow(dead_end1).preflow_push()
        assert dead_end1.get_arc_flow("A", "D") == 0
        assert dead_end1.get_arc_flow("S", "A") == 2
        assert dead_end1.excess("T") == 3

    def test_stats_count_operations(self, line1):
        stats = PushRelabelMaxFlow(line1).preflow_push()
        assert stats.pushes >= 3
        assert stats.operations == stats.pushes + stats.relabels

    def test_clrs1_min_cut(self, clrs1):
        """
        On clrs1:
         - The residual-reachable set is the source side of the min cut.
        """
        PushRelabelMaxFlow(clrs1).preflow_push()
        reachable = residual_reachable(clrs1)
        assert reachable == {"S", "V1", "V2", "V4"}

        _, (side, _) = nx.minimum_cut(
            nx.DiGraph(
                [(u, v, {"capacity": c}) for (u, v), (c, _) in clrs1.get_arcs().items()]
            ),
            "S",
            "T",
        )
        assert side == reachable

    def test_invalid_config_rejected(self, line1):
        with pytest.raises(ValueError):
            PushRelabelMaxFlow(line1, SolverConfig(selection="lifo"))


class TestIdempotence:
    """
    A second run on a maximum flow does nothing.
    """

    @pytest.mark.parametrize("config", [None, HIGHEST_LABEL])
    def test_second_run_is_a_no_op(self, clrs1, config):
        solver = PushRelabelMaxFlow(clrs1, config)
        solver.preflow_push()
        flows = clrs1.get_flows()

        stats = solver.preflow_push()

        assert stats.operations == 0
        assert stats.flow_value == 23
        assert clrs1.get_flows() == flows

    def test_empty_network(self):
        network = FlowNetwork("S", "T")
        solver = PushRelabelMaxFlow(network)
        stats = solver.preflow_push()
        assert stats.operations == 0
        assert solver.get_flow_amount() == 0


class TestManualPush:
    """
    push_flow moves flow along one residual edge at a time.
    """

    def test_push_along_path_then_extend(self, line1):
        solver = PushRelabelMaxFlow(line1)
        for tail, head in [("S", "A"), ("A", "B"), ("B", "T")]:
            solver.push_flow(1, tail, head)
        assert solver.get_flow_amount() == 1

        stats = solver.preflow_push()

        assert stats.flow_value == 3
        assert_valid_flow(line1)

    def test_push_cancels_reverse_flow(self, line1):
        solver = PushRelabelMaxFlow(line1)
        solver.push_flow(2, "S", "A")
        solver.push_flow(1, "A", "S")
        assert line1.get_arc_flow("S", "A") == 1
        assert not line1.has_edge("A", "S")

    def test_push_uses_forward_capacity_before_cancelling(self, antiparallel1):
        solver = PushRelabelMaxFlow(antiparallel1)
        solver.push_flow(2, "B", "A")
        solver.push_flow(4, "A", "B")
        # 3 units fill A->B and the fourth cancels one unit of B->A
        assert antiparallel1.get_arc_flow("A", "B") == 3
        assert antiparallel1.get_arc_flow("B", "A") == 1

    def test_push_beyond_residual_changes_nothing(self, line1):
        solver = PushRelabelMaxFlow(line1)
        solver.push_flow(1, "S", "A")
        before = line1.get_flows()
        with pytest.raises(InvalidStateError, match="residual capacity is 3"):
            solver.push_flow(4, "A", "B")
        with pytest.raises(InvalidStateError):
            solver.push_flow(1, "T", "B")
        assert line1.get_flows() == before

    @pytest.mark.parametrize("amount", [0, -1, 1.0, True])
    def test_push_rejects_bad_amount(self, line1, amount):
        solver = PushRelabelMaxFlow(line1)
        with pytest.raises(InvalidArgumentError):
            solver.push_flow(amount, "S", "A")

    def test_negative_excess_is_not_a_preflow(self, line1):
        solver = PushRelabelMaxFlow(line1)
        solver.push_flow(1, "A", "B")
        with pytest.raises(InvalidStateError, match="'A'"):
            solver.preflow_push()

    def test_flow_amount_requires_initialization(self, line1):
        solver = PushRelabelMaxFlow(line1)
        assert not solver.is_initialized
        with pytest.raises(InvalidStateError):
            solver.get_flow_amount()
        solver.init_flow()
        assert solver.get_flow_amount() == 0


class TestStateRestore:
    """
    get_state / restore round trips of arc flows.
    """

    def test_restore_is_exact(self, diamond1):
        solver = PushRelabelMaxFlow(diamond1)
        solver.push_flow(1, "S", "A")
        solver.push_flow(1, "A", "B")
        solver.push_flow(1, "B", "T")
        state = solver.get_state()
        assert isinstance(state, FlowState)
        assert state.flow_value == 1

        solver.preflow_push()
        assert solver.get_flow_amount() == 18

        solver.restore(state)
        assert diamond1.get_flows() == state.as_dict()
        assert solver.get_flow_amount() == 1

    def test_restore_then_rerun(self, clrs1):
        solver = PushRelabelMaxFlow(clrs1)
        state = solver.get_state()
        solver.preflow_push()
        solver.restore(state)
        assert solver.get_flow_amount() == 0
        assert solver.preflow_push().flow_value == 23

    def test_restore_keeps_capacities(self, line1):
        solver = PushRelabelMaxFlow(line1)
        state = solver.get_state()
        line1.set_arc_capacity(5, "A", "B")
        solver.restore(state)
        assert line1.get_arc_capacity("A", "B") == 5
        assert solver.preflow_push().flow_value == 4

    def test_state_from_other_network_rejected(self, line1):
        other = PushRelabelMaxFlow(line1.copy())
        state = other.get_state()
        with pytest.raises(InvalidArgumentError):
            PushRelabelMaxFlow(line1).restore(state)

    def test_states_are_values(self, line1):
        solver = PushRelabelMaxFlow(line1)
        assert solver.get_state() == solver.get_state()
        with pytest.raises(AttributeError):
            solver.get_state().flow_value = 7


def random_network(seed, node_count=8, arc_probability=0.35, max_capacity=9):
    rng = random.Random(seed)
    names = ["S", "T"] + [f"N{i}" for i in range(node_count - 2)]
    network = FlowNetwork("S", "T")
    for tail in names:
        for head in names:
            if tail != head and rng.random() < arc_probability:
                network.set_arc_capacity(rng.randint(0, max_capacity), tail, head)
    return network


class TestAgainstNetworkx:
    """
    Seeded random networks checked against networkx.
    """

    @pytest.mark.parametrize("seed", range(25))
    @pytest.mark.parametrize("config", [None, HIGHEST_LABEL])
    def test_random_network(self, seed, config):
        network = random_network(seed)
        expected = reference_max_flow(network)

        stats = PushRelabelMaxFlow(network, config).preflow_push()

        assert stats.flow_value == expected
        assert_valid_flow(network)
        reachable = residual_reachable(network)
        assert network.sink not in reachable
        cut = sum(
            network.get_arc_capacity(u, v)
            for u, v in network.edges
            if u in reachable and v not in reachable
        )
        assert cut == expected

    @pytest.mark.parametrize("seed", range(10))
    def test_random_partial_flow_extended(self, seed):
        """
        A flow seeded along one augmenting path still ends at the maximum.
        """
        network = random_network(seed, node_count=7)
        expected = reference_max_flow(network)
        solver = PushRelabelMaxFlow(network)
        if expected:
            graph = nx.DiGraph()
            graph.add_edges_from(
                (u, v) for (u, v), (c, _) in network.get_arcs().items() if c > 0
            )
            path = nx.shortest_path(graph, "S", "T")
            for tail, head in zip(path, path[1:]):
                solver.push_flow(1, tail, head)

        assert solver.preflow_push().flow_value == expected
        assert_valid_flow(network)
