"""Types and data structures for solver state and analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, Tuple

# Arc identifier tuple: (tail_node, head_node)
Arc = Tuple[Hashable, Hashable]


@dataclass(frozen=True)
class PushRelabelStats:
    """Operation counts of one ``preflow_push`` run.

    Attributes:
        pushes: Number of push operations, source saturation included.
        relabels: Number of relabel operations.
        flow_value: Flow leaving the source once the run finished.
    """

    pushes: int
    relabels: int
    flow_value: int

    @property
    def operations(self) -> int:
        return self.pushes + self.relabels


@dataclass(frozen=True)
class FlowState:
    """Immutable snapshot of every arc flow in one network.

    Only flows are captured; capacities, heights and excesses are not. Treat
    instances as opaque and hand them back to ``restore``.

    Attributes:
        flows: ((tail, head), flow) pairs, one per arc.
        flow_value: Flow leaving the source when the snapshot was taken.
    """

    flows: Tuple[Tuple[Arc, int], ...]
    flow_value: int
    owner: int = field(default=0, compare=False, repr=False)

    def as_dict(self) -> Dict[Arc, int]:
        return dict(self.flows)
