"""Node identities used as vertices of a flow network.

Three kinds exist: the source marker, the sink marker, and value nodes that
wrap a caller-supplied payload (an applicant, a requirement, ...). Value
nodes are equal iff their payloads are equal, so callers can look nodes up
again by wrapping the same domain object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Union


@dataclass(frozen=True)
class SourceNode:
    """Marker for the unique source of a flow network."""

    def __repr__(self) -> str:
        return "SOURCE"


@dataclass(frozen=True)
class SinkNode:
    """Marker for the unique sink of a flow network."""

    def __repr__(self) -> str:
        return "SINK"


@dataclass(frozen=True)
class ValueNode:
    """Node tagged with a hashable payload.

    Attributes:
        value: Payload the node stands for. Never mutated by the network.
    """

    value: Any

    def __repr__(self) -> str:
        return f"ValueNode({self.value!r})"


Node = Union[SourceNode, SinkNode, ValueNode]

SOURCE = SourceNode()
SINK = SinkNode()


def node(value: Hashable) -> ValueNode:
    """Wrap ``value`` in a :class:`ValueNode`.

    Raises:
        TypeError: If ``value`` is not hashable.
    """
    hash(value)
    return ValueNode(value)
