"""Flow network graph primitives."""

from __future__ import annotations

from teamflow.graph.flow_network import FlowNetwork
from teamflow.graph.nodes import (
    SINK,
    SOURCE,
    Node,
    SinkNode,
    SourceNode,
    ValueNode,
    node,
)

__all__ = [
    "FlowNetwork",
    "Node",
    "SOURCE",
    "SINK",
    "SourceNode",
    "SinkNode",
    "ValueNode",
    "node",
]
