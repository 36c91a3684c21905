from __future__ import annotations

from teamflow.algorithms.push_relabel import PushRelabelMaxFlow
from teamflow.algorithms.types import FlowState, PushRelabelStats

__all__ = ["PushRelabelMaxFlow", "FlowState", "PushRelabelStats"]
