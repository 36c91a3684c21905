"""Error taxonomy shared by the flow network, solver and matching layers.

Operations that edit flow come in two flavours: ``try_*`` methods return a
:class:`FlowEditResult` so callers can branch on expected, preventable
failures, and the plain methods raise the matching exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, cast


class ErrorKind(Enum):
    """Category of a rejected operation."""

    #: Malformed input, e.g. a negative capacity.
    INVALID_ARGUMENT = "invalid_argument"
    #: Operation not allowed in the current flow state.
    INVALID_STATE = "invalid_state"
    #: An assignment refers to a role no requirement describes.
    UNMATCHED_INPUT = "unmatched_input"


class TeamFlowError(Exception):
    """Base class for all teamflow errors."""

    kind: ErrorKind = ErrorKind.INVALID_STATE


class InvalidArgumentError(TeamFlowError, ValueError):
    """Input rejected before any state was mutated."""

    kind = ErrorKind.INVALID_ARGUMENT


class InvalidStateError(TeamFlowError, RuntimeError):
    """Operation conflicts with the current flow or network state."""

    kind = ErrorKind.INVALID_STATE


class UnmatchedAssignmentError(InvalidArgumentError):
    """A committed assignment does not correspond to any known requirement."""

    kind = ErrorKind.UNMATCHED_INPUT


class FlowInvariantError(TeamFlowError, RuntimeError):
    """The solver reached a state its invariants rule out."""


_ERRORS = {
    ErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorKind.INVALID_STATE: InvalidStateError,
    ErrorKind.UNMATCHED_INPUT: UnmatchedAssignmentError,
}


@dataclass(frozen=True)
class FlowEditResult:
    """Outcome of a flow edit.

    Attributes:
        ok: True when the edit was applied.
        kind: Error category when ``ok`` is False.
        message: Human-readable reason for the failure.
    """

    ok: bool
    kind: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls) -> FlowEditResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> FlowEditResult:
        return cls(ok=False, kind=kind, message=message)

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_error(self) -> None:
        """Raise the exception matching ``kind`` if the edit failed."""
        if self.ok:
            return
        raise _ERRORS[cast(ErrorKind, self.kind)](self.message)
