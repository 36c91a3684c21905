"""Configuration classes for teamflow components."""

from dataclasses import dataclass

#: Active-node selection disciplines understood by the push-relabel solver.
SELECTIONS = ("fifo", "highest_label")


@dataclass
class SolverConfig:
    """Configuration for the push-relabel max-flow solver."""

    # Order in which active nodes are discharged
    selection: str = "fifo"

    # Heights never exceed height_bound_factor * |V| - 1
    height_bound_factor: int = 2

    def validate(self) -> None:
        """Raise ValueError for settings the solver cannot run with."""
        if self.selection not in SELECTIONS:
            raise ValueError(
                f"Unknown selection '{self.selection}'. "
                f"Expected one of {list(SELECTIONS)}"
            )
        if self.height_bound_factor < 2:
            raise ValueError("height_bound_factor must be at least 2")

    def height_bound(self, node_count: int) -> int:
        """Largest height a node may reach in a network with node_count nodes."""
        return self.height_bound_factor * node_count - 1


# Global configuration instance
SOLVER_CONFIG = SolverConfig()
