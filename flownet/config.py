"""Configuration classes for flownet solvers."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class FlowConfig:
    """Configuration shared by the max-flow and min-cost-flow solvers."""

    # Largest vertex count a graph may be created with
    max_vertices: int = 10**8

    # Signed integer width that aggregate flow/cost values must fit in.
    # None leaves Python integers unbounded.
    int_width: Optional[int] = None

    # Drain vertices reached at the current minimum distance through a FIFO
    # queue before touching the heap in the cost-flow Dijkstra
    zero_distance_fast_path: bool = True

    def __post_init__(self) -> None:
        if self.max_vertices < 0:
            raise ValueError(
                f"max_vertices must be non-negative, got {self.max_vertices}"
            )
        if self.int_width is not None and self.int_width < 2:
            raise ValueError(f"int_width must be at least 2, got {self.int_width}")

    def fits(self, value: int) -> bool:
        """Return True if ``value`` is representable in the configured width."""
        if self.int_width is None:
            return True
        bound = 1 << (self.int_width - 1)
        return -bound <= value < bound

    def check(self, value: int, what: str) -> int:
        """Return ``value`` unchanged, raising OverflowError if it does not fit.

        Args:
            value: Aggregate flow or cost to check.
            what: Short description used in the error message.

        Raises:
            OverflowError: If ``value`` exceeds the configured signed width.
        """
        if not self.fits(value):
            raise OverflowError(
                f"{what} {value} does not fit in a signed {self.int_width}-bit integer"
            )
        return value


# Global configuration instance
FLOW_CONFIG = FlowConfig()
