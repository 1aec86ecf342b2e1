"""Public edge records and argument validation shared by the solvers."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral

#: Vertex index in ``[0, n)``.
Vertex = int

#: Edge capacity and flow amount. Always a non-negative integer.
Cap = int

#: Per-unit edge cost. Always a non-negative integer on input.
Cost = int


@dataclass(frozen=True)
class MfEdge:
    """Logical edge of a max-flow graph, reconstructed from its residual arcs.

    Attributes:
        src: Tail vertex.
        dst: Head vertex.
        cap: Original capacity (forward plus backward residual).
        flow: Flow currently carried (backward residual).
    """

    src: Vertex
    dst: Vertex
    cap: Cap
    flow: Cap


@dataclass(frozen=True)
class McfEdge:
    """Edge of a min-cost-flow graph.

    Attributes:
        src: Tail vertex.
        dst: Head vertex.
        cap: Capacity, fixed at creation.
        flow: Flow currently carried, ``0 <= flow <= cap``.
        cost: Per-unit cost, fixed at creation.
    """

    src: Vertex
    dst: Vertex
    cap: Cap
    flow: Cap
    cost: Cost


def require_int(value: object, name: str) -> int:
    """Return ``value`` as ``int``, rejecting bools, floats and other types.

    Raises:
        ValueError: If ``value`` is not an integer.
    """
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return int(value)


def require_vertex(v: object, n: int, name: str = "vertex") -> Vertex:
    """Validate a vertex index against the vertex count ``n``.

    Raises:
        ValueError: If ``v`` is not an integer.
        IndexError: If ``v`` is outside ``[0, n)``.
    """
    v = require_int(v, name)
    if not 0 <= v < n:
        raise IndexError(f"{name} {v} out of range for graph with {n} vertices")
    return v


def require_non_negative(value: object, name: str) -> int:
    """Validate a capacity, cost or limit that must be ``>= 0``.

    Raises:
        ValueError: If ``value`` is not an integer or is negative.
    """
    value = require_int(value, name)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value
