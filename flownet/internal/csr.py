"""Compressed sparse row layout of an edge list."""

from __future__ import annotations

from typing import Generic, List, Sequence, Tuple, TypeVar

E = TypeVar("E")


class Csr(Generic[E]):
    """Static adjacency built from ``(from, payload)`` pairs by counting sort.

    Payloads leaving vertex ``v`` occupy ``elist[start[v]:start[v + 1]]`` in
    the order they appear in the input.

    Attributes:
        start: Out-degree prefix sums, length ``n + 1``.
        elist: Payloads grouped by source vertex.
    """

    def __init__(self, n: int, edges: Sequence[Tuple[int, E]], zero: E) -> None:
        """Build the layout in two linear passes.

        Args:
            n: Number of vertices.
            edges: ``(from, payload)`` pairs with ``0 <= from < n``.
            zero: Placeholder stored in every slot before the scatter pass.

        Raises:
            ValueError: If a source vertex is outside ``[0, n)``.
        """
        start = [0] * (n + 1)
        for frm, _ in edges:
            if not 0 <= frm < n:
                raise ValueError(f"Edge source {frm} out of range for {n} vertices")
            start[frm + 1] += 1
        for i in range(1, n + 1):
            start[i] += start[i - 1]

        elist: List[E] = [zero] * len(edges)
        counter = start[:]
        for frm, payload in edges:
            elist[counter[frm]] = payload
            counter[frm] += 1

        self.start: List[int] = start
        self.elist: List[E] = elist

    def __len__(self) -> int:
        return len(self.elist)

    def arcs(self, v: int) -> range:
        """Index range of the payloads leaving ``v`` inside ``elist``."""
        return range(self.start[v], self.start[v + 1])
