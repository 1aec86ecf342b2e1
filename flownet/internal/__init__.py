"""Internal data structures shared by the flow solvers.

``SimpleQueue`` backs every breadth-first search; ``Csr`` lays out the
residual graph rebuilt by the min-cost-flow solver on each solve.
"""

from flownet.internal.csr import Csr
from flownet.internal.queue import SimpleQueue

__all__ = ["Csr", "SimpleQueue"]
