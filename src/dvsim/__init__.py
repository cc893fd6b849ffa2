"""Distance-vector routing convergence simulator."""

from dvsim.core.metric import INFINITE
from dvsim.core.simulation import SimulationResult, build_topology, run_simulation
from dvsim.core.types import RunStatus

__all__ = [
    "INFINITE",
    "RunStatus",
    "SimulationResult",
    "build_topology",
    "run_simulation",
]
