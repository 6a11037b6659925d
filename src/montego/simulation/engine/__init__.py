"""Monte Carlo simulation engine for outcome prediction."""

from montego.simulation.engine.finalizer import (
    finalize_results,
    format_probability,
    shannon_entropy,
)
from montego.simulation.engine.simulator import (
    PHASES,
    MonteCarloSimulator,
    ProgressSnapshot,
    SimulationRun,
    build_snapshot,
    phase_for,
    simulate,
)

__all__ = [
    "MonteCarloSimulator",
    "SimulationRun",
    "ProgressSnapshot",
    "PHASES",
    "build_snapshot",
    "phase_for",
    "simulate",
    "finalize_results",
    "format_probability",
    "shannon_entropy",
]
