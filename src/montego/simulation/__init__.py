"""Outcome simulation engine.

This module provides Monte Carlo simulation of competing event outcomes,
estimating each outcome's win probability from its strength and volatility.

Main Components:
- Core: Outcome records, noise generation and scoring
- Engine: Chunked simulator with progress reporting and result finalization
"""

from montego.simulation.core.noise import NoiseGenerator
from montego.simulation.core.outcome import Outcome
from montego.simulation.core.scoring import score
from montego.simulation.engine.finalizer import finalize_results, shannon_entropy
from montego.simulation.engine.simulator import (
    PHASES,
    MonteCarloSimulator,
    ProgressSnapshot,
    SimulationRun,
    simulate,
)

__all__ = [
    # Core models
    "Outcome",
    "NoiseGenerator",
    "score",
    # Engine
    "MonteCarloSimulator",
    "SimulationRun",
    "ProgressSnapshot",
    "PHASES",
    "simulate",
    "finalize_results",
    "shannon_entropy",
]
