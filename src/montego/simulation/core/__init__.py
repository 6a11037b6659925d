"""Core simulation models: outcomes, noise and scoring."""

from montego.simulation.core.noise import NoiseGenerator
from montego.simulation.core.outcome import Outcome, OutcomePayload, parse_outcomes
from montego.simulation.core.scoring import score, score_block

__all__ = [
    "Outcome",
    "OutcomePayload",
    "parse_outcomes",
    "NoiseGenerator",
    "score",
    "score_block",
]
