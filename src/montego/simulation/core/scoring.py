"""Score an outcome for one simulated iteration."""

import numpy as np


def score(base_strength: float, volatility: float, z: float) -> float:
    """Perturb base strength by noise scaled to half the volatility.

    Negative scores are valid and are not clamped.

    Args:
        base_strength: Outcome strength (0-100)
        volatility: Outcome volatility (0-100)
        z: Standard-normal noise sample

    Returns:
        Score used for the iteration's argmax
    """
    return base_strength + z * (volatility / 2)


def score_block(
    strengths: np.ndarray,
    volatilities: np.ndarray,
    noise: np.ndarray,
) -> np.ndarray:
    """Vectorized score for a chunk of iterations.

    Args:
        strengths: Shape (n_outcomes,)
        volatilities: Shape (n_outcomes,)
        noise: Shape (n_iterations, n_outcomes)

    Returns:
        Scores with shape (n_iterations, n_outcomes)
    """
    return strengths + noise * (volatilities / 2)
