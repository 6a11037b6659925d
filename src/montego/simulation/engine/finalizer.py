"""Turn raw win tallies into ranked outcome probabilities."""

import math
from typing import Sequence

from montego.simulation.core.outcome import Outcome


def format_probability(count: int, total: int) -> str:
    """Format count/total as a percentage string with one decimal."""
    return f"{count / total * 100:.1f}"


def finalize_results(
    outcomes: Sequence[Outcome],
    tally: Sequence[int],
    total: int,
) -> list[Outcome]:
    """Attach simulation counts to outcomes and rank them.

    Args:
        outcomes: Outcomes in input order
        tally: Win count per outcome, aligned with outcomes
        total: Number of iterations that produced the tally

    Returns:
        New outcome records ordered by descending sim_prob; equal
        probabilities keep their input order
    """
    results = [
        outcome.with_result(int(count), format_probability(int(count), total))
        for outcome, count in zip(outcomes, tally)
    ]
    # sorted() is stable, so ties stay in input order
    return sorted(results, key=lambda o: float(o.sim_prob), reverse=True)


def shannon_entropy(outcomes: Sequence[Outcome]) -> float:
    """Entropy in bits of the simulated win distribution.

    Zero means one outcome took every iteration; log2(n) means an even split.
    """
    entropy = 0.0
    for outcome in outcomes:
        p = outcome.probability
        if p > 0:
            entropy -= p * math.log2(p)
    return entropy
