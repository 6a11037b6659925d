"""Unit tests for result finalization."""

import math

import numpy as np
import pytest

from montego.simulation.core.outcome import Outcome
from montego.simulation.engine.finalizer import (
    finalize_results,
    format_probability,
    shannon_entropy,
)


@pytest.fixture
def three_outcomes():
    return [
        Outcome(name="A", base_strength=50, volatility=10),
        Outcome(name="B", base_strength=50, volatility=10),
        Outcome(name="C", base_strength=50, volatility=10),
    ]


class TestFormatProbability:
    def test_one_decimal(self):
        assert format_probability(1, 3) == "33.3"
        assert format_probability(2, 3) == "66.7"
        assert format_probability(0, 10) == "0.0"
        assert format_probability(10, 10) == "100.0"


class TestFinalizeResults:
    """Test counts-to-probabilities conversion."""

    def test_sets_counts_and_probabilities(self, three_outcomes):
        results = finalize_results(three_outcomes, [200, 700, 100], 1000)

        assert [o.name for o in results] == ["B", "A", "C"]
        assert [o.sim_count for o in results] == [700, 200, 100]
        assert [o.sim_prob for o in results] == ["70.0", "20.0", "10.0"]

    def test_ties_keep_input_order(self, three_outcomes):
        results = finalize_results(three_outcomes, [250, 500, 250], 1000)
        assert [o.name for o in results] == ["B", "A", "C"]

    def test_accepts_numpy_tally(self, three_outcomes):
        results = finalize_results(three_outcomes, np.array([1, 2, 3]), 6)
        assert isinstance(results[0].sim_count, int)
        assert results[0].name == "C"

    def test_original_records_untouched(self, three_outcomes):
        finalize_results(three_outcomes, [1, 1, 1], 3)
        assert all(o.sim_prob is None for o in three_outcomes)


class TestShannonEntropy:
    """Test entropy of simulated distributions."""

    def test_certain_outcome_has_zero_entropy(self):
        outcomes = [
            Outcome(name="A", sim_count=10, sim_prob="100.0"),
            Outcome(name="B", sim_count=0, sim_prob="0.0"),
        ]
        assert shannon_entropy(outcomes) == 0.0

    def test_even_split_is_one_bit(self):
        outcomes = [
            Outcome(name="A", sim_count=5, sim_prob="50.0"),
            Outcome(name="B", sim_count=5, sim_prob="50.0"),
        ]
        assert shannon_entropy(outcomes) == pytest.approx(1.0)

    def test_four_way_split(self):
        outcomes = [Outcome(name=str(i), sim_count=1, sim_prob="25.0") for i in range(4)]
        assert shannon_entropy(outcomes) == pytest.approx(math.log2(4))
