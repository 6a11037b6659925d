"""Tests for the prediction workflow."""

import asyncio
from unittest.mock import MagicMock

import pytest

from montego.events.resolver import BaseEventResolver, StaticEventResolver
from montego.exceptions import EventNotFoundError, InvalidInputError, RateLimitError
from montego.history import HistoryStore
from montego.service import ANALYZING_PHASE, BUILDING_PHASE, PredictionService
from montego.settings import SettingsManager
from montego.simulation.engine.simulator import MonteCarloSimulator


@pytest.fixture
def resolver(events_file):
    return StaticEventResolver(events_file)


@pytest.fixture
def history(tmp_path):
    return HistoryStore(tmp_path / "history.json")


class TestPredict:
    """Test synchronous predictions."""

    def test_open_event_is_simulated(self, resolver, history):
        service = PredictionService(resolver, MonteCarloSimulator(random_state=1), history=history)

        record = service.predict("Who wins the cup final?", 5000)

        assert record.iterations == 5000
        assert record.top_outcome.name == "Rovers"
        assert sum(o.sim_count for o in record.outcomes) == 5000
        assert len(history) == 1

    def test_past_event_is_not_simulated(self, resolver, history):
        simulator = MagicMock(spec=MonteCarloSimulator)
        service = PredictionService(resolver, simulator, history=history)

        record = service.predict("Who won last year's final?", 5000)

        assert record.already_occurred
        assert record.iterations == 0
        assert record.winner == "Rovers"
        simulator.simulate.assert_not_called()
        assert len(history) == 1

    def test_progress_is_monotonic_and_bounded(self, resolver):
        snapshots = []
        service = PredictionService(
            resolver, MonteCarloSimulator(random_state=2), resolve_progress_pct=10
        )

        service.predict("Who wins the cup final?", 5000, snapshots.append)

        assert snapshots[0].phase == ANALYZING_PHASE
        assert snapshots[1].phase == BUILDING_PHASE
        assert snapshots[1].pct == 10
        pcts = [s.pct for s in snapshots]
        assert pcts == sorted(pcts)
        assert pcts[-1] == 100
        assert all(0 <= p <= 100 for p in pcts)
        assert snapshots[-1].done == 5000

    def test_save_history_preference_off(self, resolver, history, tmp_path):
        settings = SettingsManager(tmp_path / "settings.json")
        settings.set("save_history", False)
        service = PredictionService(resolver, history=history, settings=settings)

        service.predict("Who wins the cup final?", 500)

        assert len(history) == 0

    def test_iterations_default_to_preferences(self, resolver, tmp_path):
        settings = SettingsManager(tmp_path / "settings.json")
        settings.set("default_iterations", 750)
        service = PredictionService(resolver, settings=settings)

        record = service.predict("Who wins the cup final?")

        assert record.iterations == 750

    def test_blank_event(self, resolver):
        with pytest.raises(InvalidInputError):
            PredictionService(resolver).predict("  ", 100)

    def test_invalid_iterations(self, resolver):
        with pytest.raises(InvalidInputError):
            PredictionService(resolver).predict("Who wins the cup final?", 0)

    def test_unknown_event(self, resolver):
        with pytest.raises(EventNotFoundError):
            PredictionService(resolver).predict("Who wins the league?", 100)

    def test_resolver_errors_propagate(self, history):
        class ExhaustedResolver(BaseEventResolver):
            def resolve(self, event):
                raise RateLimitError()

        service = PredictionService(ExhaustedResolver(), history=history)

        with pytest.raises(RateLimitError, match="quota"):
            service.predict("Anything", 100)
        assert len(history) == 0


class TestPredictAsync:
    """Test the coroutine variant."""

    def test_open_event(self, resolver, history):
        snapshots = []
        service = PredictionService(resolver, MonteCarloSimulator(random_state=3), history=history)

        record = asyncio.run(service.predict_async("Who wins the cup final?", 2000, snapshots.append))

        assert record.iterations == 2000
        assert snapshots[-1].pct == 100
        assert len(history) == 1

    def test_past_event(self, resolver):
        record = asyncio.run(PredictionService(resolver).predict_async("Who won last year's final?"))
        assert record.already_occurred
