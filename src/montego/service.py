"""Prediction workflow: resolve an event, simulate it and record the result."""

import asyncio
from typing import Optional

import structlog

from montego.config import get_config
from montego.events.models import EventAnalysis, SimulationRecord
from montego.events.resolver import BaseEventResolver
from montego.exceptions import InvalidInputError
from montego.history import HistoryStore
from montego.reporting import rescale_progress
from montego.settings import SettingsManager
from montego.simulation.engine.simulator import (
    MonteCarloSimulator,
    ProgressCallback,
    ProgressSnapshot,
)

logger = structlog.get_logger(__name__)

ANALYZING_PHASE = "Analyzing event context…"
BUILDING_PHASE = "Building probability model…"


class PredictionService:
    """Run predictions for free-text events.

    The resolver supplies outcomes, the simulator estimates probabilities and
    the optional history store keeps the result when the save_history
    preference is on.
    """

    def __init__(
        self,
        resolver: BaseEventResolver,
        simulator: Optional[MonteCarloSimulator] = None,
        history: Optional[HistoryStore] = None,
        settings: Optional[SettingsManager] = None,
        resolve_progress_pct: Optional[int] = None,
    ) -> None:
        """Initialize prediction service.

        Args:
            resolver: Source of event analyses
            simulator: Simulator to use; a configured one is created if omitted
            history: Where to store completed records; nothing is stored if None
            settings: User preferences; defaults are used if None
            resolve_progress_pct: Overall percent reported once resolution finishes
        """
        config = get_config().simulation
        self.resolver = resolver
        self.simulator = simulator or MonteCarloSimulator(
            random_state=config.random_seed,
            min_chunk_size=config.min_chunk_size,
            chunk_divisor=config.chunk_divisor,
        )
        self.history = history
        self.settings = settings
        self.resolve_progress_pct = (
            resolve_progress_pct if resolve_progress_pct is not None else config.resolve_progress_pct
        )

    def _iterations(self, iterations: Optional[int]) -> int:
        if iterations is not None:
            return iterations
        if self.settings is not None:
            return self.settings.default_iterations
        return get_config().simulation.default_iterations

    @staticmethod
    def _check_event(event: str) -> str:
        if not event or not event.strip():
            raise InvalidInputError("Event description must not be empty")
        return event.strip()

    @staticmethod
    def _emit(on_progress: Optional[ProgressCallback], pct: int, phase: str) -> None:
        if on_progress is not None:
            on_progress(ProgressSnapshot(done=0, pct=pct, rate=0, eta=0, phase=phase))

    def _scaled(self, on_progress: Optional[ProgressCallback]) -> Optional[ProgressCallback]:
        if on_progress is None:
            return None

        def forward(snapshot: ProgressSnapshot) -> None:
            on_progress(rescale_progress(snapshot, self.resolve_progress_pct))

        return forward

    def predict(
        self,
        event: str,
        iterations: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SimulationRecord:
        """Resolve and simulate an event.

        Args:
            event: Free-text event description
            iterations: Iterations to simulate; falls back to preferences/config
            on_progress: Receives overall progress, monotonic within 0-100

        Returns:
            Completed SimulationRecord

        Raises:
            InvalidInputError: For a blank event or invalid iteration count
            ResolverError: If the event cannot be resolved
        """
        event = self._check_event(event)
        total = self._iterations(iterations)
        self._emit(on_progress, 0, ANALYZING_PHASE)

        analysis = self.resolver.resolve(event)
        if analysis.already_occurred:
            return self._complete(event, analysis, None, 0)

        self._emit(on_progress, self.resolve_progress_pct, BUILDING_PHASE)
        outcomes = self.simulator.simulate(analysis.get_outcomes(), total, self._scaled(on_progress))
        return self._complete(event, analysis, outcomes, total)

    async def predict_async(
        self,
        event: str,
        iterations: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SimulationRecord:
        """Coroutine variant of predict() that yields between simulation chunks."""
        event = self._check_event(event)
        total = self._iterations(iterations)
        self._emit(on_progress, 0, ANALYZING_PHASE)

        analysis = await asyncio.to_thread(self.resolver.resolve, event)
        if analysis.already_occurred:
            return self._complete(event, analysis, None, 0)

        self._emit(on_progress, self.resolve_progress_pct, BUILDING_PHASE)
        outcomes = await self.simulator.simulate_async(
            analysis.get_outcomes(), total, self._scaled(on_progress)
        )
        return self._complete(event, analysis, outcomes, total)

    def _complete(
        self,
        event: str,
        analysis: EventAnalysis,
        outcomes,
        iterations: int,
    ) -> SimulationRecord:
        record = SimulationRecord.from_analysis(event, analysis, outcomes=outcomes, iterations=iterations)
        save = self.settings.save_history if self.settings is not None else True
        if self.history is not None and save:
            self.history.add(record)
        logger.info(
            "prediction_complete",
            event_text=event,
            already_occurred=record.already_occurred,
            iterations=iterations,
        )
        return record
