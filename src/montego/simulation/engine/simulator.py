"""Chunked Monte Carlo outcome simulator."""

import asyncio
from dataclasses import dataclass
import math
import time
from typing import Any, Callable, Optional, Sequence, Union

import numpy as np
import structlog

from montego.exceptions import InvalidInputError
from montego.simulation.core.noise import NoiseGenerator
from montego.simulation.core.outcome import Outcome
from montego.simulation.core.scoring import score_block
from montego.simulation.engine.finalizer import finalize_results

logger = structlog.get_logger(__name__)

PHASES: tuple[str, ...] = (
    "Initializing scenarios…",
    "Calibrating variables…",
    "Running Monte Carlo iterations…",
    "Simulating edge cases…",
    "Aggregating results…",
    "Finalizing predictions…",
)

MIN_CHUNK_SIZE = 500
CHUNK_DIVISOR = 100


@dataclass(frozen=True)
class ProgressSnapshot:
    """Progress of a running simulation.

    Attributes:
        done: Iterations completed so far
        pct: Integer percent complete (0-100)
        rate: Iterations per elapsed second, 0 if no time has elapsed
        eta: Seconds remaining, 0 if rate is 0
        phase: Label for the percentile band pct falls into
    """

    done: int
    pct: int
    rate: int
    eta: int
    phase: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "done": self.done,
            "pct": self.pct,
            "rate": self.rate,
            "eta": self.eta,
            "phase": self.phase,
        }


ProgressCallback = Callable[[ProgressSnapshot], None]


def phase_for(pct: int) -> str:
    """Look up the phase label for a percent-complete value.

    Equivalent to floor(pct / (100 / len(PHASES))) in exact arithmetic.
    """
    index = pct * len(PHASES) // 100
    return PHASES[min(index, len(PHASES) - 1)]


def build_snapshot(done: int, total: int, elapsed: float) -> ProgressSnapshot:
    """Compute a progress snapshot.

    Args:
        done: Iterations completed
        total: Iterations requested
        elapsed: Seconds since the run started

    Returns:
        ProgressSnapshot for the current state
    """
    pct = done * 100 // total
    rate = math.floor(done / elapsed) if elapsed > 0 else 0
    eta = math.ceil((total - done) / rate) if rate > 0 else 0
    return ProgressSnapshot(done=done, pct=pct, rate=rate, eta=eta, phase=phase_for(pct))


class SimulationRun:
    """State of one simulate() call.

    Owns the tally buffer and the noise generator for its lifetime; the tally
    only leaves the run through finalize().
    """

    def __init__(
        self,
        outcomes: Sequence[Outcome],
        total: int,
        chunk_size: int,
        noise: NoiseGenerator,
    ) -> None:
        self.outcomes = list(outcomes)
        self.total = total
        self.chunk_size = chunk_size
        self.noise = noise
        self.done = 0
        self.logged_decile = 0
        self._strengths = np.array([o.base_strength for o in self.outcomes], dtype=float)
        self._volatilities = np.array([o.volatility for o in self.outcomes], dtype=float)
        self._tally = np.zeros(len(self.outcomes), dtype=np.int64)
        self._start = time.perf_counter()

    @property
    def is_complete(self) -> bool:
        """Check if every requested iteration has run."""
        return self.done >= self.total

    @property
    def elapsed(self) -> float:
        """Seconds since the run started."""
        return time.perf_counter() - self._start

    def run_chunk(self) -> ProgressSnapshot:
        """Run the next chunk of iterations synchronously.

        Returns:
            Snapshot taken after the chunk
        """
        batch = min(self.chunk_size, self.total - self.done)
        n_outcomes = len(self.outcomes)

        noise = self.noise.sample_block((batch, n_outcomes))
        scores = score_block(self._strengths, self._volatilities, noise)
        # argmax returns the first index on ties
        winners = np.argmax(scores, axis=1)
        self._tally += np.bincount(winners, minlength=n_outcomes)

        self.done += batch
        return build_snapshot(self.done, self.total, self.elapsed)

    def finalize(self) -> list[Outcome]:
        """Rank outcomes from the completed tally."""
        return finalize_results(self.outcomes, self._tally, self.total)


class MonteCarloSimulator:
    """Estimate outcome win probabilities by Monte Carlo sampling.

    Each call to simulate() samples noisy scores for every outcome, counts
    which outcome scored highest per iteration and reports progress after
    every chunk of iterations.
    """

    def __init__(
        self,
        random_state: Optional[int] = None,
        min_chunk_size: int = MIN_CHUNK_SIZE,
        chunk_divisor: int = CHUNK_DIVISOR,
    ) -> None:
        """Initialize simulator.

        Args:
            random_state: Random seed for reproducibility
            min_chunk_size: Lower bound on iterations per chunk
            chunk_divisor: Target number of chunks for large runs
        """
        self.random_state = random_state
        self.min_chunk_size = min_chunk_size
        self.chunk_divisor = chunk_divisor
        self._seed_sequence = np.random.SeedSequence(random_state)

    def chunk_size(self, total: int) -> int:
        """Iterations per chunk for a run of the given size."""
        return max(self.min_chunk_size, total // self.chunk_divisor)

    def simulate(
        self,
        outcomes: Sequence[Union[Outcome, dict[str, Any]]],
        total: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[Outcome]:
        """Run the simulation to completion.

        Args:
            outcomes: Non-empty list of outcomes (or their wire dicts)
            total: Number of iterations
            on_progress: Called with a snapshot after every chunk

        Returns:
            Outcomes with sim_count and sim_prob set, ranked by probability

        Raises:
            InvalidInputError: If outcomes is empty or total is not a positive int
        """
        run = self._start_run(outcomes, total)
        while not run.is_complete:
            self._report(run, run.run_chunk(), on_progress)
        return self._finish(run)

    async def simulate_async(
        self,
        outcomes: Sequence[Union[Outcome, dict[str, Any]]],
        total: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[Outcome]:
        """Run the simulation, yielding to the event loop between chunks.

        Same contract as simulate().
        """
        run = self._start_run(outcomes, total)
        while not run.is_complete:
            self._report(run, run.run_chunk(), on_progress)
            if not run.is_complete:
                await asyncio.sleep(0)
        return self._finish(run)

    def _start_run(
        self,
        outcomes: Sequence[Union[Outcome, dict[str, Any]]],
        total: int,
    ) -> SimulationRun:
        if isinstance(total, bool) or not isinstance(total, (int, np.integer)):
            raise InvalidInputError(f"total must be an integer, got {total!r}")
        if total < 1:
            raise InvalidInputError(f"total must be >= 1, got {total}")
        if not outcomes:
            raise InvalidInputError("At least one outcome is required to pick a winner")

        records = [o if isinstance(o, Outcome) else Outcome.from_dict(o) for o in outcomes]
        total = int(total)
        chunk_size = self.chunk_size(total)

        # Independent random state per run
        child_seed = self._seed_sequence.spawn(1)[0]
        noise = NoiseGenerator(rng=np.random.default_rng(child_seed))

        logger.info(
            "simulation_started",
            total=total,
            n_outcomes=len(records),
            chunk_size=chunk_size,
        )
        return SimulationRun(records, total, chunk_size, noise)

    def _report(
        self,
        run: SimulationRun,
        snapshot: ProgressSnapshot,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        if snapshot.pct // 10 > run.logged_decile:
            run.logged_decile = snapshot.pct // 10
            logger.debug("simulation_progress", done=snapshot.done, total=run.total, pct=snapshot.pct)
        if on_progress is not None:
            on_progress(snapshot)

    def _finish(self, run: SimulationRun) -> list[Outcome]:
        results = run.finalize()
        logger.info(
            "simulation_complete",
            total=run.total,
            duration_ms=round(run.elapsed * 1000, 2),
            leader=results[0].name,
            leader_prob=results[0].sim_prob,
        )
        return results


def simulate(
    outcomes: Sequence[Union[Outcome, dict[str, Any]]],
    total: int,
    on_progress: Optional[ProgressCallback] = None,
    random_state: Optional[int] = None,
) -> list[Outcome]:
    """Run a one-off simulation with a fresh simulator."""
    return MonteCarloSimulator(random_state=random_state).simulate(outcomes, total, on_progress)
