"""Presentation helpers for simulation output.

Covers iteration presets, overall progress scaling, share text and tabular
export of simulation records.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence, Union

import pandas as pd

from montego.events.models import SimulationRecord
from montego.exceptions import InvalidInputError
from montego.simulation.engine.finalizer import shannon_entropy
from montego.simulation.engine.simulator import ProgressSnapshot


@dataclass(frozen=True)
class IterationPreset:
    """A selectable iteration count."""

    value: int
    label: str
    speed: str


ITERATION_PRESETS: tuple[IterationPreset, ...] = (
    IterationPreset(100, "100", "⚡ instant"),
    IterationPreset(1_000, "1K", "⚡ fast"),
    IterationPreset(10_000, "10K", "★ default"),
    IterationPreset(100_000, "100K", "⏱ ~3s"),
    IterationPreset(1_000_000, "1M", "⏱ ~8s"),
    IterationPreset(10_000_000, "10M", "🔬 ultra"),
)


def parse_iterations(value: Union[str, int]) -> int:
    """Parse an iteration count given as a number or a preset label.

    Args:
        value: e.g. 5000, "5000", "10K" or "1M"

    Returns:
        Positive iteration count

    Raises:
        InvalidInputError: If the value is not a positive count
    """
    if isinstance(value, int) and not isinstance(value, bool):
        count = value
    else:
        text = str(value).strip().upper().replace(",", "").replace("_", "")
        for preset in ITERATION_PRESETS:
            if text == preset.label:
                return preset.value
        try:
            count = int(text)
        except ValueError:
            raise InvalidInputError(f"Invalid iteration count: {value!r}") from None
    if count < 1:
        raise InvalidInputError(f"Iteration count must be >= 1, got {count}")
    return count


def rescale_progress(snapshot: ProgressSnapshot, start_pct: int) -> ProgressSnapshot:
    """Map simulation progress into the band after event resolution.

    Args:
        snapshot: Core simulator snapshot (pct 0-100)
        start_pct: Overall percent already used by resolution (0-100)

    Returns:
        Snapshot whose pct runs from start_pct to 100
    """
    start_pct = max(0, min(100, start_pct))
    pct = start_pct + snapshot.pct * (100 - start_pct) // 100
    return replace(snapshot, pct=pct)


def format_share_text(record: SimulationRecord) -> str:
    """Build the text shared for a prediction or a known result."""
    if record.already_occurred:
        return (
            f"🎲 MonteGo Result\n\n\"{record.event}\"\n\n"
            f"✅ Outcome: {record.winner_emoji or ''} {record.winner or 'Unknown'}\n\n#MonteGo"
        )

    top = record.top_outcome
    top_line = f"{top.emoji} {top.name} ({top.sim_prob}%)" if top else "n/a"
    return (
        f"🎲 MonteGo Prediction\n\n\"{record.event}\"\n\n"
        f"Top Pick: {top_line}\n\n"
        f"Ran {record.iterations:,} simulations.\n\n#MonteGo #MonteCarlo"
    )


def record_entropy(record: SimulationRecord) -> float:
    """Entropy in bits of a record's simulated distribution, 0 for past events."""
    if record.already_occurred:
        return 0.0
    return shannon_entropy([payload.to_outcome() for payload in record.outcomes])


def results_frame(record: SimulationRecord) -> pd.DataFrame:
    """Ranked outcomes of a record as a DataFrame."""
    rows = [
        {
            "rank": rank,
            "name": o.name,
            "short_name": o.short_name,
            "emoji": o.emoji,
            "base_strength": o.base_strength,
            "volatility": o.volatility,
            "sim_count": o.sim_count,
            "sim_prob": float(o.sim_prob) if o.sim_prob is not None else None,
            "detail": o.detail,
        }
        for rank, o in enumerate(record.outcomes, start=1)
    ]
    columns = [
        "rank", "name", "short_name", "emoji", "base_strength",
        "volatility", "sim_count", "sim_prob", "detail",
    ]
    return pd.DataFrame(rows, columns=columns)


def history_frame(records: Sequence[SimulationRecord]) -> pd.DataFrame:
    """One row per stored record, newest first."""
    rows = []
    for record in records:
        top = record.top_outcome
        rows.append({
            "timestamp": datetime.fromtimestamp(record.timestamp / 1000, tz=timezone.utc),
            "event": record.event,
            "event_title": record.event_title,
            "category": record.category,
            "already_occurred": record.already_occurred,
            "iterations": record.iterations,
            "top_pick": record.winner if record.already_occurred else (top.name if top else None),
            "top_prob": float(top.sim_prob) if top and top.sim_prob is not None else None,
        })
    columns = [
        "timestamp", "event", "event_title", "category",
        "already_occurred", "iterations", "top_pick", "top_prob",
    ]
    return pd.DataFrame(rows, columns=columns)


def export_csv(frame: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a frame to CSV, creating parent directories.

    Returns:
        Path written
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, index=False)
    return output
