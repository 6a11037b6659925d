"""Pydantic models for event analyses and stored simulation records.

These models mirror the JSON payloads exchanged with an event resolver and
written to the local history file. Field aliases keep the camelCase wire
names while Python code uses snake_case attributes.
"""

import time
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from montego.simulation.core.outcome import Outcome, OutcomePayload

Category = Literal["sports", "politics", "finance", "science", "other"]
Level = Literal["low", "medium", "high"]


class EventAnalysis(BaseModel):
    """A resolver's answer for one event.

    Either the event already happened (winner set, no outcomes needed) or it
    is still open and carries the outcomes to simulate.
    """

    model_config = ConfigDict(populate_by_name=True)

    already_occurred: bool = Field(False, alias="alreadyOccurred")
    event_title: str = Field("", alias="eventTitle")
    category: Category = "other"
    winner: Optional[str] = None
    winner_emoji: Optional[str] = Field(None, alias="winnerEmoji")
    detail: Optional[str] = None
    outcomes: list[OutcomePayload] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    confidence_level: Optional[Level] = Field(None, alias="confidenceLevel")
    data_quality: Optional[Level] = Field(None, alias="dataQuality")

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v):
        """Map unknown categories to 'other'."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v in ("sports", "politics", "finance", "science"):
                return v
        return "other"

    @model_validator(mode="after")
    def check_outcomes(self) -> "EventAnalysis":
        """Open events need at least one outcome to simulate."""
        if not self.already_occurred and not self.outcomes:
            raise ValueError("An open event requires at least one outcome")
        return self

    def get_outcomes(self) -> list[Outcome]:
        """Outcomes as simulator records, in resolver order."""
        return [payload.to_outcome() for payload in self.outcomes]


class SimulationRecord(EventAnalysis):
    """A completed prediction as stored in history."""

    event: str
    iterations: int = Field(0, ge=0)
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))

    @classmethod
    def from_analysis(
        cls,
        event: str,
        analysis: EventAnalysis,
        outcomes: Optional[list[Outcome]] = None,
        iterations: int = 0,
        timestamp: Optional[int] = None,
    ) -> "SimulationRecord":
        """Combine a resolver analysis with simulation output.

        Args:
            event: Event text as entered by the user
            analysis: Resolver answer
            outcomes: Ranked simulated outcomes; the analysis outcomes are kept if None
            iterations: Iterations simulated, 0 for already-occurred events
            timestamp: Milliseconds since epoch, now if omitted

        Returns:
            New SimulationRecord
        """
        data = analysis.model_dump()
        if outcomes is not None:
            data["outcomes"] = [OutcomePayload.from_outcome(o) for o in outcomes]
        data["event"] = event
        data["iterations"] = iterations
        if timestamp is not None:
            data["timestamp"] = timestamp
        return cls.model_validate(data)

    @property
    def top_outcome(self) -> Optional[OutcomePayload]:
        """Highest ranked outcome, if any."""
        return self.outcomes[0] if self.outcomes else None

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys for storage."""
        return self.model_dump(by_alias=True, exclude_none=True)
