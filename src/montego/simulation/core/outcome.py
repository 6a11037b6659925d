"""Outcome records for event simulation and their validated wire form."""

from dataclasses import dataclass, replace
import math
import numbers
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from montego.exceptions import InvalidInputError


@dataclass(frozen=True)
class Outcome:
    """A candidate result of a simulated event.

    Attributes:
        name: Display label
        short_name: Abbreviated label
        base_strength: Central tendency of the outcome's score (0-100)
        volatility: Spread of the random perturbation around base_strength (0-100)
        detail: Free-text rationale
        emoji: Icon tag
        sim_count: Iterations won, None before simulation
        sim_prob: Win percentage with one decimal, None before simulation
    """

    name: str
    short_name: str = ""
    base_strength: float = 50.0
    volatility: float = 0.0
    detail: str = ""
    emoji: str = ""
    sim_count: Optional[int] = None
    sim_prob: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate strength and volatility."""
        for label, value in (
            ("base_strength", self.base_strength),
            ("volatility", self.volatility),
        ):
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidInputError(f"{label} must be a number, got {value!r}")
            if not math.isfinite(value) or not 0 <= value <= 100:
                raise InvalidInputError(f"{label} must be 0-100, got {value}")
        if self.sim_count is not None and self.sim_count < 0:
            raise InvalidInputError(f"sim_count must be >= 0, got {self.sim_count}")

    @property
    def probability(self) -> float:
        """Win probability as a fraction (0.0-1.0), 0.0 before simulation."""
        if self.sim_prob is None:
            return 0.0
        return float(self.sim_prob) / 100

    def with_result(self, sim_count: int, sim_prob: str) -> "Outcome":
        """Return a copy carrying simulation results."""
        return replace(self, sim_count=sim_count, sim_prob=sim_prob)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase wire keys."""
        data: dict[str, Any] = {
            "name": self.name,
            "shortName": self.short_name,
            "baseStrength": self.base_strength,
            "volatility": self.volatility,
            "detail": self.detail,
            "emoji": self.emoji,
        }
        if self.sim_count is not None:
            data["simCount"] = self.sim_count
        if self.sim_prob is not None:
            data["simProb"] = self.sim_prob
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Outcome":
        """Build an outcome from its wire form (camelCase or snake_case keys).

        Raises:
            InvalidInputError: If the payload is not a valid outcome
        """
        try:
            payload = OutcomePayload.model_validate(data)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid outcome: {e}") from e
        return payload.to_outcome()


class OutcomePayload(BaseModel):
    """Outcome as it appears on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    short_name: str = Field("", alias="shortName")
    base_strength: float = Field(..., alias="baseStrength", ge=0, le=100)
    volatility: float = Field(..., ge=0, le=100)
    detail: str = ""
    emoji: str = ""
    sim_count: Optional[int] = Field(None, alias="simCount", ge=0)
    sim_prob: Optional[str] = Field(None, alias="simProb")

    def to_outcome(self) -> Outcome:
        """Convert to the simulator's outcome record."""
        return Outcome(
            name=self.name,
            short_name=self.short_name,
            base_strength=self.base_strength,
            volatility=self.volatility,
            detail=self.detail,
            emoji=self.emoji,
            sim_count=self.sim_count,
            sim_prob=self.sim_prob,
        )

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "OutcomePayload":
        """Build a payload from a simulator outcome."""
        return cls.model_validate(outcome.to_dict())


_OUTCOME_LIST = TypeAdapter(list[OutcomePayload])


def parse_outcomes(raw: Any) -> list[Outcome]:
    """Validate a JSON list of wire outcomes.

    Args:
        raw: Decoded JSON, expected to be a list of outcome objects

    Returns:
        Outcome records in input order

    Raises:
        InvalidInputError: If raw is not a list of valid outcomes
    """
    try:
        payloads = _OUTCOME_LIST.validate_python(raw)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid outcomes: {e}") from e
    return [payload.to_outcome() for payload in payloads]
