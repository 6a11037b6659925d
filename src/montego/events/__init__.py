"""Event resolution and simulation record models."""

from montego.events.models import EventAnalysis, OutcomePayload, SimulationRecord
from montego.events.resolver import BaseEventResolver, StaticEventResolver

__all__ = [
    "EventAnalysis",
    "OutcomePayload",
    "SimulationRecord",
    "BaseEventResolver",
    "StaticEventResolver",
]
