"""Event resolvers supply the outcomes a simulation starts from.

A resolver decides whether an event has already happened and, if not, which
outcomes compete for it. The simulator does not care where these come from;
this module defines the interface plus a file-backed implementation used for
static configurations and test fixtures.
"""

from abc import ABC, abstractmethod
import json
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError
import structlog

from montego.events.models import EventAnalysis
from montego.exceptions import EventNotFoundError, InvalidInputError, ResolverError


def normalize_event(event: str) -> str:
    """Canonical lookup key for an event description."""
    return " ".join(event.split()).lower()


class BaseEventResolver(ABC):
    """Abstract base class for event resolvers."""

    def __init__(self) -> None:
        self.logger = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def resolve(self, event: str) -> EventAnalysis:
        """Resolve an event into an analysis.

        Args:
            event: Free-text event description

        Returns:
            EventAnalysis for the event

        Raises:
            EventNotFoundError: If the resolver knows nothing about the event
            RateLimitError: If the resolver's quota is exhausted
            ResolverError: For any other resolution failure
        """
        pass

    @staticmethod
    def parse_analysis(payload: Any) -> EventAnalysis:
        """Validate a raw payload into an EventAnalysis.

        Raises:
            ResolverError: If the payload does not match the schema
        """
        try:
            return EventAnalysis.model_validate(payload)
        except ValidationError as e:
            raise ResolverError(f"Malformed event analysis: {e}") from e


class StaticEventResolver(BaseEventResolver):
    """Resolve events from a JSON file.

    The file holds either one analysis object, returned for every event, or a
    mapping of event text to analysis. Mapping lookups ignore case and
    surrounding whitespace.
    """

    def __init__(self, source: Union[str, Path, dict[str, Any]]) -> None:
        """Initialize resolver.

        Args:
            source: Path to a JSON file, or an already loaded payload
        """
        super().__init__()
        if isinstance(source, dict):
            payload = source
            self.source_name = "<memory>"
        else:
            path = Path(source)
            self.source_name = str(path)
            try:
                with open(path, encoding="utf-8") as f:
                    payload = json.load(f)
            except FileNotFoundError as e:
                raise ResolverError(f"Event file not found: {path}") from e
            except json.JSONDecodeError as e:
                raise ResolverError(f"Event file is not valid JSON: {path}: {e}") from e

        if not isinstance(payload, dict):
            raise ResolverError("Event file must contain a JSON object")

        self._default: Optional[EventAnalysis] = None
        self._events: dict[str, EventAnalysis] = {}
        if _looks_like_analysis(payload):
            self._default = self.parse_analysis(payload)
        else:
            for event, analysis in payload.items():
                self._events[normalize_event(event)] = self.parse_analysis(analysis)

        self.logger.debug(
            "resolver_loaded",
            source=self.source_name,
            events=len(self._events),
            has_default=self._default is not None,
        )

    @property
    def events(self) -> list[str]:
        """Normalized event keys this resolver knows."""
        return sorted(self._events)

    def resolve(self, event: str) -> EventAnalysis:
        if not event or not event.strip():
            raise InvalidInputError("Event description must not be empty")

        analysis = self._events.get(normalize_event(event), self._default)
        if analysis is None:
            raise EventNotFoundError(f"No analysis for event: {event.strip()!r}")

        self.logger.info(
            "event_resolved",
            event_text=event.strip(),
            already_occurred=analysis.already_occurred,
            n_outcomes=len(analysis.outcomes),
        )
        return analysis


def _looks_like_analysis(payload: dict[str, Any]) -> bool:
    return "outcomes" in payload or "alreadyOccurred" in payload or "already_occurred" in payload
