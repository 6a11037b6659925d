"""Tests for event analysis and record models."""

from pydantic import ValidationError
import pytest

from montego.events.models import EventAnalysis, OutcomePayload, SimulationRecord
from montego.simulation.core.outcome import Outcome


class TestOutcomePayload:
    """Test wire outcome validation."""

    def test_parses_camel_case(self):
        payload = OutcomePayload.model_validate(
            {"name": "Rovers", "shortName": "ROV", "baseStrength": 70, "volatility": 10}
        )
        assert payload.short_name == "ROV"
        assert payload.base_strength == 70.0

    def test_rejects_out_of_range_strength(self):
        with pytest.raises(ValidationError):
            OutcomePayload.model_validate({"name": "X", "baseStrength": 120, "volatility": 10})

    def test_requires_volatility(self):
        with pytest.raises(ValidationError):
            OutcomePayload.model_validate({"name": "X", "baseStrength": 50})

    def test_round_trip_through_outcome(self):
        outcome = Outcome(name="Rovers", base_strength=70, volatility=10, sim_count=9, sim_prob="90.0")
        payload = OutcomePayload.from_outcome(outcome)
        assert payload.sim_prob == "90.0"
        assert payload.to_outcome() == outcome


class TestEventAnalysis:
    """Test resolver payload validation."""

    def test_open_event(self, open_event_payload):
        analysis = EventAnalysis.model_validate(open_event_payload)

        assert not analysis.already_occurred
        assert analysis.event_title == "Cup Final"
        assert analysis.confidence_level == "medium"
        outcomes = analysis.get_outcomes()
        assert [o.name for o in outcomes] == ["Rovers", "United"]
        assert all(isinstance(o, Outcome) for o in outcomes)

    def test_past_event_needs_no_outcomes(self, past_event_payload):
        analysis = EventAnalysis.model_validate(past_event_payload)
        assert analysis.already_occurred
        assert analysis.winner == "Rovers"
        assert analysis.outcomes == []

    def test_open_event_requires_outcomes(self):
        with pytest.raises(ValidationError):
            EventAnalysis.model_validate({"alreadyOccurred": False, "outcomes": []})

    def test_unknown_category_becomes_other(self, open_event_payload):
        open_event_payload["category"] = "Entertainment"
        assert EventAnalysis.model_validate(open_event_payload).category == "other"

    def test_category_is_normalized(self, open_event_payload):
        open_event_payload["category"] = " Politics "
        assert EventAnalysis.model_validate(open_event_payload).category == "politics"

    def test_rejects_unknown_confidence(self, open_event_payload):
        open_event_payload["confidenceLevel"] = "extreme"
        with pytest.raises(ValidationError):
            EventAnalysis.model_validate(open_event_payload)


class TestSimulationRecord:
    """Test record construction and serialization."""

    def test_from_analysis_with_outcomes(self, open_event_payload):
        analysis = EventAnalysis.model_validate(open_event_payload)
        ranked = [
            Outcome(name="Rovers", base_strength=70, volatility=10, sim_count=95, sim_prob="95.0"),
            Outcome(name="United", base_strength=30, volatility=10, sim_count=5, sim_prob="5.0"),
        ]

        record = SimulationRecord.from_analysis(
            "Who wins?", analysis, outcomes=ranked, iterations=100, timestamp=1234
        )

        assert record.event == "Who wins?"
        assert record.iterations == 100
        assert record.timestamp == 1234
        assert record.top_outcome.name == "Rovers"
        assert record.top_outcome.sim_count == 95
        assert record.insights == ["Rovers have home advantage"]

    def test_from_analysis_keeps_analysis_outcomes(self, past_event_payload):
        analysis = EventAnalysis.model_validate(past_event_payload)
        record = SimulationRecord.from_analysis("Who won?", analysis)
        assert record.iterations == 0
        assert record.top_outcome is None
        assert record.timestamp > 0

    def test_json_dict_uses_wire_names(self, open_event_payload):
        analysis = EventAnalysis.model_validate(open_event_payload)
        data = SimulationRecord.from_analysis("Who wins?", analysis, timestamp=1).to_json_dict()

        assert data["alreadyOccurred"] is False
        assert data["eventTitle"] == "Cup Final"
        assert data["outcomes"][0]["baseStrength"] == 70
        assert "winner" not in data

        restored = SimulationRecord.model_validate(data)
        assert restored.event_title == "Cup Final"
