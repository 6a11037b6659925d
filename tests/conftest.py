"""Root-level pytest configuration and shared fixtures."""

import json
from pathlib import Path

import pytest
import structlog

from montego.config import reset_config
from montego.simulation.core.outcome import Outcome


def pytest_configure(config):
    """Register custom markers and configure test environment."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "cli: mark test as CLI test")

    _configure_test_logging()


def _configure_test_logging() -> None:
    """Configure structlog for test environment with compatible processors."""
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(30),
        logger_factory=structlog.PrintLoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch) -> Path:
    """Point MonteGo's home directory at a temporary folder."""
    home = tmp_path / "montego_home"
    monkeypatch.setenv("MONTEGO_HOME", str(home))
    monkeypatch.delenv("MONTEGO_RANDOM_SEED", raising=False)
    monkeypatch.delenv("MONTEGO_DEFAULT_ITERATIONS", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)
    reset_config()
    yield home
    reset_config()


@pytest.fixture
def two_outcomes() -> list[Outcome]:
    """A strong favourite and an underdog."""
    return [
        Outcome(name="Alpha", short_name="A", base_strength=70, volatility=10, emoji="🅰️"),
        Outcome(name="Bravo", short_name="B", base_strength=30, volatility=10, emoji="🅱️"),
    ]


@pytest.fixture
def tied_outcomes() -> list[Outcome]:
    """Identical outcomes with no volatility."""
    return [
        Outcome(name="Alpha", short_name="A", base_strength=50, volatility=0),
        Outcome(name="Bravo", short_name="B", base_strength=50, volatility=0),
    ]


@pytest.fixture
def open_event_payload() -> dict:
    """Resolver payload for an event that has not happened yet."""
    return {
        "alreadyOccurred": False,
        "eventTitle": "Cup Final",
        "category": "sports",
        "detail": "Two finalists",
        "outcomes": [
            {
                "name": "Rovers",
                "shortName": "ROV",
                "baseStrength": 70,
                "volatility": 10,
                "detail": "Unbeaten run",
                "emoji": "🔵",
            },
            {
                "name": "United",
                "shortName": "UTD",
                "baseStrength": 30,
                "volatility": 10,
                "detail": "Injury troubles",
                "emoji": "🔴",
            },
        ],
        "insights": ["Rovers have home advantage"],
        "confidenceLevel": "medium",
        "dataQuality": "high",
    }


@pytest.fixture
def past_event_payload() -> dict:
    """Resolver payload for an event that already happened."""
    return {
        "alreadyOccurred": True,
        "eventTitle": "Last Year's Final",
        "category": "sports",
        "winner": "Rovers",
        "winnerEmoji": "🔵",
        "detail": "Rovers won 2-1",
        "insights": [],
    }


@pytest.fixture
def events_file(tmp_path, open_event_payload, past_event_payload) -> Path:
    """JSON events file mapping event text to analyses."""
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps(
            {
                "Who wins the cup final?": open_event_payload,
                "Who won last year's final?": past_event_payload,
            }
        ),
        encoding="utf-8",
    )
    return path
