"""MonteGo: Monte Carlo predictions for real-world events."""

__version__ = "0.1.0"
