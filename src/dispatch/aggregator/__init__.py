"""Carrier aggregator factory.

Provides get_aggregator() / set_aggregator() to swap implementations. The
adapter is chosen by the AGGREGATOR_ADAPTER environment variable (``fake``
by default); AGGREGATOR_TIMEOUT_SECONDS bounds every remote call.
"""

import os

from dispatch.aggregator.port import AggregatorPort

DEFAULT_TIMEOUT_SECONDS = 15.0

_current_aggregator: AggregatorPort | None = None


def get_aggregator() -> AggregatorPort:
    """Return the configured aggregator adapter (singleton)."""
    global _current_aggregator
    if _current_aggregator is None:
        adapter = os.environ.get("AGGREGATOR_ADAPTER", "fake")
        if adapter == "fake":
            from dispatch.aggregator.fake_adapter import FakeAggregator

            _current_aggregator = FakeAggregator()
        else:
            raise ValueError(f"Unknown aggregator adapter: {adapter}")
    return _current_aggregator


def set_aggregator(aggregator: AggregatorPort) -> None:
    """Override the active aggregator (useful for tests)."""
    global _current_aggregator
    _current_aggregator = aggregator


def reset_aggregator() -> None:
    """Reset the aggregator singleton."""
    global _current_aggregator
    _current_aggregator = None


def timeout_seconds() -> float:
    return float(os.environ.get("AGGREGATOR_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
