import logging
from types import SimpleNamespace

import pytest

import benchmark_core
import sortcomparer


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    """Drop the stderr handler main() installs so it never outlives a test's capture."""
    yield
    if sortcomparer._log_handler is not None:
        logging.getLogger().removeHandler(sortcomparer._log_handler)
        sortcomparer._log_handler = None
    logging.getLogger().setLevel(logging.WARNING)


@pytest.fixture
def fake_clock(monkeypatch):
    """
    Replace the engine's clock with scripted durations.

    Call the returned function with durations in nanoseconds; each timed
    call then consumes one of them in order.
    """
    def script(*durations_ns):
        ticks = []
        now = 0
        for d in durations_ns:
            ticks.extend([now, now + d])
            now += d + 1_000
        it = iter(ticks)
        monkeypatch.setattr(benchmark_core, "time", SimpleNamespace(perf_counter_ns=lambda: next(it)))
    return script
