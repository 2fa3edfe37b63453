from __future__ import annotations

from collections.abc import Iterator

import pytest

from vanguard.events import reset_event_bus_for_testing
from vanguard.util import rng


@pytest.fixture(autouse=True)
def clear_event_bus() -> Iterator[None]:
    """Give every test a fresh global event bus."""
    reset_event_bus_for_testing()
    yield
    reset_event_bus_for_testing()


@pytest.fixture(autouse=True)
def seeded_rng() -> Iterator[None]:
    """Make combat rolls reproducible within a test."""
    rng.reset(1234)
    yield
    rng.reset(None)
