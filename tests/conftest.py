"""
Root pytest configuration for caption scout tests

Adds project root to Python path and provides common fixtures
"""
import sys
import os
from datetime import datetime, timedelta

import pytest

# Add project root to Python path so tests can import scout
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)


class FakeClock:
    """
    Controllable wall clock.

    Calling the clock returns the current time; sleep() advances it
    instead of blocking and records each requested delay.
    """

    def __init__(self, start: datetime):
        self.current = start
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def fake_clock():
    """Clock starting at 2024-03-10 01:30 local time."""
    return FakeClock(datetime(2024, 3, 10, 1, 30))


@pytest.fixture
def data_dir(tmp_path):
    """Empty directory for state, ledger and token files."""
    return tmp_path
