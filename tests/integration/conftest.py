"""
Pytest configuration for integration tests

Wires the scheduler to fake APIs, real state files in a temp directory,
and the fake clock from the root conftest.
"""
import pytest

from scout.services.round_executor import RoundExecutor
from scout.services.scheduler import DailySessionScheduler
from scout.services.state_store import Ledger, StateStore
from tests.fixtures.sample_data import FakeYouTube

PAGE_SIZE = 50
ROUND_COST = 100 + PAGE_SIZE * 50
WORK_HOUR = 3


@pytest.fixture
def fake_api():
    return FakeYouTube(page_size=PAGE_SIZE)


@pytest.fixture
def state_store(data_dir):
    return StateStore(str(data_dir / 'data.json'))


@pytest.fixture
def ledger(data_dir):
    return Ledger(str(data_dir / 'ledger.txt'))


@pytest.fixture
def make_scheduler(fake_clock, state_store, ledger):
    """Factory building a scheduler around a given fake API and quota."""

    def factory(api, daily_quota=10100, round_cost=ROUND_COST, ledger_override=None, store_override=None,
                retry_policy=None):
        executor = RoundExecutor(
            discovery=api,
            verification=api,
            required_tags=('en', 'ko'),
            page_size=PAGE_SIZE,
            round_cost=round_cost,
            retry_policy=retry_policy,
        )
        return DailySessionScheduler(
            executor=executor,
            state_store=store_override or state_store,
            ledger=ledger_override or ledger,
            daily_quota=daily_quota,
            round_cost=round_cost,
            work_hour=WORK_HOUR,
            clock=fake_clock,
            sleep=fake_clock.sleep,
        )

    return factory
