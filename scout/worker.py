"""
Caption Scout Worker

Wires credentials, the YouTube client, the round executor, the state files
and the daily scheduler together, then runs sessions forever.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from scout.config import Config
from scout.errors import StartupError
from scout.models import Clock
from scout.services.credentials import (
    CredentialProvider,
    HeadlessCredentialProvider,
    InteractiveCredentialProvider,
)
from scout.services.round_executor import RetryPolicy, RoundExecutor
from scout.services.scheduler import DailySessionScheduler
from scout.services.state_store import Ledger, StateStore
from scout.services.youtube_client import YouTubeClient

logger = logging.getLogger(__name__)


@dataclass
class Worker:
    """Fully constructed worker components."""
    scheduler: DailySessionScheduler
    state_store: StateStore
    ledger: Ledger


def make_credential_provider(config: Config, headless: bool = False) -> CredentialProvider:
    if headless:
        return HeadlessCredentialProvider(config.token_path)
    return InteractiveCredentialProvider(config.client_secrets_path, config.token_path)


def build_worker(
    config: Config,
    credential_provider: CredentialProvider = None,
    client=None,
    clock: Clock = datetime.now,
    sleep: Callable[[float], None] = time.sleep,
) -> Worker:
    """
    Construct every worker component.

    Args:
        config: Deployment settings
        credential_provider: Source of OAuth credentials (interactive by default)
        client: Pre-built search/verification client (skips credentials)
        clock, sleep: Time source and sleep used by the scheduler

    Raises:
        StartupError: If credentials or the API client cannot be created
    """
    if client is None:
        provider = credential_provider or make_credential_provider(config)
        credentials = provider.get_credentials()
        try:
            client = YouTubeClient(
                credentials,
                page_size=config.page_size,
                search_query=config.search_query,
                relevance_language=config.relevance_language,
            )
        except Exception as e:
            raise StartupError(f"could not build YouTube client: {e}") from e

    executor = RoundExecutor(
        discovery=client,
        verification=client,
        required_tags=config.required_languages,
        page_size=config.page_size,
        round_cost=config.round_cost,
        retry_policy=RetryPolicy(max_attempts=config.max_attempts, base_delay=config.retry_base_delay),
        max_workers=config.verify_workers,
        search_cost=config.search_cost,
        captions_cost=config.captions_cost,
    )
    state_store = StateStore(config.state_path)
    ledger = Ledger(config.ledger_path)
    scheduler = DailySessionScheduler(
        executor=executor,
        state_store=state_store,
        ledger=ledger,
        daily_quota=config.daily_quota,
        round_cost=config.round_cost,
        work_hour=config.work_hour,
        clock=clock,
        sleep=sleep,
    )
    return Worker(scheduler=scheduler, state_store=state_store, ledger=ledger)


def run_worker(
    config: Config,
    once: bool = False,
    headless: bool = False,
    credential_provider: CredentialProvider = None,
    client=None,
    clock: Clock = datetime.now,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Build the worker and run daily sessions.

    Returns:
        Exit code: 1 if the worker could not start, otherwise 0 (only
        reached when once=True)
    """
    logger.info("=" * 60)
    logger.info("CAPTION SCOUT WORKER STARTING")
    logger.info(f"Required languages: {', '.join(config.required_languages)}")
    logger.info(f"Daily quota: {config.daily_quota} ({config.rounds_per_day} rounds of {config.round_cost})")
    logger.info(f"Work hour: {config.work_hour:02d}:00")
    logger.info("=" * 60)

    try:
        worker = build_worker(
            config,
            credential_provider=credential_provider or make_credential_provider(config, headless),
            client=client,
            clock=clock,
            sleep=sleep,
        )
    except StartupError as e:
        logger.error(f"Client could not be loaded: {e}")
        return 1

    state = worker.state_store.load()
    logger.info(f"Using state: day={state.last_completed_day} cursor={state.cursor}")

    worker.scheduler.run_forever(state, max_cycles=1 if once else None)
    return 0


def load_config() -> Optional[Config]:
    """Config.from_env() that logs instead of raising."""
    try:
        return Config.from_env()
    except StartupError as e:
        logger.error(f"Invalid configuration: {e}")
        return None
