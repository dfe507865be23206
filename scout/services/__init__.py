"""
Caption Scout Services

This package contains the collaborators of the daily worker:
- validation: Structural checks for persisted records and API payloads
- credentials: OAuth credential providers (interactive and headless)
- youtube_client: YouTube Data API search and caption checks
- round_executor: One budgeted search + verify round
- state_store: Session state file and append-only ledger
- scheduler: Daily session state machine
"""

from scout.services.round_executor import RoundExecutor, RetryPolicy
from scout.services.scheduler import DailySessionScheduler
from scout.services.state_store import StateStore, Ledger

__all__ = [
    'RoundExecutor',
    'RetryPolicy',
    'DailySessionScheduler',
    'StateStore',
    'Ledger',
]
