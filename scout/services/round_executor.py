"""
Budgeted Round Executor

One round = one search page + one caption check per result on that page.
The round's quota cost is fixed (search cost + page size * caption cost)
and charged whether or not any video passes. Retried calls cost extra and
are drawn from a separate retry allowance so a round never spends more
than the session has left.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence

from scout.errors import TransientApiError
from scout.models import Budget, Candidate, RoundResult

logger = logging.getLogger(__name__)

# Quota units per call (YouTube Data API v3)
SEARCH_COST = 100
CAPTIONS_COST = 50


class DiscoveryApi(Protocol):
    """Paginated search: returns (next cursor or None, candidates)."""
    def search(self, cursor: Optional[str]) -> tuple: ...


class VerificationApi(Protocol):
    """Per-candidate check against the required tags."""
    def verify(self, candidate_id: str, required_tags: Sequence[str]) -> bool: ...


@dataclass
class RetryPolicy:
    """
    Retry settings for a single API call.

    max_attempts=1 means a single attempt with no retry. Only
    TransientApiError is retried; quota and auth failures fail at once.
    """
    max_attempts: int = 1
    base_delay: float = 2.0
    retry_on: tuple = (TransientApiError,)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def call(self, func: Callable, *args, operation: str = 'call',
             reserve: Optional[Callable[[], bool]] = None):
        """
        Call func(*args), retrying transient failures.

        Args:
            reserve: Called before each retry; a False return means the
                retry cannot be paid for and the last error is raised
        """
        for attempt in range(self.max_attempts):
            try:
                return func(*args)
            except self.retry_on as e:
                if attempt >= self.max_attempts - 1:
                    raise
                if reserve is not None and not reserve():
                    logger.warning(f"{operation} failed and no quota is left to retry: {e}")
                    raise
                delay = self.base_delay * (2 ** attempt)
                logger.warning(
                    f"{operation} failed, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{self.max_attempts}): {e}"
                )
                self.sleep(delay)


class RoundExecutor:
    """Runs one discovery round against the search and verification APIs."""

    def __init__(
        self,
        discovery: DiscoveryApi,
        verification: VerificationApi,
        required_tags: Sequence[str],
        page_size: int,
        round_cost: int,
        retry_policy: RetryPolicy = None,
        max_workers: int = None,
        search_cost: int = SEARCH_COST,
        captions_cost: int = CAPTIONS_COST,
    ):
        self.discovery = discovery
        self.verification = verification
        self.required_tags = tuple(required_tags)
        self.page_size = page_size
        self.round_cost = round_cost
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_workers = max_workers or page_size
        self.search_cost = search_cost
        self.captions_cost = captions_cost

    @staticmethod
    def _reserver(allowance: Optional[Budget], cost: int) -> Optional[Callable[[], bool]]:
        if allowance is None:
            return None
        return lambda: allowance.try_spend(cost)

    def _verify(self, candidate: Candidate, allowance: Optional[Budget] = None) -> bool:
        return self.retry_policy.call(
            self.verification.verify, candidate.id, self.required_tags,
            operation=f"verify {candidate.id}",
            reserve=self._reserver(allowance, self.captions_cost),
        )

    def filter_candidates(self, candidates: list, allowance: Optional[Budget] = None) -> list:
        """
        Verify all candidates concurrently, keeping input order.

        Blocks until every check has finished; the first failure is
        re-raised after the rest complete.
        """
        if not candidates:
            return []

        workers = min(self.max_workers, len(candidates))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._verify, candidate, allowance) for candidate in candidates]

        passes = [future.result() for future in futures]
        return [candidate for candidate, passed in zip(candidates, passes) if passed]

    def run_round(self, cursor: Optional[str], retry_allowance: Optional[Budget] = None) -> RoundResult:
        """
        Fetch one page from cursor and keep the verified candidates.

        Args:
            cursor: Page token, or None for the start of the sequence
            retry_allowance: Quota available for retried calls beyond the
                fixed round cost (None = retries are not limited by quota)

        Returns:
            RoundResult with the next cursor (None when exhausted), the
            accepted candidates in search order, and the round cost
            including any retries

        Raises:
            ApiError: From either API; nothing from this round is kept
        """
        next_cursor, candidates = self.retry_policy.call(
            self.discovery.search, cursor, operation='search',
            reserve=self._reserver(retry_allowance, self.search_cost),
        )
        accepted = self.filter_candidates(candidates[:self.page_size], retry_allowance)

        retry_cost = retry_allowance.spent if retry_allowance is not None else 0
        return RoundResult(next_cursor=next_cursor, accepted=accepted, cost=self.round_cost + retry_cost)
