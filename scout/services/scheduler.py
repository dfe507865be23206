"""
Daily Session Scheduler

Drives the worker through Idle -> Waiting -> Running -> Closing once per
calendar day:

1. Compute the next start (today at the work hour, or tomorrow if today's
   session already ran) and sleep until then
2. Spend the daily quota on as many full rounds as fit
3. Save the state with today's date, even if a round failed

Leftover quota smaller than one round is forfeited. An API error ends the
day early; the cursor from the last completed round is kept.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from scout.models import Budget, Clock, Day, SchedulerPhase, SessionReport, SessionState
from scout.services.round_executor import RoundExecutor
from scout.services.state_store import Ledger, StateStore

logger = logging.getLogger(__name__)


def next_start(last_completed_day: Optional[Day], current: datetime, work_hour: int) -> datetime:
    """
    When the next session should begin.

    Today at work_hour if no session has completed today, otherwise
    tomorrow at work_hour. The result may already be in the past.
    """
    today = Day.from_date(current)
    if last_completed_day is None or last_completed_day.differs(today):
        target = today
    else:
        target = today.next_day()
    return target.at_hour(work_hour)


def wait_seconds(target: datetime, current: datetime) -> float:
    """Seconds until target, or 0 if it has passed."""
    return max(0.0, (target - current).total_seconds())


class DailySessionScheduler:
    """Runs at most one budgeted session per calendar day."""

    def __init__(
        self,
        executor: RoundExecutor,
        state_store: StateStore,
        ledger: Ledger,
        daily_quota: int,
        round_cost: int,
        work_hour: int,
        clock: Clock = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if round_cost <= 0:
            raise ValueError("round_cost must be positive")
        self.executor = executor
        self.state_store = state_store
        self.ledger = ledger
        self.daily_quota = daily_quota
        self.round_cost = round_cost
        self.work_hour = work_hour
        self.clock = clock
        self.sleep = sleep
        self.phase = SchedulerPhase.IDLE

    def next_start(self, last_completed_day: Optional[Day]) -> datetime:
        return next_start(last_completed_day, self.clock(), self.work_hour)

    def wait_until_start(self, state: SessionState) -> None:
        """Waiting: sleep until the next start time (no-op if it has passed)."""
        self.phase = SchedulerPhase.WAITING
        current = self.clock()
        target = next_start(state.last_completed_day, current, self.work_hour)
        logger.info(f"Found next work time at {target.isoformat()}")

        delay = wait_seconds(target, current)
        if delay > 0:
            logger.info(f"Waiting for {round(delay)} seconds...")
            self.sleep(delay)

    def _record_accepted(self, candidates: list) -> None:
        ids = [candidate.id for candidate in candidates]
        try:
            self.ledger.append(ids)
        except OSError as e:
            # Best effort: the ids stay in the log so they can be recovered by hand
            logger.error(f"Ledger write failed, {len(ids)} ids not recorded: {' '.join(ids)} ({e})")

    def run_session(self, state: SessionState) -> SessionReport:
        """
        Running + Closing: spend today's budget, then persist the outcome.

        Args:
            state: State loaded at startup or returned by the previous session

        Returns:
            SessionReport whose state has last_completed_day = today
        """
        self.phase = SchedulerPhase.RUNNING
        budget = Budget(self.daily_quota)
        cursor = state.cursor
        rounds = 0
        accepted_total = 0
        error = None

        logger.info("=" * 60)
        logger.info(f"SESSION STARTING (quota {budget.remaining}, {self.round_cost} per round)")
        logger.info("=" * 60)

        try:
            while budget.fits(self.round_cost):
                # Retries may only use quota left over after this round's fixed cost
                retry_allowance = Budget(budget.remaining - self.round_cost)
                result = self.executor.run_round(cursor, retry_allowance)
                self._record_accepted(result.accepted)

                logger.info(
                    f"Found {len(result.accepted)} good videos out of {self.executor.page_size} "
                    f"for page {cursor}. Next page: {result.next_cursor}"
                )
                if result.next_cursor is None:
                    logger.info("Search results exhausted; next round starts from the first page")

                cursor = result.next_cursor
                budget.spend(result.cost)
                rounds += 1
                accepted_total += len(result.accepted)

                if result.cost > self.round_cost:
                    logger.info(f"Retries cost {result.cost - self.round_cost} extra units this round")
                logger.info(f"Remaining quota: {budget.remaining}")
        except Exception as e:
            logger.error(f"Error encountered today, aborting session: {e}", exc_info=True)
            error = e

        new_state = self.close_session(cursor)

        logger.info("=" * 60)
        logger.info("SESSION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Rounds:            {rounds}")
        logger.info(f"Accepted:          {accepted_total}")
        logger.info(f"Remaining quota:   {budget.remaining}")
        logger.info(f"Next page:         {new_state.cursor}")
        if error is not None:
            logger.warning(f"Session aborted early: {error}")

        return SessionReport(
            state=new_state,
            rounds_completed=rounds,
            accepted_total=accepted_total,
            remaining_budget=budget.remaining,
            error=error,
        )

    def close_session(self, cursor: Optional[str]) -> SessionState:
        """Closing: mark today completed and save the full state."""
        self.phase = SchedulerPhase.CLOSING
        new_state = SessionState(last_completed_day=Day.now(self.clock), cursor=cursor)
        try:
            self.state_store.save(new_state)
        except OSError as e:
            # The in-memory state still marks today done, so no retry today
            logger.error(f"Could not save state to {self.state_store.path}: {e}")
        self.phase = SchedulerPhase.IDLE
        logger.info("All done for the day")
        return new_state

    def run_cycle(self, state: SessionState) -> SessionReport:
        """One Idle -> Waiting -> Running -> Closing -> Idle pass."""
        self.wait_until_start(state)
        return self.run_session(state)

    def run_forever(self, state: SessionState, max_cycles: int = None) -> SessionState:
        """
        Run daily cycles, feeding each session's state into the next.

        Args:
            state: Initial state (loaded once at startup)
            max_cycles: Stop after this many sessions (None = forever)

        Returns:
            The state after the last session
        """
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            report = self.run_cycle(state)
            state = report.state
            cycles += 1
        return state
