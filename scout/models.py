"""
Value types for the caption scout worker.

Day and SessionState are immutable: a finished session produces a new
SessionState rather than mutating the old one.
"""
import enum
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from scout.errors import BudgetExceededError

Clock = Callable[[], datetime]


# ============================================================================
# Calendar
# ============================================================================

@dataclass(frozen=True)
class Day:
    """A local calendar day with no time component. Month is 1-12."""
    year: int
    month: int
    day: int

    def differs(self, other: 'Day') -> bool:
        return (self.year, self.month, self.day) != (other.year, other.month, other.day)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def next_day(self) -> 'Day':
        return Day.from_date(self.to_date() + timedelta(days=1))

    def at_hour(self, hour: int) -> datetime:
        """Naive local datetime for this day at hour:00:00."""
        return datetime(self.year, self.month, self.day, hour)

    def to_record(self) -> dict:
        return {'year': self.year, 'month': self.month, 'day': self.day}

    @classmethod
    def from_date(cls, value: date) -> 'Day':
        return cls(value.year, value.month, value.day)

    @classmethod
    def now(cls, clock: Optional[Clock] = None) -> 'Day':
        current = clock() if clock is not None else datetime.now()
        return cls.from_date(current)

    def __str__(self) -> str:
        return self.to_date().isoformat()


def differs(a: Day, b: Day) -> bool:
    return a.differs(b)


def next_day(d: Day) -> Day:
    return d.next_day()


def now(clock: Optional[Clock] = None) -> Day:
    return Day.now(clock)


# ============================================================================
# Session state
# ============================================================================

@dataclass(frozen=True)
class SessionState:
    """
    Persisted worker state.

    cursor is the search page token for the next round; None means the
    start of the result sequence. It is only meaningful for the search
    parameters that produced it.
    """
    last_completed_day: Optional[Day] = None
    cursor: Optional[str] = None

    @classmethod
    def default(cls) -> 'SessionState':
        return cls()

    def to_record(self) -> dict:
        return {
            'day': self.last_completed_day.to_record() if self.last_completed_day else None,
            'pageToken': self.cursor,
        }


@dataclass(frozen=True)
class Candidate:
    """A video returned by search, before or after caption verification."""
    id: str
    title: str
    channel_id: str
    channel_title: str


@dataclass
class RoundResult:
    """Outcome of one search page plus its caption checks."""
    next_cursor: Optional[str]
    accepted: list = field(default_factory=list)
    cost: int = 0


class SchedulerPhase(enum.Enum):
    """Daily session state machine"""
    IDLE = "idle"
    WAITING = "waiting"
    RUNNING = "running"
    CLOSING = "closing"


@dataclass
class SessionReport:
    """Summary of one daily session."""
    state: SessionState
    rounds_completed: int = 0
    accepted_total: int = 0
    remaining_budget: int = 0
    error: Optional[BaseException] = None

    @property
    def aborted(self) -> bool:
        return self.error is not None


# ============================================================================
# Budget
# ============================================================================

class Budget:
    """Process-local quota counter, reset by creating a new one each session."""

    def __init__(self, daily_quota: int):
        if daily_quota < 0:
            raise ValueError("daily_quota must be non-negative")
        self.daily_quota = daily_quota
        self.remaining = daily_quota
        self._lock = threading.Lock()

    def fits(self, cost: int) -> bool:
        return self.remaining >= cost

    def spend(self, cost: int) -> None:
        if not self.try_spend(cost):
            raise BudgetExceededError(
                f"cannot spend {cost} units with {self.remaining} remaining"
            )

    def try_spend(self, cost: int) -> bool:
        """Spend cost if it fits. Safe to call from worker threads."""
        with self._lock:
            if self.remaining < cost:
                return False
            self.remaining -= cost
            return True

    @property
    def spent(self) -> int:
        return self.daily_quota - self.remaining
