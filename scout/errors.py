"""
Error types shared by the worker, scheduler and API collaborators.

StartupError and its subclasses are fatal: the worker logs and exits.
ApiError and its subclasses are session-scoped: the scheduler aborts the
current day's session and resumes tomorrow.
"""


class ScoutError(Exception):
    """Base class for all caption scout errors."""


class StartupError(ScoutError):
    """Raised when the worker cannot be constructed (config, credentials)."""


class ConfigError(StartupError):
    """Raised when an environment setting is missing or invalid."""


class ApiError(ScoutError):
    """Raised when a discovery or verification call fails."""

    def __init__(self, message: str, status: int = None, reason: str = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class QuotaExceededError(ApiError):
    """The API reported that the project quota is used up."""


class AuthorizationError(ApiError):
    """Credentials were rejected or lack the required scope."""


class TransientApiError(ApiError):
    """Server-side or transport failure that may succeed on retry."""


class BudgetExceededError(ScoutError):
    """Raised when spending more than the remaining daily budget."""
