"""
Worker configuration loaded from environment variables.

The entry script calls load_dotenv() first, so values may also come from
a .env file in the working directory.
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from scout.errors import ConfigError

# Defaults
DEFAULT_REQUIRED_LANGUAGES = ('en', 'ko')
DEFAULT_DAILY_QUOTA = 10000
DEFAULT_PAGE_SIZE = 50
DEFAULT_SEARCH_COST = 100
DEFAULT_CAPTIONS_COST = 50
DEFAULT_WORK_HOUR = 3
DEFAULT_SEARCH_QUERY = '-music -sports'
DEFAULT_RELEVANCE_LANGUAGE = 'ko'
MAX_PAGE_SIZE = 50  # search.list maxResults upper bound


@dataclass(frozen=True)
class Config:
    """Deployment settings for one worker process."""
    required_languages: tuple = DEFAULT_REQUIRED_LANGUAGES
    daily_quota: int = DEFAULT_DAILY_QUOTA
    page_size: int = DEFAULT_PAGE_SIZE
    search_cost: int = DEFAULT_SEARCH_COST
    captions_cost: int = DEFAULT_CAPTIONS_COST
    work_hour: int = DEFAULT_WORK_HOUR
    search_query: str = DEFAULT_SEARCH_QUERY
    relevance_language: str = DEFAULT_RELEVANCE_LANGUAGE
    data_dir: str = '.'
    client_secrets_file: str = 'auth.json'
    token_file: str = 'token.json'
    state_file: str = 'data.json'
    ledger_file: str = 'ledger.txt'
    max_attempts: int = 1
    retry_base_delay: float = 2.0
    verify_workers: Optional[int] = None
    log_level: str = field(default='INFO')

    def __post_init__(self):
        if not self.required_languages:
            raise ConfigError("at least one required language must be set")
        if self.daily_quota < 0:
            raise ConfigError(f"daily quota must be non-negative, got {self.daily_quota}")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigError(f"page size must be between 1 and {MAX_PAGE_SIZE}, got {self.page_size}")
        if self.search_cost < 0 or self.captions_cost < 0:
            raise ConfigError("API call costs must be non-negative")
        if self.round_cost <= 0:
            raise ConfigError("a round must cost at least one quota unit")
        if not 0 <= self.work_hour <= 23:
            raise ConfigError(f"work hour must be between 0 and 23, got {self.work_hour}")
        if self.max_attempts < 1:
            raise ConfigError(f"max attempts must be at least 1, got {self.max_attempts}")
        if self.verify_workers is not None and self.verify_workers < 1:
            raise ConfigError(f"verify workers must be at least 1, got {self.verify_workers}")

    @property
    def round_cost(self) -> int:
        """Quota charged for one search page plus a caption check per result."""
        return self.search_cost + self.page_size * self.captions_cost

    @property
    def rounds_per_day(self) -> int:
        if self.round_cost == 0:
            return 0
        return self.daily_quota // self.round_cost

    def path(self, filename: str) -> str:
        """Resolve a data file name against the data directory."""
        if os.path.isabs(filename):
            return filename
        return os.path.join(self.data_dir, filename)

    @property
    def client_secrets_path(self) -> str:
        return self.path(self.client_secrets_file)

    @property
    def token_path(self) -> str:
        return self.path(self.token_file)

    @property
    def state_path(self) -> str:
        return self.path(self.state_file)

    @property
    def ledger_path(self) -> str:
        return self.path(self.ledger_file)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> 'Config':
        """
        Build a Config from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated Config

        Raises:
            ConfigError: If a value cannot be parsed or is out of range
        """
        env = os.environ if environ is None else environ

        languages = _parse_languages(env.get('SCOUT_REQUIRED_LANGUAGES'))

        return cls(
            required_languages=languages if languages is not None else DEFAULT_REQUIRED_LANGUAGES,
            daily_quota=_parse_int(env, 'SCOUT_DAILY_QUOTA', DEFAULT_DAILY_QUOTA),
            page_size=_parse_int(env, 'SCOUT_PAGE_SIZE', DEFAULT_PAGE_SIZE),
            search_cost=_parse_int(env, 'SCOUT_SEARCH_COST', DEFAULT_SEARCH_COST),
            captions_cost=_parse_int(env, 'SCOUT_CAPTIONS_COST', DEFAULT_CAPTIONS_COST),
            work_hour=_parse_int(env, 'SCOUT_WORK_HOUR', DEFAULT_WORK_HOUR),
            search_query=env.get('SCOUT_SEARCH_QUERY', DEFAULT_SEARCH_QUERY),
            relevance_language=env.get('SCOUT_RELEVANCE_LANGUAGE', DEFAULT_RELEVANCE_LANGUAGE),
            data_dir=env.get('SCOUT_DATA_DIR', '.'),
            client_secrets_file=env.get('SCOUT_CLIENT_SECRETS_FILE', 'auth.json'),
            token_file=env.get('SCOUT_TOKEN_FILE', 'token.json'),
            state_file=env.get('SCOUT_STATE_FILE', 'data.json'),
            ledger_file=env.get('SCOUT_LEDGER_FILE', 'ledger.txt'),
            max_attempts=_parse_int(env, 'SCOUT_MAX_ATTEMPTS', 1),
            retry_base_delay=_parse_float(env, 'SCOUT_RETRY_BASE_DELAY', 2.0),
            verify_workers=_parse_int(env, 'SCOUT_VERIFY_WORKERS', None),
            log_level=env.get('LOG_LEVEL', 'INFO').upper(),
        )


def _parse_languages(raw: Optional[str]) -> Optional[tuple]:
    if raw is None:
        return None
    return tuple(code.strip() for code in raw.split(',') if code.strip())


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
