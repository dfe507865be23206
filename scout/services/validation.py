"""
Structural Validation

Shape checks for everything read from outside the process: the OAuth
client-secrets file, the saved token, the session state file and raw
search results. Every validator returns a ValidationResult instead of
raising, so callers decide whether a failure is fatal or just "absent".
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from scout.models import Candidate, Day, SessionState

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI = 'http://localhost'
TOKEN_REQUIRED_FIELDS = ('client_id', 'client_secret', 'refresh_token')


@dataclass
class ValidationResult:
    """Success carries a value, failure carries a reason."""
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> 'ValidationResult':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> 'ValidationResult':
        return cls(ok=False, error=error)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; a persisted `true` is not a day number
    return isinstance(value, int) and not isinstance(value, bool)


def _is_nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_session_record(record: Any) -> ValidationResult:
    """
    Validate a decoded session state record.

    Expected shape:
        {"day": {"year": int, "month": int, "day": int} | null,
         "pageToken": str | null}

    Both keys must be present. A day that is not a real calendar date fails.

    Returns:
        ValidationResult with a SessionState value on success
    """
    if not isinstance(record, dict):
        return ValidationResult.failure("state record is not an object")

    if 'day' not in record:
        return ValidationResult.failure("state record has no 'day' field")
    if 'pageToken' not in record:
        return ValidationResult.failure("state record has no 'pageToken' field")

    cursor = record['pageToken']
    if cursor is not None and not isinstance(cursor, str):
        return ValidationResult.failure("'pageToken' must be a string or null")

    raw_day = record['day']
    if raw_day is None:
        return ValidationResult.success(SessionState(last_completed_day=None, cursor=cursor))

    if not isinstance(raw_day, dict):
        return ValidationResult.failure("'day' must be an object or null")

    year, month, day = raw_day.get('year'), raw_day.get('month'), raw_day.get('day')
    if not (_is_int(year) and _is_int(month) and _is_int(day)):
        return ValidationResult.failure("'day' fields must all be integers")

    try:
        date(year, month, day)
    except ValueError as e:
        return ValidationResult.failure(f"'day' is not a calendar date: {e}")

    return ValidationResult.success(SessionState(last_completed_day=Day(year, month, day), cursor=cursor))


def validate_client_config(record: Any) -> ValidationResult:
    """
    Validate an OAuth "installed application" client-secrets file.

    Returns:
        ValidationResult with a dict of client_id, client_secret,
        redirect_uris (never empty)
    """
    if not isinstance(record, dict) or not isinstance(record.get('installed'), dict):
        return ValidationResult.failure("client secrets file has no 'installed' section")

    installed = record['installed']
    client_id = installed.get('client_id')
    client_secret = installed.get('client_secret')
    redirect_uris = installed.get('redirect_uris')

    if not _is_nonempty_str(client_id):
        return ValidationResult.failure("'installed.client_id' must be a non-empty string")
    if not _is_nonempty_str(client_secret):
        return ValidationResult.failure("'installed.client_secret' must be a non-empty string")
    if not isinstance(redirect_uris, list) or not all(isinstance(uri, str) for uri in redirect_uris):
        return ValidationResult.failure("'installed.redirect_uris' must be a list of strings")

    return ValidationResult.success({
        'client_id': client_id,
        'client_secret': client_secret,
        'redirect_uris': redirect_uris or [DEFAULT_REDIRECT_URI],
    })


def validate_token_record(record: Any) -> ValidationResult:
    """Validate a saved authorized-user token (as written by Credentials.to_json)."""
    if not isinstance(record, dict):
        return ValidationResult.failure("token record is not an object")

    missing = [name for name in TOKEN_REQUIRED_FIELDS if not _is_nonempty_str(record.get(name))]
    if missing:
        return ValidationResult.failure(f"token record missing fields: {', '.join(missing)}")

    return ValidationResult.success(record)


def validate_search_item(item: Any) -> ValidationResult:
    """
    Validate one search.list result item and convert it to a Candidate.

    Items without a video id, title, channel id or channel title fail.
    """
    if not isinstance(item, dict):
        return ValidationResult.failure("search item is not an object")

    item_id = item.get('id')
    snippet = item.get('snippet')
    video_id = item_id.get('videoId') if isinstance(item_id, dict) else None
    if not isinstance(snippet, dict):
        snippet = {}

    fields = {
        'id': video_id,
        'title': snippet.get('title'),
        'channel_id': snippet.get('channelId'),
        'channel_title': snippet.get('channelTitle'),
    }
    missing = [name for name, value in fields.items() if not _is_nonempty_str(value)]
    if missing:
        return ValidationResult.failure(f"search item missing fields: {', '.join(missing)}")

    return ValidationResult.success(Candidate(**fields))


def parse_search_items(items: Any) -> list[Candidate]:
    """Convert raw search items to Candidates, dropping malformed ones."""
    candidates = []
    for item in items or []:
        result = validate_search_item(item)
        if result.ok:
            candidates.append(result.value)
        else:
            logger.debug(f"Dropping search item: {result.error}")
    return candidates
