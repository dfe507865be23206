"""
YouTube Data API Client

Discovery (search.list) and caption verification (captions.list) calls.
API failures are translated to the typed errors in scout.errors so the
scheduler can tell quota, auth and transient failures apart.
"""

import json
import logging
from typing import Callable, Optional

import httplib2
from google.auth.exceptions import TransportError
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from scout.errors import ApiError, AuthorizationError, QuotaExceededError, TransientApiError
from scout.services.validation import parse_search_items

logger = logging.getLogger(__name__)

QUOTA_REASONS = {'quotaExceeded', 'dailyLimitExceeded'}
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}
ASR_TRACK_KIND = 'asr'


def _error_reason(error: HttpError) -> Optional[str]:
    """Extract the first error reason from an API error body."""
    try:
        body = json.loads(error.content.decode('utf-8'))
        return body['error']['errors'][0]['reason']
    except (AttributeError, ValueError, KeyError, IndexError, TypeError):
        return None


def translate_http_error(error: HttpError, operation: str) -> ApiError:
    """Map an HttpError to the matching ApiError subclass."""
    status = getattr(error.resp, 'status', None)
    try:
        status = int(status)
    except (TypeError, ValueError):
        status = None
    reason = _error_reason(error)
    message = f"{operation} failed: HTTP {status} ({reason or 'no reason'})"

    if status == 403 and reason in QUOTA_REASONS:
        return QuotaExceededError(message, status=status, reason=reason)
    if status in (401, 403):
        return AuthorizationError(message, status=status, reason=reason)
    if status in RETRYABLE_STATUSES:
        return TransientApiError(message, status=status, reason=reason)
    return ApiError(message, status=status, reason=reason)


def has_required_captions(items: list, required_languages) -> bool:
    """True iff every required language has a non-ASR caption track."""
    tracks = [item.get('snippet') or {} for item in items or [] if isinstance(item, dict)]
    human_languages = {
        snippet.get('language')
        for snippet in tracks
        if str(snippet.get('trackKind', '')).lower() != ASR_TRACK_KIND
    }
    return all(language in human_languages for language in required_languages)


class YouTubeClient:
    """
    Thin wrapper over the YouTube Data API v3 resources used by the worker.

    Each request executes on its own authorized HTTP object, so verify()
    may be called from several threads at once.
    """

    def __init__(
        self,
        credentials,
        page_size: int,
        search_query: str,
        relevance_language: str,
        service=None,
        http_factory: Callable[[], object] = None,
    ):
        self.credentials = credentials
        self.page_size = page_size
        self.search_query = search_query
        self.relevance_language = relevance_language
        self.service = service or build('youtube', 'v3', credentials=credentials, cache_discovery=False)
        self.http_factory = http_factory or self._authorized_http

    def _authorized_http(self):
        return AuthorizedHttp(self.credentials, http=httplib2.Http())

    def _execute(self, request, operation: str) -> dict:
        try:
            return request.execute(http=self.http_factory())
        except HttpError as e:
            raise translate_http_error(e, operation) from e
        except (TransportError, OSError, httplib2.HttpLib2Error) as e:
            raise TransientApiError(f"{operation} failed: {e}") from e

    def search(self, cursor: Optional[str]) -> tuple:
        """
        Fetch one page of search results.

        Args:
            cursor: Page token, or None for the first page

        Returns:
            Tuple of (next page token or None, list of Candidates)
        """
        request = self.service.search().list(
            part='snippet',
            maxResults=self.page_size,
            pageToken=cursor,
            q=self.search_query,
            relevanceLanguage=self.relevance_language,
            type='video',
            videoCaption='closedCaption',
        )
        response = self._execute(request, 'search.list')

        items = response.get('items') or []
        candidates = parse_search_items(items)
        if len(candidates) < len(items):
            logger.info(f"Dropped {len(items) - len(candidates)} malformed search items")

        return response.get('nextPageToken') or None, candidates

    def verify(self, video_id: str, required_languages) -> bool:
        """Check that the video has a human caption track for every required language."""
        request = self.service.captions().list(part='snippet', videoId=video_id)
        response = self._execute(request, 'captions.list')
        return has_required_captions(response.get('items'), required_languages)
