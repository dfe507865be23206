"""
Pytest configuration for contract tests

Provides mocked googleapiclient resources and HttpError factories
"""
import json
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError


def make_http_error(status, reason=None):
    """Build an HttpError shaped like a YouTube Data API error response."""
    resp = httplib2.Response({'status': status})
    body = {'error': {'code': status, 'message': 'error', 'errors': []}}
    if reason:
        body['error']['errors'].append({'reason': reason, 'domain': 'youtube.quota'})
    return HttpError(resp, json.dumps(body).encode('utf-8'))


@pytest.fixture
def http_error():
    return make_http_error


@pytest.fixture
def mock_service():
    """MagicMock standing in for build('youtube', 'v3')."""
    return MagicMock()
