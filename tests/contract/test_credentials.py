"""
Contract tests for the OAuth credential providers.

The Google OAuth flow and token refresh are mocked; the token and
client-secrets files are real files in a temp directory.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from scout.errors import StartupError
from scout.services.credentials import (
    SCOPES,
    HeadlessCredentialProvider,
    InteractiveCredentialProvider,
    load_client_config,
)

CLIENT_SECRETS = {
    'installed': {
        'client_id': 'test-client.apps.googleusercontent.com',
        'client_secret': 'test-secret',
        'redirect_uris': ['http://localhost'],
    }
}

SAVED_TOKEN = {
    'token': 'access-token',
    'refresh_token': 'refresh-token',
    'client_id': 'test-client.apps.googleusercontent.com',
    'client_secret': 'test-secret',
    'token_uri': 'https://oauth2.googleapis.com/token',
}


def write_json(path, record):
    path.write_text(json.dumps(record), encoding='utf-8')
    return str(path)


class TestLoadClientConfig:
    """Tests for load_client_config."""

    def test_valid_file(self, data_dir):
        path = write_json(data_dir / 'auth.json', CLIENT_SECRETS)
        config = load_client_config(path)
        assert config['installed']['client_id'] == 'test-client.apps.googleusercontent.com'
        assert config['installed']['token_uri'] == 'https://oauth2.googleapis.com/token'

    def test_missing_file(self, data_dir):
        with pytest.raises(StartupError, match='not found'):
            load_client_config(str(data_dir / 'auth.json'))

    def test_not_json(self, data_dir):
        path = data_dir / 'auth.json'
        path.write_text('not json', encoding='utf-8')
        with pytest.raises(StartupError):
            load_client_config(str(path))

    def test_wrong_shape(self, data_dir):
        path = write_json(data_dir / 'auth.json', {'web': {}})
        with pytest.raises(StartupError, match='not an auth file'):
            load_client_config(path)


class TestHeadlessProvider:
    """Tests for HeadlessCredentialProvider."""

    def test_missing_token_is_fatal(self, data_dir):
        provider = HeadlessCredentialProvider(str(data_dir / 'token.json'))
        with pytest.raises(StartupError):
            provider.get_credentials()

    def test_invalid_token_is_fatal(self, data_dir):
        path = write_json(data_dir / 'token.json', {'token': 'only-access'})
        with pytest.raises(StartupError):
            HeadlessCredentialProvider(path).get_credentials()

    def test_valid_token_loaded_without_refresh(self, data_dir):
        path = write_json(data_dir / 'token.json', SAVED_TOKEN)
        with patch.object(Credentials, 'refresh') as mock_refresh:
            credentials = HeadlessCredentialProvider(path).get_credentials()

        assert credentials.token == 'access-token'
        assert credentials.refresh_token == 'refresh-token'
        mock_refresh.assert_not_called()

    def test_expired_token_is_refreshed_and_saved(self, data_dir):
        token = dict(SAVED_TOKEN)
        del token['token']
        path = write_json(data_dir / 'token.json', token)

        def fake_refresh(self, request):
            self.token = 'fresh-token'

        with patch.object(Credentials, 'refresh', autospec=True, side_effect=fake_refresh):
            credentials = HeadlessCredentialProvider(path).get_credentials()

        assert credentials.token == 'fresh-token'
        saved = json.loads((data_dir / 'token.json').read_text(encoding='utf-8'))
        assert saved['token'] == 'fresh-token'
        assert saved['refresh_token'] == 'refresh-token'

    def test_refresh_failure_is_fatal(self, data_dir):
        token = dict(SAVED_TOKEN)
        del token['token']
        path = write_json(data_dir / 'token.json', token)

        with patch.object(Credentials, 'refresh', side_effect=RefreshError('invalid_grant')):
            with pytest.raises(StartupError, match='refresh'):
                HeadlessCredentialProvider(path).get_credentials()


class TestInteractiveProvider:
    """Tests for InteractiveCredentialProvider."""

    def make_provider(self, data_dir, prompt_answer='CODE'):
        secrets = write_json(data_dir / 'auth.json', CLIENT_SECRETS)
        self.printed = []
        return InteractiveCredentialProvider(
            secrets,
            str(data_dir / 'token.json'),
            prompt=lambda message: prompt_answer,
            output=self.printed.append,
        )

    def test_saved_token_skips_prompt(self, data_dir):
        write_json(data_dir / 'token.json', SAVED_TOKEN)
        provider = self.make_provider(data_dir)

        with patch('scout.services.credentials.Flow') as mock_flow:
            credentials = provider.get_credentials()

        assert credentials.token == 'access-token'
        mock_flow.from_client_config.assert_not_called()
        assert self.printed == []

    @patch('scout.services.credentials.Flow')
    def test_first_run_authorizes_and_saves_token(self, mock_flow_class, data_dir):
        flow = MagicMock()
        flow.authorization_url.return_value = ('https://accounts.google.com/o/oauth2/auth?x=1', 'state')
        flow.credentials = MagicMock(token='new-token')
        flow.credentials.to_json.return_value = json.dumps({'token': 'new-token', 'refresh_token': 'r'})
        mock_flow_class.from_client_config.return_value = flow

        provider = self.make_provider(data_dir)
        credentials = provider.get_credentials()

        assert credentials is flow.credentials
        mock_flow_class.from_client_config.assert_called_once()
        assert mock_flow_class.from_client_config.call_args.kwargs['scopes'] == SCOPES
        assert mock_flow_class.from_client_config.call_args.kwargs['redirect_uri'] == 'http://localhost'
        flow.authorization_url.assert_called_once_with(access_type='offline', prompt='consent')
        flow.fetch_token.assert_called_once_with(code='CODE')
        assert 'https://accounts.google.com/o/oauth2/auth?x=1' in self.printed[0]

        saved = json.loads((data_dir / 'token.json').read_text(encoding='utf-8'))
        assert saved['token'] == 'new-token'

    @patch('scout.services.credentials.Flow')
    def test_empty_code_is_fatal(self, mock_flow_class, data_dir):
        mock_flow_class.from_client_config.return_value.authorization_url.return_value = ('https://x', 's')
        provider = self.make_provider(data_dir, prompt_answer='   ')
        with pytest.raises(StartupError):
            provider.get_credentials()
        assert not (data_dir / 'token.json').exists()

    @patch('scout.services.credentials.Flow')
    def test_token_exchange_failure_is_fatal(self, mock_flow_class, data_dir):
        flow = mock_flow_class.from_client_config.return_value
        flow.authorization_url.return_value = ('https://x', 's')
        flow.fetch_token.side_effect = ValueError('invalid_grant')

        with pytest.raises(StartupError, match='token error'):
            self.make_provider(data_dir).get_credentials()

    def test_missing_client_secrets_is_fatal(self, data_dir):
        provider = InteractiveCredentialProvider(str(data_dir / 'auth.json'), str(data_dir / 'token.json'))
        with pytest.raises(StartupError):
            provider.get_credentials()

    @patch('scout.services.credentials.Flow')
    def test_closed_stdin_is_fatal(self, mock_flow_class, data_dir):
        mock_flow_class.from_client_config.return_value.authorization_url.return_value = ('https://x', 's')
        secrets = write_json(data_dir / 'auth.json', CLIENT_SECRETS)

        def no_console(message):
            raise EOFError("EOF when reading a line")

        provider = InteractiveCredentialProvider(
            secrets, str(data_dir / 'token.json'), prompt=no_console, output=lambda message: None,
        )
        with pytest.raises(StartupError, match='no console'):
            provider.get_credentials()

    @patch('scout.services.credentials.Flow')
    def test_flow_construction_failure_is_fatal(self, mock_flow_class, data_dir):
        mock_flow_class.from_client_config.side_effect = ValueError('Client secrets must be for a web or installed app.')

        with pytest.raises(StartupError, match='could not start authorization'):
            self.make_provider(data_dir).get_credentials()


class TestSaveToken:
    """Tests for CredentialProvider.save_token."""

    def test_unwritable_token_path_is_fatal(self, data_dir):
        # The token path is a directory, so opening it for writing fails
        provider = HeadlessCredentialProvider(str(data_dir))
        credentials = MagicMock()
        credentials.to_json.return_value = '{}'

        with pytest.raises(StartupError, match='could not save token'):
            provider.save_token(credentials)
