"""
Google OAuth Credential Providers

Supplies authorized credentials for the YouTube Data API.

Two flows:
- InteractiveCredentialProvider: reuses a saved token, otherwise prints an
  authorization URL and reads the code from the console (one time only).
- HeadlessCredentialProvider: pre-provisioned token file only, never prompts.

Both persist refreshed tokens back to the token file. Every failure is
raised as StartupError; the worker cannot run without credentials.
"""

import json
import logging
import os
from typing import Callable, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from scout.errors import StartupError
from scout.services.validation import validate_client_config, validate_token_record

logger = logging.getLogger(__name__)

# Required scopes
SCOPES = ['https://www.googleapis.com/auth/youtube.force-ssl']


def load_client_config(path: str) -> dict:
    """
    Load and validate an OAuth client-secrets file.

    Returns:
        Client config dict in the "installed" format expected by Flow

    Raises:
        StartupError: If the file is missing, not JSON, or malformed
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            record = json.load(f)
    except FileNotFoundError:
        raise StartupError(f"client secrets file not found: {path}")
    except (OSError, ValueError) as e:
        raise StartupError(f"could not read client secrets file {path}: {e}")

    result = validate_client_config(record)
    if not result.ok:
        raise StartupError(f"not an auth file ({path}): {result.error}")

    client = result.value
    return {
        'installed': {
            'client_id': client['client_id'],
            'client_secret': client['client_secret'],
            'redirect_uris': client['redirect_uris'],
            'auth_uri': record['installed'].get('auth_uri', 'https://accounts.google.com/o/oauth2/auth'),
            'token_uri': record['installed'].get('token_uri', 'https://oauth2.googleapis.com/token'),
        }
    }


class CredentialProvider:
    """Base provider: loads, refreshes and saves the authorized-user token."""

    def __init__(self, token_path: str, scopes: list = None):
        self.token_path = token_path
        self.scopes = scopes or SCOPES

    def get_credentials(self) -> Credentials:
        raise NotImplementedError

    def load_saved_token(self) -> Optional[Credentials]:
        """
        Load the saved token, refreshing it if expired.

        Returns:
            Credentials, or None if there is no usable saved token
        """
        try:
            with open(self.token_path, 'r', encoding='utf-8') as f:
                record = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.token_path}: {e}")
            return None

        result = validate_token_record(record)
        if not result.ok:
            logger.warning(f"Ignoring invalid token file {self.token_path}: {result.error}")
            return None

        credentials = Credentials.from_authorized_user_info(result.value, self.scopes)

        if not credentials.valid and credentials.refresh_token:
            try:
                credentials.refresh(Request())
            except GoogleAuthError as e:
                raise StartupError(f"token refresh failed: {e}") from e
            logger.info("Refreshed saved access token")
            self.save_token(credentials)

        return credentials

    def save_token(self, credentials: Credentials) -> None:
        directory = os.path.dirname(self.token_path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.token_path, 'w', encoding='utf-8') as f:
                f.write(credentials.to_json())
        except OSError as e:
            raise StartupError(f"could not save token to {self.token_path}: {e}") from e
        logger.info(f"Saved token to {self.token_path}")


class HeadlessCredentialProvider(CredentialProvider):
    """Uses a pre-provisioned token file; never prompts."""

    def get_credentials(self) -> Credentials:
        credentials = self.load_saved_token()
        if credentials is None:
            raise StartupError(
                f"no usable token at {self.token_path}; "
                "authorize once with the interactive worker first"
            )
        return credentials


class InteractiveCredentialProvider(CredentialProvider):
    """Falls back to a one-time console authorization when no token is saved."""

    def __init__(
        self,
        client_secrets_path: str,
        token_path: str,
        scopes: list = None,
        prompt: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        super().__init__(token_path, scopes)
        self.client_secrets_path = client_secrets_path
        self.prompt = prompt
        self.output = output

    def get_credentials(self) -> Credentials:
        client_config = load_client_config(self.client_secrets_path)

        credentials = self.load_saved_token()
        if credentials is not None:
            return credentials

        credentials = self.authorize(client_config)
        self.save_token(credentials)
        return credentials

    def authorize(self, client_config: dict) -> Credentials:
        """Run the console authorization flow and return fresh credentials."""
        redirect_uri = client_config['installed']['redirect_uris'][0]
        try:
            flow = Flow.from_client_config(client_config, scopes=self.scopes, redirect_uri=redirect_uri)
            auth_url, _ = flow.authorization_url(access_type='offline', prompt='consent')
        except ValueError as e:
            raise StartupError(f"could not start authorization: {e}") from e

        self.output(f"authorize with this url: {auth_url}")
        try:
            code = self.prompt('Enter code from the page: ').strip()
        except (EOFError, OSError) as e:
            raise StartupError(f"no console to read the authorization code from: {e!r}") from e
        if not code:
            raise StartupError("no authorization code entered")

        try:
            flow.fetch_token(code=code)
        except Exception as e:
            raise StartupError(f"token error: {e}") from e

        credentials = flow.credentials
        if credentials is None or not credentials.token:
            raise StartupError("token missing")

        logger.info("Authorization complete")
        return credentials
