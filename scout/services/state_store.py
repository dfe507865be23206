"""
State Persistence

StateStore keeps the {last completed day, page cursor} record between
process runs. Ledger is the append-only list of accepted video ids.
"""

import json
import logging
import os
import tempfile

from scout.models import SessionState
from scout.services.validation import validate_session_record

logger = logging.getLogger(__name__)


class StateStore:
    """JSON file holding the session state. Saves replace the whole file."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> SessionState:
        """
        Load the saved session state.

        A missing, unreadable or malformed file is treated as "no prior
        state" and yields SessionState.default(). Never raises.
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                record = json.load(f)
        except FileNotFoundError:
            logger.info(f"No state file at {self.path}, starting fresh")
            return SessionState.default()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read state file {self.path}: {e}")
            return SessionState.default()

        result = validate_session_record(record)
        if not result.ok:
            logger.warning(f"Ignoring malformed state file {self.path}: {result.error}")
            return SessionState.default()

        return result.value

    def save(self, state: SessionState) -> None:
        """Write the full state to a temp file, then rename over the old one."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix='.state-', suffix='.json', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(state.to_record(), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Saved state: day={state.last_completed_day} cursor={state.cursor}")


class Ledger:
    """Append-only, space-separated record of accepted ids."""

    def __init__(self, path: str):
        self.path = path

    def append(self, ids) -> None:
        ids = list(ids)
        if not ids:
            return

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(' '.join(ids) + ' ')

    def read_ids(self) -> list:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return f.read().split()
        except FileNotFoundError:
            return []
