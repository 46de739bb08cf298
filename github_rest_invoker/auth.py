"""Access token resolution.

Tokens are looked up in order: the value passed to the current call, the
token cached for this process, the per-user token file, then the
``GITHUB_TOKEN`` environment variable. When none is found the call goes out
unauthenticated (and is subject to much lower rate limits).

The token file is encrypted with Fernet under a per-user key stored beside
it; both files are created with owner-only permissions.
"""

import logging
import os
import threading
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from .settings import Settings, config_dir

logger = logging.getLogger(__name__)

TOKEN_FILE_NAME = "access_token"
KEY_SUFFIX = ".key"


def token_path() -> Path:
    return config_dir() / TOKEN_FILE_NAME


class CredentialStore:
    """Process-lifetime holder for the GitHub access token."""

    def __init__(self, settings: Settings, path: Path | None = None):
        self.settings = settings
        self._path = path
        self._token: str | None = None
        self._file_checked = False
        self._warned = False
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path or token_path()

    @property
    def key_path(self) -> Path:
        path = self.path
        return path.with_name(path.name + KEY_SUFFIX)

    def get_access_token(self, explicit: str | None = None) -> str | None:
        if explicit:
            return explicit

        with self._lock:
            if self._token:
                return self._token

            if not self._file_checked:
                self._file_checked = True
                self._token = self._read_token_file()
                if self._token:
                    return self._token

            if self.settings.github_token:
                return self.settings.github_token

            if not self._warned and not self.settings.suppress_no_token_warning:
                self._warned = True
                logger.warning(
                    "No access token configured; requests are unauthenticated and "
                    "subject to lower rate limits. Call set_access_token() to add one."
                )
        return None

    def has_access_token(self) -> bool:
        with self._lock:
            if self._token:
                return True
        return self.path.exists() or bool(self.settings.github_token)

    def set_access_token(self, token: str, session_only: bool = False):
        if not token:
            raise ValueError("token must be a non-empty string")
        with self._lock:
            self._token = token
            self._file_checked = True
            self._warned = False
        if not session_only:
            self._write_token_file(token)

    def clear_access_token(self, session_only: bool = False):
        with self._lock:
            self._token = None
            self._file_checked = False
        if not session_only:
            self.path.unlink(missing_ok=True)

    def _read_token_file(self) -> str | None:
        path = self.path
        if not path.exists():
            return None
        try:
            key = self.key_path.read_bytes()
            token = Fernet(key).decrypt(path.read_bytes()).decode("utf-8").strip()
        except OSError as e:
            logger.warning("Could not read access token file %s, continuing without it: %s", path, e)
            return None
        except (InvalidToken, ValueError) as e:
            # ValueError covers a malformed key and UnicodeDecodeError
            logger.warning("Access token file %s is corrupted, continuing without it: %r", path, e)
            return None
        if not token or any(c.isspace() for c in token) or not token.isprintable():
            logger.warning("Access token file %s is corrupted, continuing without it", path)
            return None
        return token

    def _write_token_file(self, token: str):
        key_path = self.key_path
        if key_path.exists():
            key = key_path.read_bytes()
        else:
            key = Fernet.generate_key()
            _write_private(key_path, key)
        _write_private(self.path, Fernet(key).encrypt(token.encode("utf-8")))


def _write_private(path: Path, data: bytes):
    path.parent.mkdir(parents=True, exist_ok=True)
    # Owner-only permissions from the moment the file is created
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
