"""Process-wide invocation context: settings, credentials, and telemetry.

The default context is built on first use and can be replaced or reset
explicitly. Everything that reads configuration takes an optional
``context`` argument so callers (and tests) can supply their own.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from .auth import CredentialStore
from .logging_config import configure_logging
from .settings import (
    NON_PERSISTED_SETTINGS,
    Settings,
    config_path,
    get_settings,
    read_config_file,
    write_config_file,
)
from .telemetry import Telemetry

if TYPE_CHECKING:
    from .requester import GitHubRequester

logger = logging.getLogger(__name__)

LOGGING_SETTINGS = frozenset(
    {"disable_logging", "log_path", "log_process_id", "log_time_as_utc"}
)


@dataclass
class Context:
    settings: Settings
    credentials: CredentialStore
    telemetry: Telemetry
    # Transport for API requests; None means real network access
    transport: httpx.BaseTransport | None = None
    # Created on first use by requester.get_requester and closed with the context
    requester: "GitHubRequester | None" = field(default=None, init=False, repr=False)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        telemetry_transport: httpx.BaseTransport | None = None,
    ) -> "Context":
        settings = settings or Settings()
        return cls(
            settings=settings,
            credentials=CredentialStore(settings),
            telemetry=Telemetry(settings, transport=telemetry_transport),
            transport=transport,
        )

    def replace_settings(self, settings: Settings):
        self.settings = settings
        self.credentials.settings = settings
        self.telemetry.settings = settings

    def close(self):
        """Flush telemetry and release the HTTP clients held by this context."""
        self.telemetry.close()
        if self.requester is not None:
            self.requester.close()
            self.requester = None


_context: Context | None = None
_context_lock = threading.Lock()


def get_context() -> Context:
    """Get (building on first use) the default context."""
    global _context
    with _context_lock:
        if _context is None:
            _context = Context.create(get_settings())
            configure_logging(_context.settings)
        return _context


def set_context(context: Context | None):
    global _context
    with _context_lock:
        _context = context


def reset_context():
    """Drop the default context and the cached settings; the next call rebuilds both."""
    global _context
    with _context_lock:
        if _context is not None:
            _context.close()
        _context = None
    get_settings.cache_clear()


def get_config(name: str, context: Context | None = None) -> Any:
    ctx = context or get_context()
    if name not in Settings.model_fields:
        raise KeyError(f"Unknown configuration setting: {name}")
    return getattr(ctx.settings, name)


def set_config(name: str, value: Any, session_only: bool = False, context: Context | None = None):
    """Change a setting for this process and, unless ``session_only``, persist it.

    Raises KeyError for unknown names and pydantic.ValidationError for bad values.
    """
    ctx = context or get_context()
    if name not in Settings.model_fields or name in NON_PERSISTED_SETTINGS:
        raise KeyError(f"Unknown configuration setting: {name}")

    setattr(ctx.settings, name, value)

    if not session_only:
        values = read_config_file()
        values[name] = ctx.settings.model_dump(mode="json")[name]
        write_config_file(values)

    if name in LOGGING_SETTINGS and context is None:
        configure_logging(ctx.settings)


def reset_config(session_only: bool = False, context: Context | None = None):
    """Drop session overrides and, unless ``session_only``, delete the config file.

    A session-only reset falls back to the persisted values. The stored access
    token is left alone (see ``clear_access_token``).
    """
    ctx = context or get_context()
    if not session_only:
        config_path().unlink(missing_ok=True)
    settings = Settings()
    get_settings.cache_clear()
    ctx.replace_settings(settings)
    if context is None:
        configure_logging(settings)


def set_access_token(token: str, session_only: bool = False, context: Context | None = None):
    (context or get_context()).credentials.set_access_token(token, session_only=session_only)


def clear_access_token(session_only: bool = False, context: Context | None = None):
    (context or get_context()).credentials.clear_access_token(session_only=session_only)


def has_access_token(context: Context | None = None) -> bool:
    return (context or get_context()).credentials.has_access_token()
