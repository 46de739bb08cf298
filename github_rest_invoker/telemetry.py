"""Anonymous usage reporting to Application Insights.

Everything here is fire-and-forget: events are posted from a single
background worker and any failure is logged as a warning, never raised to
the code that reported the event.
"""

import getpass
import hashlib
import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from datetime import datetime, timezone

import httpx

from .__version__ import __version__
from .settings import Settings

logger = logging.getLogger(__name__)

TELEMETRY_URL = "https://dc.services.visualstudio.com/v2/track"
SDK_VERSION = f"github-rest-invoker:{__version__}"


def get_pii_safe_string(value: str | None, settings: Settings) -> str | None:
    """One-way hash a value before it goes into telemetry, unless PII protection is off."""
    if value is None or settings.disable_pii_protection:
        return value
    return hashlib.sha512(value.encode("utf-8")).hexdigest()


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


class Telemetry:
    """Posts usage and exception events without blocking the caller."""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        self._transport = transport
        self._client: httpx.Client | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self.session_id = str(uuid.uuid4())
        self.failures = 0

    @property
    def enabled(self) -> bool:
        return not self.settings.disable_telemetry and bool(self.settings.application_insights_key)

    def send_event(
        self,
        name: str,
        properties: dict | None = None,
        measurements: dict | None = None,
    ) -> Future | None:
        if not self.enabled:
            return None
        base_data = {
            "ver": 2,
            "name": name,
            "properties": self._properties(properties),
            "measurements": dict(measurements or {}),
        }
        return self._submit(self._envelope("Event", "EventData", base_data))

    def send_exception(
        self,
        exc: BaseException,
        properties: dict | None = None,
        measurements: dict | None = None,
    ) -> Future | None:
        if not self.enabled:
            return None
        base_data = {
            "ver": 2,
            "handledAt": "UserCode",
            "properties": self._properties(properties),
            "measurements": dict(measurements or {}),
            "exceptions": [
                {
                    "id": 1,
                    "outerId": 0,
                    "typeName": type(exc).__name__,
                    "message": str(exc),
                    "hasFullStack": False,
                }
            ],
        }
        return self._submit(self._envelope("Exception", "ExceptionData", base_data))

    def flush(self, timeout: float | None = 5.0) -> bool:
        """Wait for outstanding events. Returns False if some are still running."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def close(self):
        self.flush()
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None
            if self._client is not None:
                self._client.close()
                self._client = None

    def _properties(self, properties: dict | None) -> dict[str, str]:
        merged = {
            "ApiHostName": get_pii_safe_string(self.settings.api_host_name, self.settings),
            "DefaultOwnerNameSpecified": str(bool(self.settings.default_owner_name)),
            "DefaultRepositoryNameSpecified": str(bool(self.settings.default_repository_name)),
            "ModuleVersion": __version__,
        }
        for key, value in (properties or {}).items():
            merged[key] = "" if value is None else str(value)
        return merged

    def _envelope(self, kind: str, base_type: str, base_data: dict) -> dict:
        key = self.settings.application_insights_key
        return {
            "name": f"Microsoft.ApplicationInsights.{key.replace('-', '')}.{kind}",
            "time": datetime.now(timezone.utc).isoformat(),
            "iKey": key,
            "tags": {
                "ai.user.id": get_pii_safe_string(_current_user(), self.settings),
                "ai.session.id": self.session_id,
                "ai.application.ver": __version__,
                "ai.internal.sdkVersion": SDK_VERSION,
            },
            "data": {"baseType": base_type, "baseData": base_data},
        }

    def _submit(self, envelope: dict) -> Future:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="telemetry")
            future = self._executor.submit(self._post, envelope)
            self._pending.add(future)
        future.add_done_callback(self._on_done)
        return future

    def _post(self, envelope: dict) -> bool:
        if self._client is None:
            self._client = httpx.Client(transport=self._transport, timeout=10.0)
        t0 = time.time()
        try:
            resp = self._client.post(TELEMETRY_URL, json=[envelope])
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self.failures += 1
            logger.warning("Failed to send telemetry: %s", e)
            return False
        logger.debug("Telemetry event %s sent in %.2fs", envelope["name"], time.time() - t0)
        return True

    def _on_done(self, future: Future):
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self.failures += 1
            logger.warning("Failed to send telemetry: %s", exc)


def repository_properties(owner: str, repo: str, settings: Settings) -> dict[str, str | None]:
    """Standard telemetry properties for an operation scoped to one repository."""
    return {
        "OwnerName": get_pii_safe_string(owner, settings),
        "RepositoryName": get_pii_safe_string(repo, settings),
    }
