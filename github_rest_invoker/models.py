"""Request/response value types shared by the request pipeline."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from .pagination import parse_link_header

DEFAULT_API_HOST = "github.com"

MEDIA_TYPE_JSON = "application/vnd.github.v3+json"
MEDIA_TYPE_RAW = "application/vnd.github.v3.raw"
MEDIA_TYPE_HTML = "text/html"

VALID_METHODS = ("GET", "POST", "PATCH", "PUT", "DELETE")
BODY_METHODS = ("POST", "PATCH", "PUT", "DELETE")


@dataclass(frozen=True)
class RequestDescriptor:
    """One logical call against the GitHub REST API.

    ``uri_fragment`` is relative to the API host; host composition belongs to
    the requester. ``body`` may be pre-serialized (str/bytes) or any
    JSON-serializable object, which is serialized with ``json.dumps``.
    """

    method: str
    uri_fragment: str
    body: str | bytes | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    accept_pagination: bool = False
    max_retries: int | None = None
    retry_delay: float | None = None
    description: str | None = None
    telemetry_event_name: str | None = None
    telemetry_properties: Mapping[str, Any] = field(default_factory=dict)
    telemetry_exception_bucket: str | None = None
    # Error statuses the caller handles itself; not reported as exceptions
    expected_error_statuses: frozenset[int] = frozenset()

    def __post_init__(self):
        method = self.method.upper()
        if method not in VALID_METHODS:
            raise ValueError(f"Unsupported method: {self.method}")
        object.__setattr__(self, "method", method)

        fragment = self.uri_fragment.lstrip("/")
        if "://" in fragment:
            raise ValueError(f"uri_fragment must not include a scheme or host: {self.uri_fragment}")
        if fragment == "api/v3" or fragment.startswith("api/v3/"):
            raise ValueError(f"uri_fragment must not include the api prefix: {self.uri_fragment}")
        object.__setattr__(self, "uri_fragment", fragment)

        body = self.body
        if body is not None and not isinstance(body, (str, bytes)):
            body = json.dumps(body)
        if body is not None and method not in BODY_METHODS:
            raise ValueError(f"{method} requests cannot carry a body")
        object.__setattr__(self, "body", body)
        object.__setattr__(self, "headers", dict(self.headers))
        object.__setattr__(self, "telemetry_properties", dict(self.telemetry_properties))
        object.__setattr__(self, "expected_error_statuses", frozenset(self.expected_error_statuses))

    @property
    def accept(self) -> str:
        for name, value in self.headers.items():
            if name.lower() == "accept":
                return value
        return MEDIA_TYPE_JSON

    @property
    def encoded_body(self) -> bytes | None:
        if self.body is None:
            return None
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a single successful HTTP exchange."""

    status_code: int
    headers: httpx.Headers
    decoded_body: Any = None
    url: str | None = None

    @property
    def link(self) -> str | None:
        return self.headers.get("link")

    @property
    def next_link(self) -> str | None:
        return parse_link_header(self.link).get("next")

    @property
    def request_id(self) -> str | None:
        return self.headers.get("x-github-request-id")

    @property
    def retry_after(self) -> float | None:
        return _parse_float(self.headers.get("retry-after"))

    @property
    def rate_limit_remaining(self) -> int | None:
        value = _parse_float(self.headers.get("x-ratelimit-remaining"))
        return int(value) if value is not None else None

    @property
    def rate_limit_reset(self) -> int | None:
        value = _parse_float(self.headers.get("x-ratelimit-reset"))
        return int(value) if value is not None else None


@dataclass(frozen=True)
class NotReady:
    """A 202 response: GitHub is still computing the result."""

    headers: httpx.Headers
    url: str | None = None


def _parse_float(val: str | None) -> float | None:
    if val is None:
        return None
    try:
        return float(val)
    except ValueError:
        return None
