"""Typed wrappers around decoded API payloads.

Resource operations wrap what the requester returns so callers get a type
tag, convenient accessors, and (unless pipeline support is disabled) the
URL of the repository the object came from, for chaining into the next call.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from .settings import Settings


@dataclass(frozen=True)
class Envelope:
    type_name: ClassVar[str] = "GitHub.Object"

    data: dict[str, Any] = field(default_factory=dict)
    repository_url: str | None = None

    @classmethod
    def wrap(cls, data: dict[str, Any], settings: Settings, repository_url: str | None = None):
        if settings.disable_pipeline_support:
            repository_url = None
        return cls(data=data, repository_url=repository_url)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class GitHubUser(Envelope):
    type_name: ClassVar[str] = "GitHub.User"

    @property
    def login(self) -> str | None:
        return self.data.get("login")

    @property
    def user_id(self) -> int | None:
        return self.data.get("id")


@dataclass(frozen=True)
class GitHubIssue(Envelope):
    type_name: ClassVar[str] = "GitHub.Issue"

    @property
    def number(self) -> int | None:
        return self.data.get("number")

    @property
    def assignees(self) -> list[GitHubUser]:
        return [GitHubUser(data=u, repository_url=self.repository_url) for u in self.data.get("assignees") or []]


@dataclass(frozen=True)
class RateLimitBucket:
    limit: int
    remaining: int
    reset: int
    reset_at: datetime | None = None

    @classmethod
    def from_json(cls, data: dict, settings: Settings) -> "RateLimitBucket":
        reset = int(data.get("reset", 0))
        reset_at = None if settings.disable_smarter_objects else datetime.fromtimestamp(reset, tz=timezone.utc)
        return cls(
            limit=int(data.get("limit", 0)),
            remaining=int(data.get("remaining", 0)),
            reset=reset,
            reset_at=reset_at,
        )


@dataclass(frozen=True)
class GitHubRateLimit(Envelope):
    type_name: ClassVar[str] = "GitHub.RateLimit"

    core: RateLimitBucket | None = None
    search: RateLimitBucket | None = None
    graphql: RateLimitBucket | None = None

    @classmethod
    def wrap(cls, data: dict[str, Any], settings: Settings, repository_url: str | None = None):
        resources = data.get("resources") or {}

        def bucket(name):
            raw = resources.get(name)
            return RateLimitBucket.from_json(raw, settings) if raw else None

        return cls(data=data, core=bucket("core"), search=bucket("search"), graphql=bucket("graphql"))


@dataclass(frozen=True)
class GitHubLicense(Envelope):
    type_name: ClassVar[str] = "GitHub.License"

    decoded_content: str | None = None

    @property
    def key(self) -> str | None:
        # Repository license responses nest the license object
        return (self.data.get("license") or self.data).get("key")

    @property
    def name(self) -> str | None:
        return (self.data.get("license") or self.data).get("name")


@dataclass(frozen=True)
class GitHubCodeOfConduct(Envelope):
    type_name: ClassVar[str] = "GitHub.CodeOfConduct"

    @property
    def key(self) -> str | None:
        return self.data.get("key")

    @property
    def name(self) -> str | None:
        return self.data.get("name")


@dataclass(frozen=True)
class GitHubGitignore(Envelope):
    type_name: ClassVar[str] = "GitHub.Gitignore"

    @property
    def name(self) -> str | None:
        return self.data.get("name")

    @property
    def source(self) -> str | None:
        return self.data.get("source")
