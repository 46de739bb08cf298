"""Unit tests for utils module."""

import pytest

from .settings import Settings
from .utils import parse_repository_url, repository_html_url, resolve_repository


def describe_parse_repository_url():
    def it_parses_web_urls():
        assert parse_repository_url("https://github.com/octocat/Hello-World") == ("octocat", "Hello-World")

    def it_strips_git_suffix_and_trailing_path():
        assert parse_repository_url("https://github.com/o/r.git") == ("o", "r")
        assert parse_repository_url("https://github.com/o/r/issues/12") == ("o", "r")

    def it_parses_api_urls():
        assert parse_repository_url("https://api.github.com/repos/o/r") == ("o", "r")

    def it_parses_enterprise_api_urls():
        assert parse_repository_url("https://github.contoso.com/api/v3/repos/o/r") == ("o", "r")

    def it_rejects_non_repository_urls():
        assert parse_repository_url("https://github.com/octocat") is None
        assert parse_repository_url("octocat/Hello-World") is None


def describe_resolve_repository():
    def it_prefers_the_uri():
        settings = Settings(default_owner_name="d", default_repository_name="dr")
        assert resolve_repository("o", "r", "https://github.com/u/ur", settings) == ("u", "ur")

    def it_prefers_explicit_names_over_defaults():
        settings = Settings(default_owner_name="d", default_repository_name="dr")
        assert resolve_repository("o", None, None, settings) == ("o", "dr")

    def it_falls_back_to_defaults():
        settings = Settings(default_owner_name="d", default_repository_name="dr")
        assert resolve_repository(settings=settings) == ("d", "dr")

    def it_raises_when_the_owner_is_unknown():
        with pytest.raises(ValueError, match="owner"):
            resolve_repository(repository_name="r", settings=Settings())

    def it_raises_for_unparseable_uris():
        with pytest.raises(ValueError):
            resolve_repository(uri="not a url")


def describe_repository_html_url():
    def it_builds_the_web_url():
        assert repository_html_url("o", "r", "github.com") == "https://github.com/o/r"
