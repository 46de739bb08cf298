"""Shared fixtures: keep every test away from the real home directory and network."""

import os

import httpx
import pytest

from github_rest_invoker import context as context_module
from github_rest_invoker.context import Context
from github_rest_invoker.settings import Settings


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Point config/token/log files at a temp dir and clear ambient credentials."""
    monkeypatch.setenv("GITHUB_REST_CONFIG_DIR", str(tmp_path / "config"))
    for name in list(os.environ):
        if name.startswith("GITHUB_REST_") and name != "GITHUB_REST_CONFIG_DIR":
            monkeypatch.delenv(name)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.chdir(tmp_path)
    context_module.reset_context()
    yield
    context_module.reset_context()


class FakeGitHub:
    """Queue of canned responses served through httpx.MockTransport.

    Each queued item is an httpx.Response, an exception to raise, or a
    callable taking the request. Every request is recorded in ``requests``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._queue: list = []

    def queue(self, *items):
        self._queue.extend(items)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            return httpx.Response(500, json={"message": "no response queued"})
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def settings():
    return Settings(retry_delay_seconds=0, disable_logging=True, suppress_no_token_warning=True)


@pytest.fixture
def context(settings, fake_github):
    ctx = Context.create(settings, transport=fake_github.transport)
    yield ctx
    ctx.close()
