"""Unit tests for fire-and-forget telemetry."""

import hashlib
import json

import httpx
import pytest

from .settings import Settings
from .telemetry import TELEMETRY_URL, Telemetry, get_pii_safe_string, repository_properties

KEY = "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def posted():
    return []


@pytest.fixture
def telemetry(posted):
    def handler(request: httpx.Request):
        posted.append(request)
        return httpx.Response(200, json={"itemsReceived": 1, "itemsAccepted": 1})

    t = Telemetry(Settings(application_insights_key=KEY), transport=httpx.MockTransport(handler))
    yield t
    t.close()


def describe_get_pii_safe_string():
    def it_hashes_by_default():
        expected = hashlib.sha512(b"octocat").hexdigest()
        assert get_pii_safe_string("octocat", Settings()) == expected

    def it_passes_values_through_when_protection_is_off():
        assert get_pii_safe_string("octocat", Settings(disable_pii_protection=True)) == "octocat"

    def it_keeps_none():
        assert get_pii_safe_string(None, Settings()) is None


def describe_Telemetry():
    def it_is_disabled_without_a_key():
        t = Telemetry(Settings())
        assert not t.enabled
        assert t.send_event("get_emojis") is None

    def it_is_disabled_by_setting():
        t = Telemetry(Settings(application_insights_key=KEY, disable_telemetry=True))
        assert t.send_event("get_emojis") is None

    def it_posts_an_event_envelope(telemetry: Telemetry, posted):
        future = telemetry.send_event("get_emojis", {"Extra": 3}, {"Duration": 1.5})
        assert future.result(timeout=5) is True

        assert len(posted) == 1
        assert str(posted[0].url) == TELEMETRY_URL
        (envelope,) = json.loads(posted[0].content)
        assert envelope["iKey"] == KEY
        assert envelope["name"].endswith(".Event")
        base = envelope["data"]["baseData"]
        assert base["name"] == "get_emojis"
        assert base["properties"]["Extra"] == "3"
        assert base["properties"]["ApiHostName"] == get_pii_safe_string("github.com", telemetry.settings)
        assert base["measurements"] == {"Duration": 1.5}

    def it_posts_exceptions(telemetry: Telemetry, posted):
        telemetry.send_exception(ValueError("boom"), {"Bucket": "get_emojis"}).result(timeout=5)

        (envelope,) = json.loads(posted[0].content)
        assert envelope["data"]["baseType"] == "ExceptionData"
        assert envelope["data"]["baseData"]["exceptions"][0]["typeName"] == "ValueError"

    def it_counts_failures_without_raising():
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        t = Telemetry(Settings(application_insights_key=KEY), transport=httpx.MockTransport(handler))
        try:
            assert t.send_event("get_emojis").result(timeout=5) is False
            assert t.failures == 1
        finally:
            t.close()

    def it_flushes_pending_events(telemetry: Telemetry, posted):
        for _ in range(3):
            telemetry.send_event("get_emojis")
        assert telemetry.flush(timeout=5)
        assert len(posted) == 3


def describe_repository_properties():
    def it_hashes_owner_and_repository():
        props = repository_properties("octocat", "Hello-World", Settings())
        assert props["OwnerName"] == hashlib.sha512(b"octocat").hexdigest()
        assert props["RepositoryName"] == hashlib.sha512(b"Hello-World").hexdigest()
