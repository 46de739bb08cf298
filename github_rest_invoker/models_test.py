"""Unit tests for request descriptors, results and errors."""

import dataclasses

import httpx
import pytest

from .errors import ApiError, RetryExhaustedError
from .models import MEDIA_TYPE_JSON, ExecutionResult, RequestDescriptor


def describe_RequestDescriptor():
    def it_normalizes_method_and_fragment():
        d = RequestDescriptor("get", "/repos/o/r/assignees")
        assert d.method == "GET"
        assert d.uri_fragment == "repos/o/r/assignees"

    def it_rejects_unknown_methods():
        with pytest.raises(ValueError):
            RequestDescriptor("HEAD", "rate_limit")

    def it_rejects_fragments_with_a_host():
        with pytest.raises(ValueError):
            RequestDescriptor("GET", "https://api.github.com/rate_limit")

    def it_rejects_fragments_with_the_api_prefix():
        with pytest.raises(ValueError):
            RequestDescriptor("GET", "api/v3/rate_limit")

    def it_rejects_bodies_on_get():
        with pytest.raises(ValueError):
            RequestDescriptor("GET", "markdown", body="{}")

    def it_serializes_object_bodies():
        d = RequestDescriptor("POST", "markdown", body={"text": "# hi", "mode": "gfm"})
        assert d.body == '{"text": "# hi", "mode": "gfm"}'
        assert d.encoded_body == b'{"text": "# hi", "mode": "gfm"}'

    def it_keeps_pre_serialized_bodies():
        assert RequestDescriptor("PUT", "x", body=b"raw").encoded_body == b"raw"

    def it_defaults_accept_to_json():
        assert RequestDescriptor("GET", "x").accept == MEDIA_TYPE_JSON
        assert RequestDescriptor("GET", "x", headers={"ACCEPT": "text/html"}).accept == "text/html"

    def it_freezes_expected_error_statuses():
        d = RequestDescriptor("GET", "x", expected_error_statuses=[404, 404])
        assert d.expected_error_statuses == frozenset({404})
        assert RequestDescriptor("GET", "x").expected_error_statuses == frozenset()

    def it_is_immutable():
        d = RequestDescriptor("GET", "x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            d.method = "POST"


def describe_ExecutionResult():
    def it_exposes_pagination_and_rate_limit_headers():
        result = ExecutionResult(
            status_code=200,
            headers=httpx.Headers(
                {
                    "Link": '<https://api.github.com/x?page=2>; rel="next"',
                    "X-RateLimit-Remaining": "4999",
                    "X-RateLimit-Reset": "1700000000",
                    "Retry-After": "60",
                    "X-GitHub-Request-Id": "AB:CD",
                }
            ),
        )
        assert result.next_link == "https://api.github.com/x?page=2"
        assert result.rate_limit_remaining == 4999
        assert result.rate_limit_reset == 1700000000
        assert result.retry_after == 60.0
        assert result.request_id == "AB:CD"

    def it_tolerates_missing_headers():
        result = ExecutionResult(status_code=204, headers=httpx.Headers())
        assert result.next_link is None
        assert result.retry_after is None
        assert result.rate_limit_remaining is None


def describe_ApiError():
    def it_is_read_only():
        error = ApiError("boom", status_code=500)
        with pytest.raises(AttributeError):
            error.status_code = 200

    def it_renders_its_message():
        assert str(ApiError("404 Not Found", status_code=404)) == "404 Not Found"

    def it_marks_retry_exhaustion():
        error = RetryExhaustedError("still 202", attempts=4)
        assert isinstance(error, ApiError)
        assert error.status_code == 202
        assert error.attempts == 4
