"""GitHub REST request pipeline using httpx.

Every API operation in the package goes through ``GitHubRequester``: URL
composition against the configured host, header assembly, the 202
retry-until-ready loop, Link header pagination, and translation of failures
into ``ApiError``.
"""

import logging
import time
from collections.abc import Callable

import httpx

from .__version__ import __version__
from .context import Context, get_context
from .errors import ApiError, RetryExhaustedError
from .models import (
    BODY_METHODS,
    DEFAULT_API_HOST,
    ExecutionResult,
    NotReady,
    RequestDescriptor,
)
from .pagination import estimate_page_count, should_report_progress
from .settings import Settings

logger = logging.getLogger(__name__)

USER_AGENT = f"github-rest-invoker/{__version__}"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"

ProgressCallback = Callable[[int, int], None]


def build_url(uri_fragment: str, api_host_name: str = DEFAULT_API_HOST) -> str:
    """Compose the full URL for a fragment.

    github.com is served from ``api.github.com``; Enterprise hosts serve the
    API under ``/api/v3``.
    """
    fragment = uri_fragment.lstrip("/")
    host = api_host_name.strip().rstrip("/")
    if host.lower() == DEFAULT_API_HOST:
        return f"https://api.{DEFAULT_API_HOST}/{fragment}"
    return f"https://{host}/api/v3/{fragment}"


def build_headers(descriptor: RequestDescriptor, access_token: str | None = None) -> dict[str, str]:
    headers = {"Accept": descriptor.accept, "User-Agent": USER_AGENT}
    for name, value in descriptor.headers.items():
        if name.lower() != "accept":
            headers[name] = value
    if access_token:
        headers["Authorization"] = f"token {access_token}"
    if descriptor.body is not None:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return headers


def decode_body(resp: httpx.Response, accept: str):
    """Decode a successful response body.

    JSON that fails to parse comes back as text rather than raising.
    """
    if not resp.content:
        return None
    content_type = resp.headers.get("content-type", "").lower()
    if "json" in content_type or (not content_type and "json" in accept.lower()):
        try:
            return resp.json()
        except ValueError:
            return resp.text
    if content_type.startswith("text/") or "charset" in content_type:
        return resp.text
    return resp.content


def build_api_error(resp: httpx.Response, descriptor: RequestDescriptor | None = None) -> ApiError:
    """Translate a non-success response into an ApiError.

    The message carries the status line, GitHub's ``message``, the
    documentation link, each validation error, and the request id.
    """
    status = resp.status_code
    parts = [f"{status} {resp.reason_phrase}".strip()]
    documentation_url = None
    errors: list[dict] = []

    try:
        data = resp.json() if resp.content else None
    except ValueError:
        data = None

    if isinstance(data, dict):
        raw_body = data
        if data.get("message"):
            parts.append(str(data["message"]))
        documentation_url = data.get("documentation_url")
        if documentation_url:
            parts.append(str(documentation_url))
        for err in data.get("errors") or []:
            if isinstance(err, dict):
                errors.append(err)
                fields = ("resource", "field", "code", "message")
                parts.append(" | ".join(f"{k}: {err[k]}" for k in fields if err.get(k)))
            else:
                errors.append({"message": str(err)})
                parts.append(str(err))
    else:
        raw_body = data if data is not None else (resp.text or None)
        if resp.text:
            parts.append(resp.text)

    if status in (403, 429) and resp.headers.get("x-ratelimit-remaining") == "0":
        parts.append(f"Rate limit exhausted, resets at {resp.headers.get('x-ratelimit-reset')} (epoch seconds)")

    request_id = resp.headers.get("x-github-request-id")
    if request_id:
        parts.append(f"RequestId: {request_id}")

    return ApiError(
        "\n".join(parts),
        status_code=status,
        raw_body=raw_body,
        descriptor=descriptor,
        request_id=request_id,
        documentation_url=documentation_url,
        errors=errors,
    )


class GitHubRequester:
    """Executes RequestDescriptors against the GitHub REST API."""

    def __init__(self, context: Context | None = None, transport: httpx.BaseTransport | None = None):
        self._context = context
        if transport is None and context is not None:
            transport = context.transport
        self._client = httpx.Client(transport=transport, follow_redirects=True)

    @property
    def context(self) -> Context:
        return self._context or get_context()

    def execute(self, descriptor: RequestDescriptor, access_token: str | None = None) -> ExecutionResult:
        """Run one logical call, polling 202 responses until the result is ready.

        Raises:
            ApiError: transport failure or non-success status.
            RetryExhaustedError: still 202 after the configured retries.
        """
        ctx = self.context
        settings = ctx.settings
        token = ctx.credentials.get_access_token(access_token)
        url = build_url(descriptor.uri_fragment, settings.api_host_name)

        t0 = time.time()
        try:
            result = self._execute_until_ready(descriptor, descriptor.method, url, token, settings)
        except ApiError as e:
            if e.status_code not in descriptor.expected_error_statuses:
                self._report_failure(ctx, descriptor, e)
            raise
        self._settle(descriptor, settings)
        self._report_success(ctx, descriptor, t0)
        return result

    def execute_paged(
        self,
        descriptor: RequestDescriptor,
        access_token: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list:
        """Run a call and follow ``rel="next"`` links, concatenating array pages in order.

        A non-array first page comes back as a one-element list; a non-array
        later page ends pagination.
        """
        ctx = self.context
        settings = ctx.settings
        token = ctx.credentials.get_access_token(access_token)
        url = build_url(descriptor.uri_fragment, settings.api_host_name)

        t0 = time.time()
        page = 0
        try:
            first = self._execute_until_ready(descriptor, descriptor.method, url, token, settings)
            page = 1
            body = first.decoded_body
            if body is None:
                results = []
            elif not isinstance(body, list):
                results = [body]
            else:
                results = list(body)
                total_pages = estimate_page_count(first.link)
                report = should_report_progress(total_pages, settings.multi_request_progress_threshold)
                if report:
                    self._progress(on_progress, page, total_pages)

                api_host = httpx.URL(url).host
                next_url = first.next_link
                while next_url:
                    # next links are already fully qualified
                    page_token = token if httpx.URL(next_url).host == api_host else None
                    if token and page_token is None:
                        logger.warning("Next page %s is off the API host, sending it without credentials", next_url)
                    result = self._execute_until_ready(descriptor, "GET", next_url, page_token, settings)
                    if not isinstance(result.decoded_body, list):
                        logger.info("Non-array page at %s, ending pagination", next_url)
                        break
                    results.extend(result.decoded_body)
                    page += 1
                    if report:
                        self._progress(on_progress, page, total_pages)
                    next_url = result.next_link
        except ApiError as e:
            if e.status_code not in descriptor.expected_error_statuses:
                self._report_failure(ctx, descriptor, e)
            raise

        self._settle(descriptor, settings)
        self._report_success(ctx, descriptor, t0, {"Pages": page})
        return results

    def close(self):
        self._client.close()

    def _execute_until_ready(
        self,
        descriptor: RequestDescriptor,
        method: str,
        url: str,
        token: str | None,
        settings: Settings,
    ) -> ExecutionResult:
        max_retries = (
            descriptor.max_retries
            if descriptor.max_retries is not None
            else settings.maximum_retries_when_result_not_ready
        )
        delay = descriptor.retry_delay if descriptor.retry_delay is not None else settings.retry_delay_seconds

        retries = 0
        while True:
            outcome = self._send(descriptor, method, url, token, settings)
            if not isinstance(outcome, NotReady):
                return outcome
            if retries >= max_retries:
                message = (
                    f"Request still not ready after {retries} retries: {method} {url}. "
                    "The retry limit is configurable via maximum_retries_when_result_not_ready."
                )
                logger.error(message)
                raise RetryExhaustedError(message, attempts=retries + 1, descriptor=descriptor)
            retries += 1
            logger.info("Result not ready (202), retry %d/%d in %ss", retries, max_retries, delay)
            time.sleep(delay)

    def _send(
        self,
        descriptor: RequestDescriptor,
        method: str,
        url: str,
        token: str | None,
        settings: Settings,
    ) -> ExecutionResult | NotReady:
        """One HTTP exchange. 202 comes back as NotReady; failures raise ApiError."""
        headers = build_headers(descriptor, token)
        content = descriptor.encoded_body if method in BODY_METHODS else None
        if content is None:
            headers.pop("Content-Type", None)

        if descriptor.description:
            logger.info(descriptor.description)
        logger.info("Executing: %s %s", method, url)
        if content is not None:
            logger.info("Request body: %s", descriptor.body if settings.log_request_body else "<redacted>")

        try:
            resp = self._client.request(method, url, headers=headers, content=content, timeout=settings.timeout)
        except httpx.RequestError as e:
            # Redirect loops and undecodable bodies land here too
            raise ApiError(
                f"Request failed: {method} {url}: {type(e).__name__}: {e}",
                descriptor=descriptor,
            ) from e

        request_id = resp.headers.get("x-github-request-id")
        logger.debug("Response %d for %s %s (request id %s)", resp.status_code, method, url, request_id)

        if resp.status_code == 202:
            return NotReady(headers=resp.headers, url=str(resp.url))

        if 200 <= resp.status_code < 300:
            return ExecutionResult(
                status_code=resp.status_code,
                headers=resp.headers,
                decoded_body=decode_body(resp, descriptor.accept),
                url=str(resp.url),
            )

        error = build_api_error(resp, descriptor)
        logger.error("%s %s failed: %s", method, url, error.message)
        raise error

    def _settle(self, descriptor: RequestDescriptor, settings: Settings):
        if descriptor.method in BODY_METHODS and settings.state_change_delay_seconds > 0:
            time.sleep(settings.state_change_delay_seconds)

    def _progress(self, on_progress: ProgressCallback | None, page: int, total_pages: int):
        logger.info("Retrieved page %d of %d", page, total_pages)
        if on_progress is None:
            return
        try:
            on_progress(page, total_pages)
        except Exception as e:
            logger.warning("Progress callback failed: %s", e)

    def _report_success(self, ctx: Context, descriptor: RequestDescriptor, t0: float, measurements=None):
        if not descriptor.telemetry_event_name:
            return
        measurements = {"Duration": (time.time() - t0) * 1000, **(measurements or {})}
        try:
            ctx.telemetry.send_event(descriptor.telemetry_event_name, descriptor.telemetry_properties, measurements)
        except Exception as e:
            logger.warning("Could not queue telemetry event: %s", e)

    def _report_failure(self, ctx: Context, descriptor: RequestDescriptor, error: ApiError):
        properties = dict(descriptor.telemetry_properties)
        if descriptor.telemetry_exception_bucket:
            properties["ExceptionBucket"] = descriptor.telemetry_exception_bucket
        try:
            ctx.telemetry.send_exception(error, properties)
        except Exception as e:
            logger.warning("Could not queue telemetry exception: %s", e)


def get_requester(context: Context | None = None) -> GitHubRequester:
    """Get or create a requester bound to ``context`` (default: the process context)."""
    ctx = context or get_context()
    if ctx.requester is None:
        ctx.requester = GitHubRequester(ctx)
    return ctx.requester


def execute(
    descriptor: RequestDescriptor,
    access_token: str | None = None,
    context: Context | None = None,
) -> ExecutionResult:
    return get_requester(context).execute(descriptor, access_token)


def execute_paged(
    descriptor: RequestDescriptor,
    access_token: str | None = None,
    context: Context | None = None,
    on_progress: ProgressCallback | None = None,
) -> list:
    return get_requester(context).execute_paged(descriptor, access_token, on_progress)


def invoke(
    descriptor: RequestDescriptor,
    access_token: str | None = None,
    context: Context | None = None,
    on_progress: ProgressCallback | None = None,
):
    """Decoded result of a descriptor: a list when it accepts pagination, else the body."""
    if descriptor.accept_pagination:
        return execute_paged(descriptor, access_token, context, on_progress)
    return execute(descriptor, access_token, context).decoded_body
