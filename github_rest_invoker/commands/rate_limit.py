"""Rate limit status."""

from ..context import Context, get_context
from ..envelopes import GitHubRateLimit
from ..models import RequestDescriptor
from ..requester import invoke


def get_rate_limit(access_token: str | None = None, context: Context | None = None) -> GitHubRateLimit:
    """Current core/search/graphql limits for the resolved token (or the caller's IP)."""
    ctx = context or get_context()
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment="rate_limit",
        description="Getting your API rate limit",
        telemetry_event_name="get_rate_limit",
    )
    return GitHubRateLimit.wrap(invoke(descriptor, access_token, context) or {}, ctx.settings)
