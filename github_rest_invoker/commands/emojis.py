"""Emoji available for use on GitHub."""

from ..context import Context
from ..models import RequestDescriptor
from ..requester import invoke


def get_emojis(access_token: str | None = None, context: Context | None = None) -> dict[str, str]:
    """Map of emoji name to image URL."""
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment="emojis",
        description="Getting all emoji",
        telemetry_event_name="get_emojis",
    )
    return dict(invoke(descriptor, access_token, context) or {})
