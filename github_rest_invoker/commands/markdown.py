"""Render Markdown to HTML with GitHub's renderer."""

from ..context import Context
from ..models import MEDIA_TYPE_HTML, RequestDescriptor
from ..requester import invoke

MARKDOWN_MODES = ("markdown", "gfm")


def render_markdown(
    text: str,
    mode: str = "markdown",
    context_repository: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> str:
    """Render ``text`` to HTML.

    ``gfm`` mode links issue references and mentions; ``context_repository``
    ("owner/repo") tells GitHub which repository short references point at.
    """
    if mode not in MARKDOWN_MODES:
        raise ValueError(f"mode must be one of {MARKDOWN_MODES}, got {mode!r}")
    body = {"text": text, "mode": mode}
    if context_repository:
        body["context"] = context_repository
    descriptor = RequestDescriptor(
        method="POST",
        uri_fragment="markdown",
        body=body,
        headers={"Accept": MEDIA_TYPE_HTML},
        description="Converting Markdown to HTML",
        telemetry_event_name="render_markdown",
        telemetry_properties={"Mode": mode},
    )
    result = invoke(descriptor, access_token, context)
    if isinstance(result, bytes):
        return result.decode("utf-8")
    return result or ""
