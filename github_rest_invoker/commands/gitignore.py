"""Gitignore templates."""

from ..context import Context, get_context
from ..envelopes import GitHubGitignore
from ..models import MEDIA_TYPE_RAW, RequestDescriptor
from ..requester import invoke


def get_gitignore_templates(access_token: str | None = None, context: Context | None = None) -> list[str]:
    """Names of every available template (e.g. "Python", "Node")."""
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment="gitignore/templates",
        accept_pagination=True,
        description="Getting all gitignore templates",
        telemetry_event_name="get_gitignore_templates",
    )
    return list(invoke(descriptor, access_token, context))


def get_gitignore_template(
    name: str,
    raw: bool = False,
    access_token: str | None = None,
    context: Context | None = None,
) -> GitHubGitignore | str:
    """One template; with ``raw`` the file contents are returned as text."""
    ctx = context or get_context()
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"gitignore/templates/{name}",
        headers={"Accept": MEDIA_TYPE_RAW} if raw else {},
        description=f"Getting the {name} gitignore template",
        telemetry_event_name="get_gitignore_template",
        telemetry_properties={"Name": name, "Raw": raw},
    )
    result = invoke(descriptor, access_token, context)
    if raw:
        return result.decode("utf-8") if isinstance(result, bytes) else (result or "")
    return GitHubGitignore.wrap(result or {}, ctx.settings)
