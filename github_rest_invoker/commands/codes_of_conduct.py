"""Codes of conduct."""

from ..context import Context, get_context
from ..envelopes import GitHubCodeOfConduct
from ..models import RequestDescriptor
from ..requester import invoke
from ..telemetry import repository_properties
from ..utils import repository_html_url, resolve_repository

# Codes of conduct are still served under a preview media type
PREVIEW_MEDIA_TYPE = "application/vnd.github.scarlet-witch-preview+json"


def get_codes_of_conduct(
    access_token: str | None = None, context: Context | None = None
) -> list[GitHubCodeOfConduct]:
    ctx = context or get_context()
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment="codes_of_conduct",
        headers={"Accept": PREVIEW_MEDIA_TYPE},
        accept_pagination=True,
        description="Getting all codes of conduct",
        telemetry_event_name="get_codes_of_conduct",
    )
    return [GitHubCodeOfConduct.wrap(item, ctx.settings) for item in invoke(descriptor, access_token, context)]


def get_code_of_conduct(
    key: str, access_token: str | None = None, context: Context | None = None
) -> GitHubCodeOfConduct:
    ctx = context or get_context()
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"codes_of_conduct/{key}",
        headers={"Accept": PREVIEW_MEDIA_TYPE},
        description=f"Getting the {key} code of conduct",
        telemetry_event_name="get_code_of_conduct",
        telemetry_properties={"Key": key},
    )
    return GitHubCodeOfConduct.wrap(invoke(descriptor, access_token, context) or {}, ctx.settings)


def get_repository_code_of_conduct(
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> GitHubCodeOfConduct:
    ctx = context or get_context()
    owner, repo = resolve_repository(owner_name, repository_name, uri, ctx.settings)
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"repos/{owner}/{repo}/community/code_of_conduct",
        headers={"Accept": PREVIEW_MEDIA_TYPE},
        description=f"Getting the code of conduct for {repo}",
        telemetry_event_name="get_repository_code_of_conduct",
        telemetry_properties=repository_properties(owner, repo, ctx.settings),
    )
    repo_url = repository_html_url(owner, repo, ctx.settings.api_host_name)
    return GitHubCodeOfConduct.wrap(invoke(descriptor, access_token, context) or {}, ctx.settings, repo_url)
