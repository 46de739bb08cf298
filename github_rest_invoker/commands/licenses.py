"""Open source license metadata."""

import base64
import binascii
import logging

from ..context import Context, get_context
from ..envelopes import GitHubLicense
from ..models import RequestDescriptor
from ..requester import invoke
from ..telemetry import repository_properties
from ..utils import repository_html_url, resolve_repository

logger = logging.getLogger(__name__)


def get_licenses(access_token: str | None = None, context: Context | None = None) -> list[GitHubLicense]:
    """Commonly used licenses (the ones offered when creating a repository)."""
    ctx = context or get_context()
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment="licenses",
        accept_pagination=True,
        description="Getting all licenses",
        telemetry_event_name="get_licenses",
    )
    return [GitHubLicense.wrap(item, ctx.settings) for item in invoke(descriptor, access_token, context)]


def get_license(key: str, access_token: str | None = None, context: Context | None = None) -> GitHubLicense:
    ctx = context or get_context()
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"licenses/{key}",
        description=f"Getting the {key} license",
        telemetry_event_name="get_license",
        telemetry_properties={"LicenseKey": key},
    )
    return GitHubLicense.wrap(invoke(descriptor, access_token, context) or {}, ctx.settings)


def get_repository_license(
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> GitHubLicense:
    """The license file detected in a repository, with its content decoded."""
    ctx = context or get_context()
    owner, repo = resolve_repository(owner_name, repository_name, uri, ctx.settings)
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"repos/{owner}/{repo}/license",
        description=f"Getting the license for {repo}",
        telemetry_event_name="get_repository_license",
        telemetry_properties=repository_properties(owner, repo, ctx.settings),
    )
    data = invoke(descriptor, access_token, context) or {}
    repo_url = None if ctx.settings.disable_pipeline_support else repository_html_url(
        owner, repo, ctx.settings.api_host_name
    )
    return GitHubLicense(data=data, repository_url=repo_url, decoded_content=_decode_content(data))


def _decode_content(data: dict) -> str | None:
    content = data.get("content")
    if not content or data.get("encoding") != "base64":
        return None
    try:
        return base64.b64decode(content).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.warning("Could not decode license content: %s", e)
        return None
