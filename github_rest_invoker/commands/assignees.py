"""Issue assignee operations."""

from ..context import Context, get_context
from ..envelopes import GitHubIssue, GitHubUser
from ..errors import ApiError
from ..models import RequestDescriptor
from ..requester import get_requester, invoke
from ..telemetry import get_pii_safe_string, repository_properties
from ..utils import repository_html_url, resolve_repository


def get_assignees(
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> list[GitHubUser]:
    """List the users that can be assigned to issues in a repository."""
    ctx = context or get_context()
    owner, repo = resolve_repository(owner_name, repository_name, uri, ctx.settings)
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"repos/{owner}/{repo}/assignees",
        accept_pagination=True,
        description=f"Getting assignee list for {repo}",
        telemetry_event_name="get_assignees",
        telemetry_properties=repository_properties(owner, repo, ctx.settings),
        telemetry_exception_bucket="get_assignees",
    )
    repo_url = repository_html_url(owner, repo, ctx.settings.api_host_name)
    return [GitHubUser.wrap(u, ctx.settings, repo_url) for u in invoke(descriptor, access_token, context)]


def check_assignee(
    assignee: str,
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> bool:
    """Check whether ``assignee`` can be assigned issues in the repository.

    GitHub answers 204 for yes and 404 for no; any other failure raises.
    """
    ctx = context or get_context()
    owner, repo = resolve_repository(owner_name, repository_name, uri, ctx.settings)
    properties = repository_properties(owner, repo, ctx.settings)
    properties["Assignee"] = get_pii_safe_string(assignee, ctx.settings)
    descriptor = RequestDescriptor(
        method="GET",
        uri_fragment=f"repos/{owner}/{repo}/assignees/{assignee}",
        description=f"Checking permission for {assignee} for {repo}",
        telemetry_event_name="check_assignee",
        telemetry_properties=properties,
        telemetry_exception_bucket="check_assignee",
        expected_error_statuses={404},
    )
    try:
        result = get_requester(context).execute(descriptor, access_token)
    except ApiError as e:
        if e.status_code == 404:
            return False
        raise
    return result.status_code == 204


def _issue_assignees(
    method: str,
    verb: str,
    issue: int,
    assignees: list[str],
    owner_name: str | None,
    repository_name: str | None,
    uri: str | None,
    access_token: str | None,
    context: Context | None,
) -> GitHubIssue:
    if not assignees:
        raise ValueError("At least one assignee is required")
    ctx = context or get_context()
    owner, repo = resolve_repository(owner_name, repository_name, uri, ctx.settings)
    properties = repository_properties(owner, repo, ctx.settings)
    properties["AssigneeCount"] = len(assignees)
    descriptor = RequestDescriptor(
        method=method,
        uri_fragment=f"repos/{owner}/{repo}/issues/{issue}/assignees",
        body={"assignees": list(assignees)},
        description=f"{verb} assignees on issue {issue} for {repo}",
        telemetry_event_name=f"{verb.lower()}_assignees",
        telemetry_properties=properties,
        telemetry_exception_bucket=f"{verb.lower()}_assignees",
    )
    data = invoke(descriptor, access_token, context)
    repo_url = repository_html_url(owner, repo, ctx.settings.api_host_name)
    return GitHubIssue.wrap(data or {}, ctx.settings, repo_url)


def add_assignees(
    issue: int,
    assignees: list[str],
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> GitHubIssue:
    """Assign users to an issue. Users already assigned are left as they are."""
    return _issue_assignees(
        "POST", "Add", issue, assignees, owner_name, repository_name, uri, access_token, context
    )


def remove_assignees(
    issue: int,
    assignees: list[str],
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    access_token: str | None = None,
    context: Context | None = None,
) -> GitHubIssue:
    return _issue_assignees(
        "DELETE", "Remove", issue, assignees, owner_name, repository_name, uri, access_token, context
    )
