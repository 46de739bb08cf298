"""Helpers for turning user input into owner/repository pairs."""

from urllib.parse import urlsplit

from .settings import Settings


def parse_repository_url(url: str) -> tuple[str, str] | None:
    """Parse a repository URL into (owner, repo).

    Accepts web URLs (``https://github.com/o/r``, with or without ``.git``
    or trailing path) and API URLs (``https://api.github.com/repos/o/r``,
    ``https://ghe.example.com/api/v3/repos/o/r``). Returns None if the URL
    does not name a repository.
    """
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    segments = [s for s in parts.path.split("/") if s]

    if segments[:2] == ["api", "v3"]:
        segments = segments[2:]
    if segments[:1] == ["repos"]:
        segments = segments[1:]
    if len(segments) < 2:
        return None

    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return None
    return owner, repo


def resolve_repository(
    owner_name: str | None = None,
    repository_name: str | None = None,
    uri: str | None = None,
    settings: Settings | None = None,
) -> tuple[str, str]:
    """Work out which repository an operation targets.

    A URI wins over explicit names, which win over the configured defaults.
    Raises ValueError if either part is still unknown.
    """
    if uri:
        parsed = parse_repository_url(uri)
        if parsed is None:
            raise ValueError(f"Could not determine owner and repository from uri: {uri}")
        return parsed

    owner = owner_name or (settings.default_owner_name if settings else None)
    repo = repository_name or (settings.default_repository_name if settings else None)
    if not owner:
        raise ValueError("Unable to determine the owner name; pass owner_name or configure default_owner_name")
    if not repo:
        raise ValueError(
            "Unable to determine the repository name; pass repository_name or configure default_repository_name"
        )
    return owner, repo


def repository_html_url(owner: str, repo: str, api_host_name: str) -> str:
    return f"https://{api_host_name}/{owner}/{repo}"
