"""Call the GitHub REST API through a single request pipeline.

Every operation builds a RequestDescriptor and hands it to the requester,
which handles host composition, authentication, 202 polling, Link header
pagination, and error translation.
"""

from .__version__ import __version__
from .cli import main
from .context import (
    Context,
    clear_access_token,
    get_config,
    get_context,
    has_access_token,
    reset_config,
    reset_context,
    set_access_token,
    set_config,
    set_context,
)
from .errors import ApiError, GitHubRestError, RetryExhaustedError
from .models import ExecutionResult, RequestDescriptor
from .requester import GitHubRequester, execute, execute_paged, invoke

__all__ = [
    "__version__",
    "main",
    "Context",
    "clear_access_token",
    "get_config",
    "get_context",
    "has_access_token",
    "reset_config",
    "reset_context",
    "set_access_token",
    "set_config",
    "set_context",
    "ApiError",
    "GitHubRestError",
    "RetryExhaustedError",
    "ExecutionResult",
    "RequestDescriptor",
    "GitHubRequester",
    "execute",
    "execute_paged",
    "invoke",
]

if __name__ == "__main__":
    main()
