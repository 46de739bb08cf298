"""Resource-level operations built on the request pipeline."""

from .assignees import add_assignees, check_assignee, get_assignees, remove_assignees
from .codes_of_conduct import get_code_of_conduct, get_codes_of_conduct, get_repository_code_of_conduct
from .emojis import get_emojis
from .gitignore import get_gitignore_template, get_gitignore_templates
from .licenses import get_license, get_licenses, get_repository_license
from .markdown import render_markdown
from .rate_limit import get_rate_limit

__all__ = [
    "add_assignees",
    "check_assignee",
    "get_assignees",
    "remove_assignees",
    "get_code_of_conduct",
    "get_codes_of_conduct",
    "get_repository_code_of_conduct",
    "get_emojis",
    "get_gitignore_template",
    "get_gitignore_templates",
    "get_license",
    "get_licenses",
    "get_repository_license",
    "render_markdown",
    "get_rate_limit",
]
