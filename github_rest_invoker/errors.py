"""Exceptions raised by the request pipeline."""

from typing import Any

from .models import RequestDescriptor


class GitHubRestError(Exception):
    """Base class for all github_rest_invoker errors."""


class ApiError(GitHubRestError):
    """A terminal failure of one logical API call.

    ``status_code`` is ``None`` when no response was obtained (DNS, refused
    connection, timeout). Instances are read-only once constructed.
    """

    _frozen = False

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        raw_body: Any = None,
        descriptor: RequestDescriptor | None = None,
        request_id: str | None = None,
        documentation_url: str | None = None,
        errors: list[dict] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.raw_body = raw_body
        self.descriptor = descriptor
        self.request_id = request_id
        self.documentation_url = documentation_url
        self.errors = list(errors or [])
        self._frozen = True

    def __setattr__(self, name, value):
        # Dunder attributes (__notes__, __cause__) stay writable for the interpreter
        if self._frozen and not name.startswith("__"):
            raise AttributeError(f"{type(self).__name__} is read-only")
        super().__setattr__(name, value)

    def __str__(self):
        return self.message


class RetryExhaustedError(ApiError):
    """GitHub kept answering 202 until the retry budget ran out."""

    def __init__(self, message: str, attempts: int, **kwargs):
        self.__dict__["attempts"] = attempts
        super().__init__(message, status_code=202, **kwargs)
