"""Typed exceptions for scaffoldkit.

All scaffolding errors inherit from ScaffoldError.
These provide structured error information for logging and debugging.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class ScaffoldError(Exception):
    """Base exception for all scaffoldkit errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class HTTPError(ScaffoldError):
    """HTTP request failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        method: str = "GET",
    ):
        context = {"status_code": status_code, "url": url, "method": method}
        super().__init__(message, context={k: v for k, v in context.items() if v is not None})
        self.status_code = status_code
        self.url = url
        self.method = method


class TimeoutError(ScaffoldError):
    """Operation timed out."""

    def __init__(self, message: str, *, timeout_seconds: float | None = None):
        context = {"timeout_seconds": timeout_seconds} if timeout_seconds else {}
        super().__init__(message, context=context)
        self.timeout_seconds = timeout_seconds


class ProviderError(ScaffoldError):
    """A provider API rejected a call."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        code: str | None = None,
        status_code: int | None = None,
    ):
        context = {"provider": provider, "code": code, "status_code": status_code}
        super().__init__(message, context={k: v for k, v in context.items() if v is not None})
        self.provider = provider
        self.code = code
        self.status_code = status_code


class AlreadyExistsError(ProviderError):
    """The resource a step tried to create already exists.

    Steps catch this (and only this) to record a caveat instead of failing.
    """

    def __init__(self, message: str, *, provider: str, resource: str):
        super().__init__(message, provider=provider, code="ALREADY_EXISTS")
        self.context["resource"] = resource
        self.resource = resource


class UserAlreadyExistsError(AlreadyExistsError):
    """Database user already exists."""

    def __init__(self, username: str):
        super().__init__(
            f"Database user '{username}' already exists", provider="atlas", resource=username
        )
        self.username = username


class ProjectIdTakenError(AlreadyExistsError):
    """Cloud project id is taken (possibly by an unrelated project)."""

    def __init__(self, project_id: str):
        super().__init__(
            f"Cloud project id '{project_id}' is taken", provider="gcloud", resource=project_id
        )
        self.project_id = project_id


class ProjectIdUnavailableError(ScaffoldError):
    """No free project id was found within the allowed attempts."""

    def __init__(self, project_id: str, *, attempts: int):
        super().__init__(
            f"Could not reserve a cloud project id after {attempts} attempt(s)",
            context={"last_project_id": project_id, "attempts": attempts},
        )
        self.project_id = project_id
        self.attempts = attempts


class OperationTimeoutError(ScaffoldError):
    """Long-running cloud operation did not complete in time."""

    def __init__(self, operation: str, *, polls: int):
        super().__init__(
            "Cloud operation did not complete", context={"operation": operation, "polls": polls}
        )
        self.operation = operation
        self.polls = polls


class CommandError(ScaffoldError):
    """External command exited with a non-zero status."""

    def __init__(self, argv: Sequence[str], *, returncode: int, stderr: str = ""):
        context: dict[str, Any] = {"returncode": returncode}
        if stderr:
            # Truncate long output for readability
            context["stderr"] = stderr[:200] + "..." if len(stderr) > 200 else stderr
        super().__init__(f"Command failed: {' '.join(argv)}", context=context)
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr


class ConfigError(ScaffoldError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, *, missing: Sequence[str] = ()):
        context = {"missing": list(missing)} if missing else {}
        super().__init__(message, context=context)
        self.missing = list(missing)


class PromptCancelledError(ScaffoldError):
    """The operator cancelled an interactive prompt."""

    def __init__(self, message: str = "Prompt cancelled"):
        super().__init__(message)


class JobDefinitionError(ScaffoldError):
    """A job's steps do not match its declared output schema."""

    def __init__(self, message: str, *, job: str, title: str | None = None):
        context = {"job": job}
        if title is not None:
            context["title"] = title
        super().__init__(message, context=context)
        self.job = job
        self.title = title


class StepOutputError(ScaffoldError):
    """A step returned a value that does not match its declared output."""

    def __init__(self, message: str, *, title: str, expected: str, actual: str):
        super().__init__(
            message, context={"title": title, "expected": expected, "actual": actual}
        )
        self.title = title


class StepFailedError(ScaffoldError):
    """A step raised and the job was aborted.

    The message is the original error's message. ``original`` (also set as
    ``__cause__``) is the exception the step raised and ``outputs`` holds
    what earlier steps produced.
    """

    def __init__(self, cause: BaseException, *, step_title: str, outputs: Mapping[str, Any]):
        super().__init__(str(cause) or type(cause).__name__)
        self.step_title = step_title
        self.outputs = outputs
        self.original = cause
        self.__cause__ = cause
