"""Step I/O models for job execution.

This module defines the contracts between steps and the job runner:
- Step: a named unit of work
- RunContext: what each step receives besides earlier outputs
- StepDescriptor: the progress event payload
- JobState: lifecycle of a single job run
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from scaffoldkit.steppy.ledger import CaveatHandle


class JobState(str, Enum):
    """Job run lifecycle.

    NOT_STARTED -> RUNNING -> COMPLETED, or RUNNING -> FAILED.
    FAILED is terminal.
    """

    NOT_STARTED = "not-started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RunContext:
    """Per-run context threaded into every step of a job.

    Attributes:
        params: Job-level parameters, immutable for the run.
        caveat: Handle for recording and querying caveats.

    Attribute lookups that miss fall through to ``params``, so steps can
    read ``ctx.project_hid`` directly.
    """

    params: Any
    caveat: CaveatHandle

    def __getattr__(self, name: str) -> Any:
        if name in ("params", "caveat") or name.startswith("__"):
            raise AttributeError(name)
        return getattr(self.params, name)


# Type alias for step run functions
StepRunFn = Callable[[RunContext, Mapping[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class Step:
    """Single step in a job.

    Attributes:
        title: Unique identifier within the job; also the output key and
            the progress label.
        run: Async function taking the run context and earlier outputs.
        group: Optional tag used only for progress formatting.
    """

    title: str
    run: StepRunFn
    group: str | None = None

    @property
    def descriptor(self) -> StepDescriptor:
        return StepDescriptor(title=self.title, group=self.group)


@dataclass(frozen=True)
class StepDescriptor:
    """Progress event payload, emitted when a step begins and ends."""

    title: str
    group: str | None = None


@dataclass(frozen=True)
class OutputSpec:
    """Declared output of a step: ``kind`` is a type, or None for void."""

    title: str
    kind: type | None = None

    @property
    def is_void(self) -> bool:
        return self.kind is None
