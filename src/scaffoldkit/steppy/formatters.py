"""Progress listeners for job runs.

The runner calls a listener synchronously around each step. Listeners only
observe; they never influence control flow.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Protocol

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.text import Text

from scaffoldkit.steppy.models import StepDescriptor

# Colour per provider group; unknown groups render unstyled
GROUP_STYLES: dict[str, str] = {
    "vercel": "magenta",
    "github": "blue",
    "google": "green",
    "mongo": "yellow",
    "local": "bright_black",
}


class ProgressListener(Protocol):
    """Observer interface for job progress."""

    def on_step_start(self, step: StepDescriptor) -> None: ...

    def on_step_end(self, step: StepDescriptor, *, succeeded: bool) -> None: ...

    def on_job_error(self, step: StepDescriptor, error: BaseException) -> None: ...

    def on_job_complete(self, outputs: Mapping[str, Any]) -> None: ...


class DefaultFormatter:
    """Render one line per step: ``[HH:MM:SS] [group] title`` plus a status.

    A spinner runs while the step is in flight when the console is a
    terminal; when the step ends the line is printed with a tick or cross.

    Args:
        console: Rich console to print to.
        group_styles: Group name -> rich style (defaults to GROUP_STYLES).
        clock: Returns the time shown on each line.
        format_title: Override for building the line text.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        group_styles: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] = datetime.now,
        format_title: Callable[[StepDescriptor], Text] | None = None,
    ) -> None:
        self.console = console or Console()
        self.group_styles = dict(GROUP_STYLES if group_styles is None else group_styles)
        self.clock = clock
        self._format_title = format_title or self.format_title
        self._status: Status | None = None
        self._line: Text | None = None

    def format_group(self, group: str) -> Text:
        return Text(f"[{group}]", style=self.group_styles.get(group, ""))

    def format_title(self, step: StepDescriptor) -> Text:
        line = Text("[")
        line.append(self.clock().strftime("%H:%M:%S"), style="dim")
        line.append("] ")
        if step.group is not None:
            line.append_text(self.format_group(step.group))
            line.append(" ")
        line.append(step.title)
        return line

    def on_step_start(self, step: StepDescriptor) -> None:
        self._line = self._format_title(step)
        if self.console.is_terminal:
            self._status = self.console.status(self._line)
            self._status.start()

    def on_step_end(self, step: StepDescriptor, *, succeeded: bool) -> None:
        self._stop_spinner()
        line = self._line if self._line is not None else self._format_title(step)
        mark = Text(" ✔", style="green") if succeeded else Text(" ✖", style="red")
        self.console.print(Text.assemble(line, mark))
        self._line = None

    def on_job_error(self, step: StepDescriptor, error: BaseException) -> None:
        self.console.print()

    def on_job_complete(self, outputs: Mapping[str, Any]) -> None:
        self._stop_spinner()

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Pause the spinner, e.g. while prompting the operator."""
        status = self._status
        if status is not None:
            status.stop()
        try:
            yield
        finally:
            if status is not None and self._status is status:
                status.start()

    def _stop_spinner(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


class SilentFormatter:
    """Record progress in memory instead of rendering it."""

    def __init__(self) -> None:
        self.titles: list[str] = []
        self.events: list[tuple[str, str]] = []
        self.errors: list[BaseException] = []

    def on_step_start(self, step: StepDescriptor) -> None:
        self.titles.append(step.title)
        self.events.append(("start", step.title))

    def on_step_end(self, step: StepDescriptor, *, succeeded: bool) -> None:
        self.events.append(("success" if succeeded else "fail", step.title))

    def on_job_error(self, step: StepDescriptor, error: BaseException) -> None:
        self.errors.append(error)
        self.events.append(("error", step.title))

    def on_job_complete(self, outputs: Mapping[str, Any]) -> None:
        self.events.append(("complete", ""))

    @contextmanager
    def suspended(self) -> Iterator[None]:
        yield


def head(message: str, console: Console | None = None) -> None:
    """Print a boxed heading for a job."""
    console = console or Console()
    console.print()
    console.print(Panel(message, box=box.ASCII, expand=False, padding=(0, 1)))
    console.print()
