"""Job definitions: ordered steps bound to a declared output schema.

A job declares, up front, the title of every step and the type of value
that step produces (or None for a step with no output). Steps are then
attached in declaration order, so "earlier step" is well defined and a step
can rely on the shape of any earlier output it reads.

Usage:
    job = Job(
        "setting up github",
        outputs=[
            ("setting up github", RepoOutput),
            ("adding git remote", None),
        ],
    )

    @job.step("setting up github", group="github")
    async def setup_repo(ctx, outputs):
        ...
        return RepoOutput(repo_url=...)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from scaffoldkit.errors import JobDefinitionError
from scaffoldkit.steppy.models import OutputSpec, Step, StepRunFn


class Job:
    """Ordered collection of steps sharing one context and output schema.

    Args:
        name: Job name, used in headings and errors.
        outputs: Ordered ``(title, kind)`` pairs; ``kind`` None means void.
    """

    def __init__(self, name: str, outputs: Sequence[tuple[str, type | None]]) -> None:
        self.name = name
        self._schema: dict[str, OutputSpec] = {}
        self._steps: list[Step] = []

        for title, kind in outputs:
            if title in self._schema:
                raise JobDefinitionError(
                    f"Output '{title}' is declared twice", job=name, title=title
                )
            self._schema[title] = OutputSpec(title=title, kind=kind)

    @property
    def titles(self) -> list[str]:
        """Declared step titles, in order."""
        return list(self._schema)

    @property
    def schema(self) -> list[OutputSpec]:
        return list(self._schema.values())

    @property
    def steps(self) -> tuple[Step, ...]:
        return tuple(self._steps)

    def output_kind(self, title: str) -> type | None:
        """Get the declared output type of a step (None for void)."""
        if title not in self._schema:
            raise JobDefinitionError(f"Unknown step '{title}'", job=self.name, title=title)
        return self._schema[title].kind

    def add(self, step: Step) -> Step:
        """Attach a step to the job.

        Raises:
            JobDefinitionError: If the title is undeclared, already attached,
                or not the next declared title.
        """
        if step.title not in self._schema:
            raise JobDefinitionError(
                f"Step '{step.title}' is not declared in the job outputs",
                job=self.name,
                title=step.title,
            )
        if any(s.title == step.title for s in self._steps):
            raise JobDefinitionError(
                f"Step '{step.title}' is already attached", job=self.name, title=step.title
            )

        expected = self.titles[len(self._steps)]
        if step.title != expected:
            raise JobDefinitionError(
                f"Step '{step.title}' attached out of order (expected '{expected}')",
                job=self.name,
                title=step.title,
            )

        self._steps.append(step)
        return step

    def step(self, title: str, *, group: str | None = None) -> Callable[[StepRunFn], StepRunFn]:
        """Decorator form of :meth:`add`."""

        def _register(fn: StepRunFn) -> StepRunFn:
            self.add(Step(title=title, run=fn, group=group))
            return fn

        return _register

    def validate(self) -> list[str]:
        """Validate that every declared output has a step.

        Returns:
            List of error messages (empty if valid).
        """
        errors: list[str] = []
        if not self._schema:
            errors.append(f"Job '{self.name}' declares no steps")

        attached = {s.title for s in self._steps}
        for title in self._schema:
            if title not in attached:
                errors.append(f"Declared step '{title}' has no implementation")

        return errors

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"Job({self.name!r}, steps={self.titles!r})"
