"""Job runner - executes a job's steps strictly in sequence.

The runner:
1. Validates the job definition (fails before any step runs)
2. Builds one RunContext binding the job context to the caveat ledger
3. Runs each step with a read-only snapshot of earlier outputs
4. Checks each result against the declared output kind
5. Stores non-void results under the step title
6. Stops at the first failing step and re-raises as StepFailedError

There are no retries, timeouts or concurrency here. Re-running a failed
job relies on each step being idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from scaffoldkit.errors import JobDefinitionError, StepFailedError, StepOutputError
from scaffoldkit.steppy.formatters import DefaultFormatter, ProgressListener
from scaffoldkit.steppy.job import Job
from scaffoldkit.steppy.ledger import CaveatLedger
from scaffoldkit.steppy.models import JobState, RunContext, Step

logger = logging.getLogger(__name__)


class JobRunner:
    """Single-use runner for one job execution.

    Attributes:
        state: Current lifecycle state.
        current_index: Index of the step running (or that failed), or None.
        outputs: Outputs accumulated so far (read-only).
        error: The step exception when state is FAILED.
    """

    def __init__(
        self,
        job: Job,
        ledger: CaveatLedger,
        *,
        listener: ProgressListener | None = None,
    ) -> None:
        self.job = job
        self.ledger = ledger
        self.listener: ProgressListener = listener if listener is not None else DefaultFormatter()
        self.state = JobState.NOT_STARTED
        self.current_index: int | None = None
        self.error: BaseException | None = None
        self._outputs: dict[str, Any] = {}

    @property
    def outputs(self) -> Mapping[str, Any]:
        return MappingProxyType(self._outputs)

    async def run(self, context: Any) -> Mapping[str, Any]:
        """Execute the job.

        Args:
            context: Job-level parameters for this run.

        Returns:
            Read-only mapping of step title to output, for non-void steps.

        Raises:
            JobDefinitionError: If the job is incomplete or already ran.
            StepFailedError: If a step raised; wraps the original exception.
        """
        if self.state is not JobState.NOT_STARTED:
            raise JobDefinitionError("Job runner has already been used", job=self.job.name)

        errors = self.job.validate()
        if errors:
            raise JobDefinitionError(
                f"Job definition is incomplete: {'; '.join(errors)}", job=self.job.name
            )

        ctx = RunContext(params=context, caveat=self.ledger.handle())
        self.state = JobState.RUNNING
        logger.info(f"Starting job: {self.job.name} ({len(self.job)} steps)")

        for index, step in enumerate(self.job.steps):
            self.current_index = index
            descriptor = step.descriptor
            self.listener.on_step_start(descriptor)
            logger.debug(f"Step {index + 1}/{len(self.job)}: {step.title}")

            # Steps see a snapshot; _outputs is replaced, never mutated in place
            snapshot = MappingProxyType(self._outputs)
            try:
                result = await step.run(ctx, snapshot)
                self._check_output(step, result)
            except Exception as e:
                self.state = JobState.FAILED
                self.error = e
                logger.error(f"Step '{step.title}' failed: {e}")
                self.listener.on_step_end(descriptor, succeeded=False)
                self.listener.on_job_error(descriptor, e)
                raise StepFailedError(e, step_title=step.title, outputs=self.outputs) from e

            if result is not None:
                self._outputs = {**self._outputs, step.title: result}
            self.listener.on_step_end(descriptor, succeeded=True)

        self.state = JobState.COMPLETED
        self.current_index = None
        logger.info(f"Job {self.job.name} completed")
        self.listener.on_job_complete(self.outputs)
        return self.outputs

    def _check_output(self, step: Step, result: Any) -> None:
        kind = self.job.output_kind(step.title)
        if kind is None:
            if result is not None:
                raise StepOutputError(
                    f"Step '{step.title}' declares no output but returned a value",
                    title=step.title,
                    expected="None",
                    actual=type(result).__name__,
                )
            return

        if not isinstance(result, kind):
            raise StepOutputError(
                f"Step '{step.title}' returned the wrong output type",
                title=step.title,
                expected=kind.__name__,
                actual=type(result).__name__,
            )


async def run_job(
    job: Job,
    context: Any,
    ledger: CaveatLedger,
    *,
    listener: ProgressListener | None = None,
) -> Mapping[str, Any]:
    """Run a job once. See JobRunner.run."""
    return await JobRunner(job, ledger, listener=listener).run(context)
