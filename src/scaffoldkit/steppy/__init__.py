"""steppy: a typed, strictly sequential step runner.

This module provides:
- Job: ordered steps bound to a declared output schema
- Step/RunContext/StepDescriptor: the step contract
- JobRunner/run_job: execute a job, threading outputs forward
- CaveatLedger: run-scoped record of reused resources
- DefaultFormatter/SilentFormatter: progress listeners

Example:
    job = Job("demo", outputs=[("A", dict), ("B", dict)])

    @job.step("A")
    async def step_a(ctx, outputs):
        return {"x": 1}

    @job.step("B")
    async def step_b(ctx, outputs):
        return {"y": outputs["A"]["x"] + 1}

    outputs = await run_job(job, context, CaveatLedger())
    # {"A": {"x": 1}, "B": {"y": 2}}
"""

from scaffoldkit.steppy.formatters import (
    GROUP_STYLES,
    DefaultFormatter,
    ProgressListener,
    SilentFormatter,
    head,
)
from scaffoldkit.steppy.job import Job
from scaffoldkit.steppy.ledger import CaveatHandle, CaveatLedger
from scaffoldkit.steppy.models import (
    JobState,
    OutputSpec,
    RunContext,
    Step,
    StepDescriptor,
    StepRunFn,
)
from scaffoldkit.steppy.runner import JobRunner, run_job

__all__ = [
    # Definitions
    "Job",
    "OutputSpec",
    "Step",
    "StepRunFn",
    # Execution
    "JobRunner",
    "JobState",
    "RunContext",
    "run_job",
    # Caveats
    "CaveatHandle",
    "CaveatLedger",
    # Progress
    "GROUP_STYLES",
    "DefaultFormatter",
    "ProgressListener",
    "SilentFormatter",
    "StepDescriptor",
    "head",
]
