"""Testing utilities for step implementations.

Usage:
    from scaffoldkit.steppy.testing import run_single_step

    def test_repo_step_reuses_existing(params):
        result, ledger = asyncio.run(run_single_step(setup_repo_step, params))

        assert result.repo_url == "git@github.com:org/demo.git"
        assert ledger.list() == ["GITHUB_REPO_EXISTS"]
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from scaffoldkit.steppy.job import Job
from scaffoldkit.steppy.ledger import CaveatLedger
from scaffoldkit.steppy.models import RunContext, Step


async def run_single_step(
    step: Step,
    params: Any,
    outputs: Mapping[str, Any] | None = None,
    *,
    ledger: CaveatLedger | None = None,
) -> tuple[Any, CaveatLedger]:
    """Run one step in isolation, outside its job.

    Args:
        step: The step to run.
        params: Job context passed as RunContext.params.
        outputs: Outputs of earlier steps the step reads.
        ledger: Ledger to record into (a fresh one if not given).

    Returns:
        Tuple of (step_result, ledger).
    """
    ledger = ledger if ledger is not None else CaveatLedger()
    ctx = RunContext(params=params, caveat=ledger.handle())
    result = await step.run(ctx, MappingProxyType(dict(outputs or {})))
    return result, ledger


def get_step(job: Job, title: str) -> Step:
    """Look up a step of a job by title."""
    for step in job.steps:
        if step.title == title:
            return step
    raise KeyError(f"Job '{job.name}' has no step '{title}'")
