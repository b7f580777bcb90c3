"""Top-level driver: run every job for a new project, in order.

dev environment -> github -> stage environment -> production environment

All jobs share one CaveatLedger, so caveats recorded by any job appear in
the final report. The first failing step aborts the whole run; resources
already created stay in place and a re-run reuses them.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console

from scaffoldkit.config import Settings
from scaffoldkit.deps import Deps
from scaffoldkit.jobs import github, local_env, remote_env
from scaffoldkit.jobs.models import PRODUCTION, STAGE, EnvDescriptor
from scaffoldkit.steppy import CaveatLedger, ProgressListener, head, run_job

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "mindfulstudio.io"

PASSWORD_LENGTH = 10
PASSWORD_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class ProjectParams:
    """Operator-supplied parameters for one project.

    Attributes:
        project_name: Display name, e.g. "MS Web".
        project_hid: Human id used in every resource name, e.g. "ms-web".
        domain: Production domain; stage runs on ``stage.<domain>``.
        dest_dir: Directory the work tree is created in.
        template_dir: Starter template to copy.
        mongo_password: Password for the project's database user.
        seed_file: Optional mongo archive restored into the local database.
        enable_direnv: Run ``direnv allow`` in each package.
        refresh_secrets: Rewrite repository secrets on an existing repo.
    """

    project_name: str
    project_hid: str
    domain: str
    dest_dir: Path
    template_dir: Path
    mongo_password: str
    seed_file: Path | None = None
    enable_direnv: bool = True
    refresh_secrets: bool = False


@dataclass
class ProjectReport:
    """Outputs of every job, keyed by heading, plus the caveats recorded."""

    outputs: dict[str, Mapping[str, Any]] = field(default_factory=dict)
    caveats: list[str] = field(default_factory=list)


def slugify(name: str) -> str:
    """Param-case a display name: "MS Web" -> "ms-web", "myApp" -> "my-app"."""
    words = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name.strip())
    words = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", words)
    return "-".join(re.findall(r"[A-Za-z0-9]+", words)).lower()


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Random alphanumeric password (safe inside a connection string)."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def environments(domain: str) -> list[tuple[EnvDescriptor, str]]:
    """Deployment environments in run order, with the domain each serves."""
    return [(STAGE, f"stage.{domain}"), (PRODUCTION, domain)]


async def create_project(
    params: ProjectParams,
    settings: Settings,
    deps: Deps,
    ledger: CaveatLedger,
    *,
    listener: ProgressListener | None = None,
    console: Console | None = None,
) -> ProjectReport:
    """Bootstrap a project end to end.

    Args:
        params: Operator-supplied project parameters.
        settings: Loaded configuration (tokens written into secrets and .env).
        deps: Provider clients and command runner.
        ledger: Ledger shared by every job of the run.
        listener: Progress listener (defaults to a DefaultFormatter).
        console: Console headings are printed to.

    Returns:
        ProjectReport with each job's outputs and the caveats recorded.

    Raises:
        StepFailedError: If any step fails; later jobs don't run.
    """
    report = ProjectReport()

    async def run(heading: str, job: Any, context: Any) -> None:
        head(heading, console)
        logger.info(f"Running {heading} for {params.project_hid}")
        report.outputs[heading] = await run_job(job, context, ledger, listener=listener)

    await run(
        "setting up dev environment",
        local_env.job,
        local_env.LocalEnvContext(
            project_name=params.project_name,
            project_hid=params.project_hid,
            template_dir=params.template_dir,
            dest_dir=params.dest_dir,
            deps=deps,
            seed_file=params.seed_file,
            enable_direnv=params.enable_direnv,
        ),
    )

    await run(
        "setting up github",
        github.job,
        github.GitHubContext(
            project_hid=params.project_hid,
            dest_dir=params.dest_dir,
            npm_token=settings.npm_token,
            vercel_token=settings.vercel_token,
            vercel_org_id=settings.vercel_org_id,
            gcloud_credentials_file=Path(settings.gcloud_credentials_file),
            deps=deps,
            refresh_secrets=params.refresh_secrets,
        ),
    )

    for env, domain in environments(params.domain):
        await run(
            f"setting up {env.name.lower()} environment",
            remote_env.job,
            remote_env.RemoteEnvContext(
                project_name=params.project_name,
                project_hid=params.project_hid,
                dest_dir=params.dest_dir,
                domain=domain,
                env=env,
                mongo_password=params.mongo_password,
                vercel_token=settings.vercel_token,
                vercel_org_id=settings.vercel_org_id,
                deps=deps,
                max_id_attempts=settings.max_id_attempts,
            ),
        )

    report.caveats = ledger.list()
    return report
