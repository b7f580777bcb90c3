"""Job definitions for bootstrapping a project.

Jobs run in this order:
- local_env: work tree, env files, seed data and git
- github: repository, repository secrets and git remote
- remote_env: database user, cloud project and hosting projects, once per
  deployment environment
"""

from scaffoldkit.jobs import github, local_env, remote_env
from scaffoldkit.jobs.github import GitHubContext
from scaffoldkit.jobs.local_env import LocalEnvContext
from scaffoldkit.jobs.models import (
    ENV_PACKAGES,
    PACKAGES,
    PRODUCTION,
    STAGE,
    Caveat,
    DatabaseUriOutput,
    EnvDescriptor,
    GcloudOutput,
    RepoOutput,
    VercelProjectOutput,
)
from scaffoldkit.jobs.remote_env import RemoteEnvContext
from scaffoldkit.steppy import Job

# Every job, in run order
ALL_JOBS: tuple[Job, ...] = (local_env.job, github.job, remote_env.job)

__all__ = [
    "ALL_JOBS",
    "ENV_PACKAGES",
    "PACKAGES",
    "PRODUCTION",
    "STAGE",
    "Caveat",
    "DatabaseUriOutput",
    "EnvDescriptor",
    "GcloudOutput",
    "GitHubContext",
    "LocalEnvContext",
    "RemoteEnvContext",
    "RepoOutput",
    "VercelProjectOutput",
    "github",
    "local_env",
    "remote_env",
]
