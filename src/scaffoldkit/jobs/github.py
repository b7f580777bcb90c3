"""Source control job: repository, repository secrets and git remote."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scaffoldkit.clients.git import Git
from scaffoldkit.deps import Deps
from scaffoldkit.jobs.models import Caveat, RepoOutput
from scaffoldkit.steppy import Job, RunContext


@dataclass(frozen=True)
class GitHubContext:
    """Parameters for the source control job.

    Attributes:
        refresh_secrets: Also write repository secrets when the repository
            already existed (they are always written for a new one).
    """

    project_hid: str
    dest_dir: Path
    npm_token: str
    vercel_token: str
    vercel_org_id: str
    gcloud_credentials_file: Path
    deps: Deps
    refresh_secrets: bool = False


job = Job(
    "setting up github",
    outputs=[
        ("setting up github", RepoOutput),
        ("adding git remote", None),
    ],
)


def repository_secrets(ctx: RunContext) -> dict[str, str]:
    return {
        "NPM_TOKEN": ctx.npm_token,
        "VERCEL_TOKEN": ctx.vercel_token,
        "VERCEL_ORG_ID": ctx.vercel_org_id,
        "GCLOUD_SERVICE_ACCOUNT_JSON": Path(ctx.gcloud_credentials_file).read_text(
            encoding="utf-8"
        ),
    }


@job.step("setting up github", group="github")
async def setup_repo(ctx: RunContext, outputs: Mapping[str, Any]) -> RepoOutput:
    github = ctx.deps.github
    repo = await github.get_repo(ctx.project_hid)

    if repo is not None:
        ctx.caveat.add(Caveat.GITHUB_REPO_EXISTS)
        ctx.deps.logger.warning(f"Reusing existing repository {ctx.project_hid}")
        if ctx.refresh_secrets:
            await github.add_secrets(ctx.project_hid, repository_secrets(ctx))
        return RepoOutput(repo_url=repo.ssh_url)

    repo = await github.create_repo(ctx.project_hid)
    await github.add_secrets(ctx.project_hid, repository_secrets(ctx))
    return RepoOutput(repo_url=repo.ssh_url)


@job.step("adding git remote", group="local")
async def add_git_remote(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    repo: RepoOutput = outputs["setting up github"]
    git = Git(ctx.dest_dir, ctx.deps.run_command)

    await git.remote("add", "origin", repo.repo_url)

    # An existing remote already has its branches
    if not ctx.caveat.exists(Caveat.GITHUB_REPO_EXISTS):
        await git.checkout("main")
        await git.push("--set-upstream", "origin", "main")
        await git.checkout("develop")
        await git.push("--set-upstream", "origin", "develop")
