"""Dev environment job: work tree, env files, seed data and git.

Steps:
- creating work tree: copy the starter template to dest_dir
- adding default .env files: .env.example -> .env per package
- seeding cms database: restore the seed archive into the local mongo
- injecting template variables: render {{projectName}}/{{projectHid}}
- prefixing packages: packages/<p> -> packages/<hid>-<p>
- enabling environment variables: direnv allow per package
- initialising git: initial commit on main, then a develop branch
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scaffoldkit import envfile, template
from scaffoldkit.clients.git import Git
from scaffoldkit.deps import Deps
from scaffoldkit.jobs.models import ENV_PACKAGES, PACKAGES
from scaffoldkit.steppy import Job, RunContext

# Docker container running the local mongo
MONGO_CONTAINER = "mongo"

# Database namespace the seed archive was dumped from
SEED_NAMESPACE = "ms"


@dataclass(frozen=True)
class LocalEnvContext:
    project_name: str
    project_hid: str
    template_dir: Path
    dest_dir: Path
    deps: Deps
    seed_file: Path | None = None
    enable_direnv: bool = True


job = Job(
    "setting up dev environment",
    outputs=[
        ("creating work tree", None),
        ("adding default .env files", None),
        ("seeding cms database", None),
        ("injecting template variables", None),
        ("prefixing packages", None),
        ("enabling environment variables", None),
        ("initialising git", None),
    ],
)


@job.step("creating work tree", group="local")
async def create_work_tree(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    template.copy_tree(ctx.template_dir, ctx.dest_dir)


@job.step("adding default .env files", group="local")
async def add_env_files(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    for package in ENV_PACKAGES:
        envfile.copy_example(Path(ctx.dest_dir) / "packages" / package)


@job.step("seeding cms database", group="local")
async def seed_cms_database(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    if ctx.seed_file is None:
        ctx.deps.logger.info("No seed archive configured, skipping cms seed")
        return

    await ctx.deps.run_command(
        [
            "docker",
            "exec",
            "-i",
            MONGO_CONTAINER,
            "mongorestore",
            "--archive",
            f"--nsFrom={SEED_NAMESPACE}.*",
            f"--nsTo={ctx.project_hid}.*",
        ],
        stdin_path=ctx.seed_file,
    )
    await ctx.deps.run_command(
        [
            "docker",
            "exec",
            "-i",
            MONGO_CONTAINER,
            "mongo",
            ctx.project_hid,
            "--eval",
            f"db.projects.updateOne({{}}, {{ $set: {{ name: {json.dumps(ctx.project_name)} }} }})",
        ]
    )


@job.step("injecting template variables", group="local")
async def inject_template_variables(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    template.render_directory(
        ctx.dest_dir, {"projectName": ctx.project_name, "projectHid": ctx.project_hid}
    )


@job.step("prefixing packages", group="local")
async def prefix_packages(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    template.move_packages(ctx.dest_dir, PACKAGES, ctx.project_hid)


@job.step("enabling environment variables", group="local")
async def enable_env_vars(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    if not ctx.enable_direnv:
        return
    for package in ENV_PACKAGES:
        await ctx.deps.run_command(
            ["direnv", "allow"],
            cwd=Path(ctx.dest_dir) / "packages" / f"{ctx.project_hid}-{package}",
        )


@job.step("initialising git", group="local")
async def init_git(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    git = Git(ctx.dest_dir, ctx.deps.run_command)
    await git.init()
    await git.add("--all")
    await git.commit("-m", "chore: initial commit [skip ci]")
    await git.branch("--move", "main")
    await git.checkout("-b", "develop")
