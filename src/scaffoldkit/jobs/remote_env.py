"""Remote environment job, run once per deployment environment.

Every provisioning step follows the same pattern: look the resource up by
its naming-derived id; if it exists, record a caveat and return its id;
otherwise create it and return the new id. Re-running the job after a
partial failure therefore converges without duplicating resources.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

import yaml

from scaffoldkit import envfile, template
from scaffoldkit.clients.vercel import VercelEnvVariable
from scaffoldkit.deps import Deps
from scaffoldkit.errors import UserAlreadyExistsError
from scaffoldkit.jobs.models import (
    Caveat,
    DatabaseUriOutput,
    EnvDescriptor,
    GcloudOutput,
    VercelProjectOutput,
)
from scaffoldkit.steppy import Job, RunContext

APP_YAML_RESOURCE = "google.app.yml"


@dataclass(frozen=True)
class RemoteEnvContext:
    project_name: str
    project_hid: str
    dest_dir: Path
    domain: str
    env: EnvDescriptor
    mongo_password: str
    vercel_token: str
    vercel_org_id: str
    deps: Deps
    max_id_attempts: int = 5


job = Job(
    "setting up remote environment",
    outputs=[
        ("creating atlas user", None),
        ("getting database uri", DatabaseUriOutput),
        ("setting up google cloud", GcloudOutput),
        ("creating ui project", VercelProjectOutput),
        ("creating app project", VercelProjectOutput),
        ("adding github env vars", None),
        ("updating .env files", None),
        ("adding google app.yml file to cms", None),
    ],
)


def build_database_uri(srv_address: str, username: str, password: str, database: str) -> str:
    """Add credentials, database and write options to a cluster SRV address."""
    parts = urlsplit(srv_address)
    netloc = f"{quote(username, safe='')}:{quote(password, safe='')}@{parts.hostname}"
    if parts.port:
        netloc += f":{parts.port}"
    query = urlencode({"retryWrites": "true", "w": "majority"})
    return urlunsplit((parts.scheme, netloc, f"/{database}", query, ""))


def render_app_yaml(node_env: str, database_uri: str) -> str:
    """Render the App Engine manifest and check it is a YAML mapping."""
    rendered = template.render_string(
        template.read_resource(APP_YAML_RESOURCE),
        {"nodeEnv": node_env, "databaseUri": database_uri},
    )
    if not isinstance(yaml.safe_load(rendered), dict):
        raise ValueError(f"Rendered {APP_YAML_RESOURCE} is not a YAML mapping")
    return rendered


def package_dir(ctx: RunContext, package: str) -> Path:
    return Path(ctx.dest_dir) / "packages" / f"{ctx.project_hid}-{package}"


@job.step("creating atlas user", group="mongo")
async def create_atlas_user(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    atlas = ctx.deps.atlas
    if await atlas.get_user(ctx.project_hid) is not None:
        ctx.caveat.add(Caveat.ATLAS_USER_EXISTS)
        return

    try:
        await atlas.create_user(ctx.project_hid, ctx.mongo_password)
    except UserAlreadyExistsError:
        ctx.caveat.add(Caveat.ATLAS_USER_EXISTS)


@job.step("getting database uri", group="mongo")
async def get_database_uri(ctx: RunContext, outputs: Mapping[str, Any]) -> DatabaseUriOutput:
    srv_address = await ctx.deps.atlas.get_connection_string(ctx.env.name)
    uri = build_database_uri(srv_address, ctx.project_hid, ctx.mongo_password, ctx.project_hid)
    return DatabaseUriOutput(uri=uri)


@job.step("setting up google cloud", group="google")
async def setup_google_cloud(ctx: RunContext, outputs: Mapping[str, Any]) -> GcloudOutput:
    database: DatabaseUriOutput = outputs["getting database uri"]
    gcloud = ctx.deps.gcloud
    project_name = f"{ctx.project_name} CMS {ctx.env.short_name}"
    project_id = f"{ctx.project_hid}-cms-{ctx.env.slug}"

    project = await gcloud.get_project(project_id)
    if project is not None:
        ctx.caveat.add(Caveat.GCLOUD_PROJECT_EXISTS)
        ctx.deps.logger.warning(f"Reusing existing cloud project {project_id}")
    else:
        project = await gcloud.setup_project(
            project_name,
            project_id,
            ctx.deps.replace_taken_id,
            max_attempts=ctx.max_id_attempts,
        )

    return GcloudOutput(
        project_id=project.project_id,
        app_yaml=render_app_yaml(ctx.env.node_env, database.uri),
    )


@job.step("creating ui project", group="vercel")
async def create_ui_project(ctx: RunContext, outputs: Mapping[str, Any]) -> VercelProjectOutput:
    vercel = ctx.deps.vercel
    name = f"{ctx.project_hid}-ui-{ctx.env.slug}"

    project = await vercel.get_project(name)
    if project is not None:
        ctx.caveat.add(Caveat.VERCEL_PROJECT_EXISTS)
    else:
        project = await vercel.create_project(name=name, domain=f"ui.{ctx.domain}")

    return VercelProjectOutput(project_id=project.id)


@job.step("creating app project", group="vercel")
async def create_app_project(ctx: RunContext, outputs: Mapping[str, Any]) -> VercelProjectOutput:
    vercel = ctx.deps.vercel
    name = f"{ctx.project_hid}-app-{ctx.env.slug}"

    project = await vercel.get_project(name)
    if project is not None:
        ctx.caveat.add(Caveat.VERCEL_PROJECT_EXISTS)
    else:
        project = await vercel.create_project(
            name=name,
            domain=ctx.domain,
            framework="nextjs",
            env=[
                VercelEnvVariable(key="GRAPHQL_URL", value=f"https://cms.{ctx.domain}/graphql"),
                VercelEnvVariable(
                    key="NPM_TOKEN",
                    value=await vercel.get_secret_id("npm-token"),
                    type="secret",
                ),
            ],
        )

    return VercelProjectOutput(project_id=project.id)


@job.step("adding github env vars", group="github")
async def add_github_env_vars(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    gcloud: GcloudOutput = outputs["setting up google cloud"]
    ui: VercelProjectOutput = outputs["creating ui project"]
    app: VercelProjectOutput = outputs["creating app project"]
    suffix = ctx.env.constant_suffix

    # Written on every run: ids change when a resource was recreated
    await ctx.deps.github.add_secrets(
        ctx.project_hid,
        {
            f"VERCEL_APP_PROJECT_ID_{suffix}": app.project_id,
            f"VERCEL_UI_PROJECT_ID_{suffix}": ui.project_id,
            f"GCLOUD_PROJECT_ID_{suffix}": gcloud.project_id,
            f"GCLOUD_APP_YAML_BASE64_{suffix}": base64.b64encode(
                gcloud.app_yaml.encode("utf-8")
            ).decode("ascii"),
        },
    )


@job.step("updating .env files", group="local")
async def update_env_files(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    database: DatabaseUriOutput = outputs["getting database uri"]
    gcloud: GcloudOutput = outputs["setting up google cloud"]
    ui: VercelProjectOutput = outputs["creating ui project"]
    app: VercelProjectOutput = outputs["creating app project"]
    suffix = ctx.env.constant_suffix

    envfile.extend_dotenv(
        package_dir(ctx, "cms") / ".env",
        {
            f"DATABASE_URI_{suffix}": database.uri,
            f"GCLOUD_PROJECT_ID_{suffix}": gcloud.project_id,
        },
    )
    envfile.extend_dotenv(
        package_dir(ctx, "ui") / ".env",
        {
            "VERCEL_TOKEN": ctx.vercel_token,
            "VERCEL_ORG_ID": ctx.vercel_org_id,
            f"VERCEL_PROJECT_ID_{suffix}": ui.project_id,
        },
    )
    envfile.extend_dotenv(
        package_dir(ctx, "app") / ".env",
        {
            "VERCEL_TOKEN": ctx.vercel_token,
            "VERCEL_ORG_ID": ctx.vercel_org_id,
            f"VERCEL_PROJECT_ID_{suffix}": app.project_id,
        },
    )


@job.step("adding google app.yml file to cms", group="local")
async def add_app_yaml(ctx: RunContext, outputs: Mapping[str, Any]) -> None:
    gcloud: GcloudOutput = outputs["setting up google cloud"]
    path = package_dir(ctx, "cms") / f"app.{ctx.env.slug}.yml"
    path.write_text(gcloud.app_yaml, encoding="utf-8")
