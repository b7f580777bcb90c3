"""Shared types for the job definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

# Packages in the starter template, before prefixing
PACKAGES = ("tsconfig", "types", "cms", "ui", "app")

# Packages that carry a .env file
ENV_PACKAGES = ("cms", "ui", "app")


class Caveat(str, Enum):
    """Remote resources that already existed and were reused."""

    GITHUB_REPO_EXISTS = "GITHUB_REPO_EXISTS"
    GCLOUD_PROJECT_EXISTS = "GCLOUD_PROJECT_EXISTS"
    ATLAS_USER_EXISTS = "ATLAS_USER_EXISTS"
    VERCEL_PROJECT_EXISTS = "VERCEL_PROJECT_EXISTS"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EnvDescriptor:
    """Naming for one deployment environment.

    Attributes:
        name: Display name, also the Atlas cluster name.
        short_name: Used in cloud project display names.
        slug: Used in resource ids and file names.
        node_env: NODE_ENV in the deployment manifest.
        constant_suffix: Suffix for secret and env var names.
    """

    name: str
    short_name: str
    slug: str
    node_env: str
    constant_suffix: str


STAGE = EnvDescriptor(
    name="Stage", short_name="Stage", slug="stage", node_env="stage", constant_suffix="STAGE"
)

PRODUCTION = EnvDescriptor(
    name="Production",
    short_name="Prod",
    slug="prod",
    node_env="production",
    constant_suffix="PROD",
)


class RepoOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo_url: str


class DatabaseUriOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str


class GcloudOutput(BaseModel):
    """Cloud project id plus the rendered App Engine manifest."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    app_yaml: str


class VercelProjectOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
