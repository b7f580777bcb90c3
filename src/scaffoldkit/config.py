"""Configuration loading for scaffoldkit.

Parses credentials and provider settings from the environment into a typed
Settings object. This is the only place environment variables are read.
A ``.env`` file in the working directory is loaded first if present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from scaffoldkit.errors import ConfigError


class Settings(BaseModel):
    """Provider credentials and settings for a run."""

    # GitHub
    github_token: str = Field(description="GITHUB_TOKEN - Token with repo and secrets scope")
    github_org: str = Field(default="mindful-studio", description="GITHUB_ORG - Owning organisation")
    npm_token: str = Field(description="NPM_TOKEN - Registry token stored as a repo secret")

    # Vercel
    vercel_token: str = Field(description="VERCEL_TOKEN - Vercel API token")
    vercel_org_id: str = Field(description="VERCEL_ORG_ID - Vercel team id")

    # Google Cloud
    gcloud_credentials_file: str = Field(
        description="GOOGLE_APPLICATION_CREDENTIALS - Service account key file"
    )
    gcloud_parent_folder_id: str = Field(
        description="GCLOUD_PARENT_FOLDER_ID - Folder new projects are created in"
    )
    gcloud_billing_account: str = Field(
        description="GCLOUD_BILLING_ACCOUNT - Billing account linked to new projects"
    )
    gcloud_app_location: str = Field(
        default="asia-south1", description="GCLOUD_APP_LOCATION - App Engine region"
    )

    # MongoDB Atlas
    mongo_user_id: str = Field(description="MONGO_USER_ID - Atlas API public key")
    mongo_user_token: str = Field(description="MONGO_USER_TOKEN - Atlas API private key")
    mongo_project_id: str = Field(description="MONGO_PROJECT_ID - Atlas project id")

    # Runtime
    http_timeout: float = Field(default=30.0, description="SCAFFOLD_HTTP_TIMEOUT - Seconds")
    max_id_attempts: int = Field(
        default=5, description="SCAFFOLD_MAX_ID_ATTEMPTS - Cloud project ids tried before failing"
    )

    @field_validator("gcloud_credentials_file")
    @classmethod
    def check_credentials_file(cls, v: str) -> str:
        path = Path(v).expanduser()
        if not path.is_file():
            raise ValueError(f"service account key file not found: {v}")
        if not os.access(path, os.R_OK):
            raise ValueError(f"service account key file is not readable: {v}")
        return str(path)

    @field_validator("max_id_attempts")
    @classmethod
    def check_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


# Environment variable names (single source of truth)
ENV_VARS = {
    "github_token": "GITHUB_TOKEN",
    "github_org": "GITHUB_ORG",
    "npm_token": "NPM_TOKEN",
    "vercel_token": "VERCEL_TOKEN",
    "vercel_org_id": "VERCEL_ORG_ID",
    "gcloud_credentials_file": "GOOGLE_APPLICATION_CREDENTIALS",
    "gcloud_parent_folder_id": "GCLOUD_PARENT_FOLDER_ID",
    "gcloud_billing_account": "GCLOUD_BILLING_ACCOUNT",
    "gcloud_app_location": "GCLOUD_APP_LOCATION",
    "mongo_user_id": "MONGO_USER_ID",
    "mongo_user_token": "MONGO_USER_TOKEN",
    "mongo_project_id": "MONGO_PROJECT_ID",
    "http_timeout": "SCAFFOLD_HTTP_TIMEOUT",
    "max_id_attempts": "SCAFFOLD_MAX_ID_ATTEMPTS",
}

# Required environment variables (must be present and non-empty)
REQUIRED_ENV_VARS = [
    "GITHUB_TOKEN",
    "NPM_TOKEN",
    "VERCEL_TOKEN",
    "VERCEL_ORG_ID",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GCLOUD_PARENT_FOLDER_ID",
    "GCLOUD_BILLING_ACCOUNT",
    "MONGO_USER_ID",
    "MONGO_USER_TOKEN",
    "MONGO_PROJECT_ID",
]

# Values masked when displayed
SECRET_ENV_VARS = {"GITHUB_TOKEN", "NPM_TOKEN", "VERCEL_TOKEN", "MONGO_USER_TOKEN"}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load and validate settings.

    Args:
        environ: Environment mapping (defaults to os.environ after loading
            a ``.env`` file from the working directory).

    Returns:
        Parsed Settings.

    Raises:
        ConfigError: If required variables are missing or values are invalid.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = dict(os.environ)

    missing = [var for var in REQUIRED_ENV_VARS if not environ.get(var)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}", missing=missing
        )

    kwargs: dict[str, Any] = {}
    for field_name, env_var in ENV_VARS.items():
        value = environ.get(env_var)
        if value:
            kwargs[field_name] = value

    try:
        return Settings(**kwargs)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
