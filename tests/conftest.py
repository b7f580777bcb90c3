"""Pytest fixtures for scaffoldkit tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import httpx
import pytest

from scaffoldkit.clients.gcloud import CloudProject
from scaffoldkit.clients.github import Repo
from scaffoldkit.clients.shell import CommandResult
from scaffoldkit.clients.vercel import VercelEnvVariable, VercelProject
from scaffoldkit.config import Settings, load_settings
from scaffoldkit.deps import Deps

SETTINGS_ENV = {
    "GITHUB_TOKEN": "ghp_test",
    "GITHUB_ORG": "test-org",
    "NPM_TOKEN": "npm_test",
    "VERCEL_TOKEN": "vercel_test",
    "VERCEL_ORG_ID": "team_test",
    "GOOGLE_APPLICATION_CREDENTIALS": "/tmp/gcloud.json",
    "GCLOUD_PARENT_FOLDER_ID": "123456",
    "GCLOUD_BILLING_ACCOUNT": "billingAccounts/000-111",
    "MONGO_USER_ID": "atlas-public",
    "MONGO_USER_TOKEN": "atlas-private",
    "MONGO_PROJECT_ID": "atlas-project",
}


class FakeGitHub:
    """In-memory GitHub: repos persist across calls, like the real service."""

    def __init__(self) -> None:
        self.repos: dict[str, Repo] = {}
        self.secrets: dict[str, dict[str, str]] = {}
        self.created: list[str] = []

    async def get_repo(self, name: str) -> Repo | None:
        return self.repos.get(name)

    async def create_repo(self, name: str) -> Repo:
        repo = Repo(name=name, ssh_url=f"git@github.com:test-org/{name}.git")
        self.repos[name] = repo
        self.created.append(name)
        return repo

    async def add_secrets(self, repo: str, secrets: dict[str, str]) -> None:
        self.secrets.setdefault(repo, {}).update(secrets)


class FakeAtlas:
    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.created: list[str] = []
        self.clusters: list[str] = []

    async def get_user(self, name: str) -> dict[str, Any] | None:
        return self.users.get(name)

    async def create_user(self, name: str, password: str) -> None:
        self.users[name] = {"username": name, "password": password}
        self.created.append(name)

    async def get_connection_string(self, cluster_name: str) -> str:
        self.clusters.append(cluster_name)
        return f"mongodb+srv://{cluster_name.lower()}.abcde.mongodb.net"


class FakeVercel:
    def __init__(self) -> None:
        self.projects: dict[str, VercelProject] = {}
        self.created: list[dict[str, Any]] = []

    async def get_project(self, name: str) -> VercelProject | None:
        return self.projects.get(name)

    async def create_project(
        self,
        *,
        name: str,
        domain: str,
        framework: str | None = None,
        env: Sequence[VercelEnvVariable] = (),
    ) -> VercelProject:
        project = VercelProject(id=f"prj_{len(self.projects) + 1}", name=name)
        self.projects[name] = project
        self.created.append(
            {"name": name, "domain": domain, "framework": framework, "env": list(env)}
        )
        return project

    async def get_secret_id(self, secret_name: str) -> str:
        return f"sec_{secret_name}"


class FakeCloud:
    def __init__(self) -> None:
        self.projects: dict[str, CloudProject] = {}
        self.created: list[str] = []

    async def get_project(self, project_id: str) -> CloudProject | None:
        return self.projects.get(project_id)

    async def setup_project(
        self,
        name: str,
        project_id: str,
        replace_taken_id: Callable[[str], str],
        *,
        max_attempts: int = 5,
    ) -> CloudProject:
        project = CloudProject(project_id=project_id, project_number="1000", name=name)
        self.projects[project_id] = project
        self.created.append(project_id)
        return project


class RecordingRunner:
    """Command runner that records argv and cwd instead of spawning."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    @property
    def argvs(self) -> list[list[str]]:
        return [call["argv"] for call in self.calls]

    async def __call__(
        self,
        argv: Sequence[str],
        *,
        cwd: str | Path | None = None,
        stdin_path: str | Path | None = None,
    ) -> CommandResult:
        self.calls.append({"argv": list(argv), "cwd": cwd, "stdin_path": stdin_path})
        return CommandResult(argv=tuple(argv), returncode=0, stdout="", stderr="")


@pytest.fixture
def fake_deps() -> Deps:
    """Create a Deps instance wired to in-memory providers."""
    return Deps(
        github=FakeGitHub(),
        atlas=FakeAtlas(),
        vercel=FakeVercel(),
        gcloud=FakeCloud(),
        run_command=RecordingRunner(),
        replace_taken_id=lambda taken: f"{taken}-2",
        logger=logging.getLogger("test"),
    )


@pytest.fixture
def credentials_file(tmp_path: Path) -> Path:
    """Service account key file stored as a repository secret."""
    path = tmp_path / "gcloud.json"
    path.write_text(json.dumps({"type": "service_account", "project_id": "ops"}))
    return path


@pytest.fixture
def settings_env(credentials_file: Path) -> dict[str, str]:
    return {**SETTINGS_ENV, "GOOGLE_APPLICATION_CREDENTIALS": str(credentials_file)}


@pytest.fixture
def settings(settings_env: dict[str, str]) -> Settings:
    return load_settings(settings_env)


@pytest.fixture
def project_tree(tmp_path: Path) -> Path:
    """A work tree after the dev environment job: prefixed packages with .env files."""
    dest = tmp_path / "ms-web"
    for package in ("cms", "ui", "app"):
        package_dir = dest / "packages" / f"ms-web-{package}"
        package_dir.mkdir(parents=True)
        (package_dir / ".env").write_text("NODE_ENV=development\n")
    return dest


@pytest.fixture
def mock_http() -> Callable[..., httpx.AsyncClient]:
    """Factory for an AsyncClient answering every request with a handler."""

    def make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    return make


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()
