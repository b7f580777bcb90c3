"""Vercel client: projects, domain aliases, env vars and secrets."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from scaffoldkit.clients.http import HTTPResponse, request
from scaffoldkit.errors import ProviderError

logger = logging.getLogger(__name__)

VERCEL_API_URL = "https://api.vercel.com"

EnvTarget = Literal["development", "preview", "production"]


@dataclass(frozen=True)
class VercelEnvVariable:
    """Project environment variable.

    Attributes:
        key: Variable name.
        value: Plain value, or the secret id when type is "secret".
        type: "plain", "secret" or "system".
        target: Deployments that receive the variable.
    """

    key: str
    value: str
    type: Literal["plain", "secret", "system"] = "plain"
    target: tuple[EnvTarget, ...] = ("production", "preview")

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type, "key": self.key, "value": self.value, "target": list(self.target)}


@dataclass(frozen=True)
class VercelProject:
    id: str
    name: str
    extra: dict[str, Any] = field(default_factory=dict, compare=False)


class VercelClient:
    """Thin async wrapper over the Vercel REST API.

    Args:
        http: Client configured with the API base URL and bearer token.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self.http = http

    async def get_project(self, name: str) -> VercelProject | None:
        """Get a project by name, or None if it doesn't exist."""
        response = await request(self.http, "GET", f"/v8/projects/{name}")
        if response.status_code == 404:
            return None
        return _project(self._checked(response, "GET", name))

    async def create_project(
        self,
        *,
        name: str,
        domain: str,
        framework: str | None = None,
        env: Sequence[VercelEnvVariable] = (),
    ) -> VercelProject:
        """Create a project, alias its domain, set framework and env vars."""
        created = self._checked(
            await request(self.http, "POST", "/v6/projects", json_body={"name": name}),
            "POST",
            name,
        )
        project = _project(created)

        self._checked(
            await request(
                self.http, "POST", f"/v1/projects/{project.id}/alias", json_body={"domain": domain}
            ),
            "POST",
            name,
        )

        if framework is not None:
            self._checked(
                await request(
                    self.http,
                    "PATCH",
                    f"/v2/projects/{project.id}",
                    json_body={"framework": framework},
                ),
                "PATCH",
                name,
            )

        for variable in env:
            response = await request(
                self.http, "POST", f"/v6/projects/{project.id}/env", json_body=variable.to_payload()
            )
            self._checked(response, "POST", name)

        logger.info(f"Created Vercel project {name} ({project.id}) on {domain}")
        return project

    async def get_secret_id(self, secret_name: str) -> str:
        """Resolve a named secret to its uid."""
        data = self._checked(
            await request(self.http, "GET", f"/v3/now/secrets/{secret_name}"), "GET", secret_name
        )
        return data["uid"]

    def _checked(self, response: HTTPResponse, method: str, name: str) -> dict[str, Any]:
        if not response.ok:
            error = response.json_dict().get("error", {})
            raise ProviderError(
                error.get("message") or f"Failed Vercel API call: {method} {name}",
                provider="vercel",
                code=error.get("code"),
                status_code=response.status_code,
            )
        return response.json_dict()


def _project(data: dict[str, Any]) -> VercelProject:
    return VercelProject(
        id=data["id"],
        name=data.get("name", ""),
        extra={k: v for k, v in data.items() if k not in ("id", "name")},
    )
