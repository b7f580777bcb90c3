"""GitHub client: repositories and Actions secrets for an organisation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from scaffoldkit.clients.http import raise_for_status, request
from scaffoldkit.clients.secrets import encrypt_secret

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class Repo:
    """The parts of a GitHub repository the jobs use."""

    name: str
    ssh_url: str


class GitHubClient:
    """Thin async wrapper over the GitHub REST API.

    Args:
        http: Client configured with the API base URL and token.
        org: Organisation owning the repositories.
    """

    def __init__(self, http: httpx.AsyncClient, org: str) -> None:
        self.http = http
        self.org = org

    async def get_repo(self, name: str) -> Repo | None:
        """Get a repository, or None if it doesn't exist."""
        url = f"/repos/{self.org}/{name}"
        response = await request(self.http, "GET", url)
        if response.status_code == 404:
            return None
        data = raise_for_status(response, method="GET", url=url).json_dict()
        return Repo(name=data["name"], ssh_url=data["ssh_url"])

    async def create_repo(self, name: str) -> Repo:
        """Create a repository in the organisation."""
        url = f"/orgs/{self.org}/repos"
        response = await request(self.http, "POST", url, json_body={"name": name})
        data = raise_for_status(response, method="POST", url=url).json_dict()
        logger.info(f"Created GitHub repository {self.org}/{name}")
        return Repo(name=data["name"], ssh_url=data["ssh_url"])

    async def add_secrets(self, repo: str, secrets: Mapping[str, str]) -> None:
        """Encrypt and store Actions secrets on a repository.

        Values are sealed with the repository's public key before they
        leave this process.
        """
        key_url = f"/repos/{self.org}/{repo}/actions/secrets/public-key"
        response = await request(self.http, "GET", key_url)
        key = raise_for_status(response, method="GET", url=key_url).json_dict()

        for name, value in secrets.items():
            await self._put_secret(repo, name, encrypt_secret(key["key"], value), key["key_id"])
        logger.info(f"Stored {len(secrets)} secret(s) on {self.org}/{repo}")

    async def _put_secret(self, repo: str, name: str, encrypted_value: str, key_id: str) -> None:
        url = f"/repos/{self.org}/{repo}/actions/secrets/{name}"
        response = await request(
            self.http,
            "PUT",
            url,
            json_body={"encrypted_value": encrypted_value, "key_id": key_id},
        )
        raise_for_status(response, method="PUT", url=url)
