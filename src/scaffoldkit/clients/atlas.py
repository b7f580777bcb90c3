"""MongoDB Atlas client: database users and cluster connection strings."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from scaffoldkit.clients.http import HTTPResponse, request
from scaffoldkit.errors import ProviderError, UserAlreadyExistsError

logger = logging.getLogger(__name__)

ATLAS_API_URL = "https://cloud.mongodb.com/api/atlas/v1.0"


class AtlasClient:
    """Thin async wrapper over the Atlas admin API for one project.

    Args:
        http: Client configured with the API base URL and digest auth.
        project_id: Atlas project (group) id.
    """

    def __init__(self, http: httpx.AsyncClient, project_id: str) -> None:
        self.http = http
        self.project_id = project_id

    async def get_user(self, name: str) -> dict[str, Any] | None:
        """Get a database user, or None if it doesn't exist."""
        response = await self._call("GET", f"/databaseUsers/admin/{name}")
        if not response.ok and _error_code(response) == "USERNAME_NOT_FOUND":
            return None
        return self._checked(response)

    async def create_user(self, name: str, password: str) -> None:
        """Create a user with dbAdmin and readWrite on the database ``name``.

        Raises:
            UserAlreadyExistsError: If the username is taken.
        """
        response = await self._call(
            "POST",
            "/databaseUsers",
            json_body={
                "databaseName": "admin",
                "username": name,
                "groupId": self.project_id,
                "password": password,
                "roles": [
                    {"databaseName": name, "roleName": "dbAdmin"},
                    {"databaseName": name, "roleName": "readWrite"},
                ],
            },
        )
        if _error_code(response) == "USER_ALREADY_EXISTS":
            raise UserAlreadyExistsError(name)
        self._checked(response)
        logger.info(f"Created Atlas user {name}")

    async def get_connection_string(self, cluster_name: str) -> str:
        """Get the SRV address of a cluster."""
        data = self._checked(await self._call("GET", f"/clusters/{cluster_name}"))
        srv = data.get("srvAddress") or data.get("connectionStrings", {}).get("standardSrv")
        if not srv:
            raise ProviderError(
                f"Cluster '{cluster_name}' has no SRV address", provider="atlas"
            )
        return srv

    async def _call(
        self, method: str, endpoint: str, *, json_body: dict[str, Any] | None = None
    ) -> HTTPResponse:
        return await request(
            self.http,
            method,
            f"/groups/{self.project_id}{endpoint}",
            json_body=json_body,
        )

    def _checked(self, response: HTTPResponse) -> dict[str, Any]:
        if not response.ok:
            data = response.json_dict()
            raise ProviderError(
                data.get("detail") or f"Atlas request failed: {response.body[:200]}",
                provider="atlas",
                code=data.get("errorCode"),
                status_code=response.status_code,
            )
        return response.json_dict()


def _error_code(response: HTTPResponse) -> str | None:
    return response.json_dict().get("errorCode")
