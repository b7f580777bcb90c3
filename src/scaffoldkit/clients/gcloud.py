"""Google Cloud client: projects, billing, services and App Engine.

Project creation is a long-running operation; ``create_project`` polls it
until done. ``setup_project`` wraps creation with the replacement-id loop:
when the desired id is taken, the caller-supplied ``replace_taken_id``
callback proposes another, up to ``max_attempts`` ids in total.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from scaffoldkit.clients.http import HTTPResponse, request
from scaffoldkit.errors import (
    OperationTimeoutError,
    ProjectIdTakenError,
    ProjectIdUnavailableError,
    ProviderError,
)

logger = logging.getLogger(__name__)

RESOURCE_MANAGER_URL = "https://cloudresourcemanager.googleapis.com/v1"
BILLING_URL = "https://cloudbilling.googleapis.com/v1"
SERVICE_USAGE_URL = "https://serviceusage.googleapis.com/v1"
APP_ENGINE_URL = "https://appengine.googleapis.com/v1"

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

# Services enabled on every new project, in order
PROJECT_SERVICES = ("appengine.googleapis.com", "cloudbuild.googleapis.com")

TokenProvider = Callable[[], Awaitable[str]]
ReplaceTakenId = Callable[[str], str]


@dataclass(frozen=True)
class CloudProject:
    project_id: str
    project_number: str | None = None
    name: str | None = None


class CloudResourceClient:
    """Thin async wrapper over the Google Cloud REST APIs.

    Args:
        http: Plain client; each call uses an absolute URL.
        token_provider: Returns a fresh OAuth access token.
        parent_folder_id: Folder new projects are created in.
        billing_account: Billing account name (``billingAccounts/...``).
        location: App Engine region.
        poll_interval: Seconds between operation polls.
        max_polls: Operation polls before giving up.
        sleep: Injectable sleep (tests pass a no-op).
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token_provider: TokenProvider,
        *,
        parent_folder_id: str,
        billing_account: str,
        location: str = "asia-south1",
        poll_interval: float = 3.0,
        max_polls: int = 6,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.http = http
        self.token_provider = token_provider
        self.parent_folder_id = parent_folder_id
        self.billing_account = billing_account
        self.location = location
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.sleep = sleep

    async def get_project(self, project_id: str) -> CloudProject | None:
        """Get a project, or None if it doesn't exist.

        The API answers 403 rather than 404 for ids it cannot see, so both
        mean "not ours".
        """
        response = await self._call("GET", f"{RESOURCE_MANAGER_URL}/projects/{project_id}")
        if response.status_code in (403, 404):
            return None
        return _project(self._checked(response))

    async def create_project(self, name: str, project_id: str) -> CloudProject:
        """Create a project and wait for the operation to finish.

        Raises:
            ProjectIdTakenError: If the id is already in use.
            OperationTimeoutError: If the operation never completes.
        """
        response = await self._call(
            "POST",
            f"{RESOURCE_MANAGER_URL}/projects",
            json_body={
                "name": name,
                "projectId": project_id,
                "parent": {"type": "folder", "id": self.parent_folder_id},
            },
        )
        if _error_status(response) == "ALREADY_EXISTS":
            raise ProjectIdTakenError(project_id)

        operation = self._checked(response)
        operation_name = operation.get("name")
        if not isinstance(operation_name, str):
            raise ProviderError("Project creation returned no operation", provider="gcloud")

        result = await self._wait_for_operation(operation_name)
        project = _project(result)
        if project.project_number is None:
            raise ProviderError(
                f"Created project '{project_id}' has no project number", provider="gcloud"
            )
        logger.info(f"Created cloud project {project.project_id}")
        return project

    async def enable_service(self, project_number: str, service: str) -> None:
        self._checked(
            await self._call(
                "POST", f"{SERVICE_USAGE_URL}/projects/{project_number}/services/{service}:enable"
            )
        )

    async def update_billing(self, project_id: str) -> None:
        self._checked(
            await self._call(
                "PUT",
                f"{BILLING_URL}/projects/{project_id}/billingInfo",
                json_body={
                    "name": f"projects/{project_id}/billingInfo",
                    "projectId": project_id,
                    "billingAccountName": self.billing_account,
                    "billingEnabled": True,
                },
            )
        )

    async def create_app(self, project_id: str) -> None:
        self._checked(
            await self._call(
                "POST",
                f"{APP_ENGINE_URL}/apps",
                json_body={"id": project_id, "locationId": self.location},
            )
        )

    async def setup_project(
        self,
        name: str,
        project_id: str,
        replace_taken_id: ReplaceTakenId,
        *,
        max_attempts: int = 5,
    ) -> CloudProject:
        """Create a fully configured project.

        Creates the project (asking ``replace_taken_id`` for a new id each
        time the current one is taken), links billing, enables the App
        Engine and Cloud Build services and creates the App Engine app.

        Raises:
            ProjectIdUnavailableError: If ``max_attempts`` ids were all taken.
        """
        candidate = project_id
        attempt = 1
        while True:
            try:
                project = await self.create_project(name, candidate)
                break
            except ProjectIdTakenError as e:
                logger.warning(f"Cloud project id taken: {candidate} (attempt {attempt})")
                if attempt >= max_attempts:
                    raise ProjectIdUnavailableError(candidate, attempts=attempt) from e
                candidate = replace_taken_id(candidate)
                attempt += 1

        if project.project_number is None:
            raise ProviderError(
                f"Created project {project.project_id} has no project number",
                provider="gcloud",
            )
        await self.enable_service(project.project_number, "cloudbilling.googleapis.com")
        await self.update_billing(project.project_id)
        for service in PROJECT_SERVICES:
            await self.enable_service(project.project_number, service)
        await self.create_app(project.project_id)
        return project

    async def _wait_for_operation(self, operation_name: str) -> dict[str, Any]:
        for poll in range(1, self.max_polls + 1):
            operation = self._checked(
                await self._call("GET", f"{RESOURCE_MANAGER_URL}/{operation_name}")
            )
            if operation.get("done"):
                if "error" in operation:
                    error = operation["error"]
                    raise ProviderError(
                        error.get("message", "Cloud operation failed"),
                        provider="gcloud",
                        code=str(error.get("code")),
                    )
                return operation.get("response", {})
            logger.debug(f"Operation {operation_name} not done (poll {poll}/{self.max_polls})")
            if poll < self.max_polls:
                await self.sleep(self.poll_interval)
        raise OperationTimeoutError(operation_name, polls=self.max_polls)

    async def _call(
        self, method: str, url: str, *, json_body: dict[str, Any] | None = None
    ) -> HTTPResponse:
        token = await self.token_provider()
        return await request(
            self.http,
            method,
            url,
            headers={"Authorization": f"Bearer {token}"},
            json_body=json_body,
        )

    def _checked(self, response: HTTPResponse) -> dict[str, Any]:
        if not response.ok:
            error = response.json_dict().get("error", {})
            raise ProviderError(
                error.get("message") or f"Cloud API call failed: {response.body[:200]}",
                provider="gcloud",
                code=error.get("status"),
                status_code=response.status_code,
            )
        return response.json_dict()


def google_token_provider(credentials_file: str) -> TokenProvider:
    """Build a token provider from a service account key file.

    Tokens are cached by google-auth and refreshed when expired.
    """
    from google.auth.transport.requests import Request
    from google.oauth2 import service_account

    credentials = service_account.Credentials.from_service_account_file(
        credentials_file, scopes=[CLOUD_PLATFORM_SCOPE]
    )

    async def provide() -> str:
        if not credentials.valid:
            await asyncio.to_thread(credentials.refresh, Request())
        return credentials.token

    return provide


def _error_status(response: HTTPResponse) -> str | None:
    if response.ok:
        return None
    return response.json_dict().get("error", {}).get("status")


def _project(data: dict[str, Any]) -> CloudProject:
    return CloudProject(
        project_id=data["projectId"],
        project_number=data.get("projectNumber"),
        name=data.get("name"),
    )
