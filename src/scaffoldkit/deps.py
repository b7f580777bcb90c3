"""Dependency injection for job steps."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass

import httpx

from scaffoldkit.clients.atlas import ATLAS_API_URL, AtlasClient
from scaffoldkit.clients.gcloud import CloudResourceClient, TokenProvider, google_token_provider
from scaffoldkit.clients.github import GITHUB_API_URL, GitHubClient
from scaffoldkit.clients.shell import CommandRunner, run_command
from scaffoldkit.clients.vercel import VERCEL_API_URL, VercelClient
from scaffoldkit.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deps:
    """Dependencies injected into job steps.

    This container holds all external collaborators that steps need.
    Steps receive it through their job context, making them testable with
    fake clients.

    Attributes:
        github: Source control provider.
        atlas: Database-as-a-service provider.
        vercel: Serverless hosting provider.
        gcloud: Cloud resource manager.
        run_command: Subprocess runner for git, docker and direnv.
        replace_taken_id: Asks for a new cloud project id when one is taken.
        logger: Logger instance for step output.
    """

    github: GitHubClient
    atlas: AtlasClient
    vercel: VercelClient
    gcloud: CloudResourceClient
    run_command: CommandRunner
    replace_taken_id: Callable[[str], str]
    logger: logging.Logger


@asynccontextmanager
async def build_deps(
    settings: Settings,
    *,
    replace_taken_id: Callable[[str], str],
    runner: CommandRunner = run_command,
    token_provider: TokenProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Deps]:
    """Build dependencies for a run.

    This is an async context manager that closes every HTTP client on exit.

    Args:
        settings: Loaded configuration.
        replace_taken_id: Callback proposing a replacement cloud project id.
        runner: Subprocess runner.
        token_provider: Cloud access token source (defaults to the service
            account in ``settings.gcloud_credentials_file``).
        transport: Optional httpx transport shared by all clients (tests).

    Yields:
        A Deps instance with all dependencies wired up.

    Example:
        async with build_deps(settings, replace_taken_id=prompt_for_id) as deps:
            await create_project(params, settings, deps, ledger)
    """
    timeout = settings.http_timeout
    if token_provider is None:
        token_provider = google_token_provider(settings.gcloud_credentials_file)

    async with AsyncExitStack() as stack:

        def client(**kwargs) -> httpx.AsyncClient:
            http = httpx.AsyncClient(
                timeout=timeout, follow_redirects=True, transport=transport, **kwargs
            )
            stack.push_async_callback(http.aclose)
            return http

        github_http = client(
            base_url=GITHUB_API_URL,
            headers={
                "Authorization": f"Bearer {settings.github_token}",
                "Accept": "application/vnd.github+json",
            },
        )
        atlas_http = client(
            base_url=ATLAS_API_URL,
            auth=httpx.DigestAuth(settings.mongo_user_id, settings.mongo_user_token),
        )
        vercel_http = client(
            base_url=VERCEL_API_URL,
            headers={"Authorization": f"Bearer {settings.vercel_token}"},
            params={"teamId": settings.vercel_org_id},
        )
        gcloud_http = client()

        yield Deps(
            github=GitHubClient(github_http, settings.github_org),
            atlas=AtlasClient(atlas_http, settings.mongo_project_id),
            vercel=VercelClient(vercel_http),
            gcloud=CloudResourceClient(
                gcloud_http,
                token_provider,
                parent_folder_id=settings.gcloud_parent_folder_id,
                billing_account=settings.gcloud_billing_account,
                location=settings.gcloud_app_location,
            ),
            run_command=runner,
            replace_taken_id=replace_taken_id,
            logger=logging.getLogger("scaffoldkit.job"),
        )
