"""Provider clients for scaffoldkit.

Thin async wrappers over the external services a project is provisioned
on, plus the local git/subprocess helpers the jobs compose.
"""

from scaffoldkit.clients.atlas import AtlasClient
from scaffoldkit.clients.gcloud import CloudProject, CloudResourceClient, google_token_provider
from scaffoldkit.clients.git import Git
from scaffoldkit.clients.github import GitHubClient, Repo
from scaffoldkit.clients.http import HTTPResponse, request
from scaffoldkit.clients.secrets import encrypt_secret
from scaffoldkit.clients.shell import CommandResult, CommandRunner, run_command
from scaffoldkit.clients.vercel import VercelClient, VercelEnvVariable, VercelProject

__all__ = [
    "AtlasClient",
    "CloudProject",
    "CloudResourceClient",
    "CommandResult",
    "CommandRunner",
    "Git",
    "GitHubClient",
    "HTTPResponse",
    "Repo",
    "VercelClient",
    "VercelEnvVariable",
    "VercelProject",
    "encrypt_secret",
    "google_token_provider",
    "request",
    "run_command",
]
