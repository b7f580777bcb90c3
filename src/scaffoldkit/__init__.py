"""scaffoldkit: bootstrap a project and provision its cloud environments."""

__version__ = "0.1.0"

from scaffoldkit.config import Settings, load_settings
from scaffoldkit.create_project import (
    ProjectParams,
    ProjectReport,
    create_project,
    environments,
    generate_password,
    slugify,
)
from scaffoldkit.deps import Deps, build_deps
from scaffoldkit.errors import ScaffoldError, StepFailedError
from scaffoldkit.steppy import CaveatLedger, Job, run_job

__all__ = [
    # Core
    "Deps",
    "Settings",
    "build_deps",
    "load_settings",
    # Driver
    "ProjectParams",
    "ProjectReport",
    "create_project",
    "environments",
    "generate_password",
    "slugify",
    # Orchestrator
    "CaveatLedger",
    "Job",
    "run_job",
    # Errors
    "ScaffoldError",
    "StepFailedError",
]
