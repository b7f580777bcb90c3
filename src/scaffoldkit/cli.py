"""Command-line interface for bootstrapping projects."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.pretty import Pretty
from rich.table import Table

from scaffoldkit.config import ENV_VARS, REQUIRED_ENV_VARS, SECRET_ENV_VARS, Settings, load_settings
from scaffoldkit.create_project import (
    DEFAULT_DOMAIN,
    ProjectParams,
    ProjectReport,
    create_project,
    generate_password,
    slugify,
)
from scaffoldkit.deps import build_deps
from scaffoldkit.errors import ConfigError, PromptCancelledError, StepFailedError
from scaffoldkit.jobs import ALL_JOBS
from scaffoldkit.steppy import CaveatLedger, DefaultFormatter
from scaffoldkit.template import default_template_dir

app = typer.Typer(
    name="create-project",
    help="Bootstrap a project: work tree, repository and cloud environments.",
    no_args_is_help=True,
)

console = Console()

# Exit code for an operator-cancelled prompt (as for SIGINT)
EXIT_CANCELLED = 130


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def prompt_text(message: str, default: str | None = None) -> str:
    """Prompt the operator, mapping Ctrl-C / EOF to PromptCancelledError."""
    try:
        return typer.prompt(message, default=default)
    except typer.Abort as e:
        raise PromptCancelledError() from e


def id_replacer(formatter: DefaultFormatter) -> Callable[[str], str]:
    """Build the callback asking for a new cloud project id when one is taken."""

    def replace_taken_id(taken_id: str) -> str:
        with formatter.suspended():
            console.print(f"[yellow]Cloud project id '{taken_id}' is already taken.[/yellow]")
            return prompt_text("Enter another project id")

    return replace_taken_id


async def run_create(
    params: ProjectParams, settings: Settings, formatter: DefaultFormatter
) -> ProjectReport:
    ledger = CaveatLedger()
    async with build_deps(settings, replace_taken_id=id_replacer(formatter)) as deps:
        return await create_project(
            params, settings, deps, ledger, listener=formatter, console=console
        )


def print_report(report: ProjectReport) -> None:
    console.print()
    for heading, outputs in report.outputs.items():
        if not outputs:
            continue
        console.print(f"[cyan]{heading}[/cyan]")
        console.print(
            Pretty({title: _plain(value) for title, value in outputs.items()}, indent_guides=True)
        )

    console.print()
    if not report.caveats:
        console.print("[green]✓ No caveats: every resource was created fresh[/green]")
        return

    table = Table(title="Caveats")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Caveat", style="yellow")
    for index, caveat in enumerate(report.caveats, start=1):
        table.add_row(str(index), str(caveat))
    console.print(table)


@app.command("create")
def create_cmd(
    project_name: str | None = typer.Option(
        None,
        "--name",
        "-n",
        help="Project display name (prompted if omitted)",
    ),
    project_hid: str | None = typer.Option(
        None,
        "--hid",
        help="Project hid used in resource names (default: param-cased name)",
    ),
    domain: str | None = typer.Option(
        None,
        "--domain",
        "-d",
        help=f"Production domain (prompted if omitted, default: {DEFAULT_DOMAIN})",
    ),
    dest_dir: Path | None = typer.Option(
        None,
        "--dest",
        help="Directory to create the project in (default: ./<hid>)",
    ),
    template_dir: Path | None = typer.Option(
        None,
        "--template",
        help="Starter template directory (default: bundled template)",
    ),
    seed_file: Path | None = typer.Option(
        None,
        "--seed",
        help="Mongo archive restored into the local cms database",
    ),
    enable_direnv: bool = typer.Option(
        True,
        "--direnv/--no-direnv",
        help="Run 'direnv allow' in each package",
    ),
    refresh_secrets: bool = typer.Option(
        False,
        "--refresh-secrets",
        help="Rewrite repository secrets when the repository already exists",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Create a project and provision its remote environments.

    Example:
        create-project create --name "MS Web" --domain mindfulstudio.io
    """
    configure_logging(verbose)

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Configuration Error:[/red] {e.message}")
        raise typer.Exit(code=2) from None

    try:
        if project_name is None:
            project_name = prompt_text("What is the name of the project?", default="MS Web")
        if project_hid is None:
            project_hid = prompt_text(
                "Is this the correct project hid?", default=slugify(project_name)
            )
        if domain is None:
            domain = prompt_text("What is the domain?", default=DEFAULT_DOMAIN)
    except PromptCancelledError:
        raise typer.Exit(code=EXIT_CANCELLED) from None

    params = ProjectParams(
        project_name=project_name,
        project_hid=project_hid,
        domain=domain,
        dest_dir=dest_dir or Path.cwd() / project_hid,
        template_dir=template_dir or default_template_dir(),
        mongo_password=generate_password(),
        seed_file=seed_file,
        enable_direnv=enable_direnv,
        refresh_secrets=refresh_secrets,
    )

    formatter = DefaultFormatter(console)
    try:
        report = asyncio.run(run_create(params, settings, formatter))
    except StepFailedError as e:
        if isinstance(e.original, PromptCancelledError):
            raise typer.Exit(code=EXIT_CANCELLED) from None
        console.print(f"[red]✗ Step '{e.step_title}' failed:[/red] {escape(repr(e.original))}")
        raise typer.Exit(code=1) from None
    except KeyboardInterrupt:
        raise typer.Exit(code=EXIT_CANCELLED) from None

    print_report(report)
    console.print(f"\n[green]✓ Project {params.project_hid} created in {params.dest_dir}[/green]")


@app.command("jobs")
def jobs_cmd() -> None:
    """List every job and its steps, in run order."""
    table = Table(title="Jobs")
    table.add_column("Job", style="cyan", no_wrap=True)
    table.add_column("Step", style="green")
    table.add_column("Group", style="magenta")
    table.add_column("Output", style="dim")

    for job in ALL_JOBS:
        for step in job.steps:
            kind = job.output_kind(step.title)
            table.add_row(
                job.name,
                step.title,
                step.group or "",
                kind.__name__ if kind is not None else "-",
            )

    console.print(table)


@app.command("env")
def env_cmd() -> None:
    """Show the configuration variables and whether each is set.

    Secret values are masked.
    """
    table = Table(title="Configuration Variables")
    table.add_column("Variable", style="cyan", no_wrap=True)
    table.add_column("Required", style="yellow")
    table.add_column("Current Value", style="green")

    for env_var in sorted(ENV_VARS.values()):
        required = "Yes" if env_var in REQUIRED_ENV_VARS else "No"
        value = os.environ.get(env_var)
        if not value:
            value = "(not set)"
        elif env_var in SECRET_ENV_VARS:
            value = "****"
        elif len(value) > 50:
            value = value[:47] + "..."
        table.add_row(env_var, required, value)

    console.print(table)


def _plain(value: object) -> object:
    dump = getattr(value, "model_dump", None)
    return dump() if callable(dump) else value


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
