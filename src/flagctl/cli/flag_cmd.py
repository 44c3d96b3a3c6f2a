from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from flagctl.cli.common import load_repo
from flagctl.engine.workflow import BranchWorkflow
from flagctl.events.dispatcher import EventDispatcher
from flagctl.events.observer import StdoutObserver
from flagctl.exceptions import FlagctlError, HostingError, NoChangeNeeded, ValidationError
from flagctl.flags.environments import list_projects
from flagctl.interviewer.console import ConsoleInterviewer
from flagctl.interviewer.request_flow import collect_request
from flagctl.models.outcome import ExitCode
from flagctl.workspace.git_ops import GitError
from flagctl.workspace.hosting import build_pull_request_creator


def flag(
    operation: Optional[str] = typer.Option(None, "--operation", "-o", help="add or remove"),
    flag_name: Optional[str] = typer.Option(None, "--flag", "-f", help="Feature flag name"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project under the applications directory"),
    environment: Optional[str] = typer.Option(None, "--env", "-e", help="prod or non-prod"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    repo_root: Optional[Path] = typer.Option(None, "--repo-root", help="Deployment repository checkout"),
) -> None:
    """Add or remove a feature flag for one project and open a pull request.

    Values not given as options are asked for interactively.
    """
    config, root = load_repo(repo_root)

    interviewer = ConsoleInterviewer()
    try:
        request = collect_request(
            interviewer,
            projects=list_projects(root, config.repository.applications_dir),
            operation=operation,
            flag_name=flag_name,
            project=project,
            environment=environment,
            confirm=not yes,
        )
    except ValidationError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=ExitCode.USAGE)

    if request is None:
        typer.echo("Operation cancelled.")
        return

    try:
        pr_creator = build_pull_request_creator(config, root)
    except HostingError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=ExitCode.FAILURE)

    dispatcher = EventDispatcher([StdoutObserver()])
    workflow = BranchWorkflow(config, root, pr_creator, event_emitter=dispatcher)

    try:
        change_set = workflow.run(request)
    except NoChangeNeeded as e:
        typer.echo(f"Nothing to do: {e}")
        raise typer.Exit(code=ExitCode.NO_CHANGE)
    except (FlagctlError, GitError, OSError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=ExitCode.FAILURE)

    if change_set.pull_request is not None:
        typer.echo(f"\nPull request: {change_set.pull_request.url}")
