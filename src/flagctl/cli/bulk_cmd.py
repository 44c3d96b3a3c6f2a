from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from flagctl.cli.common import load_repo
from flagctl.engine.bulk import (
    BulkOrchestrator,
    InProcessProjectRunner,
    ProjectRunner,
    SubprocessProjectRunner,
    default_subprocess_command,
)
from flagctl.events.dispatcher import EventDispatcher
from flagctl.events.observer import StdoutObserver
from flagctl.exceptions import HostingError, ValidationError
from flagctl.models.outcome import ExitCode
from flagctl.models.request import make_request
from flagctl.workspace.hosting import build_pull_request_creator


def bulk(
    operation: str = typer.Argument(..., help="add or remove"),
    flag_name: str = typer.Argument(..., help="Feature flag name"),
    environment: str = typer.Argument(..., help="prod or non-prod"),
    projects: list[str] = typer.Argument(..., help="Projects to update, in order"),
    isolate: bool = typer.Option(False, "--isolate", help="Run each project in its own flagctl subprocess"),
    repo_root: Optional[Path] = typer.Option(None, "--repo-root", help="Deployment repository checkout"),
) -> None:
    """Apply the same flag change to several projects, one after another.

    Per-project failures are reported in the summary and do not change the
    exit code.
    """
    try:
        template = make_request(operation.lower(), flag_name, projects[0], environment.lower())
        for project in projects[1:]:
            make_request(template.operation, template.flag_name, project, template.environment_class)
    except ValidationError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=ExitCode.USAGE)

    config, root = load_repo(repo_root)

    dispatcher = EventDispatcher([StdoutObserver()])

    runner: ProjectRunner
    if isolate:
        runner = SubprocessProjectRunner(
            default_subprocess_command(root),
            timeout=config.timeouts.project_seconds,
        )
    else:
        try:
            pr_creator = build_pull_request_creator(config, root)
        except HostingError as e:
            typer.echo(f"Error: {e}")
            raise typer.Exit(code=ExitCode.USAGE)
        runner = InProcessProjectRunner(config, root, pr_creator, event_emitter=dispatcher)

    summary = BulkOrchestrator(runner, event_emitter=dispatcher).run(template, projects)

    for result in summary.results:
        suffix = f" {result.pull_request_url}" if result.pull_request_url else ""
        typer.echo(f"  {result.project}: {result.status.value}{suffix}")
