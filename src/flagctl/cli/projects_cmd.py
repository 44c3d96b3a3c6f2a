from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from flagctl.cli.common import load_repo
from flagctl.flags.environments import list_projects


def projects(
    repo_root: Optional[Path] = typer.Option(None, "--repo-root", help="Deployment repository checkout"),
) -> None:
    """List projects found under the applications directory."""
    config, root = load_repo(repo_root)
    names = list_projects(root, config.repository.applications_dir)
    if not names:
        typer.echo(f"No projects found in {root / config.repository.applications_dir}")
        return
    for name in names:
        typer.echo(name)
