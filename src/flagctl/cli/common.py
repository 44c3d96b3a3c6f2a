from __future__ import annotations

from pathlib import Path

import typer

from flagctl.config.settings import FlagctlConfig, load_config
from flagctl.exceptions import ValidationError
from flagctl.models.outcome import ExitCode


def load_repo(repo_root: Path | None) -> tuple[FlagctlConfig, Path]:
    """Load configuration and resolve the repository root, or exit with a usage error."""
    try:
        config = load_config()
        root = config.resolve_repo_root(repo_root)
    except ValidationError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=ExitCode.USAGE)
    if not root.is_dir():
        typer.echo(f"Error: repository root not found: {root}")
        raise typer.Exit(code=ExitCode.USAGE)
    return config, root
