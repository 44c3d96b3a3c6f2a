from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

import typer

from flagctl.cli.common import load_repo
from flagctl.models.outcome import ExitCode
from flagctl.workspace import git_ops


def _report(ok: bool, message: str) -> bool:
    typer.echo(f"  [{'ok' if ok else 'FAIL'}] {message}")
    return ok


def doctor(
    repo_root: Optional[Path] = typer.Option(None, "--repo-root", help="Deployment repository checkout"),
) -> None:
    """Check that the tools and repository flagctl needs are available."""
    typer.echo("Checking environment...")
    results = [_report(shutil.which("git") is not None, "git on PATH")]

    config, root = load_repo(repo_root)
    repo = config.repository
    if config.hosting.provider == "gh":
        results.append(_report(shutil.which("gh") is not None, "gh on PATH"))

    is_repo = git_ops.is_git_repo(root)
    results.append(_report(is_repo, f"git repository at {root}"))
    if is_repo:
        results.append(
            _report(
                git_ops.branch_exists(repo.base_branch, cwd=root),
                f"base branch '{repo.base_branch}' exists",
            )
        )
        available = git_ops.remotes(cwd=root)
        results.append(_report(repo.default_remote in available, f"remote '{repo.default_remote}'"))
        if repo.push_remote:
            results.append(_report(repo.push_remote in available, f"push remote '{repo.push_remote}'"))

    applications = root / repo.applications_dir
    results.append(_report(applications.is_dir(), f"applications directory {applications}"))

    if not all(results):
        raise typer.Exit(code=ExitCode.FAILURE)
    typer.echo("All checks passed.")
