from __future__ import annotations

import subprocess
from pathlib import Path

DEFAULT_TIMEOUT = 120.0


class GitError(Exception):
    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git command failed ({returncode}): {' '.join(command)}\n{stderr}")


def run_git(*args: str, cwd: Path, timeout: float | None = DEFAULT_TIMEOUT) -> str:
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(cmd, -1, f"timed out after {timeout}s") from e
    if result.returncode != 0:
        raise GitError(cmd, result.returncode, result.stderr.strip())
    return result.stdout.strip()


def rev_parse(ref: str, *, cwd: Path) -> str:
    return run_git("rev-parse", ref, cwd=cwd)


def current_branch(*, cwd: Path) -> str:
    return run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)


def branch_exists(name: str, *, cwd: Path) -> bool:
    try:
        run_git("rev-parse", "--verify", "--quiet", f"refs/heads/{name}", cwd=cwd)
        return True
    except GitError:
        return False


def create_branch(name: str, *, cwd: Path) -> None:
    run_git("checkout", "-b", name, cwd=cwd)


def checkout(ref: str, *, cwd: Path) -> None:
    run_git("checkout", ref, cwd=cwd)


def branch_delete(name: str, *, cwd: Path) -> None:
    run_git("branch", "-D", name, cwd=cwd)


def add(paths: list[str], *, cwd: Path) -> None:
    if not paths:
        return
    run_git("add", "--", *paths, cwd=cwd)


def commit(
    message: str,
    *,
    author: str = "",
    cwd: Path,
) -> str:
    args = ["commit", "-m", message]
    if author:
        args.extend(["--author", author])
    run_git(*args, cwd=cwd)
    return rev_parse("HEAD", cwd=cwd)


def status(*, cwd: Path) -> str:
    return run_git("status", "--porcelain", cwd=cwd)


def is_git_repo(path: Path) -> bool:
    try:
        run_git("rev-parse", "--is-inside-work-tree", cwd=path)
        return True
    except (GitError, FileNotFoundError, NotADirectoryError):
        return False


def reset_hard(*, cwd: Path) -> None:
    run_git("reset", "--hard", "HEAD", cwd=cwd)


def clean_untracked(*, cwd: Path) -> None:
    run_git("clean", "-fd", cwd=cwd)


# Stash


def stash_top(*, cwd: Path) -> str | None:
    try:
        return run_git("rev-parse", "-q", "--verify", "refs/stash", cwd=cwd)
    except GitError:
        return None


def stash_push(message: str, *, cwd: Path) -> str | None:
    """Stash tracked and untracked changes; return the new stash SHA.

    Returns None when git created no stash entry.
    """
    before = stash_top(cwd=cwd)
    run_git("stash", "push", "--include-untracked", "-m", message, cwd=cwd)
    after = stash_top(cwd=cwd)
    if after is None or after == before:
        return None
    return after


def stash_list(*, cwd: Path) -> list[str]:
    output = run_git("stash", "list", "--format=%H", cwd=cwd)
    return output.splitlines() if output else []


def stash_pop(sha: str, *, cwd: Path) -> None:
    entries = stash_list(cwd=cwd)
    if sha not in entries:
        raise GitError(["git", "stash", "pop"], 1, f"stash {sha[:8]} not found in stash list")
    run_git("stash", "pop", f"stash@{{{entries.index(sha)}}}", cwd=cwd)


# Remotes


def remotes(*, cwd: Path) -> list[str]:
    output = run_git("remote", cwd=cwd)
    return [line.strip() for line in output.splitlines() if line.strip()]


def remote_url(name: str, *, cwd: Path) -> str:
    return run_git("remote", "get-url", name, cwd=cwd)


def fetch(remote: str, *, cwd: Path, timeout: float | None = DEFAULT_TIMEOUT) -> None:
    run_git("fetch", remote, cwd=cwd, timeout=timeout)


def pull(
    remote: str, branch: str, *, cwd: Path, timeout: float | None = DEFAULT_TIMEOUT
) -> None:
    run_git("pull", "--ff-only", remote, branch, cwd=cwd, timeout=timeout)


def push(
    remote: str,
    branch: str,
    *,
    cwd: Path,
    set_upstream: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> None:
    args = ["push"]
    if set_upstream:
        args.append("-u")
    args.extend([remote, branch])
    run_git(*args, cwd=cwd, timeout=timeout)
