from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import httpx

from flagctl.exceptions import HostingError
from flagctl.models.outcome import PullRequestRef
from flagctl.workspace import git_ops

if TYPE_CHECKING:
    from flagctl.config.settings import FlagctlConfig

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[:/]([^/:]+)/([^/]+?)(?:\.git)?/?$")
_PR_URL_PATTERN = re.compile(r"https?://\S+/pull/(\d+)")


class PullRequestCreator(Protocol):
    def create(self, *, title: str, body: str, head: str, base: str) -> PullRequestRef: ...


def parse_remote_slug(url: str) -> tuple[str, str]:
    """Return ``(owner, repo)`` from an ssh or https remote URL."""
    m = _SLUG_PATTERN.search(url.strip())
    if not m:
        raise HostingError(f"Cannot determine owner/repo from remote URL: {url}")
    return m.group(1), m.group(2)


def pull_request_head(
    branch: str, *, push_remote: str, default_remote: str, cwd: Path
) -> str:
    """Head ref for the PR; fork pushes need the ``owner:branch`` form."""
    if push_remote == default_remote:
        return branch
    try:
        owner, _ = parse_remote_slug(git_ops.remote_url(push_remote, cwd=cwd))
    except (git_ops.GitError, HostingError):
        logger.warning("Could not read owner of remote '%s'; using bare branch name", push_remote)
        return branch
    return f"{owner}:{branch}"


class GhCliPullRequestCreator:
    """Open pull requests with the GitHub CLI (``gh pr create``)."""

    def __init__(
        self, repo_path: Path, *, draft: bool = False, timeout: float | None = 60.0
    ) -> None:
        self._repo_path = repo_path
        self._draft = draft
        self._timeout = timeout

    def create(self, *, title: str, body: str, head: str, base: str) -> PullRequestRef:
        cmd = ["gh", "pr", "create", "--head", head, "--base", base, "--title", title, "--body", body]
        if self._draft:
            cmd.append("--draft")
        try:
            result = subprocess.run(
                cmd,
                cwd=self._repo_path,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise HostingError("GitHub CLI 'gh' not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            raise HostingError(f"'gh pr create' timed out after {self._timeout}s") from e
        if result.returncode != 0:
            raise HostingError(
                f"'gh pr create' failed ({result.returncode}): {result.stderr.strip()}"
            )

        output = result.stdout.strip()
        m = _PR_URL_PATTERN.search(output)
        if m:
            return PullRequestRef(url=m.group(0), number=int(m.group(1)))
        url = output.splitlines()[-1] if output else ""
        return PullRequestRef(url=url)


class GitHubApiPullRequestCreator:
    """Open pull requests through the GitHub REST API."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        *,
        api_url: str = "https://api.github.com",
        draft: bool = False,
        timeout: float | None = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._draft = draft
        self._client = client or httpx.Client(
            base_url=api_url.rstrip("/"),
            timeout=timeout,
        )
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    def create(self, *, title: str, body: str, head: str, base: str) -> PullRequestRef:
        try:
            response = self._client.post(
                f"/repos/{self._owner}/{self._repo}/pulls",
                json={"title": title, "body": body, "head": head, "base": base, "draft": self._draft},
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HostingError(
                f"GitHub API rejected pull request ({e.response.status_code}): {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise HostingError(f"GitHub API request failed: {e}") from e

        data = response.json()
        return PullRequestRef(url=data.get("html_url", ""), number=data.get("number"))

    def close(self) -> None:
        self._client.close()


def build_pull_request_creator(config: FlagctlConfig, repo_path: Path) -> PullRequestCreator:
    hosting = config.hosting
    timeout = config.timeouts.hosting_seconds

    if hosting.provider == "gh":
        return GhCliPullRequestCreator(repo_path, draft=hosting.draft, timeout=timeout)

    if hosting.provider == "github-api":
        token = os.environ.get(hosting.token_env, "")
        if not token:
            raise HostingError(
                f"Environment variable {hosting.token_env} is not set; "
                "it must hold a GitHub token for the github-api provider."
            )
        try:
            url = git_ops.remote_url(config.repository.default_remote, cwd=repo_path)
        except git_ops.GitError as e:
            raise HostingError(
                f"Cannot read URL of remote '{config.repository.default_remote}': {e}"
            ) from e
        owner, repo = parse_remote_slug(url)
        return GitHubApiPullRequestCreator(
            owner,
            repo,
            token,
            api_url=hosting.api_url,
            draft=hosting.draft,
            timeout=timeout,
        )

    raise HostingError(f"Unknown hosting provider: {hosting.provider!r}")
