from __future__ import annotations

import os
from pathlib import Path

import yaml
import pydantic
from pydantic import BaseModel, Field

from flagctl.exceptions import ValidationError

CONFIG_FILENAME = "flagctl.yaml"
DEFAULT_REPO_DIRNAME = "k8s-template"


class RepositoryConfig(BaseModel):
    path: str = ""
    applications_dir: str = "v2/applications"
    values_filename: str = "values.yaml"
    base_branch: str = "master"
    default_remote: str = "origin"
    push_remote: str = ""


class HostingConfig(BaseModel):
    provider: str = "gh"
    api_url: str = "https://api.github.com"
    token_env: str = "GITHUB_TOKEN"
    draft: bool = False


class TimeoutConfig(BaseModel):
    git_seconds: float | None = 120.0
    hosting_seconds: float | None = 60.0
    project_seconds: float | None = 900.0


class FlagctlConfig(BaseModel):
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    hosting: HostingConfig = Field(default_factory=HostingConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    header_comment: str = "# Feature flags for this environment"
    stash_message: str = "flagctl temporary stash"
    commit_author: str = ""
    config_dir: Path | None = None

    def resolve_repo_root(self, override: Path | None = None) -> Path:
        if override is not None:
            return override.expanduser().resolve()
        if not self.repository.path:
            raise ValidationError(
                "No repository configured. Pass --repo-root, set FLAGCTL_REPO_ROOT, "
                f"or set repository.path in {CONFIG_FILENAME}."
            )
        path = Path(self.repository.path).expanduser()
        if not path.is_absolute():
            path = (self.config_dir or Path.cwd()) / path
        return path.resolve()


def _find_config_file(start: Path | None = None) -> Path | None:
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(start: Path | None = None) -> FlagctlConfig:
    config_path = _find_config_file(start)

    if config_path is not None:
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f) or {}
            config = FlagctlConfig.model_validate(raw)
        except (yaml.YAMLError, pydantic.ValidationError) as e:
            raise ValidationError(f"invalid config file {config_path}: {e}") from e
        config.config_dir = config_path.parent
    else:
        config = FlagctlConfig()

    repo_root_env = os.environ.get("FLAGCTL_REPO_ROOT")
    if repo_root_env:
        config.repository.path = repo_root_env
    elif not config.repository.path and os.environ.get("DEV_ROOT"):
        config.repository.path = str(Path(os.environ["DEV_ROOT"]) / DEFAULT_REPO_DIRNAME)

    push_remote_env = os.environ.get("FLAGCTL_PUSH_REMOTE")
    if push_remote_env is not None:
        config.repository.push_remote = push_remote_env

    return config
