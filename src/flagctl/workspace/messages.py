from __future__ import annotations

from pathlib import Path

from flagctl.models.outcome import MutationOutcome
from flagctl.models.request import FeatureFlagRequest, Operation


def _verb(request: FeatureFlagRequest) -> str:
    return "Add" if request.operation == Operation.ADD else "Remove"


def _preposition(request: FeatureFlagRequest) -> str:
    return "for" if request.operation == Operation.ADD else "from"


def branch_name(request: FeatureFlagRequest, epoch_millis: int) -> str:
    return (
        f"{request.operation.value}-{request.flag_name}-{request.project_name}-"
        f"{request.environment_class.value}-{epoch_millis}"
    )


def commit_message(request: FeatureFlagRequest) -> str:
    return (
        f"{_verb(request)} {request.flag_name} feature flag {_preposition(request)} "
        f"{request.project_name} in {request.environment_class.value} environments"
    )


def pr_title(request: FeatureFlagRequest) -> str:
    return (
        f"{_verb(request)} {request.flag_name} feature flag {_preposition(request)} "
        f"{request.project_name} ({request.environment_class.value})"
    )


def pr_body(
    request: FeatureFlagRequest,
    outcomes: list[MutationOutcome],
    *,
    repo_root: Path,
) -> str:
    applied = [o for o in outcomes if o.applied]
    skipped = [o for o in outcomes if not o.applied]
    action = "Add" if request.operation == Operation.ADD else "Remove"
    target_word = "to" if request.operation == Operation.ADD else "from"

    lines = [
        "## Summary",
        f"- {action} `{request.flag_name}: true` {target_word} "
        f"{request.environment_class.value} environment configurations for {request.project_name}",
        f"- Updated {len(applied)} environment file(s)",
        "",
        "## Environment files updated:",
    ]
    lines.extend(f"- {_relative(o.target.config_file_path, repo_root)}" for o in applied)
    if skipped:
        lines.append("")
        lines.append("## Already in the requested state:")
        lines.extend(
            f"- {_relative(o.target.config_file_path, repo_root)} ({o.status.value})"
            for o in skipped
        )
    return "\n".join(lines) + "\n"


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)
