from __future__ import annotations

from pathlib import Path

from flagctl.exceptions import InvalidEnvironmentClass
from flagctl.models.request import EnvironmentClass, EnvironmentTarget, FeatureFlagRequest

ENVIRONMENTS: dict[EnvironmentClass, tuple[str, ...]] = {
    EnvironmentClass.PROD: ("prod",),
    EnvironmentClass.NON_PROD: ("main", "ondemand", "stage", "preprod"),
}


def _coerce(environment_class: EnvironmentClass | str) -> EnvironmentClass:
    if isinstance(environment_class, EnvironmentClass):
        return environment_class
    try:
        return EnvironmentClass(environment_class)
    except ValueError:
        raise InvalidEnvironmentClass(
            f"Unknown environment class {environment_class!r}; "
            f"expected one of: {', '.join(e.value for e in EnvironmentClass)}"
        ) from None


def resolve(environment_class: EnvironmentClass | str) -> frozenset[str]:
    return frozenset(ENVIRONMENTS[_coerce(environment_class)])


def environment_targets(
    request: FeatureFlagRequest,
    *,
    repo_root: Path,
    applications_dir: str,
    values_filename: str,
) -> list[EnvironmentTarget]:
    """Expand a request into one target per environment, in a stable order."""
    project_dir = repo_root / applications_dir / request.project_name
    targets: list[EnvironmentTarget] = []
    for env in ENVIRONMENTS[_coerce(request.environment_class)]:
        directory = project_dir / env
        targets.append(
            EnvironmentTarget(
                environment=env,
                directory_path=directory,
                config_file_path=directory / values_filename,
            )
        )
    return targets


def list_projects(repo_root: Path, applications_dir: str) -> list[str]:
    apps = repo_root / applications_dir
    if not apps.is_dir():
        return []
    return sorted(p.name for p in apps.iterdir() if p.is_dir())
