from pathlib import Path

from flagctl.models.outcome import MutationOutcome, MutationStatus
from flagctl.models.request import EnvironmentTarget, make_request
from flagctl.workspace.messages import branch_name, commit_message, pr_body, pr_title


def _outcome(root: Path, env: str, status: MutationStatus) -> MutationOutcome:
    directory = root / "v2" / "applications" / "svc" / env
    return MutationOutcome(
        target=EnvironmentTarget(env, directory, directory / "values.yaml"),
        status=status,
    )


def test_branch_name() -> None:
    request = make_request("add", "FEATURE_X", "svc", "non-prod")
    assert branch_name(request, 1700000000123) == "add-FEATURE_X-svc-non-prod-1700000000123"


def test_commit_message_add() -> None:
    request = make_request("add", "FEATURE_X", "svc", "prod")
    assert commit_message(request) == "Add FEATURE_X feature flag for svc in prod environments"


def test_commit_message_remove() -> None:
    request = make_request("remove", "FEATURE_X", "svc", "non-prod")
    assert commit_message(request) == "Remove FEATURE_X feature flag from svc in non-prod environments"


def test_pr_title() -> None:
    request = make_request("remove", "FEATURE_X", "svc", "prod")
    assert pr_title(request) == "Remove FEATURE_X feature flag from svc (prod)"


def test_pr_body_lists_updated_and_skipped_files(tmp_path: Path) -> None:
    request = make_request("add", "FEATURE_X", "svc", "non-prod")
    outcomes = [
        _outcome(tmp_path, "main", MutationStatus.APPLIED),
        _outcome(tmp_path, "stage", MutationStatus.CREATED),
        _outcome(tmp_path, "preprod", MutationStatus.SKIPPED_ALREADY_PRESENT),
    ]

    body = pr_body(request, outcomes, repo_root=tmp_path)

    assert body.startswith("## Summary\n")
    assert "- Add `FEATURE_X: true` to non-prod environment configurations for svc" in body
    assert "- Updated 2 environment file(s)" in body
    assert "- v2/applications/svc/main/values.yaml\n" in body
    assert "- v2/applications/svc/stage/values.yaml\n" in body
    assert "## Already in the requested state:" in body
    assert "- v2/applications/svc/preprod/values.yaml (skipped_already_present)" in body


def test_pr_body_without_skips(tmp_path: Path) -> None:
    request = make_request("remove", "FEATURE_X", "svc", "prod")
    body = pr_body(request, [_outcome(tmp_path, "prod", MutationStatus.APPLIED)], repo_root=tmp_path)
    assert "from prod environment configurations" in body
    assert "Already in the requested state" not in body
