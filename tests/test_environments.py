from pathlib import Path

import pytest

from flagctl.exceptions import InvalidEnvironmentClass, ValidationError
from flagctl.flags.environments import environment_targets, list_projects, resolve
from flagctl.models.request import EnvironmentClass, make_request


class TestResolve:
    def test_prod(self) -> None:
        assert resolve(EnvironmentClass.PROD) == frozenset({"prod"})

    def test_non_prod(self) -> None:
        assert resolve("non-prod") == frozenset({"main", "ondemand", "stage", "preprod"})

    def test_classes_are_disjoint(self) -> None:
        assert not resolve("prod") & resolve("non-prod")

    def test_unknown_class_raises(self) -> None:
        with pytest.raises(InvalidEnvironmentClass):
            resolve("staging")

    def test_unknown_class_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            resolve("")


class TestEnvironmentTargets:
    def test_non_prod_targets_in_stable_order(self, tmp_path: Path) -> None:
        request = make_request("add", "FEATURE_X", "svc", "non-prod")

        targets = environment_targets(
            request,
            repo_root=tmp_path,
            applications_dir="v2/applications",
            values_filename="values.yaml",
        )

        assert [t.environment for t in targets] == ["main", "ondemand", "stage", "preprod"]
        stage = targets[2]
        assert stage.directory_path == tmp_path / "v2/applications/svc/stage"
        assert stage.config_file_path == tmp_path / "v2/applications/svc/stage/values.yaml"

    def test_prod_single_target(self, tmp_path: Path) -> None:
        request = make_request("remove", "FEATURE_X", "svc", "prod")

        targets = environment_targets(
            request, repo_root=tmp_path, applications_dir="apps", values_filename="v.yaml"
        )

        assert len(targets) == 1
        assert targets[0].config_file_path == tmp_path / "apps/svc/prod/v.yaml"


class TestListProjects:
    def test_lists_directories_sorted(self, tmp_path: Path) -> None:
        apps = tmp_path / "v2" / "applications"
        for name in ("zeta", "alpha", "mid"):
            (apps / name).mkdir(parents=True)
        (apps / "README.md").write_text("not a project\n")

        assert list_projects(tmp_path, "v2/applications") == ["alpha", "mid", "zeta"]

    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        assert list_projects(tmp_path, "v2/applications") == []
