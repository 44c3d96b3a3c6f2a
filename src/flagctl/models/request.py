from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from flagctl.exceptions import ValidationError

FLAG_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")
PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class Operation(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class EnvironmentClass(str, Enum):
    PROD = "prod"
    NON_PROD = "non-prod"


class FeatureFlagRequest(BaseModel):
    """One unit of work: a single flag change for one project."""

    model_config = ConfigDict(frozen=True)

    operation: Operation
    flag_name: str
    project_name: str
    environment_class: EnvironmentClass

    @field_validator("flag_name")
    @classmethod
    def _check_flag_name(cls, value: str) -> str:
        value = value.strip()
        if not FLAG_NAME_PATTERN.match(value) or ".." in value:
            raise ValueError(f"invalid flag name: {value!r}")
        return value

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        value = value.strip()
        if not PROJECT_NAME_PATTERN.match(value) or ".." in value:
            raise ValueError(f"invalid project name: {value!r}")
        return value


@dataclass(frozen=True)
class EnvironmentTarget:
    environment: str
    directory_path: Path
    config_file_path: Path


def make_request(
    operation: str | Operation,
    flag_name: str,
    project_name: str,
    environment_class: str | EnvironmentClass,
) -> FeatureFlagRequest:
    """Build a request from raw operator input, raising ValidationError on bad input."""
    try:
        return FeatureFlagRequest(
            operation=operation,
            flag_name=flag_name,
            project_name=project_name,
            environment_class=environment_class,
        )
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(problems) from e
