from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

from flagctl.models.request import EnvironmentTarget, FeatureFlagRequest


class MutationStatus(str, Enum):
    APPLIED = "applied"
    CREATED = "created"
    SKIPPED_ALREADY_PRESENT = "skipped_already_present"
    SKIPPED_NOT_PRESENT = "skipped_not_present"
    SKIPPED_MISSING_FILE = "skipped_missing_file"

    @property
    def applied(self) -> bool:
        return self in (MutationStatus.APPLIED, MutationStatus.CREATED)


@dataclass(frozen=True)
class MutationOutcome:
    target: EnvironmentTarget
    status: MutationStatus

    @property
    def applied(self) -> bool:
        return self.status.applied


@dataclass(frozen=True)
class PullRequestRef:
    url: str
    number: int | None = None


@dataclass
class ChangeSet:
    request: FeatureFlagRequest
    branch_name: str
    outcomes: list[MutationOutcome] = field(default_factory=list)
    commit_sha: str = ""
    push_remote: str = ""
    pull_request: PullRequestRef | None = None

    @property
    def applied(self) -> list[MutationOutcome]:
        return [o for o in self.outcomes if o.applied]


class WorkflowState(str, Enum):
    IDLE = "idle"
    CAPTURED = "captured"
    SYNCED = "synced"
    BRANCHED = "branched"
    MUTATED = "mutated"
    COMMITTED = "committed"
    PUSHED = "pushed"
    PR_OPENED = "pr_opened"
    RESTORED = "restored"
    DONE = "done"
    FAILED = "failed"


class ExitCode(IntEnum):
    OK = 0
    FAILURE = 1
    USAGE = 2
    NO_CHANGE = 3


class ProjectStatus(str, Enum):
    SUCCEEDED = "succeeded"
    NO_CHANGE = "no_change"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class ProjectResult:
    project: str
    status: ProjectStatus
    exit_code: int = ExitCode.OK
    error: str = ""
    pull_request_url: str = ""


@dataclass
class BulkSummary:
    results: list[ProjectResult] = field(default_factory=list)

    def _count(self, status: ProjectStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(ProjectStatus.SUCCEEDED)

    @property
    def no_change(self) -> int:
        return self._count(ProjectStatus.NO_CHANGE)

    @property
    def cancelled(self) -> int:
        return self._count(ProjectStatus.CANCELLED)

    @property
    def failed(self) -> int:
        return self._count(ProjectStatus.FAILED)
