from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Event(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str


class WorkflowStarted(Event):
    event_type: str = "WorkflowStarted"
    operation: str
    flag_name: str
    project_name: str
    environment_class: str


class WorkflowCompleted(Event):
    event_type: str = "WorkflowCompleted"
    project_name: str
    branch_name: str = ""
    pull_request_url: str = ""
    duration_ms: int = 0


class WorkflowFailed(Event):
    event_type: str = "WorkflowFailed"
    project_name: str
    state: str = ""
    error: str = ""
    soft: bool = False


class WorkspaceCaptured(Event):
    event_type: str = "WorkspaceCaptured"
    repo_path: str
    original_branch: str = ""
    has_stash: bool = False


class WorkspaceRestored(Event):
    event_type: str = "WorkspaceRestored"
    repo_path: str
    branch: str = ""
    stash_restored: bool = False
    warnings: list[str] = Field(default_factory=list)


class BaseSynced(Event):
    event_type: str = "BaseSynced"
    remote: str
    base_branch: str


class TopicBranchCreated(Event):
    event_type: str = "TopicBranchCreated"
    branch_name: str


class TargetMutated(Event):
    event_type: str = "TargetMutated"
    environment: str
    path: str
    status: str


class ChangesCommitted(Event):
    event_type: str = "ChangesCommitted"
    sha: str
    message: str = ""
    files: list[str] = Field(default_factory=list)


class BranchPushed(Event):
    event_type: str = "BranchPushed"
    remote: str
    branch_name: str


class PullRequestOpened(Event):
    event_type: str = "PullRequestOpened"
    url: str
    title: str = ""


class BulkStarted(Event):
    event_type: str = "BulkStarted"
    operation: str
    flag_name: str
    environment_class: str
    projects: list[str] = Field(default_factory=list)


class BulkProjectStarted(Event):
    event_type: str = "BulkProjectStarted"
    project: str
    index: int
    total: int


class BulkProjectFinished(Event):
    event_type: str = "BulkProjectFinished"
    project: str
    status: str
    exit_code: int = 0
    error: str = ""


class BulkCompleted(Event):
    event_type: str = "BulkCompleted"
    total: int = 0
    succeeded: int = 0
    no_change: int = 0
    cancelled: int = 0
    failed: int = 0


EVENT_TYPE_MAP: dict[str, type[Event]] = {
    "WorkflowStarted": WorkflowStarted,
    "WorkflowCompleted": WorkflowCompleted,
    "WorkflowFailed": WorkflowFailed,
    "WorkspaceCaptured": WorkspaceCaptured,
    "WorkspaceRestored": WorkspaceRestored,
    "BaseSynced": BaseSynced,
    "TopicBranchCreated": TopicBranchCreated,
    "TargetMutated": TargetMutated,
    "ChangesCommitted": ChangesCommitted,
    "BranchPushed": BranchPushed,
    "PullRequestOpened": PullRequestOpened,
    "BulkStarted": BulkStarted,
    "BulkProjectStarted": BulkProjectStarted,
    "BulkProjectFinished": BulkProjectFinished,
    "BulkCompleted": BulkCompleted,
}
