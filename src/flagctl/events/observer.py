from __future__ import annotations

from typing import Protocol

import typer

from flagctl.events.types import (
    BaseSynced,
    BranchPushed,
    BulkCompleted,
    BulkProjectFinished,
    BulkProjectStarted,
    BulkStarted,
    ChangesCommitted,
    Event,
    PullRequestOpened,
    TargetMutated,
    TopicBranchCreated,
    WorkflowCompleted,
    WorkflowFailed,
    WorkflowStarted,
    WorkspaceCaptured,
    WorkspaceRestored,
)


class EventObserver(Protocol):
    def on_event(self, event: Event) -> None: ...


class StdoutObserver:
    def on_event(self, event: Event) -> None:
        if isinstance(event, WorkflowStarted):
            typer.echo(
                f"[Flag] {event.operation.upper()} {event.flag_name} for "
                f"{event.project_name} ({event.environment_class})"
            )
        elif isinstance(event, WorkspaceCaptured):
            stash = " (uncommitted changes stashed)" if event.has_stash else ""
            typer.echo(f"  [Workspace] On branch {event.original_branch}{stash}")
        elif isinstance(event, BaseSynced):
            typer.echo(f"  [Sync] {event.base_branch} up to date with {event.remote}")
        elif isinstance(event, TopicBranchCreated):
            typer.echo(f"  [Branch] Created {event.branch_name}")
        elif isinstance(event, TargetMutated):
            typer.echo(f"    {event.environment}: {event.status} ({event.path})")
        elif isinstance(event, ChangesCommitted):
            typer.echo(f"  [Commit] {event.sha[:8]} {event.message.splitlines()[0] if event.message else ''}")
        elif isinstance(event, BranchPushed):
            typer.echo(f"  [Push] {event.branch_name} -> {event.remote}")
        elif isinstance(event, PullRequestOpened):
            typer.echo(f"  [PR] {event.url}")
        elif isinstance(event, WorkspaceRestored):
            typer.echo(f"  [Workspace] Restored to {event.branch}")
            for warning in event.warnings:
                typer.echo(f"  [Workspace] WARNING: {warning}")
        elif isinstance(event, WorkflowCompleted):
            typer.echo(f"[Flag] Completed: {event.project_name} ({event.duration_ms}ms)")
        elif isinstance(event, WorkflowFailed):
            label = "No change" if event.soft else "FAILED"
            typer.echo(f"[Flag] {label}: {event.project_name} at {event.state}: {event.error}")
        elif isinstance(event, BulkStarted):
            typer.echo(
                f"[Bulk] {event.operation.upper()} {event.flag_name} ({event.environment_class}) "
                f"across {len(event.projects)} project(s)"
            )
        elif isinstance(event, BulkProjectStarted):
            typer.echo(f"\n[Bulk] Project {event.index}/{event.total}: {event.project}")
        elif isinstance(event, BulkProjectFinished):
            detail = f": {event.error}" if event.error else ""
            typer.echo(f"[Bulk] {event.project}: {event.status}{detail}")
        elif isinstance(event, BulkCompleted):
            cancelled = f", {event.cancelled} cancelled" if event.cancelled else ""
            typer.echo(
                f"\n[Bulk] Done: {event.succeeded} succeeded, {event.no_change} unchanged{cancelled}, "
                f"{event.failed} failed ({event.total} total)"
            )
