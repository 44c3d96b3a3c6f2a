from __future__ import annotations

from flagctl.events.dispatcher import EventDispatcher, NullEmitter
from flagctl.events.observer import StdoutObserver
from flagctl.events.types import (
    BulkCompleted,
    PullRequestOpened,
    WorkflowFailed,
    WorkflowStarted,
    WorkspaceRestored,
)


class RecordingObserver:
    def __init__(self) -> None:
        self.events: list = []

    def on_event(self, event) -> None:
        self.events.append(event)


def test_dispatcher_sends_to_all_observers() -> None:
    dispatcher = EventDispatcher()
    obs1 = RecordingObserver()
    obs2 = RecordingObserver()
    dispatcher.add_observer(obs1)
    dispatcher.add_observer(obs2)

    dispatcher.emit(
        "WorkflowStarted",
        operation="add",
        flag_name="FEATURE_X",
        project_name="svc",
        environment_class="prod",
    )

    assert len(obs1.events) == 1
    assert len(obs2.events) == 1
    assert isinstance(obs1.events[0], WorkflowStarted)
    assert obs1.events[0].flag_name == "FEATURE_X"


def test_unknown_event_type_is_ignored() -> None:
    dispatcher = EventDispatcher()
    observer = RecordingObserver()
    dispatcher.add_observer(observer)
    dispatcher.emit("SomethingElse", foo="bar")
    assert observer.events == []


def test_null_emitter_accepts_anything() -> None:
    NullEmitter().emit("WorkflowStarted", anything=1)


def test_stdout_observer_formats_events(capsys) -> None:
    observer = StdoutObserver()
    observer.on_event(
        WorkflowStarted(
            operation="add", flag_name="FEATURE_X", project_name="svc", environment_class="non-prod"
        )
    )
    observer.on_event(PullRequestOpened(url="https://github.com/acme/k8s-template/pull/1"))
    observer.on_event(
        WorkspaceRestored(repo_path="/repo", branch="feature/wip", warnings=["stash pop abc: gone"])
    )
    observer.on_event(
        WorkflowFailed(project_name="svc", state="pushed", error="gh failed", soft=False)
    )
    observer.on_event(BulkCompleted(total=3, succeeded=2, no_change=0, failed=1))

    out = capsys.readouterr().out
    assert "[Flag] ADD FEATURE_X for svc (non-prod)" in out
    assert "[PR] https://github.com/acme/k8s-template/pull/1" in out
    assert "[Workspace] Restored to feature/wip" in out
    assert "WARNING: stash pop abc: gone" in out
    assert "FAILED: svc at pushed" in out
    assert "2 succeeded, 0 unchanged, 1 failed (3 total)" in out


def test_cancelled_count_shown_only_when_nonzero(capsys) -> None:
    observer = StdoutObserver()
    observer.on_event(BulkCompleted(total=2, succeeded=1, cancelled=1))

    out = capsys.readouterr().out
    assert "1 succeeded, 0 unchanged, 1 cancelled, 0 failed (2 total)" in out


def test_soft_failure_is_reported_as_no_change(capsys) -> None:
    StdoutObserver().on_event(
        WorkflowFailed(project_name="svc", state="branched", error="nothing", soft=True)
    )
    assert "No change: svc" in capsys.readouterr().out


def test_failing_observer_does_not_block_others() -> None:
    class Broken:
        def on_event(self, event) -> None:
            raise RuntimeError("terminal gone")

    healthy = RecordingObserver()
    dispatcher = EventDispatcher([Broken(), healthy])

    dispatcher.emit("PullRequestOpened", url="https://example.test/pull/1")

    assert len(healthy.events) == 1
