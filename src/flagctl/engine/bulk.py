from __future__ import annotations

import logging
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable, Protocol

from flagctl.config.settings import FlagctlConfig
from flagctl.engine.workflow import BranchWorkflow
from flagctl.events.dispatcher import EventEmitter, NullEmitter
from flagctl.exceptions import NoChangeNeeded, ValidationError
from flagctl.flags.environments import list_projects
from flagctl.interviewer.queue import QueueInterviewer
from flagctl.interviewer.request_flow import collect_request, scripted_answers
from flagctl.models.outcome import BulkSummary, ExitCode, ProjectResult, ProjectStatus
from flagctl.models.request import FeatureFlagRequest, make_request
from flagctl.workspace.hosting import PullRequestCreator

logger = logging.getLogger(__name__)


class ProjectRunner(Protocol):
    def run_project(self, project: str, answers: list[str]) -> ProjectResult: ...


class InProcessProjectRunner:
    """Replay the interactive flow in this process with scripted answers."""

    def __init__(
        self,
        config: FlagctlConfig,
        repo_root: Path,
        pr_creator: PullRequestCreator,
        *,
        event_emitter: EventEmitter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._repo_root = repo_root
        self._pr_creator = pr_creator
        self._event_emitter = event_emitter
        self._clock = clock

    def run_project(self, project: str, answers: list[str]) -> ProjectResult:
        interviewer = QueueInterviewer(answers)
        request = collect_request(
            interviewer,
            projects=list_projects(self._repo_root, self._config.repository.applications_dir),
        )
        if request is None:
            return ProjectResult(
                project=project,
                status=ProjectStatus.CANCELLED,
                exit_code=ExitCode.OK,
                error="cancelled at confirmation",
            )

        workflow = BranchWorkflow(
            self._config,
            self._repo_root,
            self._pr_creator,
            event_emitter=self._event_emitter,
            clock=self._clock,
        )
        try:
            change_set = workflow.run(request)
        except NoChangeNeeded as e:
            return ProjectResult(
                project=project,
                status=ProjectStatus.NO_CHANGE,
                exit_code=ExitCode.NO_CHANGE,
                error=str(e),
            )
        return ProjectResult(
            project=project,
            status=ProjectStatus.SUCCEEDED,
            pull_request_url=change_set.pull_request.url if change_set.pull_request else "",
        )


def default_subprocess_command(repo_root: Path) -> list[str]:
    return [sys.executable, "-m", "flagctl", "flag", "--repo-root", str(repo_root)]


class SubprocessProjectRunner:
    """Run each project as ``flagctl flag`` in a child process fed via stdin."""

    def __init__(
        self,
        command: list[str],
        *,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._command = command
        self._timeout = timeout
        self._env = env

    def run_project(self, project: str, answers: list[str]) -> ProjectResult:
        stdin = "\n".join(answers) + "\n"
        try:
            result = subprocess.run(
                self._command,
                input=stdin,
                text=True,
                timeout=self._timeout,
                env=self._env,
            )
        except subprocess.TimeoutExpired:
            return ProjectResult(
                project=project,
                status=ProjectStatus.FAILED,
                exit_code=ExitCode.FAILURE,
                error=f"timed out after {self._timeout}s",
            )

        if result.returncode == ExitCode.OK:
            return ProjectResult(project=project, status=ProjectStatus.SUCCEEDED)
        if result.returncode == ExitCode.NO_CHANGE:
            return ProjectResult(
                project=project,
                status=ProjectStatus.NO_CHANGE,
                exit_code=ExitCode.NO_CHANGE,
            )
        return ProjectResult(
            project=project,
            status=ProjectStatus.FAILED,
            exit_code=result.returncode,
            error=f"exit code {result.returncode}",
        )


class BulkOrchestrator:
    """Apply one request template to many projects, one at a time.

    Projects share a single working copy, so they are never run
    concurrently. A failure in one project is logged and recorded in the
    summary; the remaining projects still run.
    """

    def __init__(self, runner: ProjectRunner, *, event_emitter: EventEmitter | None = None) -> None:
        self._runner = runner
        self._event_emitter = event_emitter or NullEmitter()

    def run(self, template: FeatureFlagRequest, projects: list[str]) -> BulkSummary:
        if not projects:
            raise ValidationError("At least one project is required")
        requests = [
            make_request(template.operation, template.flag_name, p, template.environment_class)
            for p in projects
        ]

        self._event_emitter.emit(
            "BulkStarted",
            operation=template.operation.value,
            flag_name=template.flag_name,
            environment_class=template.environment_class.value,
            projects=[r.project_name for r in requests],
        )

        summary = BulkSummary()
        for index, request in enumerate(requests, 1):
            project = request.project_name
            self._event_emitter.emit(
                "BulkProjectStarted", project=project, index=index, total=len(requests)
            )
            answers = scripted_answers(
                request.operation.value,
                request.flag_name,
                project,
                request.environment_class.value,
            )
            try:
                result = self._runner.run_project(project, answers)
            except Exception as e:
                logger.warning("Project '%s' failed; continuing", project, exc_info=True)
                result = ProjectResult(
                    project=project,
                    status=ProjectStatus.FAILED,
                    exit_code=ExitCode.FAILURE,
                    error=str(e),
                )
            summary.results.append(result)
            self._event_emitter.emit(
                "BulkProjectFinished",
                project=project,
                status=result.status.value,
                exit_code=int(result.exit_code),
                error=result.error,
            )

        self._event_emitter.emit(
            "BulkCompleted",
            total=len(summary.results),
            succeeded=summary.succeeded,
            no_change=summary.no_change,
            cancelled=summary.cancelled,
            failed=summary.failed,
        )
        return summary
