from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable

from flagctl.config.settings import FlagctlConfig
from flagctl.events.dispatcher import EventEmitter, NullEmitter
from flagctl.exceptions import CommitError, HostingError, NoChangeNeeded, SyncError
from flagctl.flags.config_mutator import ConfigMutator
from flagctl.flags.environments import environment_targets
from flagctl.models.outcome import ChangeSet, MutationOutcome, PullRequestRef, WorkflowState
from flagctl.models.request import FeatureFlagRequest
from flagctl.workspace import git_ops, messages
from flagctl.workspace.guard import WorkspaceGuard
from flagctl.workspace.hosting import PullRequestCreator, pull_request_head

logger = logging.getLogger(__name__)


class BranchWorkflow:
    """Apply one flag request to the deployment repo and open a pull request.

    Runs the sequence capture → sync → branch → mutate → commit → push →
    PR inside a :class:`WorkspaceGuard`, so the operator's branch and
    uncommitted work are restored whatever happens. ``state`` holds the
    last state reached and ``history`` every state entered, in order.

    Sync and branch failures raise :class:`SyncError`, commit failures
    :class:`CommitError`, push and PR failures :class:`HostingError`. When
    no target changes, :class:`NoChangeNeeded` is raised and nothing is
    committed.
    """

    def __init__(
        self,
        config: FlagctlConfig,
        repo_root: Path,
        pr_creator: PullRequestCreator,
        *,
        mutator: ConfigMutator | None = None,
        event_emitter: EventEmitter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._repo_root = repo_root
        self._pr_creator = pr_creator
        self._mutator = mutator or ConfigMutator(config.header_comment)
        self._event_emitter = event_emitter or NullEmitter()
        self._clock = clock
        self.state = WorkflowState.IDLE
        self.history: list[WorkflowState] = [WorkflowState.IDLE]

    def _enter(self, state: WorkflowState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("Workflow state: %s", state.value)

    def run(self, request: FeatureFlagRequest) -> ChangeSet:
        if self.state != WorkflowState.IDLE:
            raise RuntimeError("BranchWorkflow instances are single-use")

        start = time.monotonic()
        self._event_emitter.emit(
            "WorkflowStarted",
            operation=request.operation.value,
            flag_name=request.flag_name,
            project_name=request.project_name,
            environment_class=request.environment_class.value,
        )

        change_set = ChangeSet(request=request, branch_name="")
        guard = WorkspaceGuard(
            self._repo_root,
            stash_message=self._config.stash_message,
            event_emitter=self._event_emitter,
        )
        failed_at: WorkflowState | None = None
        try:
            with guard:
                self._enter(WorkflowState.CAPTURED)
                try:
                    self._steps(request, change_set)
                except BaseException:
                    failed_at = self.state
                    raise
        except NoChangeNeeded as e:
            self._finish_failed(request, change_set, failed_at or self.state, e, soft=True)
            raise
        except BaseException as e:
            self._finish_failed(request, change_set, failed_at or self.state, e, soft=False)
            raise

        self._enter(WorkflowState.RESTORED)
        self._enter(WorkflowState.DONE)
        self._event_emitter.emit(
            "WorkflowCompleted",
            project_name=request.project_name,
            branch_name=change_set.branch_name,
            pull_request_url=change_set.pull_request.url if change_set.pull_request else "",
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return change_set

    def _finish_failed(
        self,
        request: FeatureFlagRequest,
        change_set: ChangeSet,
        failed_at: WorkflowState,
        error: BaseException,
        *,
        soft: bool,
    ) -> None:
        # A failed capture leaves the state at IDLE and there is nothing to restore.
        if self.state != WorkflowState.IDLE:
            self._enter(WorkflowState.RESTORED)
            self._drop_empty_topic_branch(change_set)
        self._enter(WorkflowState.FAILED)
        self._event_emitter.emit(
            "WorkflowFailed",
            project_name=request.project_name,
            state=failed_at.value,
            error=str(error),
            soft=soft,
        )

    def _steps(self, request: FeatureFlagRequest, change_set: ChangeSet) -> None:
        self._sync()
        self._enter(WorkflowState.SYNCED)

        change_set.branch_name = self._create_topic_branch(request)
        self._enter(WorkflowState.BRANCHED)

        change_set.outcomes = self._mutate(request)
        if not change_set.applied:
            raise NoChangeNeeded(change_set.outcomes)
        self._enter(WorkflowState.MUTATED)

        change_set.commit_sha = self._commit(request, change_set.applied)
        self._enter(WorkflowState.COMMITTED)

        change_set.push_remote = self._push(change_set.branch_name)
        self._enter(WorkflowState.PUSHED)

        change_set.pull_request = self._open_pull_request(request, change_set)
        self._enter(WorkflowState.PR_OPENED)

    def _sync(self) -> None:
        repo = self._config.repository
        timeout = self._config.timeouts.git_seconds
        try:
            git_ops.fetch(repo.default_remote, cwd=self._repo_root, timeout=timeout)
            git_ops.checkout(repo.base_branch, cwd=self._repo_root)
            git_ops.pull(repo.default_remote, repo.base_branch, cwd=self._repo_root, timeout=timeout)
        except git_ops.GitError as e:
            raise SyncError(
                f"Failed to sync {repo.base_branch} from {repo.default_remote}: {e}"
            ) from e
        self._event_emitter.emit("BaseSynced", remote=repo.default_remote, base_branch=repo.base_branch)

    def _create_topic_branch(self, request: FeatureFlagRequest) -> str:
        millis = int(self._clock() * 1000)
        name = messages.branch_name(request, millis)
        try:
            while git_ops.branch_exists(name, cwd=self._repo_root):
                millis += 1
                name = messages.branch_name(request, millis)
            git_ops.create_branch(name, cwd=self._repo_root)
        except git_ops.GitError as e:
            raise SyncError(f"Failed to create branch {name}: {e}") from e
        self._event_emitter.emit("TopicBranchCreated", branch_name=name)
        return name

    def _mutate(self, request: FeatureFlagRequest) -> list[MutationOutcome]:
        repo = self._config.repository
        targets = environment_targets(
            request,
            repo_root=self._repo_root,
            applications_dir=repo.applications_dir,
            values_filename=repo.values_filename,
        )
        outcomes: list[MutationOutcome] = []
        for target in targets:
            status = self._mutator.apply(target.config_file_path, request.flag_name, request.operation)
            outcomes.append(MutationOutcome(target=target, status=status))
            self._event_emitter.emit(
                "TargetMutated",
                environment=target.environment,
                path=str(target.config_file_path.relative_to(self._repo_root)),
                status=status.value,
            )
        return outcomes

    def _commit(self, request: FeatureFlagRequest, applied: list[MutationOutcome]) -> str:
        files = [str(o.target.config_file_path.relative_to(self._repo_root)) for o in applied]
        message = messages.commit_message(request)
        try:
            git_ops.add(files, cwd=self._repo_root)
            sha = git_ops.commit(message, author=self._config.commit_author, cwd=self._repo_root)
        except git_ops.GitError as e:
            raise CommitError(f"Failed to commit changes: {e}") from e
        self._event_emitter.emit("ChangesCommitted", sha=sha, message=message, files=files)
        return sha

    def resolve_push_remote(self) -> str:
        repo = self._config.repository
        if not repo.push_remote:
            return repo.default_remote
        try:
            available = git_ops.remotes(cwd=self._repo_root)
        except git_ops.GitError:
            logger.warning("Could not list remotes; pushing to %s", repo.default_remote)
            return repo.default_remote
        if repo.push_remote in available:
            return repo.push_remote
        logger.warning(
            "Configured push remote '%s' not found; pushing to '%s'",
            repo.push_remote,
            repo.default_remote,
        )
        return repo.default_remote

    def _push(self, branch: str) -> str:
        remote = self.resolve_push_remote()
        try:
            git_ops.push(
                remote,
                branch,
                cwd=self._repo_root,
                set_upstream=True,
                timeout=self._config.timeouts.git_seconds,
            )
        except git_ops.GitError as e:
            raise HostingError(f"Failed to push {branch} to {remote}: {e}") from e
        self._event_emitter.emit("BranchPushed", remote=remote, branch_name=branch)
        return remote

    def _open_pull_request(
        self, request: FeatureFlagRequest, change_set: ChangeSet
    ) -> PullRequestRef:
        repo = self._config.repository
        title = messages.pr_title(request)
        body = messages.pr_body(request, change_set.outcomes, repo_root=self._repo_root)
        head = pull_request_head(
            change_set.branch_name,
            push_remote=change_set.push_remote,
            default_remote=repo.default_remote,
            cwd=self._repo_root,
        )
        pr = self._pr_creator.create(title=title, body=body, head=head, base=repo.base_branch)
        self._event_emitter.emit("PullRequestOpened", url=pr.url, title=title)
        return pr

    def _drop_empty_topic_branch(self, change_set: ChangeSet) -> None:
        if not change_set.branch_name or change_set.commit_sha:
            return
        try:
            if git_ops.current_branch(cwd=self._repo_root) == change_set.branch_name:
                return
            git_ops.branch_delete(change_set.branch_name, cwd=self._repo_root)
        except git_ops.GitError:
            logger.warning(
                "Could not delete unused branch %s", change_set.branch_name, exc_info=True
            )
