from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any

from flagctl.events.dispatcher import EventEmitter, NullEmitter
from flagctl.exceptions import RestorationWarning, WorkspaceError
from flagctl.workspace import git_ops

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceSnapshot:
    repo_path: Path
    original_branch: str | None
    original_sha: str | None = None
    stash_sha: str | None = None
    consumed: bool = False
    warnings: list[RestorationWarning] = field(default_factory=list)

    @property
    def has_stash(self) -> bool:
        return self.stash_sha is not None

    @property
    def restore_ref(self) -> str | None:
        # Detached HEAD is restored by commit, not by name.
        if self.original_branch and self.original_branch != "HEAD":
            return self.original_branch
        return self.original_sha


class WorkspaceGuard:
    """Checkpoint a working copy and put it back afterwards.

    Use as a context manager so restoration runs on every exit path::

        with WorkspaceGuard(repo_root) as snapshot:
            ...  # switch branches, edit files, commit

    ``capture`` records the current branch and stashes uncommitted work
    (untracked files included). ``release`` drops whatever the protected
    block left in the working tree, checks the original branch back out and
    pops the stash. Each release step is attempted even if an earlier one
    failed; failures become :class:`RestorationWarning` entries on the
    snapshot and never replace the exception that ended the block.
    """

    def __init__(
        self,
        repo_path: Path,
        *,
        stash_message: str = "flagctl temporary stash",
        event_emitter: EventEmitter | None = None,
    ) -> None:
        self._repo_path = repo_path
        self._stash_message = stash_message
        self._event_emitter = event_emitter or NullEmitter()
        self._snapshot: WorkspaceSnapshot | None = None

    @property
    def snapshot(self) -> WorkspaceSnapshot | None:
        return self._snapshot

    def capture(self) -> WorkspaceSnapshot:
        if not git_ops.is_git_repo(self._repo_path):
            raise WorkspaceError(f"Not a git repository: {self._repo_path}")

        try:
            branch = git_ops.current_branch(cwd=self._repo_path)
            sha = git_ops.rev_parse("HEAD", cwd=self._repo_path)
        except git_ops.GitError as e:
            raise WorkspaceError(f"Cannot read current branch in {self._repo_path}: {e}") from e

        snapshot = WorkspaceSnapshot(
            repo_path=self._repo_path,
            original_branch=branch,
            original_sha=sha,
        )

        try:
            if git_ops.status(cwd=self._repo_path):
                snapshot.stash_sha = git_ops.stash_push(self._stash_message, cwd=self._repo_path)
        except git_ops.GitError as e:
            raise WorkspaceError(f"Failed to stash uncommitted changes: {e}") from e

        self._snapshot = snapshot
        self._event_emitter.emit(
            "WorkspaceCaptured",
            repo_path=str(self._repo_path),
            original_branch=branch,
            has_stash=snapshot.has_stash,
        )
        return snapshot

    def release(self) -> list[RestorationWarning]:
        snapshot = self._snapshot
        if snapshot is None:
            raise WorkspaceError("Workspace was never captured")
        if snapshot.consumed:
            raise WorkspaceError("Workspace snapshot was already restored")
        snapshot.consumed = True

        cwd = snapshot.repo_path
        self._attempt(snapshot, "discard changes", lambda: self._discard_leftovers(cwd))

        target = snapshot.restore_ref
        if target is not None:
            self._attempt(snapshot, f"checkout {target}", lambda: self._checkout_original(snapshot))

        if snapshot.stash_sha is not None:
            stash_sha = snapshot.stash_sha
            self._attempt(
                snapshot,
                f"stash pop {stash_sha[:8]}",
                lambda: git_ops.stash_pop(stash_sha, cwd=cwd),
            )

        self._event_emitter.emit(
            "WorkspaceRestored",
            repo_path=str(cwd),
            branch=target or "",
            stash_restored=snapshot.has_stash and not any(
                w.step.startswith("stash pop") for w in snapshot.warnings
            ),
            warnings=[str(w) for w in snapshot.warnings],
        )
        return list(snapshot.warnings)

    def _attempt(self, snapshot: WorkspaceSnapshot, step: str, action: Any) -> None:
        try:
            action()
        except Exception as e:
            warning = RestorationWarning(step, str(e))
            snapshot.warnings.append(warning)
            logger.warning("Workspace restoration step failed: %s", warning, exc_info=True)

    def _discard_leftovers(self, cwd: Path) -> None:
        # The tree was clean right after capture, so anything here is ours.
        if not git_ops.status(cwd=cwd):
            return
        logger.info("Discarding uncommitted workflow changes in %s", cwd)
        git_ops.reset_hard(cwd=cwd)
        git_ops.clean_untracked(cwd=cwd)

    def _checkout_original(self, snapshot: WorkspaceSnapshot) -> None:
        target = snapshot.restore_ref
        assert target is not None
        if snapshot.original_branch and snapshot.original_branch != "HEAD":
            if git_ops.current_branch(cwd=snapshot.repo_path) == target:
                return
        git_ops.checkout(target, cwd=snapshot.repo_path)

    def __enter__(self) -> WorkspaceSnapshot:
        return self.capture()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.release()
        except Exception:
            if exc is None:
                raise
            logger.warning("Workspace release failed", exc_info=True)
