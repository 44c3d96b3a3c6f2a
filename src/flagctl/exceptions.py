from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flagctl.models.outcome import MutationOutcome


class FlagctlError(Exception):
    """Base class for every error flagctl raises on purpose."""


class ValidationError(FlagctlError):
    """Missing or invalid operator input. Raised before any side effect."""


class InvalidEnvironmentClass(ValidationError):
    pass


class WorkspaceError(FlagctlError):
    pass


class SyncError(FlagctlError):
    """Fetch, checkout, pull or topic-branch creation failed."""


class CommitError(FlagctlError):
    pass


class HostingError(FlagctlError):
    """Push or pull-request creation failed.

    The local commit (and, for PR failures, the pushed branch) is left in
    place so the operator can finish by hand.
    """


class NoChangeNeeded(FlagctlError):
    """Every target already satisfied the request; nothing was committed."""

    def __init__(self, outcomes: list[MutationOutcome]) -> None:
        self.outcomes = outcomes
        super().__init__(
            f"No files changed: all {len(outcomes)} target(s) already in the requested state"
        )


class RestorationWarning(FlagctlError):
    """A workspace restoration step failed.

    Recorded and logged by the workspace guard, never raised, so it cannot
    mask the error that ended the workflow.
    """

    def __init__(self, step: str, detail: str) -> None:
        self.step = step
        self.detail = detail
        super().__init__(f"{step}: {detail}")
