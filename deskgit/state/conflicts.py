"""Merge and rebase conflict tracking across status refreshes.

A conflict is observed while the status snapshot carries a merge or rebase
marker. There is no retained "resolved" state: when a refresh clears the
marker, the previous conflict is classified right away as having succeeded
or been aborted, and that classification is returned as a signal.
"""

from enum import Enum
from typing import Annotated, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field

from deskgit.git.models import ManualConflictResolution, StatusResult

logger = structlog.get_logger()


class MergeConflictState(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["merge"] = "merge"
    current_branch: str
    current_tip: str
    manual_resolutions: dict[str, ManualConflictResolution] = {}


class RebaseConflictState(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rebase"] = "rebase"
    current_tip: str
    target_branch: str
    original_branch_tip: str
    base_branch_tip: str | None = None
    manual_resolutions: dict[str, ManualConflictResolution] = {}


ConflictState = Annotated[
    MergeConflictState | RebaseConflictState, Field(discriminator="kind")
]


class ConflictSignal(Enum):
    MERGE_SUCCEEDED = "merge_succeeded"
    MERGE_ABORTED = "merge_aborted"
    REBASE_SUCCEEDED = "rebase_succeeded"
    REBASE_ABORTED = "rebase_aborted"


class ConflictUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    conflict_state: ConflictState | None = None
    signal: ConflictSignal | None = None


def get_conflict_state(
    status: StatusResult,
    manual_resolutions: dict[str, ManualConflictResolution],
) -> MergeConflictState | RebaseConflictState | None:
    """Derive the conflict state a status snapshot describes.

    Returns None when there is no marker, or when the branch or tip needed
    to identify the conflict is not known yet.
    """
    if status.merge_head_found:
        if status.rebase_internal_state is not None:
            logger.warning(
                "conflict_markers_ambiguous",
                current_branch=status.current_branch,
                current_tip=status.current_tip,
            )
        if status.current_branch is None or status.current_tip is None:
            return None
        return MergeConflictState(
            current_branch=status.current_branch,
            current_tip=status.current_tip,
            manual_resolutions=dict(manual_resolutions),
        )

    rebase = status.rebase_internal_state
    if rebase is not None:
        if status.current_tip is None:
            return None
        return RebaseConflictState(
            current_tip=status.current_tip,
            target_branch=rebase.target_branch,
            original_branch_tip=rebase.original_branch_tip,
            base_branch_tip=rebase.base_branch_tip,
            manual_resolutions=dict(manual_resolutions),
        )

    return None


def _merge_signal(
    prev: MergeConflictState | None,
    new: MergeConflictState | None,
    status: StatusResult,
) -> ConflictSignal | None:
    # Branch changed while still conflicted: the merge was abandoned.
    if prev is not None and new is not None:
        if prev.current_branch != new.current_branch:
            return ConflictSignal.MERGE_ABORTED
        return None

    if prev is not None and new is None and status.current_tip is not None:
        if status.current_tip != prev.current_tip:
            return ConflictSignal.MERGE_SUCCEEDED
        return ConflictSignal.MERGE_ABORTED

    return None


def _rebase_signal(
    prev: RebaseConflictState | None,
    new: RebaseConflictState | None,
    status: StatusResult,
) -> ConflictSignal | None:
    if prev is not None and new is not None:
        if prev.target_branch != new.target_branch:
            return ConflictSignal.REBASE_ABORTED
        return None

    if (
        prev is not None
        and new is None
        and status.current_tip is not None
        and status.current_branch is not None
    ):
        # A rebase can be resumed from another branch, so a moved tip alone
        # is not enough; the target branch must be checked out again.
        if (
            status.current_tip != prev.original_branch_tip
            and status.current_branch == prev.target_branch
        ):
            return ConflictSignal.REBASE_SUCCEEDED
        return ConflictSignal.REBASE_ABORTED

    return None


def update_conflict_state(
    prev: MergeConflictState | RebaseConflictState | None,
    status: StatusResult,
) -> ConflictUpdate:
    """Compute the next conflict state and classify the transition."""
    manual_resolutions = prev.manual_resolutions if prev is not None else {}
    new = get_conflict_state(status, manual_resolutions)

    if prev is None and new is None:
        return ConflictUpdate()

    signal: ConflictSignal | None = None
    if (prev is None or prev.kind == "merge") and (new is None or new.kind == "merge"):
        signal = _merge_signal(prev, new, status)  # type: ignore[arg-type]
    elif (prev is None or prev.kind == "rebase") and (new is None or new.kind == "rebase"):
        signal = _rebase_signal(prev, new, status)  # type: ignore[arg-type]
    else:
        # Merge directly followed by rebase or vice versa; not comparable.
        logger.debug(
            "conflict_kind_changed",
            previous_kind=prev.kind if prev else None,
            new_kind=new.kind if new else None,
        )

    if signal is not None:
        logger.info(
            "conflict_signal",
            signal=signal.value,
            current_branch=status.current_branch,
            current_tip=status.current_tip,
        )

    return ConflictUpdate(conflict_state=new, signal=signal)
