"""Reconciles the changes view with a freshly sampled working directory."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from deskgit.git.models import (
    DiffSelectionType,
    StatusResult,
    WorkingDirectoryFileChange,
    WorkingDirectoryStatus,
)
from deskgit.state.conflicts import ConflictState


class WorkingDirectorySelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["working_directory"] = "working_directory"
    selected_file_ids: list[str] = []
    # Only rendered when exactly one file is selected.
    diff: Any = None


class StashSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["stash"] = "stash"
    selected_stashed_file: str | None = None
    diff: Any = None


ChangesSelection = Annotated[
    WorkingDirectorySelection | StashSelection, Field(discriminator="kind")
]


class ChangesState(BaseModel):
    model_config = ConfigDict(frozen=True)

    working_directory: WorkingDirectoryStatus = Field(
        default_factory=WorkingDirectoryStatus
    )
    selection: ChangesSelection = Field(default_factory=WorkingDirectorySelection)
    conflict_state: ConflictState | None = None


class ChangedFilesResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    working_directory: WorkingDirectoryStatus
    selection: ChangesSelection


def _merge_files(
    previous: list[WorkingDirectoryFileChange],
    fresh: list[WorkingDirectoryFileChange],
    clear_partial_state: bool,
) -> list[WorkingDirectoryFileChange]:
    files_by_id = {f.id: f for f in previous}

    merged: list[WorkingDirectoryFileChange] = []
    for file in fresh:
        existing = files_by_id.get(file.id)
        if existing is None:
            merged.append(file)
        elif (
            clear_partial_state
            and existing.selection.selection_type is DiffSelectionType.PARTIAL
        ):
            merged.append(file.with_include_all(False))
        else:
            merged.append(file.with_selection(existing.selection))

    merged.sort(key=lambda f: f.path.casefold())
    return merged


def update_changed_files(
    state: ChangesState,
    status: StatusResult,
    clear_partial_state: bool,
) -> ChangedFilesResult:
    """Merge the fresh file list into the current state, keeping selections.

    Per-file diff selections carry over by file id. Selected files that no
    longer exist are dropped; if nothing is left selected the first file is
    selected. The cached diff survives only if the same single file was and
    still is the whole selection.
    """
    merged = _merge_files(
        state.working_directory.files,
        status.working_directory.files,
        clear_partial_state,
    )
    working_directory = WorkingDirectoryStatus.from_files(merged)

    selection = state.selection
    if isinstance(selection, StashSelection):
        return ChangedFilesResult(working_directory=working_directory, selection=selection)

    merged_ids = {f.id for f in merged}
    previous_ids = selection.selected_file_ids
    selected_ids = [file_id for file_id in previous_ids if file_id in merged_ids]

    if not selected_ids and merged:
        selected_ids = [merged[0].id]

    keep_diff = (
        len(selected_ids) == 1
        and len(previous_ids) == 1
        and previous_ids[0] == selected_ids[0]
    )

    return ChangedFilesResult(
        working_directory=working_directory,
        selection=WorkingDirectorySelection(
            selected_file_ids=selected_ids,
            diff=selection.diff if keep_diff else None,
        ),
    )


def select_working_directory_files(
    state: ChangesState,
    files: list[WorkingDirectoryFileChange] | None = None,
) -> WorkingDirectorySelection:
    """Switch the selection to the working directory.

    Without ``files`` an existing working-directory selection is kept as is,
    otherwise the first changed file (if any) is selected. An explicit list
    selects exactly those files.
    """
    if files is None:
        if isinstance(state.selection, WorkingDirectorySelection):
            return state.selection
        wd_files = state.working_directory.files
        selected_ids = [wd_files[0].id] if wd_files else []
    else:
        selected_ids = [f.id for f in files]

    return WorkingDirectorySelection(selected_file_ids=selected_ids, diff=None)
